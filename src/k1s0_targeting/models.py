"""ターゲティング設定の正規 (永続化) データモデル"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .exceptions import TargetingError, TargetingErrorCodes
from .serve import Select, ServeStrategy, serve_from_dict, serve_to_dict


class ConditionType(StrEnum):
    """条件タイプ。"""

    STRING = "string"
    NUMBER = "number"
    SEMVER = "semver"
    DATETIME = "datetime"
    SEGMENT = "segment"


@dataclass
class Variation:
    """フラグが返しうる値。"""

    name: str = ""
    value: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Variation:
        return cls(
            name=data.get("name", ""),
            value=data.get("value", ""),
            description=data.get("description", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "description": self.description,
        }


@dataclass
class Condition:
    """ルール条件。segment タイプの subject は永続化されない。"""

    type: str
    predicate: str = ""
    subject: str | None = None
    objects: list[str] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        objects = data.get("objects")
        return cls(
            type=data["type"],
            predicate=data.get("predicate", ""),
            subject=data.get("subject"),
            objects=list(objects) if objects is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type}
        if self.subject is not None:
            result["subject"] = self.subject
        result["predicate"] = self.predicate
        if self.objects is not None:
            result["objects"] = list(self.objects)
        return result


@dataclass
class Rule:
    """条件 (AND) とサーブ戦略の組。リスト順が優先度。"""

    conditions: list[Condition] = field(default_factory=list)
    serve: ServeStrategy | None = field(default_factory=lambda: Select(0))
    name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Rule:
        return cls(
            conditions=[Condition.from_dict(c) for c in data.get("conditions", [])],
            serve=serve_from_dict(_require(data, "serve")),
            name=data.get("name"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.name is not None:
            result["name"] = self.name
        result["conditions"] = [c.to_dict() for c in self.conditions]
        result["serve"] = serve_to_dict(self.serve)
        return result


@dataclass
class Configuration:
    """フラグのターゲティング設定全体。"""

    disabled: bool = False
    variations: list[Variation] = field(default_factory=list)
    rules: list[Rule] = field(default_factory=list)
    default_serve: ServeStrategy | None = field(default_factory=lambda: Select(0))
    disabled_serve: ServeStrategy | None = field(default_factory=lambda: Select(0))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Configuration:
        """ワイヤ形式からデコードする。

        ``{"disabled": ..., "content": {...}}`` とフラットな形式の両方を受け付ける。
        """
        content = data.get("content", data)
        if not isinstance(content, dict):
            raise TargetingError(
                TargetingErrorCodes.INVALID_CONFIGURATION,
                "targeting content must be an object",
            )
        return cls(
            disabled=bool(data.get("disabled", False)),
            variations=[Variation.from_dict(v) for v in content.get("variations", [])],
            rules=[Rule.from_dict(r) for r in content.get("rules", [])],
            default_serve=serve_from_dict(_require(content, "defaultServe")),
            disabled_serve=serve_from_dict(_require(content, "disabledServe")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "disabled": self.disabled,
            "content": {
                "rules": [r.to_dict() for r in self.rules],
                "disabledServe": serve_to_dict(self.disabled_serve),
                "defaultServe": serve_to_dict(self.default_serve),
                "variations": [v.to_dict() for v in self.variations],
            },
        }


def _require(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise TargetingError(
            TargetingErrorCodes.INVALID_CONFIGURATION,
            f"missing or invalid '{key}'",
        )
    return value
