"""targeting ライブラリ設定の型定義と読み込み"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import TargetingError, TargetingErrorCodes
from .serve import SPLIT_TOTAL


class LogSection(BaseModel):
    """ログ設定。"""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class ClassifierSection(BaseModel):
    """変更分類の設定。"""

    non_material_variation_fields: list[str] = Field(
        default_factory=lambda: ["value", "description"]
    )
    non_material_rule_fields: list[str] = Field(default_factory=lambda: ["name"])


class TargetingSettings(BaseModel):
    """ターゲティング編集セッションの設定。"""

    split_total: int = Field(default=SPLIT_TOTAL, gt=0)
    messages: dict[str, str] = Field(default_factory=dict)
    classifier: ClassifierSection = Field(default_factory=ClassifierSection)
    log: LogSection = Field(default_factory=LogSection)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TargetingError(
            code=TargetingErrorCodes.READ_FILE,
            message=f"Failed to read settings file: {path}",
            cause=e,
        ) from e
    try:
        data: dict[str, Any] = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise TargetingError(
            code=TargetingErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    return data


def load_settings(path: Path, env_path: Path | None = None) -> TargetingSettings:
    """YAML から設定を読み込む。

    各ファイルは ``targeting`` セクションがあればそれを、なければ全体を使う。
    env_path が存在する場合はベースにディープマージする。
    """
    sources = [path]
    if env_path is not None and env_path.exists():
        sources.append(env_path)
    data: dict[str, Any] = {}
    for source in sources:
        loaded = _read_yaml(source)
        data = _deep_merge(data, loaded.get("targeting", loaded))
    try:
        return TargetingSettings.model_validate(data)
    except ValidationError as e:
        raise TargetingError(
            code=TargetingErrorCodes.VALIDATION,
            message=f"Settings validation failed: {e}",
            cause=e,
        ) from e
