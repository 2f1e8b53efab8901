"""編集セッション中のターゲティング設定とルール操作"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

from .codec import EditCondition, IdFactory, new_condition, new_id
from .exceptions import TargetingError, TargetingErrorCodes
from .messages import MessageCatalog
from .models import ConditionType
from .serve import ServeStrategy


@dataclass
class EditVariation:
    """編集中のバリエーション。"""

    id: str
    name: str = ""
    value: str = ""
    description: str = ""


@dataclass
class EditRule:
    """編集中のルール。active は UI の展開状態で永続化されない。"""

    id: str
    conditions: list[EditCondition] = field(default_factory=list)
    serve: ServeStrategy | None = None
    active: bool = True
    name: str | None = None


_Entry = Union[EditVariation, EditRule, EditCondition]


@dataclass
class EditModel:
    """編集可能なターゲティング設定。

    variations / rules は外部から直接書き換えてもよい。一時 ID から要素への
    逆引きは必要に応じて再構築される。
    """

    variations: list[EditVariation] = field(default_factory=list)
    rules: list[EditRule] = field(default_factory=list)
    default_serve: ServeStrategy | None = None
    disabled_serve: ServeStrategy | None = None
    id_factory: IdFactory = field(default=new_id, repr=False, compare=False)
    messages: MessageCatalog | None = field(default=None, repr=False, compare=False)
    _index: dict[str, _Entry] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def reindex(self) -> dict[str, _Entry]:
        """一時 ID の逆引きを作り直す。"""
        index: dict[str, _Entry] = {}
        for variation in self.variations:
            index[variation.id] = variation
        for rule in self.rules:
            index[rule.id] = rule
            for condition in rule.conditions:
                index[condition.id] = condition
        self._index = index
        return index

    def _lookup(self, entry_id: str, kind: type) -> _Entry:
        entry = self._index.get(entry_id)
        if not isinstance(entry, kind) or not self._contains(entry):
            entry = self.reindex().get(entry_id)
        if not isinstance(entry, kind):
            raise TargetingError(
                TargetingErrorCodes.NOT_FOUND,
                f"{kind.__name__} not found: {entry_id}",
            )
        return entry

    def _contains(self, entry: _Entry) -> bool:
        if isinstance(entry, EditVariation):
            return any(v is entry for v in self.variations)
        if isinstance(entry, EditRule):
            return any(r is entry for r in self.rules)
        return any(c is entry for r in self.rules for c in r.conditions)

    def find_variation(self, variation_id: str) -> EditVariation:
        return self._lookup(variation_id, EditVariation)  # type: ignore[return-value]

    def find_rule(self, rule_id: str) -> EditRule:
        return self._lookup(rule_id, EditRule)  # type: ignore[return-value]

    def find_condition(self, condition_id: str) -> EditCondition:
        return self._lookup(condition_id, EditCondition)  # type: ignore[return-value]

    # --- ルール操作 ---

    def add_rule(self) -> EditRule:
        """末尾に空のルールを追加する。"""
        rule = EditRule(id=self.id_factory())
        self.rules.append(rule)
        self._index[rule.id] = rule
        return rule

    def remove_rule(self, rule_id: str) -> None:
        rule = self.find_rule(rule_id)
        self.rules = [r for r in self.rules if r is not rule]
        self.reindex()

    def move_rule(self, rule_id: str, new_index: int) -> None:
        """ルールを new_index の位置へ移動する。範囲外は端に丸める。"""
        rule = self.find_rule(rule_id)
        self.rules.remove(rule)
        new_index = max(0, min(new_index, len(self.rules)))
        self.rules.insert(new_index, rule)

    def add_condition(
        self,
        rule_id: str,
        condition_type: str = ConditionType.STRING,
        *,
        now: datetime | None = None,
    ) -> EditCondition:
        rule = self.find_rule(rule_id)
        condition = new_condition(
            condition_type, messages=self.messages, id_factory=self.id_factory, now=now
        )
        rule.conditions.append(condition)
        self._index[condition.id] = condition
        return condition

    def remove_condition(self, rule_id: str, condition_id: str) -> None:
        rule = self.find_rule(rule_id)
        if not any(c.id == condition_id for c in rule.conditions):
            raise TargetingError(
                TargetingErrorCodes.NOT_FOUND,
                f"condition {condition_id} not found in rule {rule_id}",
            )
        rule.conditions = [c for c in rule.conditions if c.id != condition_id]
        self._index.pop(condition_id, None)

    # --- バリエーション操作 ---

    def add_variation(
        self, name: str = "", value: str = "", description: str = ""
    ) -> EditVariation:
        variation = EditVariation(
            id=self.id_factory(), name=name, value=value, description=description
        )
        self.variations.append(variation)
        self._index[variation.id] = variation
        return variation

    def remove_variation(self, variation_id: str) -> None:
        """バリエーションを削除する。

        既存のサーブ戦略のインデックスは書き換えない。ずれた参照はフォームへの
        反映時と検証時に検出される。
        """
        variation = self.find_variation(variation_id)
        self.variations = [v for v in self.variations if v is not variation]
        self._index.pop(variation_id, None)
