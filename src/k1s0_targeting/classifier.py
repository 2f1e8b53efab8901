"""2 つのターゲティング設定間の変更分類"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import structlog

from .diff import EDITED, Difference, diff
from .models import Configuration

logger = structlog.stdlib.get_logger(__name__)

# 既存バリエーションのこれらのフィールドだけの変更は、誰にどのバリエーションが
# 配信されるかを変えない
NON_MATERIAL_VARIATION_FIELDS: frozenset[str] = frozenset({"value", "description"})
NON_MATERIAL_RULE_FIELDS: frozenset[str] = frozenset({"name"})


@dataclass(frozen=True)
class Classification:
    """変更分類の結果。"""

    equal: bool
    material: bool


def is_equal(before: Configuration, after: Configuration) -> bool:
    """正規形式としての構造的等価性。編集のたびに評価してよい。"""
    return before.to_dict() == after.to_dict()


def classify(
    before: Configuration,
    after: Configuration,
    *,
    variation_fields: Iterable[str] = NON_MATERIAL_VARIATION_FIELDS,
    rule_fields: Iterable[str] = NON_MATERIAL_RULE_FIELDS,
) -> Classification:
    """before から after への遷移を分類する。

    material は以下のいずれかで真になる。

    - 無効状態、defaultServe、disabledServe の変更
    - バリエーションの追加・削除・並べ替え、または variation_fields 以外の変更
    - ルールの追加・削除・並べ替え、または rule_fields 以外の変更
    """
    lhs = before.to_dict()
    rhs = after.to_dict()
    if lhs == rhs:
        return Classification(equal=True, material=False)

    lhs_content, rhs_content = lhs["content"], rhs["content"]
    material = (
        lhs["disabled"] != rhs["disabled"]
        or bool(diff(lhs_content["defaultServe"], rhs_content["defaultServe"]))
        or bool(diff(lhs_content["disabledServe"], rhs_content["disabledServe"]))
        or _is_reordered(lhs_content["variations"], rhs_content["variations"])
        or _has_material(
            diff(lhs_content["variations"], rhs_content["variations"]),
            frozenset(variation_fields),
        )
        or _has_material(
            diff(lhs_content["rules"], rhs_content["rules"]),
            frozenset(rule_fields),
        )
    )
    logger.debug("classified targeting change", material=material)
    return Classification(equal=False, material=material)


def _is_reordered(before: list[dict[str, Any]], after: list[dict[str, Any]]) -> bool:
    # 同名バリエーションの入れ替えは value の変更にしか見えないので、
    # 要素の集合が同じで順序だけ違う場合を先に検出する
    if before == after:
        return False
    return Counter(map(_variation_key, before)) == Counter(map(_variation_key, after))


def _variation_key(variation: dict[str, Any]) -> tuple[str, str, str]:
    return (variation["name"], variation["value"], variation["description"])


def _has_material(changes: list[Difference], exempt: frozenset[str]) -> bool:
    for change in changes:
        if change.kind != EDITED:
            return True
        # path は (要素インデックス, フィールド名, ...)
        if len(change.path) < 2 or change.path[1] not in exempt:
            return True
    return False
