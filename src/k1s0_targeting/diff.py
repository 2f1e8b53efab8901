"""JSON 互換値の構造差分"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

NEW = "N"
DELETED = "D"
EDITED = "E"
ARRAY = "A"

Path = tuple[str | int, ...]


@dataclass(frozen=True)
class Difference:
    """差分 1 件。

    kind は N (キー追加) / D (キー削除) / E (値の変更) / A (配列要素の増減)。
    A の場合 path は配列自身を指し、index と item (N または D) が入る。
    """

    kind: str
    path: Path
    lhs: Any = None
    rhs: Any = None
    index: int | None = None
    item: Difference | None = None


def diff(lhs: Any, rhs: Any) -> list[Difference]:
    """lhs から rhs への差分を列挙する。等しければ空リスト。"""
    changes: list[Difference] = []
    _walk(lhs, rhs, (), changes)
    return changes


def _walk(lhs: Any, rhs: Any, path: Path, changes: list[Difference]) -> None:
    if isinstance(lhs, dict) and isinstance(rhs, dict):
        for key in lhs:
            if key not in rhs:
                changes.append(Difference(DELETED, (*path, key), lhs=lhs[key]))
            else:
                _walk(lhs[key], rhs[key], (*path, key), changes)
        for key in rhs:
            if key not in lhs:
                changes.append(Difference(NEW, (*path, key), rhs=rhs[key]))
        return
    if isinstance(lhs, list) and isinstance(rhs, list):
        common = min(len(lhs), len(rhs))
        for i in range(common):
            _walk(lhs[i], rhs[i], (*path, i), changes)
        for i in range(common, len(lhs)):
            changes.append(
                Difference(ARRAY, path, index=i, item=Difference(DELETED, (), lhs=lhs[i]))
            )
        for i in range(common, len(rhs)):
            changes.append(
                Difference(ARRAY, path, index=i, item=Difference(NEW, (), rhs=rhs[i]))
            )
        return
    # bool は int のサブクラスなので型も比較する
    if type(lhs) is not type(rhs) or lhs != rhs:
        changes.append(Difference(EDITED, path, lhs=lhs, rhs=rhs))
