"""サーブ戦略 (単一選択 / 重み付き分割)"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

from .exceptions import ResolutionError, TargetingError, TargetingErrorCodes

if TYPE_CHECKING:
    from .models import Variation

SPLIT_TOTAL = 10000


@dataclass(frozen=True)
class Select:
    """単一のバリエーションを返す。"""

    index: int


@dataclass(frozen=True)
class Split:
    """バリエーション間で重み付き分割する。weights はバリエーション順、合計 10000。"""

    weights: tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "weights", tuple(self.weights))


ServeStrategy = Union[Select, Split]


def serve_from_dict(data: dict[str, Any]) -> ServeStrategy:
    """ワイヤ形式 ``{"select": i}`` / ``{"split": [...]}`` をデコードする。"""
    has_select = data.get("select") is not None
    has_split = data.get("split") is not None
    if has_select == has_split:
        raise TargetingError(
            TargetingErrorCodes.INVALID_CONFIGURATION,
            f"serve must have exactly one of 'select' or 'split': {data}",
        )
    if has_select:
        return Select(int(data["select"]))
    return Split(tuple(int(w) for w in data["split"]))


def serve_to_dict(serve: ServeStrategy | None) -> dict[str, Any] | None:
    if serve is None:
        return None
    if isinstance(serve, Select):
        return {"select": serve.index}
    if isinstance(serve, Split):
        return {"split": list(serve.weights)}
    raise TypeError(f"unknown serve strategy: {serve!r}")


def referenced_indices(serve: ServeStrategy) -> range:
    """戦略が参照するバリエーションのインデックス。"""
    if isinstance(serve, Select):
        return range(serve.index, serve.index + 1)
    if isinstance(serve, Split):
        return range(len(serve.weights))
    raise TypeError(f"unknown serve strategy: {serve!r}")


def is_resolvable(serve: ServeStrategy | None, variations: Sequence[Variation]) -> bool:
    """参照するすべてのインデックスが現在のバリエーション数の範囲内か。"""
    if serve is None:
        return False
    return all(0 <= i < len(variations) for i in referenced_indices(serve))


def project(
    serve: ServeStrategy | None, variations: Sequence[Variation]
) -> ServeStrategy | None:
    """フォームに反映してよい戦略を返す。

    範囲外の参照を含む場合は None を返し、暗黙のデフォルトで参照を温存させない。
    """
    return serve if is_resolvable(serve, variations) else None


def display_name(variation: Variation) -> str:
    return variation.name or variation.value


def resolve(serve: ServeStrategy, variations: Sequence[Variation]) -> str | list[str]:
    """戦略を人間向けの表記に解決する。

    Select はバリエーション名、Split は ``"名前: 割合%"`` のリストになる。

    Raises:
        ResolutionError: 存在しないバリエーションを参照している場合
    """
    for i in referenced_indices(serve):
        if not 0 <= i < len(variations):
            raise ResolutionError(i, len(variations))
    if isinstance(serve, Select):
        return variations[serve.index].name
    if isinstance(serve, Split):
        return [
            f"{variations[i].name}: {_percentage(weight)}%"
            for i, weight in enumerate(serve.weights)
        ]
    raise TypeError(f"unknown serve strategy: {serve!r}")


def _percentage(weight: int) -> str:
    # 5000 -> "50", 3333 -> "33.33"
    value = weight / 100
    return str(int(value)) if value == int(value) else str(value)


def check_split(
    weights: Sequence[int], variation_count: int, total: int = SPLIT_TOTAL
) -> list[str]:
    """Split の不変条件違反を列挙する。空リストなら妥当。"""
    problems: list[str] = []
    if len(weights) != variation_count:
        problems.append(
            f"split has {len(weights)} weights for {variation_count} variations"
        )
    if any(w < 0 for w in weights):
        problems.append("split weights must be non-negative")
    if sum(weights) != total:
        problems.append(f"split weights sum to {sum(weights)}, expected {total}")
    return problems


def describe(
    serve: ServeStrategy | None, variations: Sequence[Variation]
) -> str | list[str] | None:
    """resolve と同じだが、解決できない戦略は None を返す。"""
    if serve is None:
        return None
    try:
        return resolve(serve, variations)
    except ResolutionError:
        return None
