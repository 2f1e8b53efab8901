"""サーブ戦略のユニットテスト"""

import pytest
from k1s0_targeting import ResolutionError, Select, Split, Variation, check_split, project, resolve
from k1s0_targeting.serve import describe, display_name, is_resolvable, serve_to_dict

VARIATIONS = [
    Variation(name="control", value="off"),
    Variation(name="treatment", value="on"),
]


def test_resolve_select() -> None:
    assert resolve(Select(1), VARIATIONS) == "treatment"


def test_resolve_split_percentages() -> None:
    """Split は "名前: 割合%" に解決される。"""
    assert resolve(Split((2500, 7500)), VARIATIONS) == ["control: 25%", "treatment: 75%"]
    assert resolve(Split((3333, 6667)), VARIATIONS) == ["control: 33.33%", "treatment: 66.67%"]


def test_resolve_out_of_range_raises() -> None:
    with pytest.raises(ResolutionError) as exc_info:
        resolve(Select(2), VARIATIONS)
    assert exc_info.value.index == 2
    assert exc_info.value.variation_count == 2


def test_resolve_split_longer_than_variations_raises() -> None:
    with pytest.raises(ResolutionError):
        resolve(Split((5000, 3000, 2000)), VARIATIONS)


def test_describe_swallows_resolution_error() -> None:
    assert describe(Select(5), VARIATIONS) is None
    assert describe(None, VARIATIONS) is None
    assert describe(Select(0), VARIATIONS) == "control"


def test_project_in_range() -> None:
    assert project(Select(1), VARIATIONS) == Select(1)
    assert project(Split((5000, 5000)), VARIATIONS) == Split((5000, 5000))


def test_project_dangling_reference_is_unset() -> None:
    """範囲外の参照はフォームに反映しない。"""
    assert project(Select(2), VARIATIONS) is None
    assert project(Select(-1), VARIATIONS) is None
    assert project(Split((5000, 3000, 2000)), VARIATIONS) is None
    assert project(None, VARIATIONS) is None


def test_is_resolvable_empty_variations() -> None:
    assert is_resolvable(Select(0), []) is False


def test_check_split_valid() -> None:
    assert check_split((5000, 5000), 2) == []


def test_check_split_problems() -> None:
    assert len(check_split((5000, 4000), 2)) == 1
    assert len(check_split((10000,), 2)) == 1
    assert len(check_split((11000, -1000), 2)) == 1
    assert len(check_split((1000,), 2)) == 2


def test_display_name_falls_back_to_value() -> None:
    assert display_name(Variation(name="", value="on")) == "on"
    assert display_name(Variation(name="enabled", value="on")) == "enabled"


def test_serve_to_dict() -> None:
    assert serve_to_dict(Select(3)) == {"select": 3}
    assert serve_to_dict(Split((10000,))) == {"split": [10000]}
    assert serve_to_dict(None) is None
