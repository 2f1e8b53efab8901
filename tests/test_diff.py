"""構造差分のユニットテスト"""

from k1s0_targeting import diff
from k1s0_targeting.diff import ARRAY, DELETED, EDITED, NEW


def test_equal_values_have_no_diff() -> None:
    value = {"a": [1, {"b": "c"}], "d": None}
    assert diff(value, {"a": [1, {"b": "c"}], "d": None}) == []


def test_edited_nested_value() -> None:
    changes = diff({"a": [{"b": 1}]}, {"a": [{"b": 2}]})
    assert len(changes) == 1
    assert changes[0].kind == EDITED
    assert changes[0].path == ("a", 0, "b")
    assert (changes[0].lhs, changes[0].rhs) == (1, 2)


def test_new_and_deleted_keys() -> None:
    changes = diff({"a": 1}, {"b": 1})
    kinds = {(c.kind, c.path) for c in changes}
    assert kinds == {(DELETED, ("a",)), (NEW, ("b",))}


def test_array_growth_and_shrink() -> None:
    grown = diff([1], [1, 2])
    assert [(c.kind, c.path, c.index, c.item.kind) for c in grown] == [(ARRAY, (), 1, NEW)]
    shrunk = diff([1, 2, 3], [1])
    assert [(c.index, c.item.kind) for c in shrunk] == [(1, DELETED), (2, DELETED)]


def test_type_change_is_edit() -> None:
    """bool と int は別物として扱う。"""
    changes = diff({"x": 1}, {"x": True})
    assert [c.kind for c in changes] == [EDITED]
    assert diff({"x": None}, {"x": {"select": 0}})[0].kind == EDITED
