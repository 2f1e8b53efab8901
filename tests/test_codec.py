"""条件コーデックのユニットテスト"""

from datetime import datetime, timedelta, timezone

from k1s0_targeting import Condition, StaticMessageCatalog, split_timestamp, to_canonical, to_edit
from k1s0_targeting.codec import new_condition, now_timestamp


def fixed_id() -> str:
    return "cond-1"


def test_datetime_round_trip() -> None:
    """datetime の値は分割と連結で元に戻る。"""
    condition = Condition(
        type="datetime", subject="", predicate="after", objects=["2023-05-01T10:00:00+08:00"]
    )
    edit = to_edit(condition, id_factory=fixed_id)
    assert edit.id == "cond-1"
    assert edit.datetime == "2023-05-01T10:00:00"
    assert edit.timezone == "+08:00"
    assert to_canonical(edit) == condition


def test_split_timestamp_variants() -> None:
    assert split_timestamp("2023-05-01T10:00:00Z") == ("2023-05-01T10:00:00", "Z")
    assert split_timestamp("2023-05-01T10:00:00-0530") == ("2023-05-01T10:00:00", "-0530")
    assert split_timestamp("2023-05-01T10:00:00") == ("2023-05-01T10:00:00", "")


def test_split_timestamp_falls_back_to_fixed_offset() -> None:
    """想定外の形式は先頭 19 文字で分割する。"""
    value = "2023-05-01T10:00:00.123+08:00"
    assert split_timestamp(value) == ("2023-05-01T10:00:00", ".123+08:00")


def test_datetime_without_objects_uses_now() -> None:
    now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=9)))
    edit = to_edit(Condition(type="datetime", predicate="before"), now=now)
    assert edit.datetime == "2024-01-02T03:04:05"
    assert edit.timezone == "+09:00"
    assert to_canonical(edit).objects == ["2024-01-02T03:04:05+09:00"]


def test_now_timestamp_is_offset_aware() -> None:
    value = now_timestamp()
    date_part, offset = split_timestamp(value)
    assert len(date_part) == 19
    assert offset != ""


def test_segment_subject_is_display_only() -> None:
    """segment の subject は表示用で、正規形式では落ちる。"""
    condition = Condition(type="segment", predicate="is in", objects=["beta"])
    edit = to_edit(condition, messages=StaticMessageCatalog({"common.user.text": "ユーザー"}))
    assert edit.subject == "ユーザー"
    canonical = to_canonical(edit)
    assert canonical.subject is None
    assert canonical == condition


def test_other_types_pass_through() -> None:
    condition = Condition(type="semver", subject="version", predicate=">=", objects=["1.2.0"])
    edit = to_edit(condition)
    assert edit.subject == "version"
    assert edit.objects == ["1.2.0"]
    assert edit.datetime is None
    assert to_canonical(edit) == condition


def test_to_edit_copies_objects() -> None:
    condition = Condition(type="string", subject="city", predicate="is one of", objects=["a"])
    edit = to_edit(condition)
    edit.objects.append("b")  # type: ignore[union-attr]
    assert condition.objects == ["a"]


def test_fresh_ids_per_call() -> None:
    condition = Condition(type="number", subject="age", predicate="=", objects=["20"])
    assert to_edit(condition).id != to_edit(condition).id


def test_new_condition_defaults() -> None:
    edit = new_condition(id_factory=fixed_id)
    assert edit.type == "string"
    assert edit.objects is None
    assert to_canonical(edit) == Condition(type="string")
