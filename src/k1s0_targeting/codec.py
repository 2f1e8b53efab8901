"""条件オペランドの編集フォーム形式と正規形式の相互変換"""

from __future__ import annotations

import re
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import structlog

from .messages import USER_SUBJECT, MessageCatalog, StaticMessageCatalog
from .models import Condition, ConditionType

logger = structlog.stdlib.get_logger(__name__)

IdFactory = Callable[[], str]

# YYYY-MM-DDTHH:mm:ss の直後にオフセット (+08:00 / Z など) が続く
_TIMESTAMP_RE = re.compile(
    r"^(?P<datetime>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?P<timezone>Z|[+-]\d{2}:?\d{2})?$"
)
_LEGACY_SPLIT_AT = 19


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class EditCondition:
    """編集中の条件。datetime / timezone は datetime タイプでのみ使われる。"""

    id: str
    type: str
    predicate: str = ""
    subject: str | None = None
    objects: list[str] | None = None
    datetime: str | None = None
    timezone: str | None = None


def split_timestamp(value: str) -> tuple[str, str]:
    """ISO-8601 タイムスタンプを (日時, オフセット) に分割する。

    形式に合わない値は先頭 19 文字で機械的に分割する。
    """
    match = _TIMESTAMP_RE.match(value)
    if match:
        return match.group("datetime"), match.group("timezone") or ""
    logger.warning("unexpected datetime operand, falling back to fixed split", value=value)
    return value[:_LEGACY_SPLIT_AT], value[_LEGACY_SPLIT_AT:]


def now_timestamp(now: datetime | None = None) -> str:
    """ローカルタイムゾーン付きの現在時刻 (秒精度)。"""
    current = now if now is not None else datetime.now()
    if current.tzinfo is None:
        current = current.astimezone()
    return current.isoformat(timespec="seconds")


def to_edit(
    condition: Condition,
    *,
    messages: MessageCatalog | None = None,
    id_factory: IdFactory = new_id,
    now: datetime | None = None,
) -> EditCondition:
    """正規形式の条件を編集用に変換し、新しい一時 ID を振る。"""
    edit = EditCondition(
        id=id_factory(),
        type=condition.type,
        predicate=condition.predicate,
        subject=condition.subject,
        objects=list(condition.objects) if condition.objects is not None else None,
    )
    if condition.type == ConditionType.SEGMENT:
        catalog = messages if messages is not None else StaticMessageCatalog()
        edit.subject = catalog.format_message(USER_SUBJECT)
    elif condition.type == ConditionType.DATETIME:
        source = condition.objects[0] if condition.objects else now_timestamp(now)
        edit.datetime, edit.timezone = split_timestamp(source)
    return edit


def to_canonical(edit: EditCondition) -> Condition:
    """編集用の条件を正規形式に戻す。一時 ID と派生フィールドは落とす。"""
    condition = Condition(
        type=edit.type,
        predicate=edit.predicate,
        subject=edit.subject,
        objects=list(edit.objects) if edit.objects is not None else None,
    )
    if edit.type == ConditionType.SEGMENT:
        condition.subject = None
    elif edit.type == ConditionType.DATETIME:
        condition.objects = [f"{edit.datetime or ''}{edit.timezone or ''}"]
    return condition


def new_condition(
    condition_type: str = ConditionType.STRING,
    *,
    messages: MessageCatalog | None = None,
    id_factory: IdFactory = new_id,
    now: datetime | None = None,
) -> EditCondition:
    """ルールに追加する空の条件を作る。"""
    return to_edit(
        Condition(type=condition_type),
        messages=messages,
        id_factory=id_factory,
        now=now,
    )

