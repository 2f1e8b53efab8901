"""ローカライズ済みメッセージの取得インターフェース"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

USER_SUBJECT = "common.user.text"
INPUT_REQUIRED = "common.input.placeholder"
RETURN_TYPE_REQUIRED = "toggles.returntype.placeholder"
SERVE_REQUIRED = "targeting.serve.required"
SERVE_INVALID = "targeting.serve.invalid"
REASON_REQUIRED = "targeting.publish.reason.required"
TRACK_CHOICE_REQUIRED = "targeting.publish.track.required"

DEFAULT_MESSAGES: dict[str, str] = {
    USER_SUBJECT: "User",
    INPUT_REQUIRED: "This field is required",
    RETURN_TYPE_REQUIRED: "Please select a value",
    SERVE_REQUIRED: "Please select a variation to serve",
    SERVE_INVALID: "Serve does not match the current variations",
    REASON_REQUIRED: "Please enter a reason",
    TRACK_CHOICE_REQUIRED: "Please choose whether to collect access events",
}


class MessageCatalog(Protocol):
    """メッセージ ID から表示文字列を返す。"""

    def format_message(self, message_id: str) -> str: ...


class StaticMessageCatalog:
    """辞書ベースのメッセージカタログ。未知の ID はそのまま返す。"""

    def __init__(self, overrides: Mapping[str, str] | None = None) -> None:
        self._messages: dict[str, str] = dict(DEFAULT_MESSAGES)
        if overrides:
            self._messages.update(overrides)

    def format_message(self, message_id: str) -> str:
        return self._messages.get(message_id, message_id)
