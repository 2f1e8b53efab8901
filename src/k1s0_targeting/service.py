"""外部サービス (永続化・セグメント) のプロトコルとインメモリ実装"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Protocol

from .exceptions import TargetingError, TargetingErrorCodes, TransportError
from .models import Configuration


@dataclass(frozen=True)
class ToggleKeys:
    """対象トグルの識別子。"""

    project_key: str
    environment_key: str
    toggle_key: str


@dataclass
class PublishRequest:
    """ターゲティング公開リクエスト。"""

    configuration: Configuration
    comment: str = ""
    track_access_events: bool | None = None
    reviewers: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        body = self.configuration.to_dict()
        body["comment"] = self.comment
        if self.track_access_events:
            body["trackAccessEvents"] = True
        if self.reviewers is not None:
            body["reviewers"] = list(self.reviewers)
        return body


@dataclass(frozen=True)
class Ack:
    """永続化サービスの受理応答。"""

    success: bool = True
    message: str = ""


@dataclass
class ApprovalInfo:
    """承認フロー設定。"""

    enable_approval: bool = False
    reviewers: list[str] = field(default_factory=list)


class TargetingServiceProtocol(Protocol):
    """ターゲティング永続化サービス。失敗時は TransportError を送出する。"""

    async def submit(self, keys: ToggleKeys, request: PublishRequest) -> Ack: ...

    async def approve(self, keys: ToggleKeys, request: PublishRequest) -> Ack: ...


class SegmentRegistryProtocol(Protocol):
    """セグメントの読み取り専用レジストリ。"""

    async def get_segment(self, segment_key: str) -> dict[str, Any] | None: ...


class InMemoryTargetingService:
    """テスト用インメモリ永続化サービス。"""

    def __init__(self) -> None:
        self._published: dict[ToggleKeys, Configuration] = {}
        self.submitted: list[dict[str, Any]] = []
        self.approval_requests: list[dict[str, Any]] = []
        self.fail_with: Exception | None = None
        self.reject_with: str | None = None

    def set_targeting(self, keys: ToggleKeys, configuration: Configuration) -> None:
        self._published[keys] = copy.deepcopy(configuration)

    def get_targeting(self, keys: ToggleKeys) -> Configuration:
        configuration = self._published.get(keys)
        if configuration is None:
            raise TargetingError(
                TargetingErrorCodes.NOT_FOUND,
                f"targeting not found: {keys.toggle_key}",
            )
        return copy.deepcopy(configuration)

    def _check_failure(self) -> None:
        if self.fail_with is not None:
            raise TransportError(
                f"request failed: {self.fail_with}", cause=self.fail_with
            )

    async def submit(self, keys: ToggleKeys, request: PublishRequest) -> Ack:
        self._check_failure()
        if self.reject_with is not None:
            return Ack(success=False, message=self.reject_with)
        self.submitted.append(request.to_dict())
        self._published[keys] = copy.deepcopy(request.configuration)
        return Ack()

    async def approve(self, keys: ToggleKeys, request: PublishRequest) -> Ack:
        self._check_failure()
        if self.reject_with is not None:
            return Ack(success=False, message=self.reject_with)
        self.approval_requests.append(request.to_dict())
        return Ack()


class InMemorySegmentRegistry:
    """テスト用インメモリセグメントレジストリ。"""

    def __init__(self, segments: dict[str, dict[str, Any]] | None = None) -> None:
        self._segments: dict[str, dict[str, Any]] = dict(segments or {})

    async def get_segment(self, segment_key: str) -> dict[str, Any] | None:
        return self._segments.get(segment_key)
