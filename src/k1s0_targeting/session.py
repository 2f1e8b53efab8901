"""ターゲティング編集セッション"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import structlog

from .classifier import Classification, classify, is_equal
from .codec import (
    EditCondition,
    IdFactory,
    new_id,
    now_timestamp,
    split_timestamp,
)
from .config import TargetingSettings
from .edit import EditModel, EditRule, EditVariation
from .exceptions import TargetingError, TargetingErrorCodes, TransportError
from .logger import configure_from
from .messages import MessageCatalog, StaticMessageCatalog
from .models import Configuration, ConditionType
from .normalizer import project_serve_fields, to_edit_model, to_wire_model
from .serve import Select, ServeStrategy, describe, display_name, is_resolvable
from .service import (
    Ack,
    ApprovalInfo,
    PublishRequest,
    SegmentRegistryProtocol,
    TargetingServiceProtocol,
    ToggleKeys,
)
from .validator import ValidationResult, validate, validate_publish_request

logger = structlog.stdlib.get_logger(__name__)

_CONDITION_FIELDS = frozenset(
    {"type", "subject", "predicate", "objects", "datetime", "timezone"}
)
_VARIATION_FIELDS = frozenset({"name", "value", "description"})


@dataclass(frozen=True)
class Confirmation:
    """公開確認ダイアログの状態。"""

    snapshot: Configuration
    classification: Classification
    disclosure_required: bool


@dataclass
class PublishResult:
    """公開操作の結果。

    ack が None ならリクエストを送っていない。ack.success が偽ならサービスに
    拒否されており、編集状態はそのまま残る。
    """

    ack: Ack | None = None
    validation: ValidationResult = field(default_factory=ValidationResult)

    @property
    def submitted(self) -> bool:
        return self.ack is not None and self.ack.success


class TargetingSession:
    """1 回の編集セッションのコンテキスト。

    読み込んだ正規形式を保持し、編集モデルへの変更は必ずこのクラスの操作を通す。
    各操作のあとで正規形式のスナップショットを同期的に再計算するため、
    is_dirty / classify は常に最新の状態を読む。
    """

    def __init__(
        self,
        initial: Configuration,
        *,
        service: TargetingServiceProtocol,
        keys: ToggleKeys,
        settings: TargetingSettings | None = None,
        messages: MessageCatalog | None = None,
        return_type: str | None = None,
        approval: ApprovalInfo | None = None,
        track_events: bool = False,
        allow_enable_track_events: bool = False,
        id_factory: IdFactory = new_id,
        now: datetime | None = None,
    ) -> None:
        self._service = service
        self._keys = keys
        self._settings = settings or TargetingSettings()
        if settings is not None:
            configure_from(settings.log)
        self._messages = messages or StaticMessageCatalog(self._settings.messages)
        self._return_type = return_type
        self._approval = approval or ApprovalInfo()
        self._track_events = track_events
        self._allow_enable_track_events = allow_enable_track_events
        self._id_factory = id_factory
        self._now = now
        self._publishing = False
        self._begin(initial)

    def _begin(self, initial: Configuration) -> None:
        self._initial = copy.deepcopy(initial)
        self._disabled = initial.disabled
        self._model = to_edit_model(
            self._initial,
            messages=self._messages,
            id_factory=self._id_factory,
            now=self._now,
        )
        self._confirmation: Confirmation | None = None
        self._disclosure_acknowledged = False
        self._refresh()
        logger.info(
            "targeting session started",
            toggle_key=self._keys.toggle_key,
            rules=len(self._model.rules),
            variations=len(self._model.variations),
        )

    def _refresh(self) -> None:
        self._canonical = to_wire_model(self._model, disabled=self._disabled)
        self._confirmation = None

    # --- 読み取り ---

    @property
    def model(self) -> EditModel:
        return self._model

    @property
    def initial(self) -> Configuration:
        return copy.deepcopy(self._initial)

    @property
    def disabled(self) -> bool:
        return self._disabled

    @property
    def publishing(self) -> bool:
        return self._publishing

    @property
    def confirmation(self) -> Confirmation | None:
        return self._confirmation

    def get_canonical(self) -> Configuration:
        """現時点で送信される正規形式。"""
        return copy.deepcopy(self._canonical)

    def is_dirty(self) -> bool:
        return not is_equal(self._initial, self._canonical)

    def can_publish(self) -> bool:
        return self.is_dirty() and not self._publishing

    def validate(self) -> ValidationResult:
        return validate(
            self._model,
            return_type=self._return_type,
            messages=self._messages,
            split_total=self._settings.split_total,
        )

    def classify(self) -> Classification:
        classifier = self._settings.classifier
        return classify(
            self._initial,
            self._canonical,
            variation_fields=classifier.non_material_variation_fields,
            rule_fields=classifier.non_material_rule_fields,
        )

    def form_fields(self) -> dict[str, ServeStrategy]:
        """フォームにバインドしてよいサーブ戦略。"""
        return project_serve_fields(self._model)

    def disabled_text(self) -> str | None:
        """無効時に返すバリエーションの表示名。"""
        serve = self._model.disabled_serve
        variations = self._model.variations
        if isinstance(serve, Select) and is_resolvable(serve, variations):
            return display_name(variations[serve.index])
        return None

    def serve_summaries(self, configuration: Configuration) -> dict[str, Any]:
        """差分表示用にサーブ戦略をバリエーション名へ解決する。

        解決できない戦略は None になる。
        """
        variations = configuration.variations
        return {
            "defaultServe": describe(configuration.default_serve, variations),
            "disabledServe": describe(configuration.disabled_serve, variations),
            "rules": [describe(r.serve, variations) for r in configuration.rules],
        }

    def referenced_segments(self) -> list[str]:
        keys: list[str] = []
        for rule in self._model.rules:
            for condition in rule.conditions:
                if condition.type == ConditionType.SEGMENT:
                    for key in condition.objects or []:
                        if key not in keys:
                            keys.append(key)
        return keys

    async def missing_segments(self, registry: SegmentRegistryProtocol) -> list[str]:
        """レジストリに存在しないセグメントのキーを返す。"""
        missing: list[str] = []
        for key in self.referenced_segments():
            if await registry.get_segment(key) is None:
                missing.append(key)
        return missing

    # --- 変更操作 ---

    def set_disabled(self, disabled: bool) -> None:
        self._disabled = disabled
        self._refresh()

    def set_default_serve(self, serve: ServeStrategy | None) -> None:
        self._model.default_serve = serve
        self._refresh()

    def set_disabled_serve(self, serve: ServeStrategy | None) -> None:
        self._model.disabled_serve = serve
        self._refresh()

    def set_rule_serve(self, rule_id: str, serve: ServeStrategy | None) -> None:
        self._model.find_rule(rule_id).serve = serve
        self._refresh()

    def rename_rule(self, rule_id: str, name: str | None) -> None:
        self._model.find_rule(rule_id).name = name
        self._refresh()

    def toggle_rule(self, rule_id: str, active: bool) -> None:
        # active は正規形式に現れないので再計算は不要
        self._model.find_rule(rule_id).active = active

    def add_rule(self) -> EditRule:
        rule = self._model.add_rule()
        self._refresh()
        return rule

    def remove_rule(self, rule_id: str) -> None:
        self._model.remove_rule(rule_id)
        self._refresh()

    def move_rule(self, rule_id: str, new_index: int) -> None:
        self._model.move_rule(rule_id, new_index)
        self._refresh()

    def add_condition(
        self, rule_id: str, condition_type: str = ConditionType.STRING
    ) -> EditCondition:
        condition = self._model.add_condition(rule_id, condition_type, now=self._now)
        self._refresh()
        return condition

    def remove_condition(self, rule_id: str, condition_id: str) -> None:
        self._model.remove_condition(rule_id, condition_id)
        self._refresh()

    def update_condition(self, condition_id: str, **changes: Any) -> None:
        _check_fields(changes, _CONDITION_FIELDS)
        condition = self._model.find_condition(condition_id)
        for key, value in changes.items():
            setattr(condition, key, value)
        if (
            changes.get("type") == ConditionType.DATETIME
            and condition.datetime is None
        ):
            # 日時タイプに切り替えたときは現在時刻で埋める
            condition.datetime, condition.timezone = split_timestamp(
                now_timestamp(self._now)
            )
        self._refresh()

    def add_variation(
        self, name: str = "", value: str = "", description: str = ""
    ) -> EditVariation:
        variation = self._model.add_variation(name, value, description)
        self._refresh()
        return variation

    def remove_variation(self, variation_id: str) -> None:
        self._model.remove_variation(variation_id)
        self._refresh()

    def update_variation(self, variation_id: str, **changes: Any) -> None:
        _check_fields(changes, _VARIATION_FIELDS)
        variation = self._model.find_variation(variation_id)
        for key, value in changes.items():
            setattr(variation, key, value)
        self._refresh()

    def refresh(self) -> None:
        """編集モデルを直接書き換えたあとに呼ぶ。"""
        self._refresh()

    def discard(self) -> None:
        """編集内容を破棄して読み込み時の状態に戻す。"""
        self._begin(self._initial)

    # --- 公開 ---

    def open_confirmation(self) -> ValidationResult:
        """検証に通れば公開確認を開き、変更分類を計算する。"""
        if self._publishing:
            raise TargetingError(
                TargetingErrorCodes.PUBLISH_IN_FLIGHT,
                "a publish request is already in flight",
            )
        if not self.is_dirty():
            raise TargetingError(TargetingErrorCodes.NO_CHANGES, "nothing to publish")
        result = self.validate()
        if not result.is_valid:
            return result
        classification = self.classify()
        self._confirmation = Confirmation(
            snapshot=self.get_canonical(),
            classification=classification,
            disclosure_required=classification.material and self._track_events,
        )
        self._disclosure_acknowledged = False
        return result

    def acknowledge_disclosure(self) -> None:
        self._disclosure_acknowledged = True

    def cancel_confirmation(self) -> None:
        self._confirmation = None
        self._disclosure_acknowledged = False

    async def publish(
        self, comment: str = "", *, track_access_events: bool | None = None
    ) -> PublishResult:
        """確認済みの内容を送信する。

        承認フローが有効な場合は承認リクエストとして送る。直接公開に成功すると
        送信した内容で新しいセッションを始める。

        Raises:
            TargetingError: 送信中、未確認、または開示未確認の場合
            TransportError: 永続化サービスへの送信に失敗した場合 (編集状態は保持)
        """
        if self._publishing:
            raise TargetingError(
                TargetingErrorCodes.PUBLISH_IN_FLIGHT,
                "a publish request is already in flight",
            )
        confirmation = self._confirmation
        if confirmation is None:
            raise TargetingError(
                TargetingErrorCodes.NOT_CONFIRMED,
                "open the publish confirmation first",
            )
        if confirmation.disclosure_required and not self._disclosure_acknowledged:
            raise TargetingError(
                TargetingErrorCodes.DISCLOSURE_REQUIRED,
                "material change must be acknowledged before publishing",
            )
        form = validate_publish_request(
            comment=comment,
            track_access_events=track_access_events,
            approval_enabled=self._approval.enable_approval,
            allow_enable_track_events=self._allow_enable_track_events,
            messages=self._messages,
        )
        if not form.is_valid:
            return PublishResult(validation=form)

        approval = self._approval.enable_approval
        request = PublishRequest(
            configuration=confirmation.snapshot,
            comment=comment,
            track_access_events=None if approval else track_access_events,
            reviewers=list(self._approval.reviewers) if approval else None,
        )
        self.cancel_confirmation()
        self._publishing = True
        log = logger.bind(toggle_key=self._keys.toggle_key, approval=approval)
        log.info("publishing targeting", material=confirmation.classification.material)
        try:
            if approval:
                ack = await self._service.approve(self._keys, request)
            else:
                ack = await self._service.submit(self._keys, request)
        except TransportError as e:
            log.warning("targeting publish failed", error=str(e))
            raise
        except Exception as e:
            log.warning("targeting publish failed", error=str(e))
            raise TransportError(f"Failed to publish targeting: {e}", cause=e) from e
        finally:
            self._publishing = False

        if not ack.success:
            log.warning("targeting publish rejected", reason=ack.message)
            return PublishResult(ack=ack)
        log.info("targeting published")
        if not approval:
            self._begin(confirmation.snapshot)
        return PublishResult(ack=ack)


def _check_fields(changes: dict[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise TargetingError(
            TargetingErrorCodes.INVALID_CONFIGURATION,
            f"unknown fields: {sorted(unknown)}",
        )
