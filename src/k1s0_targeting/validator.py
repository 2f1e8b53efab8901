"""公開前の編集モデル検証"""

from __future__ import annotations

from .edit import EditModel
from .exceptions import ValidationError
from .messages import (
    INPUT_REQUIRED,
    REASON_REQUIRED,
    RETURN_TYPE_REQUIRED,
    SERVE_INVALID,
    SERVE_REQUIRED,
    TRACK_CHOICE_REQUIRED,
    MessageCatalog,
    StaticMessageCatalog,
)
from .normalizer import DEFAULT_SERVE_FIELD, DISABLED_SERVE_FIELD, rule_serve_field
from .serve import SPLIT_TOTAL, Select, ServeStrategy, Split, check_split

BOOLEAN_RETURN_TYPE = "boolean"

CONDITION_REQUIRED = "CONDITION_REQUIRED"
VALUE_REQUIRED = "VALUE_REQUIRED"
SERVE_REQUIRED_CODE = "SERVE_REQUIRED"
INVALID_SERVE = "INVALID_SERVE"
REASON_REQUIRED_CODE = "REASON_REQUIRED"
TRACK_CHOICE_REQUIRED_CODE = "TRACK_CHOICE_REQUIRED"


def rule_add_field(rule_id: str) -> str:
    return f"rule_{rule_id}_add"


def variation_field(variation_id: str, *, boolean: bool) -> str:
    return f"variation_{variation_id}_normal" if boolean else f"variation_{variation_id}"


class ValidationResult:
    """検証結果。エラーは検出順に保持し、先頭がフォーカス対象になる。"""

    def __init__(self, errors: list[ValidationError] | None = None) -> None:
        self._errors: list[ValidationError] = list(errors or [])

    @property
    def is_valid(self) -> bool:
        return not self._errors

    @property
    def errors(self) -> list[ValidationError]:
        return list(self._errors)

    def add(self, error: ValidationError) -> None:
        self._errors.append(error)

    def first(self) -> ValidationError | None:
        return self._errors[0] if self._errors else None

    def fields(self) -> list[str]:
        return [e.field for e in self._errors]

    def for_field(self, field: str) -> list[ValidationError]:
        return [e for e in self._errors if e.field == field]

    def __repr__(self) -> str:
        return f"ValidationResult(errors={self._errors!r})"


def validate(
    model: EditModel,
    *,
    return_type: str | None = None,
    messages: MessageCatalog | None = None,
    split_total: int = SPLIT_TOTAL,
) -> ValidationResult:
    """編集モデルを検証する。モデルは変更しない。"""
    catalog = messages if messages is not None else StaticMessageCatalog()
    result = ValidationResult()

    for rule in model.rules:
        if not rule.conditions:
            result.add(
                ValidationError(
                    rule_add_field(rule.id),
                    catalog.format_message(INPUT_REQUIRED),
                    code=CONDITION_REQUIRED,
                )
            )

    boolean = return_type == BOOLEAN_RETURN_TYPE
    for variation in model.variations:
        if variation.value.strip() == "":
            message_id = RETURN_TYPE_REQUIRED if boolean else INPUT_REQUIRED
            result.add(
                ValidationError(
                    variation_field(variation.id, boolean=boolean),
                    catalog.format_message(message_id),
                    code=VALUE_REQUIRED,
                )
            )

    serves: list[tuple[str, ServeStrategy | None]] = [
        (rule_serve_field(rule.id), rule.serve) for rule in model.rules
    ]
    serves.append((DEFAULT_SERVE_FIELD, model.default_serve))
    serves.append((DISABLED_SERVE_FIELD, model.disabled_serve))
    for field, serve in serves:
        error = _check_serve(field, serve, len(model.variations), catalog, split_total)
        if error is not None:
            result.add(error)

    return result


def _check_serve(
    field: str,
    serve: ServeStrategy | None,
    variation_count: int,
    catalog: MessageCatalog,
    split_total: int,
) -> ValidationError | None:
    if serve is None:
        return ValidationError(
            field, catalog.format_message(SERVE_REQUIRED), code=SERVE_REQUIRED_CODE
        )
    if isinstance(serve, Select):
        if 0 <= serve.index < variation_count:
            return None
        return ValidationError(
            field, catalog.format_message(SERVE_INVALID), code=INVALID_SERVE
        )
    if isinstance(serve, Split):
        if not check_split(serve.weights, variation_count, split_total):
            return None
        return ValidationError(
            field, catalog.format_message(SERVE_INVALID), code=INVALID_SERVE
        )
    raise TypeError(f"unknown serve strategy: {serve!r}")


def validate_publish_request(
    *,
    comment: str,
    track_access_events: bool | None,
    approval_enabled: bool,
    allow_enable_track_events: bool,
    messages: MessageCatalog | None = None,
) -> ValidationResult:
    """公開確認ダイアログの入力を検証する。

    承認フローが有効なら理由 (comment) が必須。無効かつイベント収集を選べる
    場合は収集するかどうかの選択が必須。
    """
    catalog = messages if messages is not None else StaticMessageCatalog()
    result = ValidationResult()
    if approval_enabled:
        if comment == "":
            result.add(
                ValidationError(
                    "reason",
                    catalog.format_message(REASON_REQUIRED),
                    code=REASON_REQUIRED_CODE,
                )
            )
    elif allow_enable_track_events and track_access_events is None:
        result.add(
            ValidationError(
                "radioGroup",
                catalog.format_message(TRACK_CHOICE_REQUIRED),
                code=TRACK_CHOICE_REQUIRED_CODE,
            )
        )
    return result


def rules_to_expand(model: EditModel, result: ValidationResult) -> list[str]:
    """エラーを含む折りたたまれたルールの ID を返す。"""
    ids: list[str] = []
    for rule in model.rules:
        if rule.active:
            continue
        prefix = f"rule_{rule.id}_"
        if any(f.startswith(prefix) for f in result.fields()):
            ids.append(rule.id)
    return ids
