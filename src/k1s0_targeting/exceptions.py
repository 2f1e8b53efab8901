"""targeting ライブラリの例外型定義"""

from __future__ import annotations


class TargetingError(Exception):
    """targeting ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class TargetingErrorCodes:
    """TargetingError のエラーコード定数。"""

    INVALID_CONFIGURATION: str = "INVALID_CONFIGURATION"
    RESOLUTION_ERROR: str = "RESOLUTION_ERROR"
    TRANSPORT_ERROR: str = "TRANSPORT_ERROR"
    NOT_FOUND: str = "NOT_FOUND"
    PUBLISH_IN_FLIGHT: str = "PUBLISH_IN_FLIGHT"
    NOT_CONFIRMED: str = "NOT_CONFIRMED"
    NO_CHANGES: str = "NO_CHANGES"
    DISCLOSURE_REQUIRED: str = "DISCLOSURE_REQUIRED"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"


class ResolutionError(TargetingError):
    """サーブ戦略が存在しないバリエーションを参照している。"""

    def __init__(self, index: int, variation_count: int) -> None:
        super().__init__(
            TargetingErrorCodes.RESOLUTION_ERROR,
            f"variation index {index} out of range ({variation_count} variations)",
        )
        self.index = index
        self.variation_count = variation_count


class TransportError(TargetingError):
    """永続化サービスへの送信に失敗した。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(TargetingErrorCodes.TRANSPORT_ERROR, message, cause)


class ValidationError(Exception):
    """フィールド単位の検証エラー。

    field はフォームのフィールド名 (例: ``rule_<id>_add``)。検証器はこれを送出せず
    ValidationResult に集約する。
    """

    def __init__(self, field: str, message: str, *, code: str | None = None) -> None:
        self.field = field
        self.message = message
        self.code = code if code is not None else f"INVALID_{field.upper()}"
        super().__init__(f"ValidationError({field}, {self.code}): {message}")

