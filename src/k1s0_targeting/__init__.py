"""k1s0 targeting library."""

from .classifier import Classification, classify, is_equal
from .codec import EditCondition, split_timestamp, to_canonical, to_edit
from .config import TargetingSettings, load_settings
from .diff import Difference, diff
from .edit import EditModel, EditRule, EditVariation
from .exceptions import (
    ResolutionError,
    TargetingError,
    TargetingErrorCodes,
    TransportError,
    ValidationError,
)
from .logger import new_logger
from .messages import MessageCatalog, StaticMessageCatalog
from .models import Condition, ConditionType, Configuration, Rule, Variation
from .normalizer import project_serve_fields, to_edit_model, to_wire_model
from .serve import Select, ServeStrategy, Split, check_split, project, resolve
from .service import (
    Ack,
    ApprovalInfo,
    InMemorySegmentRegistry,
    InMemoryTargetingService,
    PublishRequest,
    SegmentRegistryProtocol,
    TargetingServiceProtocol,
    ToggleKeys,
)
from .session import Confirmation, PublishResult, TargetingSession
from .validator import ValidationResult, validate, validate_publish_request

__all__ = [
    "Ack",
    "ApprovalInfo",
    "Classification",
    "Condition",
    "ConditionType",
    "Configuration",
    "Confirmation",
    "Difference",
    "EditCondition",
    "EditModel",
    "EditRule",
    "EditVariation",
    "InMemorySegmentRegistry",
    "InMemoryTargetingService",
    "MessageCatalog",
    "PublishRequest",
    "PublishResult",
    "ResolutionError",
    "Rule",
    "SegmentRegistryProtocol",
    "Select",
    "ServeStrategy",
    "Split",
    "StaticMessageCatalog",
    "TargetingError",
    "TargetingErrorCodes",
    "TargetingServiceProtocol",
    "TargetingSession",
    "TargetingSettings",
    "ToggleKeys",
    "TransportError",
    "ValidationError",
    "ValidationResult",
    "Variation",
    "check_split",
    "classify",
    "diff",
    "is_equal",
    "load_settings",
    "new_logger",
    "project",
    "project_serve_fields",
    "resolve",
    "split_timestamp",
    "to_canonical",
    "to_edit",
    "to_edit_model",
    "to_wire_model",
    "validate",
    "validate_publish_request",
]
