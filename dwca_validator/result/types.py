"""
Validation result types and data structures
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Generic, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


class Severity(IntEnum):
    """
    Result severity levels, ordered OK < WARNING < ERROR.

    OK marks a check that ran and passed but is still worth recording.
    """
    OK = 0
    WARNING = 1
    ERROR = 2


class ValidationType(str, Enum):
    """Category of a finding"""
    FIELD_UNIQUENESS = "field_uniqueness"
    RECORD_CONTENT_VALUE = "record_content_value"
    RECORD_CONTENT_BOUNDS = "record_content_bounds"


class ContextKind(str, Enum):
    CORE = "core"
    EXTENSION = "extension"


@dataclass(frozen=True)
class EvaluationContext:
    """
    Stream a record or result originates from.

    Either the core stream or one extension identified by its row type.
    Use EvaluationContext.core() / EvaluationContext.extension(row_type).
    """
    kind: ContextKind
    row_type: Optional[str] = None

    def __post_init__(self):
        if self.kind == ContextKind.EXTENSION and not self.row_type:
            raise ValueError("An extension context requires a row type")
        if self.kind == ContextKind.CORE and self.row_type is not None:
            raise ValueError("The core context does not carry a row type")

    @classmethod
    def core(cls) -> "EvaluationContext":
        return cls(ContextKind.CORE)

    @classmethod
    def extension(cls, row_type: str) -> "EvaluationContext":
        return cls(ContextKind.EXTENSION, row_type)

    @property
    def is_core(self) -> bool:
        return self.kind == ContextKind.CORE

    def __str__(self) -> str:
        if self.is_core:
            return ContextKind.CORE.value
        return f"{ContextKind.EXTENSION.value}:{self.row_type}"


@dataclass(frozen=True)
class ValidationResultElement:
    """A single finding produced by one criterion"""
    criterion_key: str
    category: ValidationType
    severity: Severity
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "criterion_key": self.criterion_key,
            "category": self.category.value,
            "severity": self.severity.name,
            "message": self.message,
        }


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of one criterion invocation for one record.

    An empty elements tuple means the criterion ran and the record passed.
    "Not applicable" is expressed by the criterion returning None instead.
    """
    record_id: str
    context: EvaluationContext
    row_type: Optional[str] = None
    elements: Tuple[ValidationResultElement, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.elements, tuple):
            object.__setattr__(self, "elements", tuple(self.elements))

    @property
    def passed(self) -> bool:
        return not self.elements

    @property
    def max_severity(self) -> Severity:
        return max((e.severity for e in self.elements), default=Severity.OK)

    def has_category(self, category: ValidationType) -> bool:
        return any(e.category == category for e in self.elements)

    def messages(self) -> Sequence[str]:
        return [e.message for e in self.elements]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id": self.record_id,
            "context": str(self.context),
            "row_type": self.row_type,
            "elements": [e.to_dict() for e in self.elements],
        }


@dataclass(frozen=True)
class AggregationResult(Generic[T]):
    """Dataset-wide fact produced during finalization of a context"""
    key: str
    context: EvaluationContext
    value: T

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "context": str(self.context),
            "value": self.value,
        }
