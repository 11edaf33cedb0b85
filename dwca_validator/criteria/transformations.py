"""
Field value transformations used by record criteria.

A transformation reads one field of a record and turns it into a typed value.
When the field is absent or cannot be interpreted the result is marked as not
transformed and carries no data.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from dwca_validator.record import Record

T = TypeVar("T")

TRUE_VALUES = {"true", "t", "yes", "y", "1"}
FALSE_VALUES = {"false", "f", "no", "n", "0"}


@dataclass(frozen=True)
class ValueTransformationResult(Generic[T]):
    field: str
    data: Optional[T] = None
    transformed: bool = False

    @property
    def is_not_transformed(self) -> bool:
        return not self.transformed

    @classmethod
    def failed(cls, field: str) -> "ValueTransformationResult[T]":
        return cls(field=field)


class ValueTransformation(ABC, Generic[T]):
    def __init__(self, field: str):
        self.field = field

    @abstractmethod
    def transform(self, record: Record) -> ValueTransformationResult[T]:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.field!r})"


class NotBlankTransformation(ValueTransformation[bool]):
    """True when the field holds a non-blank value"""

    def transform(self, record: Record) -> ValueTransformationResult[bool]:
        value = record.value(self.field)
        if value is None:
            return ValueTransformationResult.failed(self.field)
        return ValueTransformationResult(self.field, bool(value.strip()), True)


class BooleanTransformation(ValueTransformation[bool]):
    """Parses yes/no style flags (true/false, t/f, yes/no, y/n, 1/0)"""

    def transform(self, record: Record) -> ValueTransformationResult[bool]:
        value = record.value(self.field)
        if value is None:
            return ValueTransformationResult.failed(self.field)

        normalized = value.strip().lower()
        if normalized in TRUE_VALUES:
            return ValueTransformationResult(self.field, True, True)
        if normalized in FALSE_VALUES:
            return ValueTransformationResult(self.field, False, True)
        return ValueTransformationResult.failed(self.field)
