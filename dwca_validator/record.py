"""Record model handed to criteria by the record sources"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class Record:
    """One row of a core or extension file"""
    id: str
    row_type: str
    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze a private copy so callers can't mutate the row behind our back
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def value(self, field_name: str) -> Optional[str]:
        """Value of field_name, or None when the record has no such field"""
        return self.values.get(field_name)

    def __hash__(self) -> int:
        return hash((self.id, self.row_type, tuple(self.values.items())))
