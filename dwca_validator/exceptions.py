"""
Validator error types.

All errors raised by the validation pipeline derive from ValidatorError so
callers can catch the whole family at the run boundary.
"""

from typing import List, Optional


class ValidatorError(Exception):
    """Base exception for validator errors."""
    pass


class CriterionConfigurationError(ValidatorError):
    """Raised at build time when a criterion or chain cannot be constructed."""
    def __init__(self, message: str, criterion: Optional[str] = None):
        super().__init__(message)
        self.criterion = criterion


class CriterionStateError(ValidatorError):
    """Raised when a stream criterion is driven out of its lifecycle order."""
    def __init__(self, criterion: str, state: str, action: str):
        self.criterion = criterion
        self.state = state
        self.action = action
        super().__init__(
            f"Criterion '{criterion}' cannot {action} while {state}"
        )


class ChainStateError(ValidatorError):
    """Raised when process/end_of_stream are called out of order."""
    pass


class ResultAccumulationError(ValidatorError):
    """Raised when a result cannot be stored by the accumulator."""
    def __init__(self, message: str, rejected: Optional[List[object]] = None):
        super().__init__(message)
        self.rejected = rejected or []
