"""
Message catalog for human-readable result messages.

Criteria refer to messages by key; rendering is kept behind format_message so
a localized catalog can be swapped in by the caller.
"""

from typing import Any, Dict

import structlog

logger = structlog.get_logger(__name__)


DEFAULT_MESSAGES: Dict[str, str] = {
    "criterion.completeness.incomplete": "Required field {0} is missing or empty",
    "criterion.numeric_range.unparseable": "Value '{1}' of {0} is not a valid number",
    "criterion.numeric_range.out_of_bounds": "Value {1} of {0} is outside [{2}, {3}]",
    "criterion.numeric_range.suspicious_default": "Coordinates {0}, {1} are likely a default value",
    "criterion.uniqueness.duplicate": "Value '{0}' of {1} is not unique",
}

_catalog: Dict[str, str] = dict(DEFAULT_MESSAGES)


def register_messages(messages: Dict[str, str]) -> None:
    """Override or extend message templates (e.g. with a localized catalog)"""
    _catalog.update(messages)


def format_message(key: str, *params: Any) -> str:
    """Render the message registered under key with positional parameters"""
    template = _catalog.get(key)
    if template is None:
        logger.warning("Unknown message key", message_key=key)
        return f"{key}: {', '.join(str(p) for p in params)}"
    return template.format(*params)
