"""Numeric sanity checks for the new-workout form."""
import math
import re
from typing import Any, Dict, Optional

NOT_A_NUMBER = "not_a_number"
NOT_POSITIVE = "not_positive"
UNKNOWN_KIND = "unknown_kind"

# Plain decimal literals only: no digit separators, no inf/nan spellings
DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

MESSAGES = {
    NOT_A_NUMBER: "Inputs are not valid numbers",
    NOT_POSITIVE: "Inputs are not positive numbers",
    UNKNOWN_KIND: "Workout type must be running or cycling",
}


class ActivityValidationError(ValueError):
    """Form input rejected before any activity is built."""

    def __init__(self, reason: str, field: Optional[str] = None):
        self.reason = reason
        self.field = field
        super().__init__(MESSAGES[reason])

    @property
    def message(self) -> str:
        return MESSAGES[self.reason]

    def to_dict(self) -> Dict[str, Any]:
        return {"reason": self.reason, "field": self.field, "message": self.message}


def parse_number(raw: Any) -> Optional[float]:
    """Parse a raw form value into a finite float, or None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not DECIMAL_RE.fullmatch(text):
            return None
        value = float(text)
    return value if math.isfinite(value) else None


def parse_finite(**raw_values: Any) -> Dict[str, float]:
    """
    Parse every named value, failing on the first one that is not a finite number.

    Raises:
        ActivityValidationError: With reason NOT_A_NUMBER
    """
    parsed = {}
    for name, raw in raw_values.items():
        value = parse_number(raw)
        if value is None:
            raise ActivityValidationError(NOT_A_NUMBER, name)
        parsed[name] = value
    return parsed


def require_positive(values: Dict[str, float], *names: str) -> None:
    """
    Raises:
        ActivityValidationError: With reason NOT_POSITIVE for the first value <= 0
    """
    for name in names:
        if not values[name] > 0:
            raise ActivityValidationError(NOT_POSITIVE, name)
