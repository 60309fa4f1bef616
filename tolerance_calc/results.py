"""Common result envelope for the GD&T calculators.

Calculators never raise on bad measurement data. They return a
``CalculatorResponse`` holding either a frozen result object or the full
list of violated preconditions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from tolerance_calc.rounding import MAX_PRECISION, MIN_PRECISION, validate_precision

Clock = Callable[[], datetime]


class Unit(Enum):
    """Unit system for all dimensional values."""
    MM = "mm"
    INCH = "inch"


class PassFailStatus(Enum):
    """Overall determination of a calculation."""
    PASS = "pass"
    FAIL = "fail"
    WARNING = "warning"


class ErrorCode(str, Enum):
    INVALID_TOLERANCE = "INVALID_TOLERANCE"
    INVALID_PRECISION = "INVALID_PRECISION"
    INVALID_SIZE = "INVALID_SIZE"
    INVALID_SIZE_TOLERANCE = "INVALID_SIZE_TOLERANCE"
    INVALID_ACTUAL_SIZE = "INVALID_ACTUAL_SIZE"
    INVALID_FEATURE_TYPE = "INVALID_FEATURE_TYPE"
    INVALID_MATERIAL_CONDITION = "INVALID_MATERIAL_CONDITION"
    INVALID_TIR = "INVALID_TIR"
    NO_MEASUREMENTS = "NO_MEASUREMENTS"
    MISSING_SIZE_DIMENSION = "MISSING_SIZE_DIMENSION"
    MISSING_ACTUAL_SIZE = "MISSING_ACTUAL_SIZE"
    MISSING_MEASUREMENT_LENGTH = "MISSING_MEASUREMENT_LENGTH"
    INVALID_MEASUREMENT_LENGTH = "INVALID_MEASUREMENT_LENGTH"
    MISSING_OUTSIDE_AMOUNT = "MISSING_OUTSIDE_AMOUNT"
    INVALID_OUTSIDE_AMOUNT = "INVALID_OUTSIDE_AMOUNT"
    # Stack-up input checks
    INSUFFICIENT_DIMENSIONS = "INSUFFICIENT_DIMENSIONS"
    INVALID_PROCESS_CAPABILITY = "INVALID_PROCESS_CAPABILITY"


@dataclass(frozen=True)
class CalculatorError:
    """A single violated precondition.

    Attributes:
        code: Stable machine-readable code.
        message: Human-readable explanation.
        field: Dotted path of the offending input field.
    """
    code: ErrorCode
    message: str
    field: Optional[str] = None

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message, "field": self.field}


R = TypeVar("R")


@dataclass(frozen=True)
class CalculatorResponse(Generic[R]):
    """Success/failure wrapper returned by every calculator."""
    success: bool
    result: Optional[R] = None
    errors: tuple[CalculatorError, ...] = field(default_factory=tuple)

    @classmethod
    def ok(cls, result: R) -> CalculatorResponse[R]:
        return cls(success=True, result=result)

    @classmethod
    def fail(cls, errors: list[CalculatorError]) -> CalculatorResponse[R]:
        if not errors:
            raise ValueError("a failed response needs at least one error")
        return cls(success=False, errors=tuple(errors))

    @property
    def error_codes(self) -> list[ErrorCode]:
        return [e.code for e in self.errors]

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "result": self.result.to_dict()}
        return {"success": False, "errors": [e.to_dict() for e in self.errors]}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def timestamp(clock: Optional[Clock] = None) -> str:
    """ISO 8601 timestamp from ``clock`` (wall clock in UTC by default)."""
    return (clock or utc_now)().isoformat()


def precision_error(precision: int) -> Optional[CalculatorError]:
    if validate_precision(precision):
        return None
    return CalculatorError(
        code=ErrorCode.INVALID_PRECISION,
        message=f"Precision must be an integer between {MIN_PRECISION} and {MAX_PRECISION}",
        field="precision",
    )


def status_from(passed: bool) -> PassFailStatus:
    return PassFailStatus.PASS if passed else PassFailStatus.FAIL
