"""Pydantic models for calculation requests and results."""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Operation(str, Enum):
    """The closed set of arithmetic operations the dispatcher understands."""

    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"


class ErrorKind(str, Enum):
    """Classification of a rejected calculation request."""

    MISSING_DATA = "missing_data"
    INVALID_NUMERIC_INPUT = "invalid_numeric_input"
    INVALID_OPERATION = "invalid_operation"
    DIVISION_BY_ZERO = "division_by_zero"

    @property
    def message(self) -> str:
        """Human-readable message shown to the end user."""
        return ERROR_MESSAGES[self]


ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.MISSING_DATA: "Missing 'num1', 'num2', or 'operation' in request data",
    ErrorKind.INVALID_NUMERIC_INPUT: "Invalid number format for 'num1' or 'num2'",
    ErrorKind.INVALID_OPERATION: "Unsupported operation",
    ErrorKind.DIVISION_BY_ZERO: "Division by zero is not allowed",
}


class CalculationRequest(BaseModel):
    """
    Raw calculation request as received from a caller.

    Fields are kept untyped on purpose: values arrive from JSON bodies or HTML
    form fields and are classified by the dispatcher, not rejected here.
    """

    model_config = ConfigDict(frozen=True)

    num1: Any = Field(default=None, description="First operand")
    num2: Any = Field(default=None, description="Second operand")
    operation: Any = Field(default=None, description="Operation name (add, subtract, multiply, divide)")


class CalculationResult(BaseModel):
    """Tagged result of a calculation: either a value or a classified error."""

    model_config = ConfigDict(frozen=True)

    result: Optional[float] = Field(default=None, description="Computed value on success")
    error: Optional[ErrorKind] = Field(default=None, description="Error classification on failure")
    message: Optional[str] = Field(default=None, description="Human-readable error message")

    @model_validator(mode="after")
    def check_exactly_one(self) -> "CalculationResult":
        """Ensure exactly one of ``result`` or ``error`` is set."""
        if (self.result is None) == (self.error is None):
            raise ValueError("Exactly one of 'result' or 'error' must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: float) -> "CalculationResult":
        return cls(result=value)

    @classmethod
    def failure(cls, kind: ErrorKind, detail: Optional[str] = None) -> "CalculationResult":
        """
        Build a failed result for ``kind``.

        :param ErrorKind kind: Error classification
        :param str detail: Optional suffix appended to the kind's message

        :return: Failed result carrying the error and its message
        :rtype: CalculationResult
        """
        message: str = kind.message if detail is None else f"{kind.message}: {detail}"
        return cls(error=kind, message=message)
