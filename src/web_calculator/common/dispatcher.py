"""Validate calculation requests and dispatch them to an arithmetic operation."""
from collections.abc import Callable as ABCCallable
import math
import operator
from typing import Any, Callable, Optional

from web_calculator.common.logger import logger
from web_calculator.common.operations import (
    CalculationRequest,
    CalculationResult,
    ErrorKind,
    Operation,
)


# Type alias for operator functions (taking two floats, returning a float)
OperatorFn: ABCCallable[[float, float], float] = Callable[[float, float], float]

# Mapping of operation names to their arithmetic function
OPERATIONS: dict[Operation, OperatorFn] = {
    Operation.ADD: operator.add,
    Operation.SUBTRACT: operator.sub,
    Operation.MULTIPLY: operator.mul,
    Operation.DIVIDE: operator.truediv,
}


class ArithmeticDispatcher:
    """
    Map a calculation request to a result or a classified error.

    Design constraints:
        - Pure: no state, no side effects besides debug logging
        - Never raises for bad input, every failure is a returned result

    Validation order (decides which error wins when several apply):
        1. Missing or empty operand/operation -> MISSING_DATA
        2. Operand not parseable as a finite float -> INVALID_NUMERIC_INPUT
        3. Operation outside the known set -> INVALID_OPERATION
        4. Division with a zero second operand -> DIVISION_BY_ZERO
        5. Otherwise compute the operation

    Examples:
        - dispatch(10, 5, "add") -> result 15.0
        - dispatch(10, 0, "divide") -> error DIVISION_BY_ZERO
    """

    @staticmethod
    def _is_missing(value: Any) -> bool:
        """
        Determine if a field is absent.

        ``None``, blank strings and empty containers are missing; a numeric
        zero is present.

        :param Any value: Raw field value

        :return: True if the field counts as absent
        :rtype: bool
        """
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip()
        return isinstance(value, (list, dict)) and not value

    @staticmethod
    def _to_number(value: Any) -> Optional[float]:
        """
        Convert a raw operand to a finite float.

        :param Any value: Raw operand (number or numeric string)

        :return: Parsed float, or None if the value is not a finite number
        :rtype: Optional[float]
        """
        # bool is a subclass of int, but True/False are not operands
        if isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return None
        if not math.isfinite(number):
            return None
        return number

    @staticmethod
    def _to_operation(value: Any) -> Optional[Operation]:
        """
        Resolve an operation name to an :class:`Operation`.

        :param Any value: Raw operation name

        :return: Matching operation, or None if unknown
        :rtype: Optional[Operation]
        """
        if not isinstance(value, str):
            return None
        try:
            return Operation(value.strip())
        except ValueError:
            return None

    @staticmethod
    def dispatch(num1: Any, num2: Any, operation: Any) -> CalculationResult:
        """
        Validate the inputs and compute the requested operation.

        :param Any num1: First operand
        :param Any num2: Second operand
        :param Any operation: Operation name

        :return: Success with the computed value, or a classified failure
        :rtype: CalculationResult
        """
        if any(ArithmeticDispatcher._is_missing(v) for v in (num1, num2, operation)):
            logger.debug("Missing data: num1=%r num2=%r operation=%r", num1, num2, operation)
            return CalculationResult.failure(ErrorKind.MISSING_DATA)

        a: Optional[float] = ArithmeticDispatcher._to_number(num1)
        b: Optional[float] = ArithmeticDispatcher._to_number(num2)
        if a is None or b is None:
            logger.debug("Invalid numeric input: num1=%r num2=%r", num1, num2)
            return CalculationResult.failure(ErrorKind.INVALID_NUMERIC_INPUT)

        op: Optional[Operation] = ArithmeticDispatcher._to_operation(operation)
        if op is None:
            logger.debug("Invalid operation: %r", operation)
            return CalculationResult.failure(ErrorKind.INVALID_OPERATION, str(operation))

        if op is Operation.DIVIDE and b == 0:
            logger.debug("Division by zero: %s / %s", a, b)
            return CalculationResult.failure(ErrorKind.DIVISION_BY_ZERO)

        result: float = OPERATIONS[op](a, b)
        logger.debug("%s %s %s = %s", a, op.value, b, result)
        return CalculationResult.success(result)

    @staticmethod
    def dispatch_request(request: CalculationRequest) -> CalculationResult:
        """
        Dispatch a :class:`CalculationRequest`.

        :param CalculationRequest request: Request holding the raw fields

        :return: Result of :meth:`dispatch`
        :rtype: CalculationResult
        """
        return ArithmeticDispatcher.dispatch(request.num1, request.num2, request.operation)
