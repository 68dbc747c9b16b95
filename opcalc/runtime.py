import enum
import logging
import math
import string
from dataclasses import dataclass
from typing import Callable, Optional

from opcalc.parser import ASSIGN, Atom, BinaryOperation, Expression
from opcalc.utils import PrintableEnum

logger = logging.getLogger(__name__)


class RuntimeErrorKind(PrintableEnum):
    MALFORMED_NUMBER = enum.auto()
    UNKNOWN_OPERATOR = enum.auto()
    UNASSIGNED_VARIABLE = enum.auto()
    INVALID_ASSIGNMENT_TARGET = enum.auto()


@dataclass
class CalcRuntimeError(Exception):
    errmsg: str
    kind: RuntimeErrorKind

    def __str__(self) -> str:
        return self.errmsg


Variables = dict[str, float]


def evaluate(expression: Expression, variables: Optional[Variables] = None) -> float:
    """Evaluates an expression tree to a float.

    Without ``variables`` every atom must be a number. With them, single-letter atoms are
    looked up as variables. Assignments are rejected here, pass them to ``assign``.
    """
    # a run of same-precedence operators nests on the left, so only right operands recurse
    spine: list[BinaryOperation] = []
    while isinstance(expression, BinaryOperation):
        _get_impl(expression.operator)
        spine.append(expression)
        expression = expression.left

    result = _evaluate_atom(expression, variables)
    for operation in reversed(spine):
        right_res = evaluate(operation.right, variables)
        result = _get_impl(operation.operator)(result, right_res)
    return result


def _evaluate_atom(expression: Expression, variables: Optional[Variables]) -> float:
    if not isinstance(expression, Atom):
        raise TypeError(f"Unexpected expression type: {expression!r}")
    if variables is not None and is_variable_name(expression.text):
        if expression.text in variables:
            return variables[expression.text]
        raise CalcRuntimeError(
            f"Variable {expression.text!r} is not assigned", kind=RuntimeErrorKind.UNASSIGNED_VARIABLE
        )
    return _parse_number(expression.text)


def _get_impl(operator: str) -> Callable[[float, float], float]:
    impl = BINARY_OPERATION_IMPLS.get(operator)
    if impl is None:
        if operator == ASSIGN:
            errmsg = "Assignment is only allowed as the outermost operation"
        else:
            errmsg = f"Unexpected binary operator: {operator!r}"
        raise CalcRuntimeError(errmsg, kind=RuntimeErrorKind.UNKNOWN_OPERATOR)
    return impl


def assign(expression: Expression, variables: Variables) -> None:
    if not isinstance(expression, BinaryOperation) or expression.operator != ASSIGN:
        raise CalcRuntimeError(f"Not an assignment: {expression}", kind=RuntimeErrorKind.INVALID_ASSIGNMENT_TARGET)
    target = expression.left
    if not isinstance(target, Atom) or not is_variable_name(target.text):
        raise CalcRuntimeError(
            f"Can only assign to a single-letter variable, not {target}",
            kind=RuntimeErrorKind.INVALID_ASSIGNMENT_TARGET,
        )
    value = evaluate(expression.right, variables)
    variables[target.text] = value
    logger.debug("Assigned %s = %r", target.text, value)


def is_variable_name(text: str) -> bool:
    return len(text) == 1 and text in string.ascii_letters


def _parse_number(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise CalcRuntimeError(f"Malformed number: {text!r}", kind=RuntimeErrorKind.MALFORMED_NUMBER) from None


def _div(a: float, b: float) -> float:
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _is_odd_integer(x: float) -> bool:
    return x.is_integer() and x % 2 == 1


def _pow(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and _is_odd_integer(b) else math.inf
    except ValueError:
        if a == 0.0:
            # zero to a negative power
            return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
        # negative base, fractional exponent
        return math.nan


BINARY_OPERATION_IMPLS: dict[str, Callable[[float, float], float]] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": _div,
    "^": _pow,
}
