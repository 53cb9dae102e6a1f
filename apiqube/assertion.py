"""Evaluation of ``expect`` expressions against values taken from responses.

An assertion receives a path (used for reporting), an expected value and the
actual value. The expected side takes one of three shapes:

* a primitive, compared for equality with type coercion;
* a string with an operator prefix, such as ``"> 18"``, ``"contains @"``,
  ``"matches ^\\d+$"``, ``"is integer"`` or ``"exists"``;
* a mapping with a single operator key, such as ``{"oneOf": [200, 201]}``.

Coercion rules: two numbers compare as floats; a number and a numeric
string compare numerically; booleans equal only booleans; ``None`` equals
only ``None``. An unknown operator or a malformed expression yields a failed
result with a message, never an exception.
"""

from __future__ import annotations

import json
import math
import numbers
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Optional

OperatorFn = Callable[[Any, Any], "tuple[bool, str]"]


@dataclass
class Result:
    """Outcome of evaluating one assertion."""

    expression: str
    passed: bool
    expected: Any = None
    actual: Any = None
    message: str = ""


# ---------------------------------------------------------------------------
# Formatting helpers


def _format_float(value: float) -> str:
    """Format a float the shortest way, switching to exponent form as %g does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    count = len(digits)
    point = count + int(exponent)
    exp10 = point - 1
    prefix = "-" if sign else ""
    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0] + ("." + digits[1:] if count > 1 else "")
        exp_sign = "+" if exp10 >= 0 else "-"
        return f"{prefix}{mantissa}e{exp_sign}{abs(exp10):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= count:
        return f"{prefix}{digits}{'0' * (point - count)}"
    return f"{prefix}{digits[:point]}.{digits[point:]}"


def _fmt(value: Any) -> str:
    """Render a value for messages and expressions."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_fmt(v) for v in value) + "]"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "map[" + " ".join(f"{_fmt(k)}:{_fmt(v)}" for k, v in items) + "]"
    return str(value)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _type_name(value: Any) -> str:
    if value is None:
        return "<nil>"
    return type(value).__name__


# ---------------------------------------------------------------------------
# Coercion


def to_float(value: Any) -> Optional[float]:
    """Coerce a value to a float, or return None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        if "_" in text:
            return None
        try:
            return float(text)
        except ValueError:
            return None
    if isinstance(value, numbers.Real):
        try:
            return float(value)
        except (OverflowError, ValueError):
            return None
    return None


def to_string(value: Any) -> Optional[str]:
    """Coerce a value to a string for substring and regex use, or return None."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    number = to_float(value)
    if number is not None:
        return _format_float(number)
    return None


def _deep_equal(a: Any, b: Any) -> bool:
    """Structural equality that, unlike ``==``, keeps value types apart."""
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if type(a) is not type(b) or len(a) != len(b):
            return False
        return all(_deep_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict) and isinstance(b, dict):
        if a.keys() != b.keys():
            return False
        return all(_deep_equal(a[k], b[k]) for k in a)
    if type(a) is not type(b):
        return False
    return bool(a == b)


def equal(actual: Any, expected: Any) -> bool:
    """Compare two values under the coercion rules."""
    if actual is None and expected is None:
        return True
    if actual is None or expected is None:
        return False

    if isinstance(actual, bool):
        return isinstance(expected, bool) and actual == expected
    if isinstance(expected, bool):
        return False

    actual_num = to_float(actual)
    expected_num = to_float(expected)
    if actual_num is not None and expected_num is not None:
        return actual_num == expected_num

    if isinstance(actual, str) and isinstance(expected, str):
        return actual == expected

    return _deep_equal(actual, expected)


# ---------------------------------------------------------------------------
# Operators


def _op_eq(actual: Any, expected: Any) -> tuple[bool, str]:
    if equal(actual, expected):
        return True, ""
    return False, f"expected {_fmt(expected)}, got {_fmt(actual)}"


def _op_ne(actual: Any, expected: Any) -> tuple[bool, str]:
    if not equal(actual, expected):
        return True, ""
    return False, f"expected != {_fmt(expected)}, got {_fmt(actual)}"


def _numeric_op(
    symbol: str, compare: Callable[[float, float], bool]
) -> OperatorFn:
    def op(actual: Any, expected: Any) -> tuple[bool, str]:
        actual_num = to_float(actual)
        expected_num = to_float(expected)
        if actual_num is None or expected_num is None:
            return False, (
                f"not numeric: actual={_fmt(actual)} expected={_fmt(expected)}"
            )
        if compare(actual_num, expected_num):
            return True, ""
        return False, f"{_fmt(actual_num)} not {symbol} {_fmt(expected_num)}"

    return op


def _op_contains(actual: Any, expected: Any) -> tuple[bool, str]:
    if isinstance(actual, (list, tuple)):
        if any(equal(item, expected) for item in actual):
            return True, ""
        return False, f"array does not contain {_fmt(expected)}"

    haystack = to_string(actual)
    needle = to_string(expected)
    if haystack is None or needle is None:
        return False, (
            f"contains: not stringifiable: actual={_fmt(actual)} "
            f"expected={_fmt(expected)}"
        )
    if needle in haystack:
        return True, ""
    return False, f"{_quote(haystack)} does not contain {_quote(needle)}"


def _op_matches(actual: Any, expected: Any) -> tuple[bool, str]:
    text = to_string(actual)
    pattern = to_string(expected)
    if text is None or pattern is None:
        return False, (
            f"matches: not stringifiable: actual={_fmt(actual)} "
            f"pattern={_fmt(expected)}"
        )
    try:
        compiled = re.compile(pattern)
    except re.error as exc:
        return False, f"invalid regex {_quote(pattern)}: {exc}"
    if compiled.search(text):
        return True, ""
    return False, f"{_quote(text)} does not match /{pattern}/"


def _op_exists(actual: Any, _expected: Any) -> tuple[bool, str]:
    if actual is None:
        return False, "value does not exist"
    return True, ""


def _op_not_exists(actual: Any, _expected: Any) -> tuple[bool, str]:
    if actual is None:
        return True, ""
    return False, f"value unexpectedly exists: {_fmt(actual)}"


def _op_one_of(actual: Any, expected: Any) -> tuple[bool, str]:
    if not isinstance(expected, (list, tuple)):
        return False, f"oneOf: expected an array, got {_type_name(expected)}"
    if any(equal(actual, option) for option in expected):
        return True, ""
    return False, f"{_fmt(actual)} not in {_fmt(expected)}"


def _type_failure(want: str, actual: Any) -> str:
    if actual is None:
        return f"expected {want}, got nil"
    return f"expected {want}, got {_type_name(actual)}"


def _op_is(actual: Any, expected: Any) -> tuple[bool, str]:
    want = to_string(expected)
    if want is None:
        return False, (
            f"is: type name must be a string, got {_type_name(expected)}"
        )
    want = want.strip().lower()

    if want in ("null", "nil"):
        return actual is None, _type_failure("null", actual)
    if want in ("bool", "boolean"):
        return isinstance(actual, bool), _type_failure("bool", actual)
    if want in ("int", "integer"):
        number = to_float(actual)
        if number is None or not math.isfinite(number) or not number.is_integer():
            return False, _type_failure("integer", actual)
        return True, ""
    if want in ("number", "float"):
        return to_float(actual) is not None, _type_failure("number", actual)
    if want == "string":
        return isinstance(actual, str), _type_failure("string", actual)
    if want in ("array", "list", "slice"):
        return isinstance(actual, (list, tuple)), _type_failure("array", actual)
    if want in ("object", "map"):
        return isinstance(actual, dict), _type_failure("object", actual)
    return False, f"is: unknown type {_quote(want)}"


_OPERATORS: dict[str, OperatorFn] = {
    "eq": _op_eq,
    "ne": _op_ne,
    "gt": _numeric_op(">", lambda a, e: a > e),
    "gte": _numeric_op(">=", lambda a, e: a >= e),
    "lt": _numeric_op("<", lambda a, e: a < e),
    "lte": _numeric_op("<=", lambda a, e: a <= e),
    "contains": _op_contains,
    "matches": _op_matches,
    "exists": _op_exists,
    "notExists": _op_not_exists,
    "oneOf": _op_one_of,
    "is": _op_is,
}

_SYMBOL_PREFIXES = (
    (">=", "gte"),
    ("<=", "lte"),
    ("==", "eq"),
    ("!=", "ne"),
    (">", "gt"),
    ("<", "lt"),
)

_WORD_PREFIXES = ("contains", "matches", "is")


def _word_prefix(text: str, word: str) -> Optional[str]:
    """Return what follows ``word`` and a blank, or None when absent."""
    if len(text) <= len(word) or not text.startswith(word):
        return None
    if text[len(word)] not in (" ", "\t"):
        return None
    return text[len(word):].strip()


def parse_operator(expression: str) -> tuple[str, str]:
    """Split a string assertion like ``"> 18"`` into operator name and value.

    Without a recognised prefix the result is ``("eq", expression)``.
    """
    text = expression.strip()
    for prefix, op in _SYMBOL_PREFIXES:
        if text.startswith(prefix):
            return op, text[len(prefix):].strip()
    for word in _WORD_PREFIXES:
        rest = _word_prefix(text, word)
        if rest is not None:
            return word, rest
    if text == "exists":
        return "exists", ""
    return "eq", text


def operator_from_map(m: dict[str, Any]) -> Optional[tuple[str, Any]]:
    """Return ``(operator, value)`` when ``m`` holds exactly one operator key."""
    if len(m) != 1:
        return None
    ((key, value),) = m.items()
    if key in _OPERATORS:
        return key, value
    return None


def run_operator(op: str, actual: Any, expected: Any) -> tuple[bool, str]:
    """Run the named operator; return ``(passed, message)``."""
    fn = _OPERATORS.get(op)
    if fn is None:
        return False, f"unknown operator {_quote(op)}"
    return fn(actual, expected)


def _classify(expected: Any) -> tuple[str, Any, bool]:
    """Map the expected value to (operator, operator value, was operator)."""
    if isinstance(expected, str):
        op, value = parse_operator(expected)
        if op == "exists":
            return op, None, True
        if op == "eq":
            return "eq", value, False
        return op, value, True
    if isinstance(expected, dict):
        found = operator_from_map(expected)
        if found is not None:
            return found[0], found[1], True
    return "eq", expected, False


def _path_expr(path: str, expected: Any) -> str:
    if not path:
        return _fmt(expected)
    return f"{path} = {_fmt(expected)}"


class Engine:
    """Evaluates assertion expressions against extracted response values."""

    def check(self, path: str, expected: Any, actual: Any) -> Result:
        """Evaluate ``expected`` against ``actual`` found at ``path``."""
        op, op_value, used = _classify(expected)
        passed, message = run_operator(op, actual, op_value)
        return Result(
            expression=_path_expr(path, expected),
            passed=passed,
            expected=op_value if used else expected,
            actual=actual,
            message=message,
        )