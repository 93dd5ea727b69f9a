"""Challenge evaluation in an embedded V8 isolate.

The snippet expects a browser: it calls ``document.createElement`` to
derive the hostname and ``document.getElementById`` to read the answer
input and, on some variants, a hidden div. We hand it a stub ``document``
with exactly those two methods and read ``a.value`` back.
"""

import json
import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Protocol

from cfpass._errors import EvaluationError, ResultParseError
from cfpass._script import ChallengeScript

logger = logging.getLogger("cfpass")


class ScriptEngine(Protocol):
    def eval(self, code: str) -> Any: ...


EngineFactory = Callable[[], ScriptEngine]


@dataclass(frozen=True)
class SolveResult:
    answer: str
    wait_millis: float


def default_engine_factory() -> ScriptEngine:
    """Create a fresh MiniRacer isolate."""
    from py_mini_racer import MiniRacer

    return MiniRacer()


_DOCUMENT_STUB = """
var document = {
  createElement: function () {
    return { firstChild: { href: %(href)s } };
  },
  getElementById: function () {
    return { innerHTML: %(inner_html)s };
  }
};
"""


def build_program(script: ChallengeScript, host: str) -> str:
    """Wrap the snippet in an IIFE that returns ``a.value``."""
    stub = _DOCUMENT_STUB % {
        "href": json.dumps(f"http://{host}/"),
        "inner_html": json.dumps(script.dom_content),
    }
    return "(function () {%s%s; return a.value;\n})()" % (stub, script.code)


def _js_number_to_string(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    # repr gives the shortest round-tripping digits, as JS does.
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    k = len(digits)
    n = exponent + k

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * -n + digits
    mantissa = digits[0] + ("." + digits[1:] if k > 1 else "")
    e = n - 1
    return f"{sign}{mantissa}e{'+' if e > 0 else '-'}{abs(e)}"


def result_to_string(value: Any) -> str:
    """Convert an engine result to the literal submitted answer.

    Strings pass through untouched. undefined, null and objects are
    rejected: submitting them can only get the answer refused.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _js_number_to_string(value)
    raise ResultParseError(value)


def evaluate(
    script: ChallengeScript,
    host: str,
    engine_factory: EngineFactory | None = None,
) -> SolveResult:
    """Run the challenge snippet and return the answer.

    A new engine is created for every call and closed afterwards; the
    stub document closes over this call's host and DOM content.

    Raises:
        EvaluationError: the snippet threw or the engine failed.
        ResultParseError: the snippet did not yield a usable value.
    """
    factory = engine_factory or default_engine_factory
    program = build_program(script, host)
    engine = factory()
    try:
        try:
            value = engine.eval(program)
        except Exception as e:
            raise EvaluationError(str(e)) from e
    finally:
        close = getattr(engine, "close", None)
        if close is not None:
            close()

    answer = result_to_string(value)
    logger.debug("Challenge answer for %s: %s", host, answer)
    return SolveResult(answer=answer, wait_millis=float(script.wait_millis))
