"""cfpass -- Cloudflare JS challenge solver for Python HTTP clients."""

import logging
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cfpass-py")
except PackageNotFoundError:
    __version__ = "0.0.0"

from cfpass._challenge import is_challenged
from cfpass._client import DEFAULT_HEADERS, BypassClient
from cfpass._delay import DelayGate
from cfpass._diagnostics import DumpConfig
from cfpass._errors import (
    BodyReadError,
    CfpassError,
    ChallengePatternMismatch,
    EvaluationError,
    ExtractionError,
    MissingForm,
    MissingFormAction,
    MissingFormInput,
    MissingFormMethod,
    MissingMandatoryParam,
    ResultParseError,
    ScriptNotFound,
    SolveCancelled,
    StillBlocked,
    TransportError,
)
from cfpass._evaluator import SolveResult, evaluate
from cfpass._form import ChallengeForm, extract_form
from cfpass._http import Request, Response
from cfpass._script import ChallengeScript, extract_script
from cfpass._solver import (
    Outcome,
    bypass,
    classify_outcome,
    resubmit,
    solve_challenge,
)
from cfpass._submission import Submission, build_submission
from cfpass._transport import RnetTransport

__all__ = [
    "__version__",
    "BypassClient",
    "RnetTransport",
    "Request",
    "Response",
    "DumpConfig",
    "DEFAULT_HEADERS",
    "is_challenged",
    "extract_form",
    "extract_script",
    "evaluate",
    "build_submission",
    "resubmit",
    "classify_outcome",
    "solve_challenge",
    "bypass",
    "ChallengeForm",
    "ChallengeScript",
    "SolveResult",
    "Submission",
    "DelayGate",
    "Outcome",
    "CfpassError",
    "ExtractionError",
    "MissingForm",
    "MissingFormMethod",
    "MissingFormAction",
    "MissingFormInput",
    "MissingMandatoryParam",
    "ScriptNotFound",
    "ChallengePatternMismatch",
    "EvaluationError",
    "ResultParseError",
    "StillBlocked",
    "TransportError",
    "BodyReadError",
    "SolveCancelled",
    "get",
    "post",
]

# Silent by default; callers opt in via logging.getLogger("cfpass").setLevel(...)
logging.getLogger("cfpass").addHandler(logging.NullHandler())


def get(url: str, **kwargs):
    """Module-level convenience: one-shot GET."""
    with BypassClient() as c:
        return c.get(url, **kwargs)


def post(url: str, **kwargs):
    """Module-level convenience: one-shot POST."""
    with BypassClient() as c:
        return c.post(url, **kwargs)
