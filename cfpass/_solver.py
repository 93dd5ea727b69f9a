"""Challenge solving pipeline.

classify -> extract form + script -> evaluate -> build submission ->
wait -> resubmit -> validate. Single shot: nothing here retries.
"""

import enum
import logging
import threading
from typing import Callable

from cfpass._challenge import is_challenged
from cfpass._delay import DelayGate
from cfpass._diagnostics import DumpConfig, dump_request, dump_response
from cfpass._errors import (
    CfpassError,
    ExtractionError,
    StillBlocked,
    TransportError,
)
from cfpass._evaluator import EngineFactory, evaluate
from cfpass._form import extract_form
from cfpass._http import Request, Response
from cfpass._script import extract_script
from cfpass._submission import Submission, build_submission

logger = logging.getLogger("cfpass")

Send = Callable[[Request], Response]

_DEFAULT_DUMP = DumpConfig()


class Outcome(enum.Enum):
    """How the CDN answered the submission."""

    SOLVED = "solved"
    STILL_BLOCKED = "still_blocked"


def classify_outcome(status_code: int) -> Outcome:
    if status_code == 503:
        return Outcome.STILL_BLOCKED
    return Outcome.SOLVED


def _send(send: Send, request: Request) -> Response:
    try:
        return send(request)
    except CfpassError:
        raise
    except Exception as e:
        raise TransportError(request.url, str(e)) from e


def resubmit(
    submission: Submission, send: Send, dump: DumpConfig = _DEFAULT_DUMP
) -> Response:
    """Send the submission once and validate the result.

    Returns the resubmission response unchanged when the answer was
    accepted, so the caller can harvest its cookies.

    Raises:
        TransportError: ``send`` failed.
        StillBlocked: the CDN answered 503 again.
    """
    dump_request(submission, dump)
    try:
        response = _send(send, submission)
    except CfpassError as e:
        dump_response(None, submission.url, dump)
        logger.debug("Could not finish challenge: %s", e)
        raise
    dump_response(response, submission.url, dump)

    if classify_outcome(response.status_code) is Outcome.STILL_BLOCKED:
        raise StillBlocked(submission.url, response.status_code)
    return response


def solve_challenge(
    response: Response,
    request: Request,
    send: Send,
    *,
    dump: DumpConfig | None = None,
    engine_factory: EngineFactory | None = None,
    cancel: threading.Event | None = None,
) -> Response:
    """Solve the challenge in ``response`` and return the CDN's reply.

    Args:
        response: The challenge response.
        request: The original resource request that produced it.
        send: Transport used once, to deliver the answer.
        dump: Diagnostics settings.
        engine_factory: Creates a fresh script engine per call.
        cancel: Setting this event aborts the pre-submission wait.
    """
    dump = dump or _DEFAULT_DUMP
    gate = DelayGate(response.received_at, cancel)
    body = response.text

    try:
        form = extract_form(body, request.scheme, request.host)
        script = extract_script(body)
    except ExtractionError as e:
        logger.warning("Challenge page not recognised at %s: %s", request.url, e)
        dump_response(response, request.url, dump, force=True)
        raise

    result = evaluate(script, request.host, engine_factory)
    submission = build_submission(form, result.answer, request, response)
    gate.wait(result.wait_millis)
    return resubmit(submission, send, dump)


def bypass(
    response: Response,
    request: Request,
    send: Send,
    *,
    dump: DumpConfig | None = None,
    engine_factory: EngineFactory | None = None,
    cancel: threading.Event | None = None,
) -> Response:
    """Return ``response`` or, if it is a challenge, the retried resource.

    On a challenge: solves it, attaches the CDN cookies to ``request``
    and sends ``request`` again (its stored body is replayed). The
    resubmission's Set-Cookie values are appended to the returned
    response so callers keeping a jar see the clearance cookie.

    A failure of that final retry raises ``TransportError``; the
    cookies stay on ``request`` for the caller to reuse.
    """
    if not is_challenged(response):
        return response

    solved = solve_challenge(
        response,
        request,
        send,
        dump=dump,
        engine_factory=engine_factory,
        cancel=cancel,
    )
    logger.info("Challenge solved at %s", request.url)

    for name, value in response.cookies().items():
        request.add_cookie(name, value)
    for name, value in solved.cookies().items():
        request.add_cookie(name, value)

    try:
        retry = _send(send, request)
    except TransportError as e:
        logger.warning(
            "Retry of %s failed after solving challenge: %s", request.url, e
        )
        raise
    retry.set_cookies.extend(solved.set_cookies)
    return retry
