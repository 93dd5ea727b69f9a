"""Builds the answer submission from the form template."""

import logging
from urllib.parse import urlencode, urljoin

from cfpass._form import ANSWER_FIELD, ChallengeForm
from cfpass._http import Request, Response, strip_url_tls_port

logger = logging.getLogger("cfpass")

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Never carried over from the original request: the transport computes
# the first two and Referer is always rewritten.
_NO_COPY_HEADERS = frozenset({"content-length", "host", "referer"})


class Submission(Request):
    """The one request that delivers the proof answer."""

    __slots__ = ("answer",)

    def __init__(self, method: str, url: str, *, answer: str, **kwargs):
        super().__init__(method, url, **kwargs)
        self.answer = answer

    def __repr__(self) -> str:
        return f"<Submission [{self.method} {self.url}]>"


def effective_url(request: Request, response: Response) -> str:
    """URL the browser would consider current: redirect target or request URL."""
    url = request.url
    if response.location:
        url = urljoin(request.url, response.location)
    return strip_url_tls_port(url)


def copy_headers(source: Request, target: Request) -> None:
    """Copy headers the target does not already define (first wins)."""
    for name, value in source.headers.items():
        if name.lower() in _NO_COPY_HEADERS:
            continue
        if not target.has_header(name):
            target.headers[name] = value


def build_submission(
    form: ChallengeForm,
    answer: str,
    request: Request,
    response: Response,
) -> Submission:
    """Merge form fields and the answer into a ready-to-send request.

    Args:
        form: Template from the challenge page.
        answer: Value computed by the evaluator, submitted verbatim.
        request: The original resource request (headers, cookies).
        response: The challenge response (cookies, redirect target).
    """
    fields = dict(form.fields)
    fields[ANSWER_FIELD] = answer
    encoded = urlencode(fields)

    if form.method == "POST":
        submission = Submission(
            "POST",
            form.url,
            answer=answer,
            headers={"Content-Type": FORM_CONTENT_TYPE},
            body=encoded.encode("ascii"),
        )
    else:
        submission = Submission("GET", f"{form.url}?{encoded}", answer=answer)

    copy_headers(request, submission)

    submission.cookies.update(request.cookies)
    submission.cookies.update(response.cookies())

    submission.remove_header("referer")
    submission.headers["Referer"] = effective_url(request, response)

    logger.debug(
        "Submission built: %s %s (%d cookies)",
        submission.method,
        submission.url,
        len(submission.cookies),
    )
    return submission
