"""Typed exceptions for cfpass."""


class CfpassError(Exception):
    """Base exception for all cfpass errors."""


# -- Extraction ---------------------------------------------------------------


class ExtractionError(CfpassError):
    """The challenge page did not match the expected layout.

    Usually means the interstitial format changed, or the page was not
    a JS challenge to begin with.
    """


class MissingForm(ExtractionError):
    def __init__(self):
        super().__init__("Could not find the challenge form")


class MissingFormMethod(ExtractionError):
    def __init__(self, method: str | None = None):
        self.method = method
        if method is None:
            msg = "Challenge form has no method attribute"
        else:
            msg = f"Challenge form has unsupported method {method!r}"
        super().__init__(msg)


class MissingFormAction(ExtractionError):
    def __init__(self):
        super().__init__("Challenge form has no action attribute")


class MissingFormInput(ExtractionError):
    def __init__(self):
        super().__init__("Challenge form has no input fields")


class MissingMandatoryParam(ExtractionError):
    """A proof field the CDN requires is absent from the form."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} is missing from challenge form")


class ScriptNotFound(ExtractionError):
    def __init__(self):
        super().__init__("Challenge page has no inline script")


class ChallengePatternMismatch(ExtractionError):
    def __init__(self):
        super().__init__("Script does not match the challenge pattern")


# -- Evaluation ---------------------------------------------------------------


class EvaluationError(CfpassError):
    """The challenge snippet raised inside the script engine."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"JS execution error: {reason}")


class ResultParseError(CfpassError):
    """The snippet ran but did not produce a usable answer."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"JS result parse error: got {value!r}")


# -- Submission ---------------------------------------------------------------


class StillBlocked(CfpassError):
    """The CDN rejected the submitted answer."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(
            f"Response after challenge answer is still blocked at {url} "
            f"(HTTP {status_code})"
        )


class TransportError(CfpassError):
    """The transport failed to deliver a request."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Transport failed for {url}: {reason}")


class BodyReadError(CfpassError):
    """The response body could not be read."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Body read error for {url}: {reason}")


class SolveCancelled(CfpassError):
    """The caller interrupted the pre-submission wait."""

    def __init__(self, remaining: float):
        self.remaining = remaining
        super().__init__(
            f"Challenge solve cancelled with {remaining:.2f}s left to wait"
        )
