"""Challenge form extraction.

The interstitial carries a ``<form id="challenge-form">`` whose hidden
inputs (``jschl_vc``, ``pass``, sometimes ``r`` or ``s``) must be echoed
back together with the computed ``jschl_answer``.
"""

import html
import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping
from urllib.parse import parse_qsl

from cfpass._errors import (
    MissingForm,
    MissingFormAction,
    MissingFormInput,
    MissingFormMethod,
    MissingMandatoryParam,
)

logger = logging.getLogger("cfpass")

ANSWER_FIELD = "jschl_answer"
MANDATORY_FIELDS = ("jschl_vc", "pass")
FORM_METHODS = ("GET", "POST")

_FORM_RE = re.compile(
    r'<form\b([^>]*\bid="challenge-form"[^>]*)>(.*?)</form>',
    re.DOTALL | re.IGNORECASE,
)
_METHOD_RE = re.compile(r'(?:^|\s)method="(.*?)"', re.DOTALL)
_ACTION_RE = re.compile(r'(?:^|\s)action="(.*?)"', re.DOTALL)
_INPUT_RE = re.compile(r"<input\b[^>]*>", re.DOTALL | re.IGNORECASE)
_NAME_RE = re.compile(r'\sname="(.*?)"', re.DOTALL)
_VALUE_RE = re.compile(r'\svalue="(.*?)"', re.DOTALL)


@dataclass(frozen=True)
class ChallengeForm:
    """Submission template parsed from the challenge form.

    ``fields`` is read-only and keeps page order. It never contains the
    answer field: that one is computed, not copied.
    """

    method: str
    action: str
    url: str
    fields: Mapping[str, str]


def _split_action(action: str) -> tuple[str, str]:
    path, _, query = action.partition("?")
    return path, query


def extract_form(body: str, scheme: str, host: str) -> ChallengeForm:
    """Parse the challenge form out of a response body.

    Args:
        body: Decoded response body.
        scheme: Scheme of the challenged request ("https").
        host: Host of the challenged request, without an explicit :443.

    Raises:
        MissingForm, MissingFormMethod, MissingFormAction,
        MissingFormInput, MissingMandatoryParam.
    """
    match = _FORM_RE.search(body)
    if match is None:
        raise MissingForm()
    form_attrs, form_inner = match.group(1), match.group(2)

    method_match = _METHOD_RE.search(form_attrs)
    if method_match is None:
        raise MissingFormMethod()
    method = method_match.group(1).strip().upper()
    if method not in FORM_METHODS:
        raise MissingFormMethod(method)

    action_match = _ACTION_RE.search(form_attrs)
    if action_match is None:
        raise MissingFormAction()
    action = html.unescape(action_match.group(1))
    path, query = _split_action(action)

    fields: dict[str, str] = {}
    if method == "POST":
        url = f"{scheme}://{host}{action}"
    else:
        url = f"{scheme}://{host}{path}"
        # CDNs sometimes put extra required parameters in the action's
        # query; a GET submission replaces the query, so carry them over.
        for name, value in parse_qsl(query, keep_blank_values=True):
            fields[name] = value

    inputs = _INPUT_RE.findall(form_inner)
    if not inputs:
        raise MissingFormInput()

    for tag in inputs:
        name_match = _NAME_RE.search(tag)
        value_match = _VALUE_RE.search(tag)
        if name_match is None or value_match is None:
            continue
        name = html.unescape(name_match.group(1))
        if name == ANSWER_FIELD:
            continue
        fields[name] = html.unescape(value_match.group(1))

    for name in MANDATORY_FIELDS:
        if not fields.get(name):
            raise MissingMandatoryParam(name)

    logger.debug(
        "Challenge form: %s %s (%d fields)", method, url, len(fields)
    )
    return ChallengeForm(
        method=method,
        action=action,
        url=url,
        fields=MappingProxyType(fields),
    )
