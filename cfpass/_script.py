"""Challenge script extraction.

Pulls the answer-computing snippet out of the interstitial's inline
script, together with the wait the page asks for and the hidden DOM
content some variants read through ``document.getElementById(k)``.
"""

import logging
import re
from dataclasses import dataclass

from cfpass._errors import ChallengePatternMismatch, ScriptNotFound

logger = logging.getLogger("cfpass")

DEFAULT_WAIT_MILLIS = 8000

# Name of the helper variable that holds the id of the hidden element.
DOM_KEY_VAR = "k"

_SCRIPT_RE = re.compile(
    r'<script type="text/javascript">\s*(.*?)</script>', re.DOTALL
)

# setTimeout(function(){ var s,t,o,p,b,r,e,a,k,i,n,g,f, ...
#     ... a.value = ...;
#     ...
# }, 4000);
_CHALLENGE_RE = re.compile(
    r"setTimeout\(function\(\)\{\s*"
    r"(var s,t,o,p.?b,r,e,a,k,i,n,g,f.+?\r?\n[\s\S]+?a\.value\s*=.+?)\r?\n"
    r"(?:[^{<>]*\},\s*(\d{4,}))?",
    re.DOTALL,
)

# Textual patches for snippets the engine cannot run as-is. Applied in
# order; append new (pattern, replacement) pairs as variants show up.
QUIRK_REWRITES: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r'\(""\)\["italics"\]\(\)'), '"<i></i>"'),
)


@dataclass(frozen=True)
class ChallengeScript:
    """Everything the evaluator needs to compute the answer."""

    code: str
    wait_millis: int = DEFAULT_WAIT_MILLIS
    dom_key: str | None = None
    dom_content: str = ""


def apply_rewrites(
    code: str,
    rewrites: tuple[tuple[re.Pattern, str], ...] = QUIRK_REWRITES,
) -> str:
    for pattern, replacement in rewrites:
        code, count = pattern.subn(replacement, code)
        if count:
            logger.debug(
                "Rewrote %d occurrence(s) of %s", count, pattern.pattern
            )
    return code


def _find_dom_keys(javascript: str) -> list[str]:
    """Return every literal assigned to the helper variable, in order."""
    keys = []
    for statement in javascript.split(";"):
        tokens = statement.strip().split("=")
        if len(tokens) < 2 or tokens[0].strip() != DOM_KEY_VAR:
            continue
        key = tokens[1].strip().strip(" '\"")
        if key:
            keys.append(key)
    return keys


def _inner_html(body: str, element_id: str) -> str | None:
    match = re.search(
        r'<div\b[^>]*\bid="' + re.escape(element_id) + r'"[^>]*>(.*?)</div>',
        body,
        re.DOTALL,
    )
    return match.group(1) if match else None


def extract_script(body: str) -> ChallengeScript:
    """Extract the challenge snippet from a response body.

    Raises:
        ScriptNotFound: no inline text/javascript block.
        ChallengePatternMismatch: the block does not have the expected
            setTimeout / a.value shape.
    """
    script_match = _SCRIPT_RE.search(body)
    if script_match is None:
        raise ScriptNotFound()
    javascript = script_match.group(1)

    match = _CHALLENGE_RE.search(javascript)
    if match is None:
        raise ChallengePatternMismatch()
    code, delay = match.group(1), match.group(2)

    wait_millis = int(delay) if delay else DEFAULT_WAIT_MILLIS
    code = apply_rewrites(code)

    dom_key = None
    dom_content = ""
    for key in _find_dom_keys(javascript):
        content = _inner_html(body, key)
        if content is not None:
            dom_key, dom_content = key, content
        elif dom_key is None:
            dom_key = key

    logger.debug(
        "Challenge script: %d chars, wait %dms, dom key %s",
        len(code),
        wait_millis,
        dom_key,
    )
    return ChallengeScript(
        code=code,
        wait_millis=wait_millis,
        dom_key=dom_key,
        dom_content=dom_content,
    )
