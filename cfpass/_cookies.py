"""Set-Cookie parsing and Cookie header assembly."""

import logging

logger = logging.getLogger("cfpass")


def parse_set_cookie(raw: str | bytes) -> tuple[str, str] | None:
    """Extract (name, value) from a Set-Cookie header value.

    Attributes after the first ';' (Path, Expires, HttpOnly...) are
    dropped: they only matter to a persistent jar.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    pair = raw.split(";", 1)[0]
    eq = pair.find("=")
    if eq <= 0:
        return None
    name = pair[:eq].strip()
    if not name:
        return None
    return name, pair[eq + 1 :].strip()


def cookies_from_headers(raw_values) -> dict[str, str]:
    """Collect name -> value from a list of Set-Cookie values.

    Later values for the same name replace earlier ones, matching how
    a browser jar would end up after processing the whole response.
    """
    cookies: dict[str, str] = {}
    for raw in raw_values:
        parsed = parse_set_cookie(raw)
        if parsed is None:
            logger.debug("Ignoring malformed Set-Cookie: %r", raw)
            continue
        name, value = parsed
        cookies[name] = value
    return cookies


def parse_cookie_header(value: str) -> dict[str, str]:
    """Split a request Cookie header into name -> value."""
    cookies: dict[str, str] = {}
    for part in value.split(";"):
        name, sep, val = part.strip().partition("=")
        if sep and name:
            cookies[name] = val
    return cookies


def format_cookie_header(cookies: dict[str, str]) -> str:
    return "; ".join(f"{name}={value}" for name, value in cookies.items())
