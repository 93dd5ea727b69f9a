"""Request/response dumps for investigating challenge format changes."""

import logging
from dataclasses import dataclass

from cfpass._http import Request, Response

logger = logging.getLogger("cfpass")


@dataclass(frozen=True)
class DumpConfig:
    """Controls how much of each exchange is written to the debug log.

    - ``enabled``: dump full header blocks, not just the request line
    - ``include_body``: also dump bodies (only with ``enabled``)
    """

    enabled: bool = False
    include_body: bool = False


def _format_headers(headers: dict[str, str]) -> str:
    return "\n".join(f"{k}: {v}" for k, v in headers.items())


def format_request(request: Request, include_body: bool) -> str:
    lines = [f"{request.method} {request.url}"]
    headers = _format_headers(request.prepared_headers())
    if headers:
        lines.append(headers)
    if include_body and request.body:
        lines.append("")
        lines.append(request.body.decode("utf-8", errors="replace"))
    return "\n".join(lines)


def format_response(response: Response, include_body: bool) -> str:
    lines = [f"HTTP {response.status_code}"]
    headers = _format_headers(response.headers)
    if headers:
        lines.append(headers)
    lines.extend(f"set-cookie: {c}" for c in response.get_all("set-cookie"))
    if include_body and response.content:
        lines.append("")
        lines.append(response.text)
    return "\n".join(lines)


def dump_request(request: Request, config: DumpConfig) -> None:
    logger.debug("%s %s", request.method, request.url)
    if not config.enabled:
        return
    logger.debug("REQUEST:\n%s", format_request(request, config.include_body))


def dump_response(
    response: Response | None,
    url: str,
    config: DumpConfig,
    force: bool = False,
) -> None:
    """Log the response status line, and its contents when enabled.

    ``force`` dumps headers and body regardless of ``config``, at
    WARNING: used when the page no longer matches the extractors.
    """
    if response is None:
        logger.debug("ERR %s", url)
        return
    logger.debug("%d %s", response.status_code, url)
    if force:
        logger.warning("RESPONSE:\n%s", format_response(response, True))
    elif config.enabled:
        logger.debug(
            "RESPONSE:\n%s", format_response(response, config.include_body)
        )
