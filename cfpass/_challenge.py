"""Challenge detection.

Pure logic, no I/O. Only the classic Cloudflare JS interstitial is
recognised: it is served with 503 (or 429 on some zones) and a
``Server: cloudflare`` header.
"""

import logging

from cfpass._http import Response

logger = logging.getLogger("cfpass")

CDN_SERVER_TOKEN = "cloudflare"

CHALLENGE_STATUSES = frozenset({429, 503})


def is_challenged(response: Response) -> bool:
    """Return True if the response is the CDN's challenge interstitial."""
    if response.status_code not in CHALLENGE_STATUSES:
        return False
    server = response.headers.get("server", "")
    if not server.startswith(CDN_SERVER_TOKEN):
        return False
    logger.debug(
        "Challenge detected: HTTP %d from %s at %s",
        response.status_code,
        server,
        response.url,
    )
    return True
