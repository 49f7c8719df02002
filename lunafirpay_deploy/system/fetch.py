"""HTTP download helper."""

from __future__ import annotations

import tempfile
from pathlib import Path

import httpx

from lunafirpay_deploy.logging import get_logger

log = get_logger(__name__)


def download(url: str, *, prefix: str = "lunafirpay-", client: httpx.Client | None = None) -> Path:
    """Stream *url* into a fresh temporary file and return its path.

    Redirects are followed (GitHub release assets redirect to a CDN).
    Raises :class:`httpx.HTTPStatusError` on a non-2xx final response.
    """
    log.info("download: %s", url)
    fd, name = tempfile.mkstemp(prefix=prefix)
    tmpf = Path(name)
    own = client is None
    http = client or httpx.Client(timeout=60, follow_redirects=True)
    try:
        with open(fd, "wb") as out, http.stream("GET", url) as r:
            r.raise_for_status()
            for chunk in r.iter_bytes():
                out.write(chunk)
    except Exception:
        tmpf.unlink(missing_ok=True)
        raise
    finally:
        if own:
            http.close()
    return tmpf
