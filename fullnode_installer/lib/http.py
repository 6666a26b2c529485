from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import httpx

from ..errors import HttpError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0
DOWNLOAD_TIMEOUT = httpx.Timeout(30.0, read=300.0)
_CHUNK = 1 << 20


def new_client(*, timeout: float | httpx.Timeout = DEFAULT_TIMEOUT) -> httpx.Client:
    return httpx.Client(timeout=timeout, follow_redirects=True)


def _get(url: str, client: Optional[httpx.Client]) -> httpx.Response:
    owns = client is None
    c = client or new_client()
    try:
        resp = c.get(url)
    except (httpx.TimeoutException, httpx.TransportError) as exc:
        raise HttpError(f"GET {url} failed: {exc}") from exc
    finally:
        if owns:
            c.close()
    if resp.status_code >= 400:
        raise HttpError(f"GET {url} returned HTTP {resp.status_code}")
    return resp


def fetch_text(url: str, *, client: Optional[httpx.Client] = None) -> str:
    return _get(url, client).text


def fetch_json(url: str, *, client: Optional[httpx.Client] = None) -> Any:
    resp = _get(url, client)
    try:
        return resp.json()
    except ValueError as exc:
        raise HttpError(f"GET {url} did not return JSON") from exc


def download(
    url: str,
    dest: str | Path,
    *,
    client: Optional[httpx.Client] = None,
    dry_run: bool = False,
) -> Path:
    """Stream url to dest. A partial file is removed if the transfer fails."""

    out = Path(dest)
    logger.info("Downloading %s -> %s", url, out)
    if dry_run:
        return out

    owns = client is None
    c = client or new_client(timeout=DOWNLOAD_TIMEOUT)
    out.parent.mkdir(parents=True, exist_ok=True)
    try:
        with c.stream("GET", url) as resp:
            if resp.status_code >= 400:
                raise HttpError(f"GET {url} returned HTTP {resp.status_code}")
            with out.open("wb") as fh:
                for chunk in resp.iter_bytes(_CHUNK):
                    fh.write(chunk)
    except (httpx.TimeoutException, httpx.TransportError) as exc:
        out.unlink(missing_ok=True)
        raise HttpError(f"Download of {url} failed: {exc}") from exc
    except HttpError:
        out.unlink(missing_ok=True)
        raise
    finally:
        if owns:
            c.close()

    logger.info("Downloaded %s (%d bytes)", out.name, out.stat().st_size)
    return out
