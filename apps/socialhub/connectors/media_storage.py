"""Client for the hosted media store (image/video CDN).

The store accepts a byte buffer and answers with a public URL. Transcoding
and storage policy live entirely on the provider side.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

from socialhub.core.exceptions import ConfigurationError, ServiceUnavailableError

logger = logging.getLogger(__name__)


class MediaStorage(Protocol):
    def upload(self, data: bytes, *, filename: str, content_type: str) -> str: ...


class HttpMediaStorage:
    """Posts multipart uploads to ``upload_url`` and returns the hosted URL."""

    def __init__(self, upload_url: str | None, timeout: int = 30) -> None:
        self.upload_url = upload_url
        self.timeout = timeout

    def upload(self, data: bytes, *, filename: str, content_type: str) -> str:
        if not self.upload_url:
            raise ConfigurationError("MEDIA_UPLOAD_URL is not configured", code="media_not_configured")
        try:
            response = requests.post(
                self.upload_url,
                files={"file": (filename, data, content_type)},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload: Any = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Media upload failed for %s: %s", filename, exc)
            raise ServiceUnavailableError("Media upload failed", code="media_upload_failed") from exc

        url = None
        if isinstance(payload, dict):
            url = payload.get("secure_url") or payload.get("url")
        if not isinstance(url, str) or not url:
            raise ServiceUnavailableError(
                "Media store returned no URL", code="media_upload_failed", details=payload
            )
        return url


__all__ = ["HttpMediaStorage", "MediaStorage"]
