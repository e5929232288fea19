"""
Image fetcher - downloads stored image bytes over HTTP.

Provides:
- Streaming GET with a per-call timeout
- Size cap so a huge upload cannot exhaust worker memory

The httpx.AsyncClient is created once by the worker and injected, so
connections are pooled across jobs. Tests inject a client backed by
httpx.MockTransport.
"""

from typing import Optional

import httpx

from intake.config.settings import settings
from intake.shared.core.exceptions import ImageFetchError
from intake.shared.core.logging import get_logger

logger = get_logger(__name__)


class ImageFetcher:
    """
    Adapter for downloading images from the CDN.

    Any transport error, non-2xx status or oversized body raises
    ImageFetchError, which fails the job without touching the target.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout_seconds: Optional[float] = None,
        max_bytes: Optional[int] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            client: Shared async HTTP client
            timeout_seconds: Per-call timeout. If not provided, uses settings.
            max_bytes: Maximum accepted body size. If not provided, uses settings.
        """
        self.client = client
        self.timeout_seconds = timeout_seconds or settings.IMAGE_FETCH_TIMEOUT_SECONDS
        self.max_bytes = max_bytes or settings.IMAGE_MAX_BYTES

    async def fetch(self, url: str) -> bytes:
        """
        Download the image at `url`.

        Args:
            url: Public image URL

        Returns:
            Raw image bytes

        Raises:
            ImageFetchError: If the download fails or exceeds max_bytes
        """
        try:
            async with self.client.stream("GET", url, timeout=self.timeout_seconds) as response:
                response.raise_for_status()

                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > self.max_bytes:
                    raise ImageFetchError(url, f"content-length {declared} exceeds {self.max_bytes} bytes")

                chunks = []
                received = 0
                async for chunk in response.aiter_bytes():
                    received += len(chunk)
                    if received > self.max_bytes:
                        raise ImageFetchError(url, f"body exceeds {self.max_bytes} bytes")
                    chunks.append(chunk)

        except httpx.HTTPStatusError as e:
            raise ImageFetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ImageFetchError(url, f"{type(e).__name__}: {e}") from e

        data = b"".join(chunks)
        if not data:
            raise ImageFetchError(url, "empty body")

        logger.debug("Image fetched", url=url, size_bytes=len(data))
        return data
