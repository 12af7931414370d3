"""Best-effort poster downloads.

Failures never propagate: a missing path or any transport problem yields
``None``, which callers render as "no image available".
"""

from __future__ import annotations

import logging

from reelfinder.services.activity import ActivityTracker
from reelfinder.services.transport import Transport
from reelfinder.shared.constants import TMDBConfig

logger = logging.getLogger(__name__)


class ImageFetcher:
    """Resolves relative TMDB image paths to image bytes.

    No caching, no retries: each call is a single independent attempt.
    """

    def __init__(
        self,
        transport: Transport,
        image_base_url: str = TMDBConfig.IMAGE_BASE_URL,
        activity: ActivityTracker | None = None,
    ) -> None:
        self.transport = transport
        self.image_base_url = image_base_url.rstrip("/")
        self.activity = activity or ActivityTracker()

    def image_url(self, path: str) -> str:
        return f"{self.image_base_url}/{path.lstrip('/')}"

    async def fetch_image(self, path: str | None) -> bytes | None:
        """Download the image at *path*.

        Args:
            path: Relative image path such as ``"/poster.jpg"``

        Returns:
            Image bytes, or None if there is no path or the download failed
        """
        if not path:
            return None

        url = self.image_url(path)
        with self.activity.track("fetch_image"):
            response = await self.transport.get_bytes(url)

        if not response.success:
            logger.warning("Image download failed for %s: %s", url, response.error)
            return None
        if not response.body:
            logger.warning("Image download for %s returned no data", url)
            return None

        logger.debug("Downloaded %d bytes from %s", len(response.body), url)
        return response.body


__all__ = ["ImageFetcher"]
