"""
Icon cache invalidation signal.

The spouse photo doubles as the installable app icon, which an external
asset layer caches aggressively. After the photo changes we tell that layer
to drop its copy. Fire-and-forget: failures are logged, never raised.
"""

from typing import Optional
import httpx

from family_directory.core.config import settings
from family_directory.core.logging import get_logger

logger = get_logger(__name__)


class IconCacheNotifier:
    """Posts icon invalidation notices to the asset layer."""

    def __init__(self, endpoint: Optional[str] = None, timeout: float = None):
        self.endpoint = endpoint if endpoint is not None else settings.icon_cache_invalidate_url
        self.timeout = timeout or settings.icon_cache_timeout_seconds

    async def invalidate(self, family_id: str) -> bool:
        """
        Signal that the family's icon must be regenerated.

        Returns:
            True when the asset layer acknowledged the notice
        """
        if not self.endpoint:
            logger.debug(f"[IconCache] No endpoint configured, skipping family {family_id}")
            return False

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.endpoint, json={"family_id": family_id})
                response.raise_for_status()
            logger.info(f"[IconCache] Invalidated icon for family {family_id}")
            return True
        except httpx.HTTPError as e:
            logger.warning(f"[IconCache] Failed to invalidate icon for family {family_id}: {e}")
            return False
