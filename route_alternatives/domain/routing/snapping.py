from __future__ import annotations

import asyncio
import logging
from typing import Tuple

from .client import OSRMClient
from .exceptions import SnapFailure
from .models import Coordinate, SnappedPoint

logger = logging.getLogger(__name__)


class GeocodeSnapper:
    """Best-effort projection of raw points onto the routable network."""

    def __init__(self, client: OSRMClient) -> None:
        self.client = client

    async def snap(self, point: Coordinate) -> SnappedPoint:
        try:
            snapped = await self.client.nearest(point)
        except SnapFailure as exc:
            logger.warning("Snap failed for %s, using raw point: %s", point.rounded(), exc.message)
            return SnappedPoint(point, None)

        logger.debug("Snapped %s -> %s", point.rounded(), snapped.coordinate.rounded())
        return snapped

    async def snap_pair(self, start: Coordinate, end: Coordinate) -> Tuple[SnappedPoint, SnappedPoint]:
        snapped_start, snapped_end = await asyncio.gather(self.snap(start), self.snap(end))
        return snapped_start, snapped_end
