from __future__ import annotations

import math
from typing import Any, Dict, Sequence

import httpx

from outing_planner.log import get_logger
from outing_planner.schemas import DistanceMatrix, Location

logger = get_logger(__name__)


class OpenRouteMatrixProvider:
    """
    Distance/time matrix backed by the OpenRouteService matrix endpoint.
    One POST covers every pair of the supplied locations.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.openrouteservice.org",
        profile: str = "driving-car",
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/v2/matrix/{self.profile}"

    async def get_matrix(self, locations: Sequence[Location]) -> DistanceMatrix:
        """Fetch distances and durations for every ordered pair of ``locations``.

        Never raises for transport or payload problems; those come back as
        ``success=False`` so callers can treat them as "no routes".
        """
        if not self.api_key:
            logger.warning("OPENROUTE_API_KEY not configured; distance matrix unavailable")
            return DistanceMatrix(success=False, error="missing_api_key")
        if not locations:
            return DistanceMatrix(success=True)

        payload = {
            # ORS expects [lng, lat]
            "locations": [[loc.lng, loc.lat] for loc in locations],
            "metrics": ["distance", "duration"],
            "units": "m",
        }
        headers = {"Authorization": self.api_key, "Content-Type": "application/json"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.endpoint, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except Exception as exc:
            logger.warning("Distance matrix request failed for %d location(s)", len(locations), exc_info=True)
            return DistanceMatrix(success=False, error=str(exc))

        matrix = self._parse(data, len(locations))
        if matrix.success:
            logger.info("Distance matrix fetched for %d location(s)", len(locations))
        else:
            logger.warning("Distance matrix response unusable: %s", matrix.error)
        return matrix

    async def get_distance(self, start: Location, end: Location) -> Dict[str, Any]:
        """Single-leg lookup built on the matrix call."""
        matrix = await self.get_matrix([start, end])
        if not matrix.success:
            return {"success": False, "error": matrix.error}
        distance = matrix.distances[0][1]
        duration = matrix.durations[0][1]
        if distance is None or duration is None:
            return {"success": False, "error": "no_route"}
        return {
            "success": True,
            "distanceKm": round(distance / 1000, 2),
            "travelTimeMinutes": math.ceil(duration / 60),
        }

    @staticmethod
    def _parse(data: Any, size: int) -> DistanceMatrix:
        if not isinstance(data, dict):
            return DistanceMatrix(success=False, error="malformed_response")
        distances = data.get("distances")
        durations = data.get("durations")
        for name, table in (("distances", distances), ("durations", durations)):
            if not isinstance(table, list) or len(table) != size:
                return DistanceMatrix(success=False, error=f"missing_{name}")
            if any(not isinstance(row, list) or len(row) != size for row in table):
                return DistanceMatrix(success=False, error=f"ragged_{name}")
        return DistanceMatrix(success=True, distances=distances, durations=durations)
