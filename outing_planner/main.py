from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from outing_planner.config import load_config
from outing_planner.log import get_logger
from outing_planner.orchestrator import build_matrix_provider, orchestrate_itinerary_plan
from outing_planner.schemas import Location

logger = get_logger(__name__)

app = FastAPI(title="Outing Planner API")

# Local UIs reach the API without browser CORS trouble; operators can narrow
# this via OUTING_PLANNER_ALLOWED_ORIGINS.
app.add_middleware(
    CORSMiddleware,
    allow_origins=load_config().allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/api/plan-itinerary")
async def api_plan_itinerary(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Rank every feasible itinerary for the supplied slots and venue pools."""
    try:
        return await orchestrate_itinerary_plan(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False)) from exc
    except Exception as exc:
        logger.exception("Itinerary planning failed")
        raise HTTPException(status_code=400, detail={"error": "Invalid request", "details": str(exc)}) from exc


@app.post("/api/directions")
async def api_directions(
    locations: Optional[List[Location]] = Body(None),
    start: Optional[Location] = Body(None),
    end: Optional[Location] = Body(None),
) -> Dict[str, Any]:
    """Distance matrix for ``locations`` (two or more), or a single ``start`` -> ``end`` leg."""
    provider = build_matrix_provider(load_config())

    if locations and len(locations) >= 2:
        matrix = await provider.get_matrix(locations)
        return {
            "success": matrix.success,
            "distances": matrix.distances,
            "durations": matrix.durations,
            **({"error": matrix.error} if matrix.error else {}),
        }

    if start is None or end is None:
        raise HTTPException(
            status_code=400,
            detail="Either 'locations' array or both 'start' and 'end' are required",
        )
    return await provider.get_distance(start, end)
