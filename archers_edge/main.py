"""
Archer's Edge - FastAPI Application

REST API over the scoring core: profiles, competitions, bale assignment,
scorecard verification and results.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Query, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .exceptions import AssignmentNotFoundError, PolicyError
from .models import Identity, Scorecard
from .services.data_service import DataService
from . import config

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

data_service = DataService()


def _error_response(e: Exception) -> HTTPException:
    """Map a service error onto an HTTP error."""
    if isinstance(e, AssignmentNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, PolicyError):
        logger.info(f"Rejected: {e}")
        return HTTPException(status_code=422, detail=str(e))
    logger.exception(f"Unexpected error: {e}")
    return HTTPException(status_code=500, detail=str(e))


# ============================================================================
# REQUEST MODELS
# ============================================================================

class AssignmentRequest(BaseModel):
    """Body of POST /api/assignments."""

    competition_id: str = Field(..., alias="competitionId")
    archer_ids: list[str] = Field(default=[], alias="archerIds")
    assignment_type: str = Field(default="school", alias="assignmentType")
    number_of_bales: int = Field(default=config.DEFAULT_NUMBER_OF_BALES, alias="numberOfBales", gt=0)
    max_archers_per_bale: int = Field(
        default=config.DEFAULT_MAX_ARCHERS_PER_BALE, alias="maxArchersPerBale", gt=0
    )
    selected_school: Optional[str] = Field(default=None, alias="selectedSchool")
    identity: Optional[Identity] = None

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class VerifyRequest(BaseModel):
    """Body of POST /api/scorecards/verify."""

    scorecard: Scorecard
    identity: Identity
    paper_confirmed: bool = Field(default=False, alias="paperConfirmed")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    info = data_service.get_storage_info()
    logger.info(f"Storage ready (healthy={info['healthy']}): {info['stats']}")

    yield

    logger.info("Shutting down...")


# Initialize FastAPI app with lifespan
app = FastAPI(
    title="Archer's Edge",
    description="Archery scoring, bale assignment and results",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    """Health check endpoint."""
    info = data_service.get_storage_info()
    return {
        "status": "ok" if info['healthy'] else "degraded",
        "storage": info['stats'],
        "cache": info['cache'],
    }


@app.get("/api/profiles")
async def get_profiles(
    school: Optional[str] = Query(None, description="Only archers from this school"),
    archers_only: bool = Query(False, alias="archersOnly", description="Only profiles with the Archer role")
):
    """Get profiles, optionally filtered to one school's archers."""
    try:
        if archers_only or school:
            profiles = data_service.load_archers(school=school)
        else:
            profiles = data_service.load_profiles()
        return [p.model_dump(by_alias=True) for p in profiles]
    except Exception as e:
        raise _error_response(e)


@app.get("/api/competitions")
async def get_competitions():
    """Get all competitions, newest first."""
    try:
        return [c.model_dump(by_alias=True) for c in data_service.load_competitions()]
    except Exception as e:
        raise _error_response(e)


@app.get("/api/competitions/stats")
async def get_all_competition_stats():
    """Get summary statistics for every competition."""
    try:
        stats = data_service.get_all_competition_stats()
        return {cid: s.model_dump(by_alias=True) for cid, s in stats.items()}
    except Exception as e:
        raise _error_response(e)


@app.get("/api/competitions/{competition_id}/results")
async def get_competition_results(competition_id: str):
    """Get overall rankings and per-division standings."""
    try:
        results = data_service.get_competition_results(competition_id)
        return results.model_dump(by_alias=True)
    except Exception as e:
        raise _error_response(e)


@app.post("/api/assignments")
async def create_assignment(request: AssignmentRequest):
    """Create a draft event assignment after checking bale capacity."""
    try:
        assignment = data_service.create_event_assignment(
            competition_id=request.competition_id,
            archer_ids=request.archer_ids,
            assignment_type=request.assignment_type,
            number_of_bales=request.number_of_bales,
            max_archers_per_bale=request.max_archers_per_bale,
            selected_school=request.selected_school,
            identity=request.identity,
        )
        return assignment.model_dump(by_alias=True)
    except Exception as e:
        raise _error_response(e)


@app.post("/api/assignments/{assignment_id}/bales")
async def assign_bales(assignment_id: str):
    """Generate bales for an assignment and mark it assigned."""
    try:
        assignment = data_service.auto_assign_bales(assignment_id)
        return assignment.model_dump(by_alias=True)
    except Exception as e:
        raise _error_response(e)


@app.post("/api/scorecards/verify")
async def verify_scorecard(request: VerifyRequest):
    """Verify a complete scorecard and store it."""
    try:
        verified = data_service.submit_scorecard(
            request.scorecard,
            request.identity,
            paper_confirmed=request.paper_confirmed,
        )
        return verified.model_dump(by_alias=True)
    except Exception as e:
        raise _error_response(e)


@app.get("/api/archers/{archer_id}/stats")
async def get_archer_stats(archer_id: str):
    """Get one archer's performance statistics and recent rounds."""
    try:
        stats = data_service.get_archer_stats(archer_id)
        profile = stats['profile']
        return {
            "profile": profile.model_dump(by_alias=True) if profile else None,
            "performance": stats['performance'].model_dump(by_alias=True),
            "recentScores": [sc.model_dump(by_alias=True) for sc in stats['recentScores']],
        }
    except Exception as e:
        raise _error_response(e)


@app.get("/api/scores")
async def get_scores(
    competition: Optional[str] = Query(None, description="Competition ID"),
    archer: Optional[str] = Query(None, description="Archer profile ID")
):
    """Get scorecards with optional filters."""
    try:
        scorecards = data_service.load_scores(competition_id=competition, archer_id=archer)
        return [sc.model_dump(by_alias=True) for sc in scorecards]
    except Exception as e:
        raise _error_response(e)


# Run with: uvicorn archers_edge.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
