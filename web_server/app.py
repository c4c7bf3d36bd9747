import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Header, Query, Request

from config import Settings, get_settings
from db import connect_db, close_db, get_db
from exceptions import MatchingError, ProfileNotFound, matching_error_handler
from models.matching import MatchResponse, MatchView
from models.profile import Profile, PublicProfile
from services.auth import extract_token, verify_token
from services.match_query import MatchOutcome, MatchQueryService
from services.matching import Tab
from services.profile_store import MongoProfileStore, ProfileStore

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def require_auth_secret(settings: Settings) -> None:
    if not settings.auth_secret:
        raise RuntimeError("AUTH_SECRET must be set to verify bearer tokens")


@asynccontextmanager
async def lifespan(app: FastAPI):
    require_auth_secret(settings)
    await connect_db(settings)
    yield
    await close_db()


app = FastAPI(title="Skilio Match API", lifespan=lifespan)
app.add_exception_handler(MatchingError, matching_error_handler)


# ── Dependencies ───────────────────────────────────────────────────────


def get_profile_store() -> ProfileStore:
    return MongoProfileStore(get_db())


def get_match_service(store: ProfileStore = Depends(get_profile_store)) -> MatchQueryService:
    return MatchQueryService(store, settings)


def get_requester_id(authorization: Optional[str] = Header(None)) -> str:
    return verify_token(extract_token(authorization), settings.auth_secret)


def _to_response(tab: Tab, outcome: MatchOutcome) -> MatchResponse:
    matches = [
        MatchView(
            candidate_id=r.candidate_id,
            score=r.score,
            teaching_matches=list(r.teaching_matches),
            learning_matches=list(r.learning_matches),
            common_interests=sorted(r.common_interests),
            candidate=PublicProfile.from_profile(outcome.profiles[r.candidate_id]),
        )
        for r in outcome.results
    ]
    return MatchResponse(
        tab=tab.value,
        query_skills=outcome.query_skills,
        total=len(matches),
        matches=matches,
    )


# ── Health ─────────────────────────────────────────────────────────────


@app.get("/health")
async def health():
    return {"status": "ok"}


# ── Profile endpoint ───────────────────────────────────────────────────


@app.get("/profile", response_model=Profile)
async def read_profile(
    requester_id: str = Depends(get_requester_id),
    store: ProfileStore = Depends(get_profile_store),
):
    profile = await store.get_by_id(requester_id)
    if profile is None:
        raise ProfileNotFound(f"Profile {requester_id} not found")
    return profile


# ── Match endpoints ────────────────────────────────────────────────────


@app.get("/matches", response_model=MatchResponse)
async def find_matches(
    request: Request,
    tab: Tab = Query(Tab.all),
    requester_id: str = Depends(get_requester_id),
    service: MatchQueryService = Depends(get_match_service),
):
    outcome = await service.find_matches(requester_id, tab)
    logger.info(f"{request.url.path} {requester_id} tab={tab.value}: {len(outcome.results)} matches")
    return _to_response(tab, outcome)


@app.get("/matches/search", response_model=MatchResponse)
async def search_matches(
    request: Request,
    skill: str = Query(""),
    tab: Tab = Query(Tab.all),
    requester_id: str = Depends(get_requester_id),
    service: MatchQueryService = Depends(get_match_service),
):
    outcome = await service.search_matches(skill, requester_id, tab)
    logger.info(f"{request.url.path} '{skill.strip()}' tab={tab.value}: {len(outcome.results)} matches")
    return _to_response(tab, outcome)
