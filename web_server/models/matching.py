from pydantic import BaseModel

from models.profile import PublicProfile


class MatchView(BaseModel):
    candidate_id: str
    score: int
    teaching_matches: list[str]
    learning_matches: list[str]
    common_interests: list[str]
    candidate: PublicProfile


class MatchResponse(BaseModel):
    status: str = "ok"
    tab: str
    query_skills: list[str]
    total: int
    matches: list[MatchView]
