import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from config import Settings, get_settings
from exceptions import InvalidQuery, ProfileNotFound
from models.profile import Profile
from services.matching import (
    MatchResult,
    Tab,
    dedupe,
    filter_tab,
    rank,
    scan,
    search_by_skill,
)
from services.profile_store import ProfileStore

logger = logging.getLogger(__name__)


@dataclass
class MatchOutcome:
    """Ranked results plus the candidate profiles they point at."""
    query_skills: list[str]
    results: list[MatchResult]
    profiles: dict[str, Profile] = field(default_factory=dict)


class MatchQueryService:
    """Runs the two match queries against a profile store.

    Holds no per-request state; every call reads its own snapshot.
    """

    def __init__(self, store: ProfileStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()

    async def find_matches(
        self,
        requester_id: str,
        tab: Tab = Tab.all,
        now: Optional[datetime] = None,
    ) -> MatchOutcome:
        requester = await self.store.get_by_id(requester_id)
        if requester is None:
            raise ProfileNotFound(f"Profile {requester_id} not found")
        if not requester.learn_skills:
            raise InvalidQuery("Declare at least one skill to learn before finding matches")

        query_skills = sorted(requester.learn_skills)
        profiles: dict[str, Profile] = {}
        partials: list[MatchResult] = []
        # Teachers of what the requester wants, then learners of what it offers
        lookups = [(self.store.query_by_skill, s) for s in query_skills]
        lookups += [(self.store.query_by_learn_skill, s) for s in sorted(requester.teach_skills)]
        for query, skill in lookups:
            population = await query(skill)
            for p in population:
                profiles.setdefault(p.id, p)
            partials.extend(scan(requester, population, min_score=1))

        results = dedupe(partials)
        logger.debug(
            f"find_matches {requester_id}: {len(query_skills)} skills, "
            f"{len(partials)} partial hits, {len(results)} unique"
        )
        return self._finish(query_skills, results, profiles, tab, now)

    async def search_matches(
        self,
        skill: str,
        requester_id: Optional[str] = None,
        tab: Tab = Tab.all,
        now: Optional[datetime] = None,
    ) -> MatchOutcome:
        needle = (skill or "").strip()
        if not needle:
            raise InvalidQuery("Search skill must not be empty")

        if self.settings.case_sensitive_search:
            population = await self.store.query_by_skill(needle)
        else:
            population = await self.store.list_all()
        population = [p for p in population if p.id != requester_id]

        results = search_by_skill(needle, population, case_sensitive=self.settings.case_sensitive_search)
        profiles = {p.id: p for p in population}
        logger.debug(f"search_matches '{needle}': {len(results)} hits")
        return self._finish([needle], results, profiles, tab, now)

    def _finish(
        self,
        query_skills: list[str],
        results: list[MatchResult],
        profiles: dict[str, Profile],
        tab: Tab,
        now: Optional[datetime],
    ) -> MatchOutcome:
        ranked = rank(results, profiles.get)
        filtered = filter_tab(
            ranked,
            profiles.get,
            tab,
            now=now,
            best_threshold=self.settings.best_score_threshold,
            available_window=timedelta(days=self.settings.available_window_days),
        )
        kept = {r.candidate_id: profiles[r.candidate_id] for r in filtered}
        return MatchOutcome(query_skills=query_skills, results=filtered, profiles=kept)
