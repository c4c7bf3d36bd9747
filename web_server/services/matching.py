"""Skill-overlap matching: scoring, scanning, dedup, ranking and tab filters.

Everything here is pure. Callers hand in profiles they already loaded; no
function touches the profile store.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from exceptions import InvalidQuery
from models.profile import Profile

SKILL_POINTS = 10
KEYWORD_SEARCH_SCORE = 75
BEST_SCORE_THRESHOLD = 70
AVAILABLE_WINDOW = timedelta(days=7)

ProfileResolver = Callable[[str], Optional[Profile]]


class Tab(str, Enum):
    all = "all"
    best = "best"
    verified = "verified"
    available = "available"


@dataclass(frozen=True)
class MatchResult:
    candidate_id: str
    score: int
    teaching_matches: tuple[str, ...] = ()
    learning_matches: tuple[str, ...] = ()
    common_interests: frozenset[str] = frozenset()


# ── Scoring ──────────────────────────────────────────────────────────────

def score(requester: Profile, candidate: Profile) -> MatchResult:
    """Score one (requester, candidate) pair.

    Teaching matches are skills the candidate teaches that the requester
    wants to learn; learning matches are the reverse. Each is worth
    SKILL_POINTS. Comparing a profile with itself yields an empty result.
    """
    if requester.id == candidate.id:
        return MatchResult(candidate_id=candidate.id, score=0)

    teaching = tuple(s for s in sorted(requester.learn_skills) if s in candidate.teach_skills)
    learning = tuple(s for s in sorted(requester.teach_skills) if s in candidate.learn_skills)

    return MatchResult(
        candidate_id=candidate.id,
        score=SKILL_POINTS * (len(teaching) + len(learning)),
        teaching_matches=teaching,
        learning_matches=learning,
        common_interests=requester.other_interests & candidate.other_interests,
    )


def scan(requester: Profile, population: Iterable[Profile], min_score: int = 1) -> list[MatchResult]:
    """Score every candidate except the requester, keeping score >= min_score."""
    results: list[MatchResult] = []
    for cand in population:
        if cand.id == requester.id:
            continue
        result = score(requester, cand)
        if result.score >= min_score:
            results.append(result)
    return results


def search_by_skill(
    skill: str,
    population: Iterable[Profile],
    case_sensitive: bool = True,
) -> list[MatchResult]:
    """Keyword search: everyone teaching `skill` gets a flat KEYWORD_SEARCH_SCORE."""
    needle = (skill or "").strip()
    if not needle:
        raise InvalidQuery("Search skill must not be empty")

    results: list[MatchResult] = []
    for cand in population:
        hit = _find_skill(needle, cand.teach_skills, case_sensitive)
        if hit is not None:
            results.append(
                MatchResult(
                    candidate_id=cand.id,
                    score=KEYWORD_SEARCH_SCORE,
                    teaching_matches=(hit,),
                )
            )
    return results


def _find_skill(needle: str, skills: frozenset[str], case_sensitive: bool) -> Optional[str]:
    if needle in skills:
        return needle
    if case_sensitive:
        return None
    folded = needle.casefold()
    for s in sorted(skills):
        if s.casefold() == folded:
            return s
    return None


# ── Merging & ordering ───────────────────────────────────────────────────

def dedupe(results: Iterable[MatchResult]) -> list[MatchResult]:
    """Keep the first result seen for each candidate, in first-seen order.

    A later duplicate is dropped even when it carries a higher score.
    """
    seen: set[str] = set()
    unique: list[MatchResult] = []
    for r in results:
        if r.candidate_id in seen:
            continue
        seen.add(r.candidate_id)
        unique.append(r)
    return unique


def rank(results: Iterable[MatchResult], resolve_profile: Optional[ProfileResolver] = None) -> list[MatchResult]:
    """Order by score desc, then candidate rating desc, then candidate id asc."""
    def rating_of(candidate_id: str) -> float:
        if resolve_profile is None:
            return 0.0
        profile = resolve_profile(candidate_id)
        return profile.rating if profile is not None else 0.0

    return sorted(results, key=lambda r: (-r.score, -rating_of(r.candidate_id), r.candidate_id))


# ── Tab filters ──────────────────────────────────────────────────────────

def filter_tab(
    ranked: Iterable[MatchResult],
    resolve_profile: ProfileResolver,
    tab: Tab = Tab.all,
    now: Optional[datetime] = None,
    best_threshold: int = BEST_SCORE_THRESHOLD,
    available_window: timedelta = AVAILABLE_WINDOW,
) -> list[MatchResult]:
    """Narrow an already ranked list to one tab without reordering it."""
    tab = Tab(tab)
    if tab is Tab.all:
        return list(ranked)
    if tab is Tab.best:
        return [r for r in ranked if r.score >= best_threshold]

    if now is None:
        now = datetime.now(timezone.utc)

    kept: list[MatchResult] = []
    for r in ranked:
        profile = resolve_profile(r.candidate_id)
        if profile is None:
            continue
        if tab is Tab.verified and profile.is_verified_mentor:
            kept.append(r)
        elif tab is Tab.available and _active_within(profile, now, available_window):
            kept.append(r)
    return kept


def _active_within(profile: Profile, now: datetime, window: timedelta) -> bool:
    if profile.last_active_at is None:
        return False
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - profile.last_active_at <= window
