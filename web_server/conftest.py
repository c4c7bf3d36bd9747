"""Shared fixtures: profile factory, an in-memory directory and an API client."""

from datetime import datetime, timedelta, timezone

import pytest

from models.profile import Profile
from services.profile_store import InMemoryProfileStore

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_profile(
    id: str,
    teach: list[str] = (),
    learn: list[str] = (),
    interests: list[str] = (),
    rating: float = 0.0,
    verified: bool = False,
    last_active_days: float | None = None,
    name: str | None = None,
) -> Profile:
    return Profile(
        id=id,
        name=name or id.title(),
        avatar=f"https://cdn.example.com/{id}.png",
        teach_skills=frozenset(teach),
        learn_skills=frozenset(learn),
        other_interests=frozenset(interests),
        rating=rating,
        review_count=3,
        is_verified_mentor=verified,
        last_active_at=None if last_active_days is None else NOW - timedelta(days=last_active_days),
    )


@pytest.fixture
def alice():
    return make_profile(
        "alice",
        teach=["python"],
        learn=["guitar", "spanish"],
        interests=["hiking", "chess"],
    )


@pytest.fixture
def population(alice):
    return [
        alice,
        make_profile("bob", teach=["guitar"], learn=["python"], interests=["chess"], rating=4.0,
                     verified=True, last_active_days=1),
        make_profile("carol", teach=["spanish", "guitar"], learn=["cooking"], rating=4.8,
                     last_active_days=30),
        make_profile("dave", teach=["spanish"], learn=["python"], rating=3.0, verified=True),
        make_profile("erin", teach=["drawing"], learn=["python"], rating=5.0, last_active_days=2),
        make_profile("frank", teach=["cooking"], learn=["drawing"]),
    ]


@pytest.fixture
def store(population):
    return InMemoryProfileStore(population)
