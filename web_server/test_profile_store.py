import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError
from pymongo.errors import ServerSelectionTimeoutError

from conftest import make_profile
from exceptions import StoreUnavailable
from models.profile import Profile
from services.profile_store import InMemoryProfileStore, MongoProfileStore


def _mongo_store(collection: MagicMock) -> MongoProfileStore:
    db = MagicMock()
    db.__getitem__.return_value = collection
    return MongoProfileStore(db)


def test_profile_skill_fields_are_sets():
    profile = Profile(id="p", teach_skills=["go", "go", "rust"], learn_skills=["c"])

    assert profile.teach_skills == frozenset({"go", "rust"})
    assert isinstance(profile.learn_skills, frozenset)


def test_profile_validates_rating_and_reviews():
    with pytest.raises(ValidationError):
        Profile(id="p", rating=5.5)
    with pytest.raises(ValidationError):
        Profile(id="p", review_count=-1)


def test_profile_naive_timestamp_is_utc():
    profile = Profile(id="p", last_active_at=datetime(2026, 1, 1, 9, 30))

    assert profile.last_active_at.tzinfo == timezone.utc


def test_in_memory_store_queries():
    store = InMemoryProfileStore([
        make_profile("a", teach=["guitar"]),
        make_profile("b", teach=["piano", "guitar"]),
        make_profile("c", teach=["Guitar"]),
    ])

    assert asyncio.run(store.get_by_id("b")).id == "b"
    assert asyncio.run(store.get_by_id("zzz")) is None
    assert {p.id for p in asyncio.run(store.query_by_skill("guitar"))} == {"a", "b"}
    assert len(asyncio.run(store.list_all())) == 3


def test_mongo_store_reads_documents():
    doc = {"id": "a", "name": "Ann", "teach_skills": ["guitar"], "learn_skills": ["python"]}
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[doc])
    collection = MagicMock()
    collection.find.return_value = cursor
    collection.find_one = AsyncMock(return_value=doc)
    store = _mongo_store(collection)

    profiles = asyncio.run(store.query_by_skill("guitar"))
    profile = asyncio.run(store.get_by_id("a"))

    collection.find.assert_called_once_with({"teach_skills": "guitar"}, {"_id": 0})
    assert profiles[0].teach_skills == frozenset({"guitar"})
    assert profile.name == "Ann"


def test_mongo_store_missing_profile_is_none():
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)

    assert asyncio.run(_mongo_store(collection).get_by_id("x")) is None


def test_mongo_store_failures_become_store_unavailable():
    collection = MagicMock()
    collection.find_one = AsyncMock(side_effect=ServerSelectionTimeoutError("no primary"))
    cursor = MagicMock()
    cursor.to_list = AsyncMock(side_effect=ServerSelectionTimeoutError("no primary"))
    collection.find.return_value = cursor
    store = _mongo_store(collection)

    with pytest.raises(StoreUnavailable):
        asyncio.run(store.get_by_id("a"))
    with pytest.raises(StoreUnavailable):
        asyncio.run(store.list_all())


def test_mongo_store_malformed_document_becomes_store_unavailable():
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[{"id": "bad", "rating": 9.5}])
    collection = MagicMock()
    collection.find.return_value = cursor
    collection.find_one = AsyncMock(return_value={"id": "bad", "review_count": -4})
    store = _mongo_store(collection)

    with pytest.raises(StoreUnavailable, match="malformed"):
        asyncio.run(store.query_by_skill("guitar"))
    with pytest.raises(StoreUnavailable, match="malformed"):
        asyncio.run(store.get_by_id("bad"))


def test_learn_skill_queries():
    store = InMemoryProfileStore([
        make_profile("a", learn=["python"]),
        make_profile("b", teach=["python"]),
    ])
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[])
    collection = MagicMock()
    collection.find.return_value = cursor

    assert [p.id for p in asyncio.run(store.query_by_learn_skill("python"))] == ["a"]
    asyncio.run(_mongo_store(collection).query_by_learn_skill("python"))
    collection.find.assert_called_once_with({"learn_skills": "python"}, {"_id": 0})
