"""Read access to the user directory.

The matching code only ever sees the ProfileStore protocol. MongoProfileStore
is what the server runs against; InMemoryProfileStore backs fixtures and tests.
"""

import logging
from collections.abc import Iterable
from typing import Optional, Protocol

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from exceptions import StoreUnavailable
from models.profile import Profile

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    async def get_by_id(self, profile_id: str) -> Optional[Profile]: ...

    async def list_all(self) -> list[Profile]: ...

    async def query_by_skill(self, skill: str) -> list[Profile]:
        """Profiles whose teach_skills contain `skill` exactly."""
        ...

    async def query_by_learn_skill(self, skill: str) -> list[Profile]:
        """Profiles whose learn_skills contain `skill` exactly."""
        ...


class MongoProfileStore:
    """Profiles collection in MongoDB, read through motor."""

    def __init__(self, db: AsyncIOMotorDatabase, collection: str = "profiles"):
        self.collection = db[collection]

    async def get_by_id(self, profile_id: str) -> Optional[Profile]:
        try:
            doc = await self.collection.find_one({"id": profile_id}, {"_id": 0})
        except PyMongoError as e:
            raise StoreUnavailable(f"Profile lookup failed: {e}") from e
        if doc is None:
            return None
        return _to_profile(doc)

    async def list_all(self) -> list[Profile]:
        return await self._find({})

    async def query_by_skill(self, skill: str) -> list[Profile]:
        return await self._find({"teach_skills": skill})

    async def query_by_learn_skill(self, skill: str) -> list[Profile]:
        return await self._find({"learn_skills": skill})

    async def _find(self, query: dict) -> list[Profile]:
        try:
            cursor = self.collection.find(query, {"_id": 0})
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StoreUnavailable(f"Profile query failed: {e}") from e
        return [_to_profile(doc) for doc in docs]


def _to_profile(doc: dict) -> Profile:
    try:
        return Profile(**doc)
    except ValidationError as e:
        logger.error(f"Malformed profile document {doc.get('id')!r}: {e}")
        raise StoreUnavailable(f"Stored profile {doc.get('id')!r} is malformed") from e


class InMemoryProfileStore:
    """Dict-backed store. Reads return the stored (immutable) profiles."""

    def __init__(self, profiles: Iterable[Profile] = ()):
        self._profiles: dict[str, Profile] = {p.id: p for p in profiles}

    def add(self, profile: Profile) -> None:
        self._profiles[profile.id] = profile

    async def get_by_id(self, profile_id: str) -> Optional[Profile]:
        return self._profiles.get(profile_id)

    async def list_all(self) -> list[Profile]:
        return list(self._profiles.values())

    async def query_by_skill(self, skill: str) -> list[Profile]:
        return [p for p in self._profiles.values() if skill in p.teach_skills]

    async def query_by_learn_skill(self, skill: str) -> list[Profile]:
        return [p for p in self._profiles.values() if skill in p.learn_skills]
