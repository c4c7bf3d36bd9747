from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Profile(BaseModel):
    """A user's matching-relevant attributes, as stored in the profiles collection."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    avatar: Optional[str] = None
    teach_skills: frozenset[str] = frozenset()
    learn_skills: frozenset[str] = frozenset()
    other_interests: frozenset[str] = frozenset()
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    review_count: int = Field(default=0, ge=0)
    is_verified_mentor: bool = False
    last_active_at: Optional[datetime] = None

    @field_validator("last_active_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Mongo hands back naive datetimes; they are always UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class PublicProfile(BaseModel):
    """Display fields attached to each match in API responses."""
    name: str
    avatar: Optional[str] = None
    rating: float
    review_count: int
    is_verified_mentor: bool

    @classmethod
    def from_profile(cls, profile: Profile) -> "PublicProfile":
        return cls(
            name=profile.name,
            avatar=profile.avatar,
            rating=profile.rating,
            review_count=profile.review_count,
            is_verified_mentor=profile.is_verified_mentor,
        )
