"""Data models for the feed engine.

The backing store owns and mutates these records; the engine only reads
snapshots of them. Every schema here is explicit so that presence rules are
checked against declared fields rather than ad hoc truthiness on a dict. The
original payload is kept in `raw` so callers can render fields we do not model.

This file uses Pydantic v2.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidInputError
from .utils import parse_timestamp, premium_flag


PostingStatus = Literal["active", "paused", "closed"]
UserType = Literal["candidate", "recruiter"]

M = TypeVar("M", bound="_Record")


def _record_id(record: Any) -> Optional[Any]:
    if isinstance(record, Mapping):
        return record.get("id")
    return getattr(record, "id", None)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "record"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


class _Record(BaseModel):
    """Base for store records: tolerant of extra keys, accepts field names or aliases."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def from_record(cls: Type[M], record: Any) -> M:
        """Validate a store record (mapping or model) into this schema.

        Raises:
            InvalidInputError: the record does not satisfy the schema. The
                message names the record id when there is one.
        """
        if isinstance(record, cls):
            return record
        if isinstance(record, BaseModel):
            record = record.model_dump()
        if not isinstance(record, Mapping):
            raise InvalidInputError(f"expected a mapping, got {type(record).__name__}")
        try:
            obj = cls.model_validate(record)
        except ValidationError as exc:
            raise InvalidInputError(_describe(exc), _record_id(record)) from exc
        if "raw" in cls.model_fields and not record.get("raw"):
            obj.raw = dict(record)
        return obj


class JobPosting(_Record):
    """A job posting snapshot as read from the store.

    Only `likes_count` and `created_at` are needed for ranking; the rest is feed
    display and filtering data.
    """

    id: Optional[str] = None
    likes_count: int = Field(..., ge=0, validation_alias=AliasChoices("likes_count", "likesCount"))
    created_at: datetime = Field(..., validation_alias=AliasChoices("created_at", "createdAt"))
    is_premium: bool = Field(default=False, validation_alias=AliasChoices("is_premium", "isPremium"))

    title: str = ""
    company: str = ""
    location: str = ""
    description: str = ""
    salary: Optional[str] = None
    city_id: Optional[int] = None
    sector_ids: Optional[List[int]] = None
    status: PostingStatus = "active"
    author_id: Optional[str] = None
    views_count: int = 0

    raw: Dict[str, Any] = Field(default_factory=dict, description="Original payload.")

    @field_validator("id", "author_id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("likes_count", mode="before")
    @classmethod
    def _reject_bool_likes(cls, v: Any) -> Any:
        # bool is an int subclass; a flag is not a count
        if isinstance(v, bool):
            raise ValueError("likes_count must be an integer")
        return v

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, v: Any) -> datetime:
        return parse_timestamp(v)

    @field_validator("is_premium", mode="before")
    @classmethod
    def _normalize_premium(cls, v: Any) -> bool:
        # Stores encode the flag as a boolean or as an integer 1/0.
        return premium_flag(v)

    @field_validator("title", "company", "location", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, v: Any) -> Any:
        return "active" if v is None else v

    @field_validator("views_count", mode="before")
    @classmethod
    def _null_views(cls, v: Any) -> Any:
        return 0 if v is None else v


class RankedPosting(JobPosting):
    """A posting with its ephemeral importance score. Never persisted."""

    importance_score: float


class FeedItem(RankedPosting):
    """A ranked posting annotated with the viewer's engagement."""

    is_liked: bool = False
    is_saved: bool = False
    has_applied: bool = False
    application_date: Optional[datetime] = None


class Experience(_Record):
    position: str
    company: Optional[str] = None
    start_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("end_date", "endDate"))
    is_current_job: bool = Field(default=False, validation_alias=AliasChoices("is_current_job", "isCurrentJob"))
    activities: Optional[str] = None


class Education(_Record):
    level: str
    institution: str = ""
    completion_year: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("completion_year", "completionYear")
    )
    is_complete: bool = Field(default=False, validation_alias=AliasChoices("is_complete", "isComplete"))
    course_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("course_name", "courseName"))


class Profile(_Record):
    """A user profile snapshot.

    Every field defaults to None, so a key missing from the record and a key
    explicitly set to null are the same thing to the completion gate.
    """

    id: Optional[str] = None
    username: Optional[str] = None
    user_type: Optional[UserType] = None

    full_name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    city_id: Optional[int] = None
    birth_date: Optional[date] = None
    professional_summary: Optional[str] = None
    address: Optional[str] = None

    education: Optional[List[Education]] = None
    experiences: Optional[List[Experience]] = None
    skills: Optional[List[str]] = None
    cnh_types: Optional[List[str]] = None
    is_first_job: Optional[bool] = None

    whatsapp: Optional[str] = None
    email: Optional[str] = None
    company_name: Optional[str] = None
    is_verified: bool = False

    raw: Dict[str, Any] = Field(default_factory=dict, description="Original payload.")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("birth_date", "user_type", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("is_verified", mode="before")
    @classmethod
    def _null_is_unverified(cls, v: Any) -> Any:
        return False if v is None else v


class City(_Record):
    id: int
    name: str
    state: str
    region: Optional[str] = None

    def display_name(self) -> str:
        return f"{self.name}, {self.state}"
