"""
Domain Schemas for MentorConnect

Each Pydantic model mirrors a collection on the backing API.
The API speaks camelCase (mentorId, dateTime, totalSessions), attributes here
are snake_case. Dump with `by_alias=True` when talking to the API.
"""
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

Role = Literal["mentor", "mentee", "admin"]
SessionStatus = Literal["scheduled", "completed", "cancelled"]


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Naive timestamps from the API are taken as UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class User(ApiModel):
    """
    Platform members
    Collection name: "users"
    """
    id: str = Field(..., description="Unique user id")
    name: str = Field(..., description="Full name")
    email: str = Field(..., description="Email address, as stored by the API")
    password: Optional[str] = Field(None, description="Stored secret (hash, or plaintext on legacy records)")
    role: Role = Field(..., description="mentor, mentee or admin")
    avatar: Optional[str] = Field(None, description="Avatar URL")
    bio: Optional[str] = Field(None, description="Short bio")
    skills: List[str] = Field(default_factory=list, description="Skills a mentor offers")
    experience: Optional[str] = Field(None, description="Experience tier, e.g. Senior")
    goals: List[str] = Field(default_factory=list, description="Goals a mentee works towards")
    availability: List[str] = Field(default_factory=list, description="Free-form availability slots")
    rating: Optional[float] = Field(None, description="Average session rating")
    total_sessions: Optional[int] = Field(None, description="Aggregate session count")
    created_at: Optional[datetime] = Field(None, description="Creation time (UTC)")

    @field_validator("skills", "goals", "availability", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return [] if v is None else v

    @field_validator("created_at")
    @classmethod
    def _utc(cls, v):
        return as_utc(v)


class UserCreate(ApiModel):
    """Registration data, before an id is assigned."""
    name: str
    email: EmailStr
    password: str
    role: Role
    avatar: Optional[str] = None
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    experience: Optional[str] = None
    goals: List[str] = Field(default_factory=list)
    availability: List[str] = Field(default_factory=list)


class Session(ApiModel):
    """
    Mentoring sessions
    Collection name: "sessions"
    """
    id: str = Field(..., description="Unique session id")
    mentor_id: str = Field(..., description="User id of the mentor")
    mentee_id: str = Field(..., description="User id of the mentee")
    title: str = Field(..., description="Session title")
    description: str = Field("", description="What the session is about")
    date_time: datetime = Field(..., description="Scheduled start (UTC)")
    duration: int = Field(60, gt=0, description="Length in minutes")
    status: SessionStatus = Field("scheduled", description="scheduled, completed or cancelled")
    rating: Optional[int] = Field(None, ge=1, le=5, description="Post-session rating")
    feedback: Optional[str] = Field(None, description="Post-session feedback")
    created_at: Optional[datetime] = Field(None, description="Creation time (UTC)")

    @field_validator("date_time", "created_at")
    @classmethod
    def _utc(cls, v):
        return as_utc(v)


class SessionCreate(ApiModel):
    """A booking request, before an id is assigned."""
    mentor_id: str
    mentee_id: str
    title: str
    description: str = ""
    date_time: datetime
    duration: int = Field(60, gt=0)
    status: SessionStatus = "scheduled"

    @field_validator("date_time")
    @classmethod
    def _utc(cls, v):
        return as_utc(v)


class Message(ApiModel):
    """
    Direct messages
    Collection name: "messages"
    """
    id: str = Field(..., description="Unique message id")
    sender_id: str = Field(..., description="Author user id")
    receiver_id: str = Field(..., description="Recipient user id")
    content: str = Field(..., description="Message text")
    timestamp: datetime = Field(..., description="Send time (UTC)")
    read: bool = Field(False, description="Whether the recipient has read it")

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, v):
        return as_utc(v)


class MessageCreate(ApiModel):
    sender_id: str
    receiver_id: str
    content: str
    timestamp: datetime = Field(default_factory=now_utc)
    read: bool = False

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, v):
        return as_utc(v)


class Conversation(ApiModel):
    """
    Messages exchanged with one counterpart. Derived, never persisted.
    """
    participant_id: str = Field(..., description="The other user's id")
    last_message: Message = Field(..., description="Most recent message")
    unread_count: int = Field(0, description="Unread messages addressed to the current user")
    messages: List[Message] = Field(default_factory=list, description="Thread, oldest first")


class DashboardStats(ApiModel):
    upcoming_sessions: int
    unread_messages: int
    total_sessions: int
    average_rating: Optional[float] = None
