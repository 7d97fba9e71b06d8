"""
Shared fixtures: an in-memory stand-in for the backing API and small
record builders.
"""
from datetime import datetime, timedelta, timezone

import pytest

from api_service import Failure, Success
from schemas import Message, Session, User

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


def make_user(user_id: str, role: str = "mentee", **fields) -> User:
    fields.setdefault("name", f"User {user_id}")
    fields.setdefault("email", f"{user_id}@mentorconnect.io")
    return User(id=user_id, role=role, **fields)


def make_session(session_id: str, mentor_id: str, mentee_id: str, when: datetime, status: str = "scheduled") -> Session:
    return Session(
        id=session_id,
        mentor_id=mentor_id,
        mentee_id=mentee_id,
        title=f"Session {session_id}",
        date_time=when,
        duration=60,
        status=status,
    )


def make_message(message_id: str, sender_id: str, receiver_id: str, when: datetime, read: bool = False) -> Message:
    return Message(
        id=message_id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=f"message {message_id}",
        timestamp=when,
        read=read,
    )


class FakeApi:
    """
    Echoes every mutation back as confirmed, unless the operation is listed
    in `failing` (explicit rejection) or `raising` (exception).
    """

    def __init__(self, users=(), sessions=(), messages=()):
        self.users = list(users)
        self.sessions = list(sessions)
        self.messages = list(messages)
        self.failing = set()
        self.raising = set()
        self.calls = []
        self.closed = False

    async def _respond(self, name, data):
        self.calls.append(name)
        if name in self.raising:
            raise RuntimeError(f"{name} exploded")
        if name in self.failing:
            return Failure(f"{name} rejected", 500)
        return Success(data)

    async def fetch_users(self):
        return await self._respond("fetch_users", list(self.users))

    async def fetch_sessions(self):
        return await self._respond("fetch_sessions", list(self.sessions))

    async def fetch_messages(self):
        return await self._respond("fetch_messages", list(self.messages))

    async def create_user(self, user):
        return await self._respond("create_user", user)

    async def update_user(self, user_id, fields):
        self.last_update = (user_id, dict(fields))
        return await self._respond("update_user", dict(fields))

    async def create_session(self, session):
        return await self._respond("create_session", session)

    async def send_message(self, message):
        return await self._respond("send_message", message)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def ana():
    return make_user(
        "u1", role="mentor", name="Ana Silva", email="ana@mentorconnect.io", password="right",
        bio="Backend engineer", skills=["Python", "Leadership"], experience="Senior",
    )


@pytest.fixture
def bo():
    return make_user(
        "u2", role="mentor", name="Bo Chen", bio="Product designer",
        skills=["Python", "Design"], experience="Mid",
    )


@pytest.fixture
def cy():
    return make_user("u3", role="mentee", name="Cy Park", email="cy@mentorconnect.io", password="secret", goals=["Ship a SaaS"])


@pytest.fixture
def dee():
    return make_user("u4", role="admin", name="Dee Admin", email="dee@mentorconnect.io", password="admin")


@pytest.fixture
def fake_api(ana, bo, cy, dee):
    return FakeApi(
        users=[ana, bo, cy, dee],
        sessions=[
            make_session("s1", "u1", "u3", datetime.now(timezone.utc) + timedelta(days=3)),
            make_session("s2", "u2", "u3", at(-60 * 24), status="completed"),
        ],
        messages=[
            make_message("m1", "u1", "u3", at(0), read=True),
            make_message("m2", "u3", "u1", at(5)),
            make_message("m3", "u2", "u3", at(10)),
        ],
    )
