"""
Application state for the MentorConnect client.

MentorshipStore owns users, sessions and messages plus the signed-in user
and the current page. Every change goes through the backing API first; local
state only changes once the API has confirmed it. Failures are logged and
reported to the caller as False / None, never raised.
"""
import asyncio
import hmac
import logging
import uuid
from typing import Any, Awaitable, Dict, List, Optional

from passlib.context import CryptContext
from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from api_service import ApiResult, ApiService, Failure
from schemas import Message, MessageCreate, Session, SessionCreate, User, UserCreate, now_utc

logger = logging.getLogger(__name__)

PUBLIC_PAGES = ("landing", "login", "register")
PAGES = PUBLIC_PAGES + ("dashboard", "mentors", "sessions", "messages", "profile", "resources", "admin")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# Helpers

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, stored: Optional[str]) -> bool:
    if not stored:
        return False
    if pwd_context.identify(stored) is None:
        # Legacy records keep the secret in plaintext
        return hmac.compare_digest(plain_password.encode(), stored.encode())
    return pwd_context.verify(plain_password, stored)


def new_id() -> str:
    return uuid.uuid4().hex


def merge_user(user: User, fields: Dict[str, Any]) -> User:
    return User.model_validate({**user.model_dump(by_alias=True), **fields})


class MentorshipStore:
    def __init__(self, api: ApiService):
        self.api = api
        self.reset()

    def reset(self) -> None:
        self.users: List[User] = []
        self.sessions: List[Session] = []
        self.messages: List[Message] = []
        self.current_user: Optional[User] = None
        self.current_page: str = "landing"
        self.loading: bool = True

    def _clear_collections(self) -> None:
        self.users, self.sessions, self.messages = [], [], []

    async def _call(self, action: str, request: Awaitable[ApiResult]) -> ApiResult:
        try:
            result = await request
        except Exception as e:
            logger.exception("Error %s", action)
            return Failure(str(e))
        if isinstance(result, Failure):
            logger.warning("Error %s: %s", action, result.reason)
        return result

    # Loading

    async def initialize(self) -> None:
        """
        Load all three collections concurrently.

        If any fetch fails, users, sessions and messages are all left empty;
        a partial load is never kept.
        """
        self.loading = True
        try:
            results = await asyncio.gather(
                self._call("loading users", self.api.fetch_users()),
                self._call("loading sessions", self.api.fetch_sessions()),
                self._call("loading messages", self.api.fetch_messages()),
            )
            if any(isinstance(r, Failure) for r in results):
                self._clear_collections()
            else:
                users, sessions, messages = results
                self.users = list(users.data)
                self.sessions = list(sessions.data)
                self.messages = list(messages.data)
        finally:
            self.loading = False
        logger.info(
            "Loaded %d users, %d sessions, %d messages",
            len(self.users), len(self.sessions), len(self.messages),
        )

    # Auth

    async def authenticate(self, email: str, password: str) -> bool:
        user = next(
            (u for u in self.users if u.email == email and verify_password(password, u.password)),
            None,
        )
        if user is None:
            return False
        self.current_user = user
        self.current_page = "dashboard"
        return True

    async def register(self, data: UserCreate) -> bool:
        user = User(
            **data.model_dump(exclude={"password"}),
            id=new_id(),
            password=hash_password(data.password),
            created_at=now_utc(),
            total_sessions=0,
            rating=0,
        )
        result = await self._call("registering user", self.api.create_user(user))
        if isinstance(result, Failure):
            return False
        self.users.append(result.data)
        self.current_user = result.data
        self.current_page = "dashboard"
        return True

    def logout(self) -> None:
        self.current_user = None
        self.current_page = "landing"

    # Mutations

    async def update_user(self, user_id: str, fields: Dict[str, Any]) -> bool:
        payload = {to_camel(k): v for k, v in fields.items()}
        result = await self._call("updating user", self.api.update_user(user_id, payload))
        if isinstance(result, Failure):
            return False
        # Nothing is assigned until every merge has validated
        try:
            users = [merge_user(u, result.data) if u.id == user_id else u for u in self.users]
            current = self.current_user
            if current is not None and current.id == user_id:
                current = next((u for u in users if u.id == user_id), None) or merge_user(current, result.data)
        except ValidationError as e:
            logger.warning("Error updating user: confirmed fields are invalid (%s)", e)
            return False
        self.users = users
        self.current_user = current
        return True

    async def create_session(self, data: SessionCreate) -> Optional[Session]:
        session = Session(**data.model_dump(), id=new_id(), created_at=now_utc())
        result = await self._call("creating session", self.api.create_session(session))
        if isinstance(result, Failure):
            return None
        self.sessions.append(result.data)
        return result.data

    async def send_message(self, data: MessageCreate) -> Optional[Message]:
        message = Message(**data.model_dump(), id=new_id())
        result = await self._call("sending message", self.api.send_message(message))
        if isinstance(result, Failure):
            return None
        self.messages.append(result.data)
        return result.data

    # Navigation

    def navigate(self, page: str) -> str:
        self.current_page = page if page in PAGES else "landing"
        return self.resolve_page()

    def resolve_page(self) -> str:
        """The page to show for current_page, given load and sign-in state."""
        page = self.current_page
        if page in PUBLIC_PAGES:
            return page
        if self.loading:
            return "loading"
        if self.current_user is None:
            return "landing"
        if page == "admin" and self.current_user.role != "admin":
            return "dashboard"
        return page
