"""
Backing API client.

Thin async wrapper over the REST collections (users, sessions, messages).
Every call returns a tagged result instead of raising:

    Success(data)                 request confirmed by the expected status
    Failure(reason, status_code)  anything else, transport errors included
"""
import os
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from schemas import Message, Session, User

API_URL = os.getenv("MENTORSHIP_API_URL", "http://localhost:3001")
API_TIMEOUT = float(os.getenv("MENTORSHIP_API_TIMEOUT", "10"))

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T


@dataclass(frozen=True)
class Failure:
    reason: str
    status_code: Optional[int] = None


ApiResult = Union[Success[T], Failure]


class ApiService:
    def __init__(
        self,
        base_url: str = API_URL,
        timeout: float = API_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # Collections

    async def fetch_users(self) -> ApiResult[List[User]]:
        return await self._request("GET", "/users", 200, List[User])

    async def fetch_sessions(self) -> ApiResult[List[Session]]:
        return await self._request("GET", "/sessions", 200, List[Session])

    async def fetch_messages(self) -> ApiResult[List[Message]]:
        return await self._request("GET", "/messages", 200, List[Message])

    # Mutations

    async def create_user(self, user: User) -> ApiResult[User]:
        return await self._request("POST", "/users", 201, User, payload=user.to_api())

    async def update_user(self, user_id: str, fields: Dict[str, Any]) -> ApiResult[Dict[str, Any]]:
        """PATCH partial fields; the confirmed fields come back as a raw camelCase dict."""
        return await self._request("PATCH", f"/users/{user_id}", 200, Dict[str, Any], payload=fields)

    async def create_session(self, session: Session) -> ApiResult[Session]:
        return await self._request("POST", "/sessions", 201, Session, payload=session.to_api())

    async def send_message(self, message: Message) -> ApiResult[Message]:
        return await self._request("POST", "/messages", 201, Message, payload=message.to_api())

    async def _request(
        self,
        method: str,
        path: str,
        expected_status: int,
        model: Union[Type[BaseModel], Any],
        payload: Optional[Dict[str, Any]] = None,
    ) -> ApiResult:
        try:
            response = await self._client.request(method, path, json=payload)
        except httpx.TimeoutException:
            return Failure(f"{method} {path} timed out")
        except httpx.HTTPError as e:
            return Failure(f"{method} {path} failed: {e}")

        if response.status_code != expected_status:
            return Failure(f"{method} {path} returned HTTP {response.status_code}", response.status_code)

        try:
            data = TypeAdapter(model).validate_json(response.content)
        except ValidationError as e:
            return Failure(f"{method} {path} returned an invalid body: {e.error_count()} error(s)", response.status_code)
        return Success(data)
