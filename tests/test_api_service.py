"""
Backing API client tests, with HTTP served by httpx.MockTransport.
"""

import asyncio
import json

import httpx

from api_service import ApiService, Failure, Success
from conftest import at, make_message, make_session, make_user


def call(handler, method_name, *args):
    async def go():
        async with ApiService("http://api.test", transport=httpx.MockTransport(handler)) as api:
            return await getattr(api, method_name)(*args)
    return asyncio.run(go())


class TestFetch:

    def test_users_parsed_from_camel_case(self):
        def handler(request):
            assert request.method == "GET"
            assert request.url.path == "/users"
            return httpx.Response(200, json=[{
                "id": "u1", "name": "Ana", "email": "ana@mentorconnect.io", "role": "mentor",
                "totalSessions": 4, "createdAt": "2026-01-01T00:00:00Z", "skills": None,
            }])

        result = call(handler, "fetch_users")

        assert isinstance(result, Success)
        user = result.data[0]
        assert user.total_sessions == 4
        assert user.skills == []
        assert user.created_at.tzinfo is not None

    def test_naive_timestamps_become_utc(self):
        def handler(request):
            return httpx.Response(200, json=[{
                "id": "s1", "mentorId": "u1", "menteeId": "u2", "title": "Intro",
                "dateTime": "2024-03-01T12:00:00", "duration": 30, "status": "scheduled",
            }])

        result = call(handler, "fetch_sessions")

        assert result.data[0].date_time == at(0)

    def test_server_error_is_failure(self):
        result = call(lambda request: httpx.Response(500), "fetch_messages")
        assert isinstance(result, Failure)
        assert result.status_code == 500

    def test_transport_error_is_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = call(handler, "fetch_users")

        assert isinstance(result, Failure)
        assert result.status_code is None
        assert "connection refused" in result.reason

    def test_any_stored_email_is_accepted(self):
        def handler(request):
            return httpx.Response(200, json=[
                {"id": "u1", "name": "Ana", "email": "ana@mentorconnect.io", "role": "mentor"},
                {"id": "u2", "name": "Demo", "email": "demo@mentorconnect.local", "role": "mentee"},
            ])

        result = call(handler, "fetch_users")

        assert isinstance(result, Success)
        assert [u.email for u in result.data] == ["ana@mentorconnect.io", "demo@mentorconnect.local"]

    def test_invalid_body_is_failure(self):
        result = call(lambda request: httpx.Response(200, json=[{"id": "m1"}]), "fetch_messages")
        assert isinstance(result, Failure)
        assert result.status_code == 200


class TestMutations:

    def test_create_session_sends_camel_case(self):
        session = make_session("s1", "u1", "u2", at(0))
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json=seen["body"])

        result = call(handler, "create_session", session)

        assert isinstance(result, Success)
        assert result.data == session
        assert seen["method"] == "POST"
        assert seen["body"]["mentorId"] == "u1"
        assert seen["body"]["dateTime"].startswith("2024-03-01T12:00:00")
        assert "rating" not in seen["body"]

    def test_create_requires_created_status(self):
        message = make_message("m1", "u1", "u2", at(0))
        result = call(lambda request: httpx.Response(200, json=message.to_api()), "send_message", message)
        assert isinstance(result, Failure)
        assert result.status_code == 200

    def test_create_user(self):
        user = make_user("u9", role="mentee")
        result = call(lambda request: httpx.Response(201, json=user.to_api()), "create_user", user)
        assert result.data.id == "u9"

    def test_update_user_patches(self):
        def handler(request):
            assert request.method == "PATCH"
            assert request.url.path == "/users/u1"
            return httpx.Response(200, json=json.loads(request.content))

        result = call(handler, "update_user", "u1", {"bio": "New bio"})

        assert result == Success({"bio": "New bio"})
