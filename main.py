import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import EmailStr

import views
from api_service import ApiService
from resources import RESOURCE_TYPES, featured_resources, resource_categories, search_resources
from schemas import ApiModel, MessageCreate, SessionCreate, User, UserCreate
from store import MentorshipStore

router = APIRouter()

SELF_SERVICE_ROLES = ("mentor", "mentee")


# Helpers

def user_to_public(u: User) -> dict:
    return u.model_dump(mode="json", by_alias=True, exclude={"password"})


def get_store(request: Request) -> MentorshipStore:
    return request.app.state.store


def get_current_user(store: MentorshipStore = Depends(get_store)) -> User:
    if store.current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please log in first",
        )
    return store.current_user


def failed(action: str) -> HTTPException:
    return HTTPException(status.HTTP_502_BAD_GATEWAY, f"Failed to {action}. Please try again.")


# Models for requests/responses
class LoginBody(ApiModel):
    email: EmailStr
    password: str


class ProfileForm(ApiModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[str] = None
    experience: Optional[str] = None
    goals: Optional[str] = None
    availability: Optional[str] = None


class BookSessionBody(ApiModel):
    mentor_id: str = ""
    title: str = ""
    description: str = ""
    date_time: Optional[datetime] = None
    duration: int = 60


class SendMessageBody(ApiModel):
    receiver_id: str
    content: str


# Auth Endpoints
@router.post("/api/auth/login")
async def login(body: LoginBody, store: MentorshipStore = Depends(get_store)):
    if not await store.authenticate(body.email, body.password):
        raise HTTPException(status_code=400, detail="Incorrect email or password")
    return user_to_public(store.current_user)


@router.post("/api/auth/register", status_code=201)
async def register(body: UserCreate, store: MentorshipStore = Depends(get_store)):
    if body.role not in SELF_SERVICE_ROLES:
        raise HTTPException(400, "You can only sign up as a mentor or mentee")
    if not await store.register(body):
        raise failed("create account")
    return user_to_public(store.current_user)


@router.post("/api/auth/logout")
def logout(store: MentorshipStore = Depends(get_store)):
    store.logout()
    return {"page": store.resolve_page()}


# Navigation
@router.get("/api/page")
def current_page(store: MentorshipStore = Depends(get_store)):
    return {"page": store.resolve_page(), "requested": store.current_page}


@router.put("/api/page/{page}")
def navigate(page: str, store: MentorshipStore = Depends(get_store)):
    return {"page": store.navigate(page)}


# Dashboard
@router.get("/api/dashboard")
def dashboard(current: User = Depends(get_current_user), store: MentorshipStore = Depends(get_store)):
    mine = views.sessions_for_user(store.sessions, current.id)
    upcoming = sorted(views.upcoming_sessions(mine), key=lambda s: s.date_time)
    return {
        "user": user_to_public(current),
        "stats": views.dashboard_stats(current, store.sessions, store.messages),
        "upcomingSessions": [
            {"session": s, "with": views.display_name(store.users, views.session_counterpart_id(s, current.id))}
            for s in upcoming[:3]
        ],
    }


# Mentor directory
@router.get("/api/mentors")
def mentor_directory(
    q: Optional[str] = None,
    skill: Optional[str] = None,
    experience: Optional[str] = None,
    current: User = Depends(get_current_user),
    store: MentorshipStore = Depends(get_store),
):
    found = views.mentor_search(store.users, q, skill, experience)
    return {
        "mentors": [user_to_public(u) for u in found],
        "count": len(found),
        "skills": views.all_skills(views.mentors(store.users)),
    }


# Sessions Endpoints
@router.get("/api/sessions")
def my_sessions(
    tab: str = "upcoming",
    current: User = Depends(get_current_user),
    store: MentorshipStore = Depends(get_store),
):
    mine = views.sessions_for_user(store.sessions, current.id)
    return {
        "tab": tab,
        "counts": views.session_tab_counts(mine),
        "sessions": [
            {"session": s, "with": views.display_name(store.users, views.session_counterpart_id(s, current.id))}
            for s in views.sessions_for_tab(mine, tab)
        ],
        "availableMentors": [user_to_public(u) for u in views.available_mentors(store.users, current.id)],
    }


@router.post("/api/sessions", status_code=201)
async def book_session(
    body: BookSessionBody,
    current: User = Depends(get_current_user),
    store: MentorshipStore = Depends(get_store),
):
    if not body.mentor_id or not body.title or body.date_time is None:
        raise HTTPException(400, "Please fill in all required fields")
    if body.mentor_id not in {u.id for u in views.available_mentors(store.users, current.id)}:
        raise HTTPException(400, "Unknown mentor")
    session = await store.create_session(
        SessionCreate(
            mentor_id=body.mentor_id,
            mentee_id=current.id,
            title=body.title,
            description=body.description,
            date_time=body.date_time,
            duration=body.duration,
        )
    )
    if session is None:
        raise failed("create session")
    return session


# Messaging Endpoints
@router.get("/api/conversations")
def conversations(
    q: Optional[str] = None,
    current: User = Depends(get_current_user),
    store: MentorshipStore = Depends(get_store),
):
    grouped = views.group_conversations(store.messages, current.id)
    return [
        {
            "participantId": c.participant_id,
            "participantName": views.display_name(store.users, c.participant_id),
            "lastMessage": c.last_message,
            "unreadCount": c.unread_count,
        }
        for c in views.search_conversations(grouped, store.users, q)
    ]


@router.get("/api/conversations/{participant_id}")
def conversation(
    participant_id: str,
    current: User = Depends(get_current_user),
    store: MentorshipStore = Depends(get_store),
):
    return {
        "participantId": participant_id,
        "participantName": views.display_name(store.users, participant_id),
        "messages": views.conversation_thread(store.messages, current.id, participant_id),
    }


@router.post("/api/messages", status_code=201)
async def send_message(
    body: SendMessageBody,
    current: User = Depends(get_current_user),
    store: MentorshipStore = Depends(get_store),
):
    content = body.content.strip()
    if not content:
        raise HTTPException(400, "Message is empty")
    if body.receiver_id == current.id or views.find_user(store.users, body.receiver_id) is None:
        raise HTTPException(400, "Unknown recipient")
    message = await store.send_message(
        MessageCreate(sender_id=current.id, receiver_id=body.receiver_id, content=content)
    )
    if message is None:
        raise failed("send message")
    return message


# Profile Endpoints
@router.get("/api/profile")
def profile(current: User = Depends(get_current_user)):
    return user_to_public(current)


@router.put("/api/profile")
async def update_profile(
    form: ProfileForm,
    current: User = Depends(get_current_user),
    store: MentorshipStore = Depends(get_store),
):
    fields = views.profile_update(current, form.model_dump())
    if not await store.update_user(current.id, fields):
        raise failed("update profile")
    return user_to_public(store.current_user)


# Resources
@router.get("/api/resources")
def resources(
    q: Optional[str] = None,
    category: Optional[str] = None,
    type: Optional[str] = None,
    current: User = Depends(get_current_user),
):
    return {
        "resources": search_resources(q, category, type),
        "featured": featured_resources(),
        "categories": resource_categories(),
        "types": list(RESOURCE_TYPES),
    }


# Admin
@router.get("/api/admin")
def admin_overview(current: User = Depends(get_current_user), store: MentorshipStore = Depends(get_store)):
    if current.role != "admin":
        raise HTTPException(403, "Admins only")
    return {
        "users": [user_to_public(u) for u in store.users],
        "sessions": store.sessions,
    }


@router.get("/")
def read_root():
    return {"message": "MentorConnect API is running"}


@router.get("/test")
def test_backing_api(store: MentorshipStore = Depends(get_store)):
    return {
        "backend": "✅ Running",
        "api_url": "✅ Set" if os.getenv("MENTORSHIP_API_URL") else "❌ Not Set",
        "loading": store.loading,
        "collections": {
            "users": len(store.users),
            "sessions": len(store.sessions),
            "messages": len(store.messages),
        },
    }


# App setup
def create_app(store: Optional[MentorshipStore] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await app.state.store.initialize()
        yield
        await app.state.store.api.aclose()

    app = FastAPI(title="MentorConnect API", lifespan=lifespan)
    app.state.store = store or MentorshipStore(ApiService())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
