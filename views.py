"""
View derivations over the three collections.

Pure functions: they read users, sessions and messages and return the
projections each page shows. Nothing is cached, so every call reflects the
collections as they are now. Returned records are the same objects the store
holds, not copies.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from schemas import Conversation, DashboardStats, Message, Session, User, now_utc

UNKNOWN_USER = "Unknown User"
SESSION_TABS = ("upcoming", "completed", "all")


def _matches(text: Optional[str], needle: str) -> bool:
    return bool(text) and needle in text.lower()


# Users

def find_user(users: Iterable[User], user_id: str) -> Optional[User]:
    return next((u for u in users if u.id == user_id), None)


def display_name(users: Iterable[User], user_id: str) -> str:
    user = find_user(users, user_id)
    return user.name if user else UNKNOWN_USER


def mentors(users: Iterable[User]) -> List[User]:
    return [u for u in users if u.role == "mentor"]


def mentor_search(
    users: Iterable[User],
    query: Optional[str] = None,
    skill: Optional[str] = None,
    experience: Optional[str] = None,
) -> List[User]:
    """
    Filter the mentor directory.

    query matches name, bio or any skill (case-insensitive substring),
    skill must be one of the mentor's skills exactly, experience must equal
    the mentor's tier. Filters combine with AND and an empty filter matches
    everyone, so with no filters the mentors come back in their original order.
    """
    needle = query.lower() if query else None
    result = []
    for user in mentors(users):
        if needle and not (
            _matches(user.name, needle)
            or _matches(user.bio, needle)
            or any(_matches(s, needle) for s in user.skills)
        ):
            continue
        if skill and skill not in user.skills:
            continue
        if experience and user.experience != experience:
            continue
        result.append(user)
    return result


def all_skills(users: Iterable[User]) -> List[str]:
    return sorted({s for u in users for s in u.skills})


def available_mentors(users: Iterable[User], current_user_id: str) -> List[User]:
    """Mentors a user can book, never themselves."""
    return [u for u in mentors(users) if u.id != current_user_id]


# Sessions

def sessions_for_user(sessions: Iterable[Session], user_id: str) -> List[Session]:
    return [s for s in sessions if s.mentor_id == user_id or s.mentee_id == user_id]


def upcoming_sessions(sessions: Iterable[Session], now: Optional[datetime] = None) -> List[Session]:
    # Input order is kept; sort by date_time if you need the next one first
    now = now or now_utc()
    return [s for s in sessions if s.status == "scheduled" and s.date_time > now]


def sessions_for_tab(sessions: Iterable[Session], tab: str, now: Optional[datetime] = None) -> List[Session]:
    if tab == "upcoming":
        return upcoming_sessions(sessions, now)
    if tab == "completed":
        return [s for s in sessions if s.status == "completed"]
    return list(sessions)


def session_tab_counts(sessions: Iterable[Session], now: Optional[datetime] = None) -> Dict[str, int]:
    sessions = list(sessions)
    return {tab: len(sessions_for_tab(sessions, tab, now)) for tab in SESSION_TABS}


def session_counterpart_id(session: Session, user_id: str) -> str:
    return session.mentee_id if session.mentor_id == user_id else session.mentor_id


# Messages

def messages_for_user(messages: Iterable[Message], user_id: str) -> List[Message]:
    return [m for m in messages if m.sender_id == user_id or m.receiver_id == user_id]


def unread_count(messages: Iterable[Message], user_id: str) -> int:
    return sum(1 for m in messages if m.receiver_id == user_id and not m.read)


def group_conversations(messages: Iterable[Message], current_user_id: str) -> List[Conversation]:
    """
    Group the current user's messages by counterpart.

    Each conversation carries its newest message and the number of unread
    messages the current user received from that counterpart. Conversations
    are ordered newest first; equal timestamps keep first-appearance order.
    A counterpart with no matching user record still gets a conversation.
    """
    groups: Dict[str, List[Message]] = {}
    for message in messages:
        if message.sender_id == current_user_id:
            other_id = message.receiver_id
        elif message.receiver_id == current_user_id:
            other_id = message.sender_id
        else:
            continue
        groups.setdefault(other_id, []).append(message)

    conversations = [
        Conversation(
            participant_id=other_id,
            last_message=max(msgs, key=lambda m: m.timestamp),
            unread_count=unread_count(msgs, current_user_id),
            messages=sorted(msgs, key=lambda m: m.timestamp),
        )
        for other_id, msgs in groups.items()
    ]
    conversations.sort(key=lambda c: c.last_message.timestamp, reverse=True)
    return conversations


def conversation_thread(messages: Iterable[Message], current_user_id: str, participant_id: str) -> List[Message]:
    thread = [
        m for m in messages
        if (m.sender_id == current_user_id and m.receiver_id == participant_id)
        or (m.sender_id == participant_id and m.receiver_id == current_user_id)
    ]
    return sorted(thread, key=lambda m: m.timestamp)


def search_conversations(
    conversations: Iterable[Conversation],
    users: Iterable[User],
    query: Optional[str] = None,
) -> List[Conversation]:
    conversations = list(conversations)
    if not query:
        return conversations
    users = list(users)
    needle = query.lower()
    result = []
    for conv in conversations:
        participant = find_user(users, conv.participant_id)
        if (participant and _matches(participant.name, needle)) or _matches(conv.last_message.content, needle):
            result.append(conv)
    return result


# Dashboard and profile

def dashboard_stats(
    user: User,
    sessions: Iterable[Session],
    messages: Iterable[Message],
    now: Optional[datetime] = None,
) -> DashboardStats:
    mine = sessions_for_user(sessions, user.id)
    completed = [s for s in mine if s.status == "completed"]
    return DashboardStats(
        upcoming_sessions=len(upcoming_sessions(mine, now)),
        unread_messages=unread_count(messages, user.id),
        total_sessions=user.total_sessions or len(completed),
        average_rating=user.rating or None,
    )


def split_list(text: Optional[str]) -> List[str]:
    """'React, , Go ' -> ['React', 'Go']"""
    if not text:
        return []
    return [part.strip() for part in text.split(",") if part.strip()]


def profile_update(user: User, form: Dict[str, Optional[str]]) -> Dict[str, object]:
    """
    Turn profile form text into the partial update for the API.

    Mentors edit skills and experience, mentees edit goals. List fields are
    entered comma separated.
    """
    update: Dict[str, object] = {
        "name": form.get("name") or user.name,
        "bio": form.get("bio") or "",
    }
    if user.role == "mentor":
        update["skills"] = split_list(form.get("skills"))
        update["experience"] = form.get("experience") or ""
    else:
        update["goals"] = split_list(form.get("goals"))
    update["availability"] = split_list(form.get("availability"))
    return update
