"""
Resource library: a fixed catalog of guides, templates, videos and articles.
"""
from typing import List, Literal, Optional

from pydantic import Field

from schemas import ApiModel

ResourceType = Literal["guide", "template", "video", "article"]
RESOURCE_TYPES = ("guide", "template", "video", "article")


class Resource(ApiModel):
    id: str
    title: str
    type: ResourceType
    category: str
    description: str
    author: str
    rating: float = Field(..., ge=0, le=5)
    read_time: int = Field(..., description="Minutes to read or watch")
    tags: List[str] = Field(default_factory=list)
    download_url: Optional[str] = None
    view_url: Optional[str] = None
    featured: bool = False


CATALOG: List[Resource] = [
    Resource(
        id="1",
        title="The Complete Guide to Effective Mentoring",
        type="guide",
        category="Mentoring Best Practices",
        description="A comprehensive guide covering everything from setting expectations to measuring success in mentoring relationships.",
        author="Dr. Sarah Mitchell",
        rating=4.8,
        read_time=15,
        tags=["mentoring", "best-practices", "relationships"],
        download_url="#",
        featured=True,
    ),
    Resource(
        id="2",
        title="Goal Setting Template for Mentees",
        type="template",
        category="Templates",
        description="A structured template to help mentees define SMART goals and track progress throughout their mentoring journey.",
        author="MentorConnect Team",
        rating=4.6,
        read_time=5,
        tags=["goals", "template", "planning"],
        download_url="#",
    ),
    Resource(
        id="3",
        title="Building Effective Communication Skills",
        type="video",
        category="Professional Development",
        description="Learn key communication strategies that will help you in both professional and mentoring relationships.",
        author="Prof. Michael Chen",
        rating=4.9,
        read_time=22,
        tags=["communication", "skills", "professional-development"],
        view_url="#",
        featured=True,
    ),
    Resource(
        id="4",
        title="First Session Checklist",
        type="template",
        category="Templates",
        description="Essential items to cover in your first mentoring session to set a strong foundation.",
        author="Lisa Rodriguez",
        rating=4.7,
        read_time=3,
        tags=["first-session", "checklist", "preparation"],
        download_url="#",
    ),
    Resource(
        id="5",
        title="Overcoming Career Transitions",
        type="article",
        category="Career Development",
        description="Strategies and insights for successfully navigating career changes with the help of mentorship.",
        author="James Thompson",
        rating=4.5,
        read_time=8,
        tags=["career-change", "transition", "strategy"],
        view_url="#",
    ),
    Resource(
        id="6",
        title="Building Your Personal Brand",
        type="video",
        category="Professional Development",
        description="Master the art of personal branding to advance your career and attract the right opportunities.",
        author="Emma Davis",
        rating=4.8,
        read_time=18,
        tags=["personal-brand", "marketing", "career"],
        view_url="#",
    ),
]


def resource_categories(catalog: Optional[List[Resource]] = None) -> List[str]:
    seen: List[str] = []
    for r in catalog if catalog is not None else CATALOG:
        if r.category not in seen:
            seen.append(r.category)
    return seen


def featured_resources(catalog: Optional[List[Resource]] = None) -> List[Resource]:
    return [r for r in (catalog if catalog is not None else CATALOG) if r.featured]


def search_resources(
    query: Optional[str] = None,
    category: Optional[str] = None,
    resource_type: Optional[str] = None,
    catalog: Optional[List[Resource]] = None,
) -> List[Resource]:
    needle = query.lower() if query else None
    result = []
    for r in catalog if catalog is not None else CATALOG:
        if needle and not (
            needle in r.title.lower()
            or needle in r.description.lower()
            or any(needle in t.lower() for t in r.tags)
        ):
            continue
        if category and r.category != category:
            continue
        if resource_type and r.type != resource_type:
            continue
        result.append(r)
    return result
