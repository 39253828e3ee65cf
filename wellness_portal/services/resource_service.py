"""Self-help resource library: search, creation and usage counters."""
from __future__ import annotations

import logging
from typing import List, Optional

from .. import db
from ..errors import ValidationError
from ..models import Resource, ResourceType, utcnow
from ..util.sanitization import clean_optional, strip_tags

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "type", "category", "url", "author", "tags", "duration")


def search(query: Optional[str] = None, type: Optional[ResourceType] = None,
           category: Optional[str] = None) -> List[Resource]:
    """List resources, optionally narrowed by type and category.

    With a ``query`` the match is case-insensitive over title,
    description, tags and author, and the best rated, most downloaded
    resources come first. Otherwise the newest come first.
    """
    q = Resource.query
    if type is not None:
        q = q.filter(Resource.type == type)
    if category:
        q = q.filter(db.func.lower(Resource.category) == category.strip().lower())
    term = (query or "").strip().lower()
    if term:
        escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        q = q.filter(
            db.or_(
                db.func.lower(Resource.title).like(pattern, escape="\\"),
                db.func.lower(Resource.description).like(pattern, escape="\\"),
                db.func.lower(db.func.coalesce(Resource.tags, "")).like(pattern, escape="\\"),
                db.func.lower(Resource.author).like(pattern, escape="\\"),
            )
        ).order_by(Resource.rating.desc(), Resource.downloads.desc())
    else:
        q = q.order_by(Resource.created_at.desc(), Resource.id.desc())
    return q.all()


def parse_type(value: Optional[str]) -> ResourceType:
    try:
        return ResourceType((value or "").strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in ResourceType)
        raise ValidationError(f"Invalid resource type. Must be one of: {allowed}", {"type": value})


def _apply(resource: Resource, data: dict) -> None:
    for name in EDITABLE_FIELDS:
        if name not in data:
            continue
        value = data[name]
        if name == "tags":
            resource.tag_list = [strip_tags(tag) for tag in value or []]
        elif name == "type":
            resource.type = value
        elif name == "duration":
            resource.duration = clean_optional(value)
        else:
            setattr(resource, name, strip_tags(value))


def create_resource(data: dict) -> Resource:
    resource = Resource()
    _apply(resource, data)
    db.session.add(resource)
    db.session.commit()
    logger.info("Resource created: %r (%s)", resource.title, resource.type.value)
    return resource


def update_resource(resource: Resource, data: dict) -> Resource:
    _apply(resource, data)
    resource.updated_at = utcnow()
    db.session.commit()
    return resource


def record_download(resource: Resource) -> Resource:
    resource.downloads = (resource.downloads or 0) + 1
    db.session.commit()
    return resource


def set_rating(resource: Resource, rating) -> Resource:
    if isinstance(rating, bool) or not isinstance(rating, (int, float)) or not 0 <= rating <= 5:
        raise ValidationError("Rating must be a number between 0 and 5", {"rating": rating})
    resource.rating = float(rating)
    db.session.commit()
    return resource
