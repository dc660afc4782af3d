"""
Read-only records for the content store snapshot.

The store is written by the authoring surface with camelCase keys; records
here are built from those mappings and never written back.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

STATUS_PUBLISHED = 'published'
STATUS_DRAFT = 'draft'

logger = logging.getLogger('Chronicle.models')


def _text(value):
    if value is None:
        return ''
    return str(value)


def _optional_id(value):
    if value is None or value == '':
        return None
    return str(value)


def normalize_tags(raw):
    """Return tags as a tuple with blanks and duplicates removed, order kept."""
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = raw.split(',')
    elif not isinstance(raw, (list, tuple)):
        logger.warning(f"Ignoring tags of unexpected type {type(raw).__name__}")
        return ()
    tags = []
    seen = set()
    for item in raw:
        tag = _text(item).strip()
        if tag and tag not in seen:
            seen.add(tag)
            tags.append(tag)
    return tuple(tags)


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    slug: str

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=_text(data.get('id')),
            name=_text(data.get('name')),
            slug=_text(data.get('slug')),
        )

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'slug': self.slug}


@dataclass(frozen=True)
class Post:
    id: str
    title: str
    slug: str
    content: str = ''
    excerpt: str = ''
    featured_image: str = ''
    youtube_url: str = ''
    status: str = STATUS_DRAFT
    category_id: Optional[str] = None
    tags: Tuple[str, ...] = ()
    created_at: str = ''
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        """Build a Post from a store record, tolerating missing optional fields."""
        return cls(
            id=_text(data.get('id')),
            title=_text(data.get('title')),
            slug=_text(data.get('slug')),
            content=_text(data.get('content')),
            excerpt=_text(data.get('excerpt')),
            featured_image=_text(data.get('featuredImage')),
            youtube_url=_text(data.get('youtubeUrl')),
            status=_text(data.get('status')) or STATUS_DRAFT,
            category_id=_optional_id(data.get('categoryId')),
            tags=normalize_tags(data.get('tags')),
            created_at=_text(data.get('createdAt')),
            updated_at=_text(data.get('updatedAt')) or None,
        )

    @property
    def is_published(self):
        return self.status == STATUS_PUBLISHED

    @property
    def was_updated(self):
        return bool(self.updated_at) and self.updated_at != self.created_at

    def to_index_entry(self):
        """The record embedded in the listing page for client-side filtering."""
        return {
            'id': self.id,
            'title': self.title,
            'slug': self.slug,
            'excerpt': self.excerpt,
            'featuredImage': self.featured_image,
            'categoryId': self.category_id,
            'tags': list(self.tags),
            'createdAt': self.created_at,
        }


@dataclass(frozen=True)
class ContentSnapshot:
    """Immutable copy of the content store taken once at the start of a build."""

    posts: Tuple[Post, ...] = ()
    categories: Tuple[Category, ...] = ()

    def category_for(self, post):
        """Resolve a post's category, or None when absent or dangling."""
        if post.category_id is None:
            return None
        for category in self.categories:
            if category.id == post.category_id:
                return category
        return None
