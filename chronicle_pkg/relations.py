"""
Derive the published-ordered sequence shared by every page in a build.

The sequence is computed once and passed to each generator, so all pages
agree on the same order and the same previous/next links.
"""

from datetime import datetime, timezone
from typing import NamedTuple, Optional

from .models import Post
from .utils import parse_timestamp

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class PostNavigation(NamedTuple):
    older: Optional[Post]
    newer: Optional[Post]


def creation_key(post):
    """Sort key for a post; unparseable timestamps sort as the oldest."""
    return parse_timestamp(post.created_at) or _OLDEST


class PublishedSequence:
    """Published posts, newest first, with stable ties."""

    def __init__(self, posts):
        self._posts = tuple(posts)

    @property
    def posts(self):
        return self._posts

    def __len__(self):
        return len(self._posts)

    def __iter__(self):
        return iter(self._posts)

    def __getitem__(self, position):
        return self._posts[position]

    @property
    def latest(self):
        return self._posts[0] if self._posts else None

    def recent(self, start, count):
        return self._posts[start:start + count]

    def neighbors(self, position):
        """Older post at position+1 and newer post at position-1, where they exist."""
        if position < 0 or position >= len(self._posts):
            raise IndexError(f"No published post at position {position}")
        older = self._posts[position + 1] if position + 1 < len(self._posts) else None
        newer = self._posts[position - 1] if position > 0 else None
        return PostNavigation(older=older, newer=newer)

    def slugs(self):
        return [post.slug for post in self._posts]


def derive_published(posts):
    """Filter to published posts and sort by creation time, newest first."""
    published = [post for post in posts if post.is_published]
    # sorted() is stable with reverse=True, so equal timestamps keep input order
    return PublishedSequence(sorted(published, key=creation_key, reverse=True))
