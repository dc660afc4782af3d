"""
Formatting helpers shared by every page generator.

All plain-text escaping goes through escape_html so that every page applies
the same rule. Rich post bodies are inserted verbatim and never pass here.
"""

import json
import re
from datetime import datetime, timezone

YOUTUBE_ID_RE = re.compile(r'(?:v=|youtu\.be/)([A-Za-z0-9_-]{11})')

_ESCAPES = (
    ('&', '&amp;'),
    ('<', '&lt;'),
    ('>', '&gt;'),
    ('"', '&quot;'),
)


def escape_html(value):
    """Escape a plain-text field for use in element text or attributes."""
    if value is None:
        return ''
    text = str(value)
    for char, entity in _ESCAPES:
        text = text.replace(char, entity)
    return text


def parse_timestamp(value):
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts a trailing 'Z', an explicit offset, fractional seconds, or a bare
    date. Naive values are taken as UTC. Returns None when the value cannot
    be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # Offsets that push the instant outside datetime's range
        return None


def format_date(value):
    """Long display form, e.g. 'March 3, 2024'. Empty string when invalid."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return ''
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def format_date_short(value):
    """Short card form, e.g. 'Mar 3, 2024'. Empty string when invalid."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return ''
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def youtube_id(url):
    """Extract the 11-character video id from a YouTube URL, or None."""
    if not url or not isinstance(url, str):
        return None
    match = YOUTUBE_ID_RE.search(url)
    return match.group(1) if match else None


def json_for_html(data):
    """Serialize data as JSON that can sit inside a <script> element."""
    text = json.dumps(data, ensure_ascii=False, separators=(',', ':'))
    return (
        text.replace('<', '\\u003c')
        .replace('>', '\\u003e')
        .replace('&', '\\u0026')
    )


def join_url(base, path):
    base = base.rstrip('/')
    path = path.lstrip('/')
    if not path:
        return base + '/'
    return f"{base}/{path}"
