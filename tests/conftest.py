"""Test configuration and fixtures for Chronicle tests."""

import json
import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from chronicle_pkg.models import Post, Category, ContentSnapshot
from chronicle_pkg.pages import PageGenerator


def post_record(**overrides):
    """A published post record as the content store holds it."""
    record = {
        'id': 'p1',
        'title': 'Three Days in Lisbon',
        'slug': 'three-days-in-lisbon',
        'content': '<p>Trams and <em>tiles</em>.</p>',
        'excerpt': 'Trams and tiles.',
        'featuredImage': '/uploads/lisbon.jpg',
        'youtubeUrl': '',
        'status': 'published',
        'categoryId': 'c1',
        'tags': ['portugal', 'city break'],
        'createdAt': '2024-03-03T09:00:00.000Z',
        'updatedAt': '2024-03-03T09:00:00.000Z',
    }
    record.update(overrides)
    return record


def make_post(**overrides):
    return Post.from_dict(post_record(**overrides))


CATEGORY_RECORDS = [
    {'id': 'c1', 'name': 'Europe', 'slug': 'europe'},
    {'id': 'c2', 'name': 'Food & Drink', 'slug': 'food-drink'},
]

POST_RECORDS = [
    post_record(id='p1', slug='lisbon', title='Lisbon', createdAt='2024-03-01T09:00:00.000Z',
                updatedAt='2024-03-01T09:00:00.000Z'),
    post_record(id='p2', slug='porto', title='Porto', createdAt='2024-03-05T09:00:00.000Z',
                updatedAt='2024-03-06T12:00:00.000Z', categoryId='c2'),
    post_record(id='p3', slug='madrid', title='Madrid', createdAt='2024-03-03T09:00:00.000Z',
                updatedAt=None, featuredImage='', categoryId='deleted-category'),
    post_record(id='p4', slug='draft-post', title='Unfinished', status='draft',
                createdAt='2024-03-09T09:00:00.000Z'),
]


@pytest.fixture(autouse=True)
def reset_chronicle_logger():
    """Drop handlers added by a build so they do not leak into the next test."""
    yield
    logger = logging.getLogger('Chronicle')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def mock_data_dir(temp_dir):
    """Create a content store with three published posts, one draft and two categories."""
    data_dir = Path(temp_dir) / 'data'
    data_dir.mkdir()
    (data_dir / 'posts.json').write_text(json.dumps(POST_RECORDS), encoding='utf-8')
    (data_dir / 'categories.json').write_text(json.dumps(CATEGORY_RECORDS), encoding='utf-8')
    return str(data_dir)


@pytest.fixture
def mock_output_dir(temp_dir):
    """Path of a not yet existing output directory."""
    return str(Path(temp_dir) / 'docs')


@pytest.fixture
def categories():
    return tuple(Category.from_dict(record) for record in CATEGORY_RECORDS)


@pytest.fixture
def snapshot(categories):
    """The mock store as an in-memory snapshot."""
    return ContentSnapshot(
        posts=tuple(Post.from_dict(record) for record in POST_RECORDS),
        categories=categories,
    )


@pytest.fixture
def generator():
    """A PageGenerator using the packaged templates and a fixed copyright year."""
    return PageGenerator(copyright_year=2024)


@pytest.fixture
def build_options(mock_data_dir, mock_output_dir, temp_dir):
    """Keyword arguments for a Chronicle build isolated in the temp dir."""
    return {
        'data_dir': mock_data_dir,
        'output_dir': mock_output_dir,
        'templates_dir': os.path.join(temp_dir, 'no-templates'),
        'log_dir': None,
        'copyright_year': 2024,
    }
