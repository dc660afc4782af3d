"""
Load the content store (posts and categories) into an immutable snapshot.

The store is read exactly once per build. A missing or unreadable file
degrades to an empty collection so the site still builds.
"""

import os
import json
import logging
import yaml

from .models import Post, Category, ContentSnapshot

logger = logging.getLogger('Chronicle.store')

STORE_EXTENSIONS = ['.json', '.yml', '.yaml']


def find_store_file(data_dir, name):
    """Return the first existing store file for a collection name, or None."""
    for ext in STORE_EXTENSIONS:
        path = os.path.join(data_dir, f'{name}{ext}')
        if os.path.exists(path):
            return path
    return None


def read_records(data_dir, name):
    """Read a list of plain records from <data_dir>/<name>.json|yml|yaml."""
    file_path = find_store_file(data_dir, name)
    if file_path is None:
        logger.warning(f"No {name} file found in {data_dir}; treating it as empty")
        return []

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            if file_path.endswith('.json'):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (IOError, OSError, PermissionError) as e:
        logger.error(f"Failed to read {name} file {file_path}: {e}")
        return []
    except UnicodeDecodeError as e:
        logger.error(f"Invalid encoding in {name} file {file_path}: {e}")
        return []
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {name} file {file_path}: {e}")
        return []
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in {name} file {file_path}: {e}")
        return []

    if data is None:
        return []
    if not isinstance(data, list):
        logger.error(f"Expected a list of records in {file_path}, got {type(data).__name__}")
        return []

    records = []
    for index, item in enumerate(data):
        if isinstance(item, dict):
            records.append(item)
        else:
            logger.warning(f"Skipping {name} record #{index} in {file_path}: not a mapping")
    return records


def load_snapshot(data_dir):
    """Read posts and categories once and freeze them into a ContentSnapshot."""
    posts = tuple(Post.from_dict(record) for record in read_records(data_dir, 'posts'))
    categories = tuple(Category.from_dict(record) for record in read_records(data_dir, 'categories'))
    logger.debug(f"Loaded {len(posts)} posts and {len(categories)} categories from {data_dir}")
    return ContentSnapshot(posts=posts, categories=categories)
