"""
Chronicle - a static blog builder.

Chronicle reads a small content store (posts and categories) and writes a
fully static, cross-linked site: a home page, a filterable listing, one page
per published post, an about page and a 404 page.
"""

__version__ = "1.0.0"

from .core import Chronicle
from .errors import BuildError, OutputError, ConfigError

__all__ = ['Chronicle', 'BuildError', 'OutputError', 'ConfigError']
