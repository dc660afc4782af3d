"""
Materialize rendered pages into the output tree.

Every routing key becomes a directory holding index.html so that clean URLs
(/blog/<slug>/) resolve on any static file server without rewrite rules.
"""

import os
import shutil
import logging

from .errors import OutputError


class OutputWriter:
    def __init__(self, output_dir):
        self.output_dir = output_dir
        self.written = []
        self.logger = logging.getLogger('Chronicle.writer')

    def _resolve(self, relative_path):
        """Join a relative path onto the output dir, refusing anything that escapes it."""
        if os.path.isabs(relative_path) or '..' in relative_path.replace('\\', '/').split('/'):
            raise OutputError(relative_path, "path escapes the output directory")
        full_path = os.path.join(self.output_dir, relative_path)
        root = os.path.abspath(self.output_dir)
        if os.path.commonpath([root, os.path.abspath(full_path)]) != root:
            raise OutputError(relative_path, "path escapes the output directory")
        return full_path

    def _write(self, relative_path, content):
        full_path = self._resolve(relative_path)
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(content)
        except (IOError, OSError, PermissionError) as e:
            self.logger.error(f"Failed to write {full_path}: {e}")
            raise OutputError(full_path, e) from e
        self.written.append(relative_path)
        self.logger.debug(f"Wrote {full_path}")
        return relative_path

    def write_route(self, key, html):
        """
        Write html for a routing key: '' is the site root, 'blog' becomes
        blog/index.html and 'blog/<slug>' becomes blog/<slug>/index.html.
        Returns the path written, relative to the output dir.
        """
        key = key.strip('/')
        relative_path = f"{key}/index.html" if key else 'index.html'
        return self._write(relative_path, html)

    def write_document(self, name, content):
        """Write a fixed top-level document such as 404.html or sitemap.xml."""
        if '/' in name.strip('/') or '\\' in name:
            raise OutputError(name, "top-level documents cannot contain a directory")
        return self._write(name.strip('/'), content)

    def find_stale_routes(self, section, current_slugs):
        """
        Route directories under <section>/ left over from earlier builds,
        i.e. posts that are no longer published. Sorted for stable output.
        """
        section_dir = os.path.join(self.output_dir, section)
        if not os.path.isdir(section_dir):
            return []
        current = set(current_slugs)
        stale = []
        for entry in sorted(os.listdir(section_dir)):
            entry_path = os.path.join(section_dir, entry)
            if entry in current or not os.path.isdir(entry_path):
                continue
            if os.path.exists(os.path.join(entry_path, 'index.html')):
                stale.append(f"{section}/{entry}")
        return stale

    def prune(self, routes):
        """Delete stale route directories. Returns the routes removed."""
        removed = []
        for route in routes:
            full_path = self._resolve(route)
            try:
                shutil.rmtree(full_path)
            except (IOError, OSError, PermissionError) as e:
                self.logger.error(f"Failed to remove stale route {full_path}: {e}")
                raise OutputError(full_path, e) from e
            removed.append(route)
            self.logger.debug(f"Removed stale route {full_path}")
        return removed
