"""
Page generators: each turns the snapshot and the derived sequence into one
HTML document. Rendering is pure; writing happens elsewhere.
"""

import os
import logging
import mistune
from xml.sax.saxutils import escape
from jinja2 import ChoiceLoader, Environment, FileSystemLoader, TemplateNotFound, TemplateSyntaxError

from .errors import BuildError
from .utils import (
    escape_html, format_date, format_date_short, json_for_html, join_url, parse_timestamp, youtube_id,
)

PACKAGE_TEMPLATES = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'templates')
FALLBACK_IMAGE = '/uploads/default-travel.jpg'
DEFAULT_TAGLINE = ('Sharing stories, discoveries, and the joy of exploring our '
                   'beautiful world, one journey at a time.')


def create_markdown_parser():
    """Create a Mistune markdown parser that leaves inline HTML alone."""
    class CustomRenderer(mistune.HTMLRenderer):
        def __init__(self):
            super().__init__(escape=False)
        def block_code(self, code, info=None):
            escaped_code = mistune.escape(code)
            return '<pre style="white-space: pre-wrap;"><code>{}</code></pre>'.format(escaped_code)
    return mistune.create_markdown(
        renderer=CustomRenderer(),
        plugins=['table', 'strikethrough']
    )


def load_about_html(about_file):
    """Read the about page body from a Markdown or HTML file; '' when unavailable."""
    logger = logging.getLogger('Chronicle.pages')
    if not about_file:
        return ''
    if not os.path.exists(about_file):
        logger.warning(f"About file not found: {about_file}")
        return ''
    try:
        with open(about_file, 'r', encoding='utf-8') as f:
            text = f.read()
    except (IOError, OSError, PermissionError) as e:
        logger.error(f"Failed to read about file {about_file}: {e}")
        return ''
    if about_file.lower().endswith(('.html', '.htm')):
        return text
    return create_markdown_parser()(text)


class PageGenerator:
    def __init__(self, templates_dir=None, site_title='Wanderlust Chronicles', site_tagline=None,
                 site_url=None, blog_slug='blog', recent_count=6, copyright_year=None,
                 about_html='', asset_suffix=''):
        self.templates_dir = templates_dir
        self.site_title = site_title
        self.site_tagline = site_tagline or DEFAULT_TAGLINE
        self.site_url = site_url.rstrip('/') if site_url else None
        self.blog_slug = blog_slug.strip('/')
        self.recent_count = max(0, int(recent_count))
        self.copyright_year = copyright_year
        self.about_html = about_html
        self.asset_suffix = asset_suffix
        self.logger = logging.getLogger('Chronicle.pages')

        # User templates shadow the packaged ones file by file
        loaders = []
        if templates_dir and os.path.isdir(templates_dir):
            loaders.append(FileSystemLoader(templates_dir))
        loaders.append(FileSystemLoader(PACKAGE_TEMPLATES))
        self.env = Environment(loader=ChoiceLoader(loaders), keep_trailing_newline=True)
        self.env.filters['esc'] = escape_html
        self.env.filters['date_long'] = format_date
        self.env.filters['date_short'] = format_date_short

    @property
    def blog_url(self):
        return f"/{self.blog_slug}/"

    def canonical_url(self, path):
        if not self.site_url:
            return None
        return join_url(self.site_url, path)

    def render_template(self, template_name, snapshot, **context):
        """Render a template with the shared site context."""
        context.setdefault('description', '')
        context.setdefault('canonical', None)
        try:
            template = self.env.get_template(template_name)
            return template.render(
                snapshot=snapshot,
                site_title=self.site_title,
                site_tagline=self.site_tagline,
                blog_url=self.blog_url,
                copyright_year=self.copyright_year,
                fallback_image=FALLBACK_IMAGE,
                asset_suffix=self.asset_suffix,
                **context
            )
        except (TemplateNotFound, TemplateSyntaxError) as e:
            self.logger.error(f"Template error in {template_name}: {e}")
            raise BuildError(f"Template error in {template_name}: {e}") from e

    def render_home(self, snapshot, sequence):
        """Hero for the newest post plus the next recent_count cards."""
        return self.render_template(
            'index.html',
            snapshot,
            page_title='Home — Travel Stories & Adventures',
            description=f"{self.site_title}: {self.site_tagline}",
            canonical=self.canonical_url('/'),
            active='home',
            featured=sequence.latest,
            recent=sequence.recent(1, self.recent_count),
        )

    def render_blog(self, snapshot, sequence):
        """
        The listing page: every published post as a card, plus the same set
        embedded as JSON for the client-side category and text filter.
        """
        posts_json = json_for_html([post.to_index_entry() for post in sequence])
        categories_json = json_for_html([category.to_dict() for category in snapshot.categories])
        return self.render_template(
            'blog.html',
            snapshot,
            page_title='Blog — All Stories',
            description=f"Browse all travel stories and adventures on {self.site_title}.",
            canonical=self.canonical_url(self.blog_url),
            active='blog',
            sequence=sequence,
            story_count=len(sequence),
            posts_json=posts_json,
            categories_json=categories_json,
        )

    def render_post(self, snapshot, sequence, position):
        post = sequence[position]
        return self.render_template(
            'post.html',
            snapshot,
            page_title=post.title,
            description=post.excerpt,
            canonical=self.canonical_url(f"{self.blog_url}{post.slug}/"),
            active='blog',
            post=post,
            category=snapshot.category_for(post),
            navigation=sequence.neighbors(position),
            video_id=youtube_id(post.youtube_url),
        )

    def render_about(self, snapshot):
        return self.render_template(
            'about.html',
            snapshot,
            page_title='About',
            description=f"Learn about {self.site_title} and the person behind the stories.",
            canonical=self.canonical_url('/about/'),
            active='about',
            about_html=self.about_html,
        )

    def render_not_found(self, snapshot):
        return self.render_template(
            '404.html',
            snapshot,
            page_title='404 — Page Not Found',
            active='',
        )

    def render_sitemap(self, sequence):
        """XML sitemap; lastmod comes from post dates so reruns are identical."""
        latest = sequence.latest
        site_lastmod = self._lastmod(latest) if latest else ''
        sitemap_content = '''<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
'''
        for path in ('/', self.blog_url):
            sitemap_content += self.format_xml_sitemap_entry(self.canonical_url(path), site_lastmod)
        sitemap_content += self.format_xml_sitemap_entry(self.canonical_url('/about/'), '')
        for post in sequence:
            if not post.slug:
                continue
            post_url = self.canonical_url(f"{self.blog_url}{post.slug}/")
            sitemap_content += self.format_xml_sitemap_entry(post_url, self._lastmod(post))
        sitemap_content += '</urlset>\n'
        return sitemap_content

    def format_xml_sitemap_entry(self, url, lastmod):
        """Format a single sitemap entry."""
        entry = f'<url>\n<loc>{escape(url)}</loc>\n'
        if lastmod:
            entry += f'<lastmod>{lastmod}</lastmod>\n'
        return entry + '</url>\n'

    @staticmethod
    def _lastmod(post):
        parsed = parse_timestamp(post.updated_at) or parse_timestamp(post.created_at)
        return parsed.strftime('%Y-%m-%d') if parsed else ''
