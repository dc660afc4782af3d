import os
import shutil
import logging
import threading
from datetime import datetime
from concurrent.futures import ProcessPoolExecutor, as_completed
import csscompressor
import rjsmin

from .errors import ConfigError, OutputError
from .pages import PageGenerator, load_about_html
from .relations import derive_published
from .store import load_snapshot
from .writer import OutputWriter

PACKAGE_ASSETS = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'assets')

# Per-process state for post page workers
thread_local = threading.local()


def initializer(generator_options, output_dir, snapshot, sequence):
    """Set up a PageGenerator and OutputWriter once in each worker process."""
    thread_local.generator = PageGenerator(**generator_options)
    thread_local.writer = OutputWriter(output_dir)
    thread_local.snapshot = snapshot
    thread_local.sequence = sequence


def build_post_page(position):
    """Render and write the post at one position of the shared sequence."""
    generator = thread_local.generator
    post = thread_local.sequence[position]
    html = generator.render_post(thread_local.snapshot, thread_local.sequence, position)
    return thread_local.writer.write_route(f"{generator.blog_slug}/{post.slug}", html)


class InfoFilter(logging.Filter):
    """Filter to allow only build progress INFO messages (and all warnings) on the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Building static site",
            "✓ ",
            "Done:",
            "Build completed in",
            "Pruned stale route",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


class Chronicle:
    def __init__(self, data_dir='data', output_dir='docs', templates_dir='templates', assets_dir=None,
                 site_title='Wanderlust Chronicles', site_tagline=None, site_url=None, blog_slug='blog',
                 recent_count=6, prune=False, minify=False, parallel_threshold=12, log_dir='logs',
                 about_file=None, copyright_year=None):
        self.data_dir = data_dir
        self.output_dir = output_dir
        self.templates_dir = templates_dir
        self.assets_dir = assets_dir
        self.site_url = site_url.rstrip('/') if site_url else None
        self.blog_slug = (blog_slug or '').strip('/')
        self.prune = prune
        self.minify = minify
        self.parallel_threshold = parallel_threshold
        self.log_dir = log_dir
        self.about_file = about_file
        self.posts_built = 0
        self.pages_written = 0
        self.stale_routes = []
        self.pruned_routes = []

        if not self.blog_slug or '/' in self.blog_slug or self.blog_slug == '..':
            raise ConfigError(f"Invalid blog slug: {blog_slug!r}")
        try:
            recent_count = int(recent_count)
        except (TypeError, ValueError):
            raise ConfigError(f"recent_count must be an integer, got {recent_count!r}")
        if recent_count < 0:
            raise ConfigError(f"recent_count must not be negative, got {recent_count}")

        self.setup_logging()

        # Fixed once so every page of one build shows the same year
        self.generator_options = {
            'templates_dir': templates_dir,
            'site_title': site_title,
            'site_tagline': site_tagline,
            'site_url': self.site_url,
            'blog_slug': self.blog_slug,
            'recent_count': recent_count,
            'copyright_year': copyright_year or datetime.now().year,
            'about_html': '',
            'asset_suffix': '.min' if minify else '',
        }
        self.generator = PageGenerator(**self.generator_options)
        self.writer = OutputWriter(self.output_dir)

    def setup_logging(self):
        """Set up logging configuration."""
        self.logger = logging.getLogger('Chronicle')
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            # Console handler with filter
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.addFilter(InfoFilter())
            console_formatter = logging.Formatter('%(message)s')
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

            # File handler for all logs
            if self.log_dir:
                os.makedirs(self.log_dir, exist_ok=True)
                log_filename = datetime.now().strftime('chronicle_%Y-%m-%d_%H-%M-%S.log')
                log_filepath = os.path.join(self.log_dir, log_filename)

                file_handler = logging.FileHandler(log_filepath, encoding='utf-8')
                file_handler.setLevel(logging.DEBUG)
                file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
                file_handler.setFormatter(file_formatter)
                self.logger.addHandler(file_handler)

    def resolve_assets_dir(self):
        """Project assets dir if configured or present, otherwise the packaged defaults."""
        if self.assets_dir:
            if os.path.isdir(self.assets_dir):
                return self.assets_dir
            self.logger.warning(f"Assets directory not found: {self.assets_dir}; using packaged assets")
        elif os.path.isdir('assets'):
            return 'assets'
        return PACKAGE_ASSETS

    def copy_assets_to_output(self):
        """Copy stylesheet and scripts into the output root, overwriting earlier copies."""
        source = self.resolve_assets_dir()
        try:
            os.makedirs(self.output_dir, exist_ok=True)
            for item in sorted(os.listdir(source)):
                src_path = os.path.join(source, item)
                dest_path = os.path.join(self.output_dir, item)
                if os.path.isdir(src_path):
                    shutil.copytree(src_path, dest_path, dirs_exist_ok=True)
                else:
                    shutil.copy2(src_path, dest_path)
        except (IOError, OSError, PermissionError) as e:
            self.logger.error(f"Failed to copy assets from {source}: {e}")
            raise OutputError(self.output_dir, e) from e
        self.logger.debug(f"Copied assets from {source}")

    def minify_assets(self):
        """Write .min.css / .min.js next to each copied stylesheet and script."""
        for subdir, ext, minifier in (('css', '.css', csscompressor.compress), ('js', '.js', rjsmin.jsmin)):
            asset_dir = os.path.join(self.output_dir, subdir)
            if not os.path.isdir(asset_dir):
                continue
            for file in sorted(os.listdir(asset_dir)):
                if not file.endswith(ext) or file.endswith('.min' + ext):
                    continue
                asset_path = os.path.join(asset_dir, file)
                minified_path = os.path.join(asset_dir, file[:-len(ext)] + '.min' + ext)
                try:
                    with open(asset_path, 'r', encoding='utf-8') as f:
                        minified = minifier(f.read())
                    with open(minified_path, 'w', encoding='utf-8') as f:
                        f.write(minified)
                except (IOError, OSError, PermissionError) as e:
                    self.logger.error(f"Failed to minify {asset_path}: {e}")
                    raise OutputError(minified_path, e) from e
                self.logger.debug(f"Minified {subdir}/{file}")

    def write_page(self, key, html):
        path = self.writer.write_route(key, html)
        self.pages_written += 1
        self.logger.info(f"  ✓ {path}")
        return path

    def build_post_pages(self, snapshot, sequence):
        """Write one page per published post, in a process pool for large sites."""
        positions = []
        for position, post in enumerate(sequence):
            if post.slug:
                positions.append(position)
            else:
                self.logger.warning(f"Skipping post {post.id!r} ({post.title!r}): it has no slug")

        if not positions:
            return

        if self.parallel_threshold and len(positions) >= self.parallel_threshold:
            self.logger.debug(f"Rendering {len(positions)} posts with {os.cpu_count()} workers")
            self._build_with_multiprocessing(snapshot, sequence, positions)
        else:
            for position in positions:
                html = self.generator.render_post(snapshot, sequence, position)
                self.write_page(f"{self.blog_slug}/{sequence[position].slug}", html)
                self.posts_built += 1

    def _build_with_multiprocessing(self, snapshot, sequence, positions):
        with ProcessPoolExecutor(
            max_workers=os.cpu_count(),
            initializer=initializer,
            initargs=(self.generator_options, self.output_dir, snapshot, sequence)
        ) as executor:
            futures = {executor.submit(build_post_page, position): position for position in positions}
            paths = {}
            for future in as_completed(futures):
                # A failed write aborts the build; the executor waits for running workers
                paths[futures[future]] = future.result()
        # Published order, independent of completion order
        for position in positions:
            path = paths[position]
            self.writer.written.append(path)
            self.pages_written += 1
            self.posts_built += 1
            self.logger.info(f"  ✓ {path}")

    def handle_stale_routes(self, sequence):
        self.stale_routes = self.writer.find_stale_routes(self.blog_slug, sequence.slugs())
        if not self.stale_routes:
            return
        if self.prune:
            self.pruned_routes = self.writer.prune(self.stale_routes)
            for route in self.pruned_routes:
                self.logger.info(f"Pruned stale route /{route}/")
        else:
            self.logger.warning(
                f"{len(self.stale_routes)} stale route(s) from earlier builds left in place: "
                + ', '.join(f"/{route}/" for route in self.stale_routes)
                + " (rerun with --prune to delete them)"
            )

    def build(self):
        """
        Main build process: read the store once, derive the published order
        once, then render and write every route from that single snapshot.
        """
        self.logger.info("Building static site…")
        self.posts_built = 0
        self.pages_written = 0
        self.stale_routes = []
        self.pruned_routes = []
        self.writer.written = []

        snapshot = load_snapshot(self.data_dir)
        sequence = derive_published(snapshot.posts)
        self.logger.debug(f"{len(sequence)} of {len(snapshot.posts)} posts are published")

        # Read with the store so a rebuild picks up edits to the about file
        about_html = load_about_html(self.about_file)
        self.generator_options['about_html'] = about_html
        self.generator.about_html = about_html

        self.copy_assets_to_output()
        if self.minify:
            self.minify_assets()

        self.write_page('', self.generator.render_home(snapshot, sequence))
        self.write_page(self.blog_slug, self.generator.render_blog(snapshot, sequence))
        self.build_post_pages(snapshot, sequence)
        self.write_page('about', self.generator.render_about(snapshot))

        path = self.writer.write_document('404.html', self.generator.render_not_found(snapshot))
        self.pages_written += 1
        self.logger.info(f"  ✓ {path}")

        if self.site_url:
            self.writer.write_document('sitemap.xml', self.generator.render_sitemap(sequence))
            self.logger.debug("Generated sitemap.xml")
        else:
            self.logger.debug("Skipping XML sitemap (no site_url).")

        self.handle_stale_routes(sequence)

        self.logger.info(f"Done: {self.posts_built} post(s) built into {self.output_dir}")
        return list(self.writer.written)
