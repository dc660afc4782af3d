#!/usr/bin/env python3
"""
Command-line interface for Chronicle - static blog builder.
"""

import os
import sys
import json
import argparse
import time
from .core import Chronicle
from .settings import ChronicleSettings

SAMPLE_CATEGORIES = [
    {'id': 'cat-europe', 'name': 'Europe', 'slug': 'europe'},
    {'id': 'cat-food', 'name': 'Food & Drink', 'slug': 'food-drink'},
]

SAMPLE_POSTS = [
    {
        'id': 'post-lisbon',
        'title': 'Three Days in Lisbon',
        'slug': 'three-days-in-lisbon',
        'content': '<p>Trams, tiles, and too many pastéis de nata.</p>',
        'excerpt': 'Trams, tiles, and too many pastries.',
        'featuredImage': '',
        'youtubeUrl': '',
        'status': 'published',
        'categoryId': 'cat-europe',
        'tags': ['portugal', 'city break'],
        'createdAt': '2024-03-03T09:00:00.000Z',
        'updatedAt': '2024-03-03T09:00:00.000Z',
    },
    {
        'id': 'post-draft',
        'title': 'Notes from the Road',
        'slug': 'notes-from-the-road',
        'content': '<p>Not ready yet.</p>',
        'excerpt': '',
        'featuredImage': '',
        'youtubeUrl': '',
        'status': 'draft',
        'categoryId': None,
        'tags': [],
        'createdAt': '2024-03-10T09:00:00.000Z',
        'updatedAt': '2024-03-10T09:00:00.000Z',
    },
]


def create_sample_data(data_dir: str) -> None:
    """Create a sample content store (posts.json and categories.json)."""
    os.makedirs(data_dir, exist_ok=True)
    for name, records in (('posts', SAMPLE_POSTS), ('categories', SAMPLE_CATEGORIES)):
        path = os.path.join(data_dir, f'{name}.json')
        if os.path.exists(path):
            print(f"Data file already exists: {path}")
            continue
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
            f.write('\n')
        print(f"Created sample data: {path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Chronicle - static blog builder')
    parser.add_argument('--data', type=str,
                        help='Directory holding posts.json and categories.json')
    parser.add_argument('--output', type=str,
                        help='Output directory for the generated site')
    parser.add_argument('--templates', type=str,
                        help='Templates directory overriding the packaged templates')
    parser.add_argument('--assets', type=str,
                        help='Assets directory copied to the output root')
    parser.add_argument('--site-title', type=str, help='Site title')
    parser.add_argument('--site-tagline', type=str, help='Site tagline shown in the footer')
    parser.add_argument('--site-url', type=str,
                        help='Public site URL for canonical links and sitemap.xml')
    parser.add_argument('--blog-slug', type=str,
                        help="Path segment for the listing and post pages instead of 'blog'")
    parser.add_argument('--recent-count', type=int,
                        help='Number of recent cards under the featured post on the home page')
    parser.add_argument('--about-file', type=str,
                        help='Markdown or HTML file with the about page body')
    parser.add_argument('--prune', action='store_true', default=None,
                        help='Delete pages of posts that are no longer published')
    parser.add_argument('--minify', action='store_true', default=None,
                        help='Minify CSS and JS assets')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file and data store')
    parser.add_argument('--version', action='version', version='%(prog)s 1.0.0')
    return parser


def main(argv=None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings_loader = ChronicleSettings()

        # Handle init command
        if args.init:
            config_path = settings_loader.create_sample_config(args.init)
            print(f"Created sample configuration file: {config_path}")
            create_sample_data(args.data or settings_loader.DEFAULT_SETTINGS['data'])
            print("\nEdit the data files, then run 'chronicle' to build your site.")
            return

        # Load settings from configuration file
        settings_loader.load_settings()

        # Convert argparse Namespace to dict, excluding None values for proper merging
        args_dict = {k: v for k, v in vars(args).items() if v is not None}
        final_settings = settings_loader.merge_with_args(args_dict)

        output_dir = os.path.expanduser(final_settings['output'])

        overall_start_time = time.time()

        generator = Chronicle(
            data_dir=final_settings['data'],
            output_dir=output_dir,
            templates_dir=final_settings['templates'],
            assets_dir=final_settings['assets'],
            site_title=final_settings['site_title'],
            site_tagline=final_settings['site_tagline'],
            site_url=final_settings['site_url'],
            blog_slug=final_settings['blog_slug'],
            recent_count=final_settings['recent_count'],
            prune=final_settings['prune'],
            minify=final_settings['minify'],
            parallel_threshold=final_settings['parallel_threshold'],
            log_dir=final_settings['log_dir'],
            about_file=final_settings['about_file'],
            copyright_year=final_settings['copyright_year'],
        )
        generator.build()

        total_time = time.time() - overall_start_time
        generator.logger.info(f"Build completed in {total_time:.3f} seconds.")

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
