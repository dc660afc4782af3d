#!/usr/bin/env python3
"""
Settings loader for Chronicle.
Supports configuration from chronicle.yml, chronicle.yaml, or chronicle.json files.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional

from .errors import ConfigError


class ChronicleSettings:
    """Load and manage Chronicle configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'data': 'data',
        'output': 'docs',
        'templates': 'templates',
        'assets': None,
        'site_title': 'Wanderlust Chronicles',
        'site_tagline': None,
        'site_url': None,
        'blog_slug': 'blog',
        'recent_count': 6,
        'about_file': None,
        'copyright_year': None,
        'prune': False,
        'minify': False,
        'parallel_threshold': 12,
        'log_dir': 'logs',
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['chronicle.yml', 'chronicle.yaml', 'chronicle.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = self.DEFAULT_SETTINGS.copy()
        self.config_file_path = None

    def load_settings(self) -> Dict[str, Any]:
        """
        Load settings from configuration file if it exists.

        Returns:
            Dictionary of configuration settings

        Raises:
            ConfigError: If the file exists but cannot be read or parsed
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            if not isinstance(loaded_settings, dict):
                raise ConfigError(f"Configuration file {config_file} must contain a mapping")
            unknown = sorted(set(loaded_settings) - set(self.DEFAULT_SETTINGS))
            if unknown:
                raise ConfigError(f"Unknown setting(s) in {config_file}: {', '.join(unknown)}")
            self.settings.update(loaded_settings)

        return self.settings.copy()

    def _find_config_file(self) -> Optional[str]:
        """
        Find the first available configuration file.

        Returns:
            Path to config file or None if not found
        """
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Dictionary of configuration settings
        """
        file_ext = os.path.splitext(config_path)[1].lower()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    return yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    return json.load(f) or {}
                else:
                    raise ConfigError(f"Unsupported config file format: {file_ext}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {config_path}: {e}")
        except (IOError, OSError) as e:
            raise ConfigError(f"Error reading configuration file {config_path}: {e}")

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        sample_config = {
            'site_title': 'Wanderlust Chronicles',
            'site_tagline': 'Stories from the road, one journey at a time.',
            'site_url': 'https://example.github.io',
            'data': 'data',
            'output': 'docs',
            'templates': 'templates',
            'blog_slug': 'blog',
            'recent_count': 6,
            'prune': False,
            'minify': False,
        }

        if file_format not in ['yml', 'yaml', 'json']:
            raise ConfigError(f"Unsupported config file format: {file_format}")

        filename = f'chronicle.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    # Custom YAML output with comments
                    f.write("# Chronicle Configuration File\n\n")
                    f.write("# Site information\n")
                    f.write("site_title: Wanderlust Chronicles\n")
                    f.write("site_tagline: Stories from the road, one journey at a time.\n")
                    f.write("site_url: https://example.github.io  # enables canonical links and sitemap.xml\n\n")
                    f.write("# Build settings\n")
                    f.write("data: data        # posts.json and categories.json\n")
                    f.write("output: docs      # what the static file server publishes\n")
                    f.write("templates: templates\n")
                    f.write("blog_slug: blog\n\n")
                    f.write("# Content settings\n")
                    f.write("recent_count: 6   # cards under the featured post on the home page\n\n")
                    f.write("# Maintenance\n")
                    f.write("prune: false      # delete pages of posts that are no longer published\n")
                    f.write("minify: false\n")
                else:
                    json.dump(sample_config, f, indent=2)
        except (IOError, OSError) as e:
            raise ConfigError(f"Error writing configuration file {config_path}: {e}")

        return config_path

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.

        Args:
            args_dict: Dictionary of command-line arguments

        Returns:
            Merged configuration dictionary
        """
        merged = self.settings.copy()

        # Override with non-None command line arguments
        for key, value in args_dict.items():
            if value is not None and key in merged:
                merged[key] = value

        return merged
