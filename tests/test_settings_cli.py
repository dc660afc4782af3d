"""Tests for configuration loading and the command line."""

import json
import os
from pathlib import Path

import pytest

from chronicle_pkg.cli import build_parser, main
from chronicle_pkg.errors import ConfigError
from chronicle_pkg.settings import ChronicleSettings


class TestChronicleSettings:
    def test_defaults_without_config_file(self, temp_dir):
        settings = ChronicleSettings(temp_dir).load_settings()
        assert settings['output'] == 'docs'
        assert settings['blog_slug'] == 'blog'
        assert settings['recent_count'] == 6
        assert settings['prune'] is False

    def test_yaml_config(self, temp_dir):
        (Path(temp_dir) / 'chronicle.yml').write_text(
            'site_title: Slow Roads\nrecent_count: 3\nprune: true\n', encoding='utf-8'
        )
        loader = ChronicleSettings(temp_dir)
        settings = loader.load_settings()
        assert settings['site_title'] == 'Slow Roads'
        assert settings['recent_count'] == 3
        assert settings['prune'] is True
        assert loader.config_file_path.endswith('chronicle.yml')

    def test_json_config(self, temp_dir):
        (Path(temp_dir) / 'chronicle.json').write_text(json.dumps({'output': 'site'}), encoding='utf-8')
        assert ChronicleSettings(temp_dir).load_settings()['output'] == 'site'

    def test_yml_preferred_over_json(self, temp_dir):
        (Path(temp_dir) / 'chronicle.yml').write_text('output: from-yaml\n', encoding='utf-8')
        (Path(temp_dir) / 'chronicle.json').write_text(json.dumps({'output': 'from-json'}), encoding='utf-8')
        assert ChronicleSettings(temp_dir).load_settings()['output'] == 'from-yaml'

    def test_arguments_override_config(self, temp_dir):
        (Path(temp_dir) / 'chronicle.yml').write_text('output: site\nminify: true\n', encoding='utf-8')
        loader = ChronicleSettings(temp_dir)
        loader.load_settings()
        merged = loader.merge_with_args({'output': 'public', 'minify': None, 'init': None, 'bogus': 1})
        assert merged['output'] == 'public'
        assert merged['minify'] is True
        assert 'bogus' not in merged

    @pytest.mark.parametrize('content', [
        'site_title: [unclosed\n',
        '- just\n- a list\n',
        'colour_scheme: dark\n',
    ])
    def test_unusable_config_raises(self, temp_dir, content):
        (Path(temp_dir) / 'chronicle.yml').write_text(content, encoding='utf-8')
        with pytest.raises(ConfigError):
            ChronicleSettings(temp_dir).load_settings()

    def test_invalid_json_config_raises(self, temp_dir):
        (Path(temp_dir) / 'chronicle.json').write_text('{"output": ', encoding='utf-8')
        with pytest.raises(ConfigError):
            ChronicleSettings(temp_dir).load_settings()

    def test_sample_config_round_trips(self, temp_dir):
        loader = ChronicleSettings(temp_dir)
        path = loader.create_sample_config('yml')
        assert os.path.basename(path) == 'chronicle.yml'
        settings = ChronicleSettings(temp_dir).load_settings()
        assert settings['site_url'] == 'https://example.github.io'
        assert settings['prune'] is False

    def test_sample_config_rejects_unknown_format(self, temp_dir):
        with pytest.raises(ConfigError):
            ChronicleSettings(temp_dir).create_sample_config('toml')
        assert os.listdir(temp_dir) == []


class TestCommandLine:
    @pytest.fixture
    def project_dir(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        return Path(temp_dir)

    def test_flags_default_to_none(self):
        args = build_parser().parse_args([])
        assert args.prune is None
        assert args.minify is None
        assert build_parser().parse_args(['--prune']).prune is True

    def test_init_then_build(self, project_dir, capsys):
        main(['--init', 'json'])
        assert (project_dir / 'chronicle.json').is_file()
        assert (project_dir / 'data' / 'posts.json').is_file()
        assert (project_dir / 'data' / 'categories.json').is_file()
        assert 'Created sample configuration file' in capsys.readouterr().out

        main([])
        output = project_dir / 'docs'
        assert (output / 'index.html').is_file()
        assert (output / 'blog' / 'three-days-in-lisbon' / 'index.html').is_file()
        assert not (output / 'blog' / 'notes-from-the-road').exists()
        assert (output / 'sitemap.xml').is_file()
        assert len(os.listdir(project_dir / 'logs')) == 1

    def test_init_keeps_existing_data(self, project_dir):
        (project_dir / 'data').mkdir()
        (project_dir / 'data' / 'posts.json').write_text('[]', encoding='utf-8')
        main(['--init', 'yml'])
        assert (project_dir / 'data' / 'posts.json').read_text(encoding='utf-8') == '[]'

    def test_command_line_overrides(self, project_dir):
        main(['--init', 'yml'])
        main(['--output', 'public', '--blog-slug', 'stories', '--site-title', 'Slow Roads'])
        page = (project_dir / 'public' / 'stories' / 'three-days-in-lisbon' / 'index.html')
        assert 'Slow Roads' in page.read_text(encoding='utf-8')

    def test_bad_config_exits_with_error(self, project_dir, capsys):
        (project_dir / 'chronicle.yml').write_text('unknown_key: 1\n', encoding='utf-8')
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 1
        assert 'Error:' in capsys.readouterr().err
