"""Tests for the output writer."""

import os
from pathlib import Path

import pytest

from chronicle_pkg.errors import BuildError, OutputError
from chronicle_pkg.writer import OutputWriter


@pytest.fixture
def writer(mock_output_dir):
    return OutputWriter(mock_output_dir)


class TestWriteRoute:
    def test_route_keys_map_to_index_files(self, writer, mock_output_dir):
        assert writer.write_route('', '<p>home</p>') == 'index.html'
        assert writer.write_route('blog', '<p>list</p>') == 'blog/index.html'
        assert writer.write_route('blog/porto', '<p>post</p>') == 'blog/porto/index.html'
        assert (Path(mock_output_dir) / 'blog' / 'porto' / 'index.html').read_text(encoding='utf-8') == '<p>post</p>'
        assert writer.written == ['index.html', 'blog/index.html', 'blog/porto/index.html']

    def test_overwrites_existing_file(self, writer, mock_output_dir):
        writer.write_route('about', 'first')
        writer.write_route('about', 'second')
        assert (Path(mock_output_dir) / 'about' / 'index.html').read_text(encoding='utf-8') == 'second'

    def test_writes_utf8(self, writer, mock_output_dir):
        writer.write_route('', 'Pastéis ✦')
        assert (Path(mock_output_dir) / 'index.html').read_text(encoding='utf-8') == 'Pastéis ✦'

    def test_rejects_escaping_paths(self, writer):
        with pytest.raises(OutputError):
            writer.write_route('blog/../../outside', 'x')
        with pytest.raises(OutputError):
            writer.write_document('/etc/passwd', 'x')
        with pytest.raises(OutputError):
            writer.write_document('nested/404.html', 'x')

    def test_io_failure_raises_output_error(self, writer, mock_output_dir):
        os.makedirs(mock_output_dir)
        # A plain file where a route directory must go
        (Path(mock_output_dir) / 'blog').write_text('not a directory', encoding='utf-8')
        with pytest.raises(OutputError) as excinfo:
            writer.write_route('blog/porto', '<p>post</p>')
        assert isinstance(excinfo.value, BuildError)
        assert 'Failed to write' in str(excinfo.value)
        assert writer.written == []

    def test_document(self, writer, mock_output_dir):
        assert writer.write_document('404.html', 'missing') == '404.html'
        assert (Path(mock_output_dir) / '404.html').read_text(encoding='utf-8') == 'missing'


class TestStaleRoutes:
    def test_no_section_dir(self, writer):
        assert writer.find_stale_routes('blog', ['porto']) == []

    def test_finds_routes_not_in_current_set(self, writer, mock_output_dir):
        for slug in ('porto', 'old-post', 'another-old'):
            writer.write_route(f'blog/{slug}', 'x')
        # Directories without an index.html are not routes
        os.makedirs(os.path.join(mock_output_dir, 'blog', 'images'))
        assert writer.find_stale_routes('blog', ['porto']) == ['blog/another-old', 'blog/old-post']

    def test_prune_removes_only_given_routes(self, writer, mock_output_dir):
        writer.write_route('blog/porto', 'x')
        writer.write_route('blog/old-post', 'x')
        stale = writer.find_stale_routes('blog', ['porto'])
        assert writer.prune(stale) == ['blog/old-post']
        assert not os.path.exists(os.path.join(mock_output_dir, 'blog', 'old-post'))
        assert os.path.exists(os.path.join(mock_output_dir, 'blog', 'porto', 'index.html'))
