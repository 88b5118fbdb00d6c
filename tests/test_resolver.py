"""Unit tests for the two-stage asset resolution."""

import os

import pytest

from portfolio_server.resolver import resolve_fallback, resolve_static_file


@pytest.fixture
def root(tmp_path):
    (tmp_path / "outside.txt").write_text("nope")
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "index.html").write_text("<html></html>")
    (dist / "app.js").write_text("")
    (dist / "blog").mkdir()
    (dist / "blog" / "index.html").write_text("blog")
    (dist / "blog" / "post.html").write_text("post")
    (dist / "bare").mkdir()
    (dist / ".git").mkdir()
    (dist / ".git" / "config").write_text("[core]")
    return dist


class TestResolveStaticFile:
    def test_existing_file(self, root):
        assert resolve_static_file(root, "/app.js") == (root / "app.js").resolve()

    def test_leading_slash_optional(self, root):
        assert resolve_static_file(root, "blog/post.html") == (root / "blog" / "post.html").resolve()

    def test_missing_file(self, root):
        assert resolve_static_file(root, "/about") is None

    def test_directory_index(self, root):
        assert resolve_static_file(root, "/blog") == (root / "blog" / "index.html").resolve()
        assert resolve_static_file(root, "/") == (root / "index.html").resolve()

    def test_directory_without_index(self, root):
        assert resolve_static_file(root, "/bare") is None

    @pytest.mark.parametrize("path", [
        "../outside.txt",
        "/../outside.txt",
        "blog/../../outside.txt",
        "/../../../../etc/passwd",
    ])
    def test_traversal_is_rejected(self, root, path):
        assert resolve_static_file(root, path) is None

    def test_dot_segments_inside_root_are_fine(self, root):
        assert resolve_static_file(root, "/blog/../app.js") == (root / "app.js").resolve()

    def test_dotfiles_are_hidden(self, root):
        assert resolve_static_file(root, "/.git/config") is None
        assert resolve_static_file(root, "/.git") is None

    def test_nul_byte(self, root):
        assert resolve_static_file(root, "/app.js\x00.png") is None

    def test_name_too_long(self, root):
        assert resolve_static_file(root, "/" + "a" * 4096) is None

    def test_file_used_as_directory(self, root):
        assert resolve_static_file(root, "/app.js/extra") is None


class TestResolveFallback:
    def test_present(self, root):
        assert resolve_fallback(root) == (root / "index.html").resolve()

    def test_absent(self, root):
        (root / "index.html").unlink()
        assert resolve_fallback(root) is None

    def test_index_directory_is_not_a_fallback(self, tmp_path):
        (tmp_path / "index.html").mkdir()
        assert resolve_fallback(tmp_path) is None


class TestSymlinkLoops:
    def test_self_loop_is_a_miss(self, root):
        try:
            os.symlink(root / "loop", root / "loop")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported here")
        assert resolve_static_file(root, "/loop") is None

    def test_loop_below_directory_is_a_miss(self, root):
        try:
            os.symlink(root / "blog" / "b", root / "blog" / "a")
            os.symlink(root / "blog" / "a", root / "blog" / "b")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported here")
        assert resolve_static_file(root, "/blog/a/index.html") is None
