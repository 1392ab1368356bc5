"""Tests for request resolution: prefix, reserved segments, containment."""

import os
from urllib.parse import unquote

import pytest
from starlette.requests import Request

from classic_static.schemas.options import StaticConfig
from classic_static.services.resolver import (
    Resolution,
    ResolvedRequest,
    is_within,
    request_path,
    resolve,
)


def _request(raw_path: str, method: str = "GET", path: str | None = None) -> Request:
    return Request(
        {
            "type": "http",
            "method": method,
            "path": path if path is not None else unquote(raw_path),
            "raw_path": raw_path.encode("latin-1"),
            "query_string": b"",
            "headers": [],
        }
    )


@pytest.fixture
def root(tmp_path):
    return str(tmp_path / "site")


class TestDelegation:
    def test_method_not_allowed(self, root):
        config = StaticConfig.build(root)
        assert resolve(_request("/a.txt", method="POST"), config) is Resolution.DELEGATE

    def test_outside_prefix(self, root):
        config = StaticConfig.build(root, url_prefix="/static")
        assert resolve(_request("/a.txt"), config) is Resolution.DELEGATE
        assert resolve(_request("/staticfoo/a.txt"), config) is Resolution.DELEGATE
        assert resolve(_request("/"), config) is Resolution.DELEGATE

    def test_reserved_first_segment(self, root):
        config = StaticConfig.build(root, urls_reserved=["/api"])
        assert resolve(_request("/api"), config) is Resolution.DELEGATE
        assert resolve(_request("/api/users/1"), config) is Resolution.DELEGATE

    def test_reserved_only_at_top_level(self, root):
        config = StaticConfig.build(root, urls_reserved=["/api"])
        resolved = resolve(_request("/docs/api"), config)
        assert isinstance(resolved, ResolvedRequest)

    def test_reserved_after_prefix(self, root):
        config = StaticConfig.build(root, url_prefix="/static", urls_reserved=["/private"])
        assert resolve(_request("/static/private/x"), config) is Resolution.DELEGATE
        assert isinstance(resolve(_request("/private/x"), config), Resolution)


class TestResolution:
    def test_root_request(self, root):
        resolved = resolve(_request("/"), StaticConfig.build(root))
        assert resolved.fs_path == root
        assert resolved.href_path == "/"
        assert resolved.at_root

    def test_trailing_slash_stripped(self, root):
        resolved = resolve(_request("/sub/"), StaticConfig.build(root))
        assert resolved.href_path == "/sub"
        assert resolved.fs_path == os.path.join(root, "sub")

    def test_prefix_stripped(self, root):
        config = StaticConfig.build(root, url_prefix="/static")
        resolved = resolve(_request("/static/sub/a.txt"), config)
        assert resolved.relative_path == "/sub/a.txt"
        assert resolved.href_path == "/static/sub/a.txt"
        assert resolved.fs_path == os.path.join(root, "sub", "a.txt")

    def test_prefix_root(self, root):
        config = StaticConfig.build(root, url_prefix="/static")
        resolved = resolve(_request("/static/"), config)
        assert resolved.at_root
        assert resolved.fs_path == root

    def test_decoded_after_prefix_match(self, root):
        config = StaticConfig.build(root, url_prefix="/static")
        # An encoded slash in the prefix segment must not match the prefix
        assert resolve(_request("/sta%2Ftic/a.txt"), config) is Resolution.DELEGATE
        resolved = resolve(_request("/static/my%20file.txt"), config)
        assert resolved.fs_path == os.path.join(root, "my file.txt")
        assert resolved.display_path == "/my file.txt"

    def test_dot_segments_collapsed_inside_root(self, root):
        resolved = resolve(_request("/sub/%2e%2e/a.txt"), StaticConfig.build(root))
        assert resolved.fs_path == os.path.join(root, "a.txt")


class TestContainment:
    def test_encoded_traversal_forbidden(self, root):
        config = StaticConfig.build(root)
        assert resolve(_request("/%2e%2e/secret.txt"), config) is Resolution.FORBIDDEN
        assert resolve(_request("/%2e%2e%2f%2e%2e%2fetc/passwd"), config) is Resolution.FORBIDDEN

    def test_sibling_with_shared_prefix_forbidden(self, root):
        config = StaticConfig.build(root)
        assert resolve(_request("/%2e%2e/site-evil/x.txt"), config) is Resolution.FORBIDDEN

    def test_is_within(self):
        assert is_within("/srv/app", "/srv/app")
        assert is_within("/srv/app", "/srv/app/x")
        assert not is_within("/srv/app", "/srv/app-evil")
        assert not is_within("/srv/app", "/srv")
        assert is_within("/", "/etc")


class TestRequestPath:
    def test_original_url_by_default(self):
        request = _request("/it/page.html", path="/page.html")
        assert request_path(request) == "/it/page.html"

    def test_rewritten_url(self):
        request = _request("/it/page.html", path="/page.html")
        assert request_path(request, use_original_url=False) == "/page.html"

    def test_rewritten_url_is_encoded(self):
        request = _request("/x", path="/my file.txt")
        assert request_path(request, use_original_url=False) == "/my%20file.txt"

    def test_query_string_dropped(self):
        assert request_path(_request("/a.txt?x=1")) == "/a.txt"
