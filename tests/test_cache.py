"""Tests for conditional-request negotiation."""

import os
from email.utils import formatdate

import pytest

from classic_static.schemas.options import StaticConfig
from classic_static.services.cache import (
    NO_CACHE_HEADERS,
    make_etag,
    negotiate,
    parse_http_date,
)

MTIME = 1_700_000_000


@pytest.fixture
def st(tmp_path):
    path = tmp_path / "page.html"
    path.write_text("hello")
    os.utime(path, (MTIME, MTIME))
    return os.stat(path)


@pytest.fixture
def config(tmp_path):
    return StaticConfig.build(str(tmp_path), browser_cache_max_age=120)


def test_etag_format(st):
    assert make_etag(st) == f'"{MTIME * 1000}-5"'


def test_fresh_request_gets_validators(st, config):
    decision = negotiate({}, st, config)
    assert not decision.not_modified
    assert decision.headers["etag"] == make_etag(st)
    assert decision.headers["last-modified"] == formatdate(MTIME, usegmt=True)
    assert decision.headers["cache-control"] == "public, max-age=120, must-revalidate"


def test_matching_etag(st, config):
    decision = negotiate({"if-none-match": make_etag(st)}, st, config)
    assert decision.not_modified
    assert decision.headers["etag"] == make_etag(st)


def test_stale_etag(st, config):
    assert not negotiate({"if-none-match": '"1-5"'}, st, config).not_modified


def test_if_modified_since_equal(st, config):
    headers = {"if-modified-since": formatdate(MTIME, usegmt=True)}
    assert negotiate(headers, st, config).not_modified


def test_if_modified_since_older(st, config):
    headers = {"if-modified-since": formatdate(MTIME - 60, usegmt=True)}
    assert not negotiate(headers, st, config).not_modified


def test_unparseable_if_modified_since_ignored(st, config):
    assert not negotiate({"if-modified-since": "yesterday"}, st, config).not_modified


def test_caching_disabled(st, tmp_path):
    config = StaticConfig.build(str(tmp_path), browser_cache_enabled=False)
    decision = negotiate({"if-none-match": make_etag(st)}, st, config)
    assert not decision.not_modified
    assert decision.headers == NO_CACHE_HEADERS


def test_parse_http_date():
    assert parse_http_date(formatdate(MTIME, usegmt=True)) == MTIME * 1000
    assert parse_http_date("not a date") is None


def test_own_last_modified_matches_fractional_mtime(tmp_path, config):
    path = tmp_path / "fresh.html"
    path.write_text("hello")
    os.utime(path, (MTIME + 0.5, MTIME + 0.5))
    st = os.stat(path)
    last_modified = negotiate({}, st, config).headers["last-modified"]
    assert last_modified == formatdate(MTIME, usegmt=True)
    assert negotiate({"if-modified-since": last_modified}, st, config).not_modified


def test_one_second_newer_is_modified(tmp_path, config):
    path = tmp_path / "fresh.html"
    path.write_text("hello")
    os.utime(path, (MTIME + 1.5, MTIME + 1.5))
    headers = {"if-modified-since": formatdate(MTIME, usegmt=True)}
    assert not negotiate(headers, os.stat(path), config).not_modified
