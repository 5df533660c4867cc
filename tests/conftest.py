"""Shared test fixtures."""

from pathlib import Path

import pytest

from picasa_feeds.models import Link, Photo, PhotoUrl, ThumbnailUrl

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> bytes:
    return (FIXTURES_DIR / name).read_bytes()


@pytest.fixture
def user_xml() -> bytes:
    return read_fixture("user_feed.xml")


@pytest.fixture
def user_page2_xml() -> bytes:
    return read_fixture("user_feed_page2.xml")


@pytest.fixture
def album_xml() -> bytes:
    return read_fixture("album_feed.xml")


@pytest.fixture
def recent_xml() -> bytes:
    return read_fixture("recent_feed.xml")


@pytest.fixture
def search_xml() -> bytes:
    return read_fixture("search_feed.xml")


@pytest.fixture
def sample_photo() -> Photo:
    return Photo(
        id="https://picasaweb.google.com/data/entry/api/user/testuser/albumid/1001/photoid/2001",
        title="beach.jpg",
        content=PhotoUrl(
            url="https://lh3.ggpht.com/testuser/BBBB/beach.jpg",
            width=1600,
            height=1200,
        ),
        thumbnails=[
            ThumbnailUrl(url="https://lh3.ggpht.com/testuser/BBBB/72c/beach.jpg", width=72, height=72),
            ThumbnailUrl(url="https://lh3.ggpht.com/testuser/BBBB/160c/beach.jpg", width=160, height=160),
            ThumbnailUrl(url="https://lh3.ggpht.com/testuser/BBBB/160c/beach-copy.jpg", width=160, height=160),
            ThumbnailUrl(url="https://lh3.ggpht.com/testuser/BBBB/800/beach.jpg", width=800, height=600),
        ],
        links=[Link(rel="self", href="https://example.com/self")],
    )
