"""Tests for the Picasa API client."""

from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
import respx

from picasa_feeds.client import (
    PicasaClient,
    authorization_url,
    feed_url,
    query_params,
)
from picasa_feeds.errors import AuthenticationError, NotFoundError, RateLimitError
from picasa_feeds.models import Album, RecentPhotos, Search, User

BASE_URL = "https://picasaweb.google.com/data/feed/api"
USER_URL = f"{BASE_URL}/user/testuser"
ALBUM_URL = f"{USER_URL}/albumid/1001"
ALBUM_ENTRY_ID = "https://picasaweb.google.com/data/entry/api/user/testuser/albumid/1001"


@pytest.fixture
def client():
    with PicasaClient(token="session-token", base_url=BASE_URL) as client:
        yield client


class TestHelpers:
    def test_query_params_renames_options(self):
        params = query_params(
            {"max_results": 10, "start_index": 11, "thumbsize": "160c", "q": "cat"}
        )
        assert params == {
            "max-results": "10",
            "start-index": "11",
            "thumbsize": "160c",
            "q": "cat",
        }

    def test_query_params_drops_none(self):
        assert query_params({"tag": None, "imgmax": 800}) == {"imgmax": "800"}

    def test_feed_url_rewrites_entry_ids(self):
        assert feed_url(ALBUM_ENTRY_ID) == ALBUM_URL
        assert feed_url(ALBUM_URL) == ALBUM_URL

    def test_authorization_url(self):
        url = authorization_url("https://example.com/done", session=True)
        query = parse_qs(urlsplit(url).query)
        assert url.startswith("https://www.google.com/accounts/AuthSubRequest?")
        assert query["scope"] == ["https://picasaweb.google.com/data/"]
        assert query["next"] == ["https://example.com/done"]
        assert query["session"] == ["1"]
        assert query["secure"] == ["0"]


class TestPicasaClient:
    @respx.mock
    def test_user_feed(self, client, user_xml):
        route = respx.get(USER_URL).mock(
            return_value=httpx.Response(200, content=user_xml)
        )

        user = client.user("testuser", {"max_results": 2})

        assert type(user) is User
        assert user.session is client
        assert len(user.albums()) == 2
        request = route.calls.last.request
        assert request.url.params["max-results"] == "2"
        assert request.headers["Authorization"] == 'AuthSub token="session-token"'
        assert request.headers["GData-Version"] == "2"

    @respx.mock
    def test_no_token_sends_no_authorization(self, user_xml):
        route = respx.get(USER_URL).mock(
            return_value=httpx.Response(200, content=user_xml)
        )

        with PicasaClient(base_url=BASE_URL) as client:
            client.user("testuser")

        assert "Authorization" not in route.calls.last.request.headers

    @respx.mock
    def test_album_by_id(self, client, album_xml):
        route = respx.get(ALBUM_URL).mock(
            return_value=httpx.Response(200, content=album_xml)
        )

        album = client.album("1001", user_id="testuser")

        assert type(album) is Album
        assert route.call_count == 1
        assert [p.gphoto_id for p in album.photos()] == ["2001", "2002"]
        assert route.call_count == 1

    @respx.mock
    def test_album_by_entry_id(self, client, album_xml):
        route = respx.get(ALBUM_URL).mock(
            return_value=httpx.Response(200, content=album_xml)
        )

        client.album(ALBUM_ENTRY_ID)

        assert route.call_count == 1

    @respx.mock
    def test_lazy_album_photos(self, client, user_xml, album_xml):
        respx.get(USER_URL).mock(return_value=httpx.Response(200, content=user_xml))
        album_route = respx.get(ALBUM_URL).mock(
            return_value=httpx.Response(200, content=album_xml)
        )

        holiday = client.user("testuser").albums()[0]
        assert album_route.call_count == 0

        photos = holiday.photos({"thumbsize": "160c"})
        assert [p.title for p in photos] == ["beach.jpg", "dunes.jpg"]
        assert album_route.calls.last.request.url.params["thumbsize"] == "160c"

        holiday.photos()
        assert album_route.call_count == 1
        assert photos[0].session is client
        assert photos[0].parent is holiday

    @respx.mock
    def test_empty_album_fetched_once(self, client, user_xml):
        empty_album = (
            b'<feed xmlns="http://www.w3.org/2005/Atom">'
            b"<id>https://picasaweb.google.com/data/feed/api/user/testuser/albumid/1002</id>"
            b'<category scheme="http://schemas.google.com/g/2005#kind" '
            b'term="http://schemas.google.com/photos/2007#album"/>'
            b"</feed>"
        )
        respx.get(USER_URL).mock(return_value=httpx.Response(200, content=user_xml))
        route = respx.get(f"{USER_URL}/albumid/1002").mock(
            return_value=httpx.Response(200, content=empty_album)
        )

        drafts = client.user("testuser").albums()[1]
        assert drafts.photos() == []
        assert drafts.photos() == []
        assert route.call_count == 1

    @respx.mock
    def test_next_and_previous(self, client, user_xml, user_page2_xml):
        route = respx.get(USER_URL)
        route.side_effect = [
            httpx.Response(200, content=user_xml),
            httpx.Response(200, content=user_page2_xml),
            httpx.Response(200, content=user_xml),
        ]

        first = client.user("testuser")
        second = first.next()

        assert type(second) is User
        assert second.start_index == 3
        assert route.calls[1].request.url.params["start-index"] == "3"
        assert second.next() is None

        back = second.previous()
        assert back.start_index == 1
        assert route.call_count == 3

    @respx.mock
    def test_next_page_keeps_feed_type(self, client, recent_xml):
        empty_page = (
            b'<feed xmlns="http://www.w3.org/2005/Atom">'
            b"<id>https://picasaweb.google.com/data/feed/api/user/testuser</id>"
            b'<category scheme="http://schemas.google.com/g/2005#kind" '
            b'term="http://schemas.google.com/photos/2007#user"/>'
            b"</feed>"
        )
        route = respx.get(USER_URL)
        route.side_effect = [
            httpx.Response(200, content=recent_xml),
            httpx.Response(200, content=empty_page),
        ]

        recent = client.recent_photos("testuser")
        page = recent.next()

        assert type(page) is RecentPhotos
        assert page.photos() == []
        assert route.calls.last.request.url.params["start-index"] == "2"

    @respx.mock
    def test_load_refetches_entity(self, client, user_xml, album_xml):
        respx.get(USER_URL).mock(return_value=httpx.Response(200, content=user_xml))
        route = respx.get(ALBUM_URL).mock(
            return_value=httpx.Response(200, content=album_xml)
        )

        holiday = client.user("testuser").albums()[0]
        detail = holiday.load({"imgmax": 800})

        assert type(detail) is Album
        assert detail.numphotos == 2
        assert route.calls.last.request.url.params["imgmax"] == "800"

    @respx.mock
    def test_recent_photos(self, client, recent_xml):
        route = respx.get(USER_URL).mock(
            return_value=httpx.Response(200, content=recent_xml)
        )

        recent = client.recent_photos("testuser")

        assert type(recent) is RecentPhotos
        assert recent.photos()[0].url("144u").endswith("/144u/snow.jpg")
        assert route.calls.last.request.url.params["kind"] == "photo"

    @respx.mock
    def test_community_search(self, client, search_xml):
        route = respx.get(f"{BASE_URL}/all").mock(
            return_value=httpx.Response(200, content=search_xml)
        )

        results = client.search("beach")

        assert type(results) is Search
        assert results.total_results == 0
        assert results.photos() == []
        assert route.call_count == 1
        assert route.calls.last.request.url.params["q"] == "beach"

    @respx.mock
    def test_user_search(self, client, album_xml):
        route = respx.get(USER_URL).mock(
            return_value=httpx.Response(200, content=album_xml)
        )

        results = client.search("beach", user_id="testuser")

        assert type(results) is Search
        assert len(results.photos()) == 2
        assert route.calls.last.request.url.params["q"] == "beach"

    @respx.mock
    def test_iter_pages(self, client, user_xml, user_page2_xml):
        route = respx.get(USER_URL)
        route.side_effect = [
            httpx.Response(200, content=user_xml),
            httpx.Response(200, content=user_page2_xml),
        ]

        first = client.user("testuser")
        pages = list(client.iter_pages(first))

        assert len(pages) == 2
        titles = [a.title for page in pages for a in page.albums()]
        assert titles == ["Holiday", "Drafts", "Winter"]
        assert route.call_count == 2

    @respx.mock
    def test_iter_pages_respects_max_pages(self, client, user_xml):
        route = respx.get(USER_URL).mock(
            return_value=httpx.Response(200, content=user_xml)
        )

        first = client.user("testuser")
        pages = list(client.iter_pages(first, max_pages=3))

        assert len(pages) == 3
        assert route.call_count == 3

    @respx.mock
    @patch("picasa_feeds.client.time.sleep")
    def test_iter_pages_delay(self, mock_sleep, client, user_xml, user_page2_xml):
        route = respx.get(USER_URL)
        route.side_effect = [
            httpx.Response(200, content=user_xml),
            httpx.Response(200, content=user_page2_xml),
        ]

        list(client.iter_pages(client.user("testuser"), delay=1.5))

        mock_sleep.assert_called_once_with(1.5)

    @respx.mock
    def test_auth_failure_raises(self, client):
        respx.get(USER_URL).mock(return_value=httpx.Response(403))

        with pytest.raises(AuthenticationError, match="Authentication failed"):
            client.user("testuser")

    @respx.mock
    def test_not_found_raises(self, client):
        respx.get(ALBUM_URL).mock(return_value=httpx.Response(404))

        with pytest.raises(NotFoundError) as exc_info:
            client.album("1001", user_id="testuser")
        assert exc_info.value.status_code == 404

    @respx.mock
    def test_rate_limit_raises(self, client):
        respx.get(USER_URL).mock(
            return_value=httpx.Response(429, headers={"retry-after": "30"})
        )

        with pytest.raises(RateLimitError, match="Retry in 30s"):
            client.user("testuser")

    @respx.mock
    def test_server_error_propagates(self, client):
        respx.get(USER_URL).mock(return_value=httpx.Response(500))

        with pytest.raises(httpx.HTTPStatusError):
            client.user("testuser")
