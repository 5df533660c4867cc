"""Picasa Web Albums Data API client.

Authentication uses AuthSub: a single-use token obtained through
``authorization_url`` is exchanged for a session token, which is sent with
every request. Public feeds can be read without a token.

The endpoint can be overridden with an environment variable:
    PICASA_BASE_URL
"""

import logging
import os
import time
from collections.abc import Iterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from .errors import AuthenticationError, NotFoundError, RateLimitError
from .models import Album, FeedEntity, RecentPhotos, Search, User
from .parser import parse_feed

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = os.environ.get(
    "PICASA_BASE_URL",
    "https://picasaweb.google.com/data/feed/api",
)

AUTHSUB_REQUEST_URL = "https://www.google.com/accounts/AuthSubRequest"
PICASA_SCOPE = "https://picasaweb.google.com/data/"

# Option names accepted by the feeds, keyed by their Python spelling
QUERY_OPTIONS = {
    "max_results": "max-results",
    "start_index": "start-index",
    "q": "q",
    "tag": "tag",
    "kind": "kind",
    "access": "access",
    "thumbsize": "thumbsize",
    "imgmax": "imgmax",
}


def authorization_url(next_url: str, session: bool = True, secure: bool = False) -> str:
    """URL to send a user to so they can grant this application access.

    Google redirects back to ``next_url`` with a ``token`` query parameter.
    """
    params = {
        "scope": PICASA_SCOPE,
        "next": next_url,
        "session": "1" if session else "0",
        "secure": "1" if secure else "0",
    }
    return f"{AUTHSUB_REQUEST_URL}?{urlencode(params)}"


def query_params(options: dict | None) -> dict[str, str]:
    """Translate option names (max_results, start_index, ...) to feed params."""
    params: dict[str, str] = {}
    for key, value in (options or {}).items():
        if value is None:
            continue
        name = QUERY_OPTIONS.get(key, key.replace("_", "-"))
        params[name] = str(value).lower() if isinstance(value, bool) else str(value)
    return params


def feed_url(id_or_url: str) -> str:
    """Entry ids point at /data/entry/...; the data lives at /data/feed/..."""
    return id_or_url.replace("/data/entry/", "/data/feed/", 1)


class PicasaClient:
    """Fetches Picasa feeds and binds itself to the entity graphs it returns."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
    ):
        self.token = token
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        headers = {"GData-Version": "2"}
        if token:
            headers["Authorization"] = f'AuthSub token="{token}"'
        self._client = httpx.Client(
            headers=headers,
            timeout=timeout,
            follow_redirects=True,
        )

    def get_url(
        self,
        id_or_url: str,
        options: dict | None = None,
        kind: type[FeedEntity] | None = None,
    ) -> FeedEntity:
        """Fetch any feed or entry by its id or URL and parse it."""
        scheme, netloc, path, query, fragment = urlsplit(feed_url(id_or_url))
        params = dict(parse_qsl(query))
        params.update(query_params(options))
        url = urlunsplit((scheme, netloc, path, "", fragment))

        logger.debug("GET %s %s", url, params)
        response = self._client.get(url, params=params)
        self._check_response(response, url)
        return parse_feed(response.content, kind=kind, session=self)

    def user(self, user_id: str = "default", options: dict | None = None) -> User:
        """The user's feed, listing their albums."""
        return self.get_url(self._user_url(user_id), options, kind=User)

    def album(
        self,
        album_id_or_url: str,
        options: dict | None = None,
        user_id: str = "default",
    ) -> Album:
        """A single album including the current page of its photos."""
        if "/" in album_id_or_url:
            url = album_id_or_url
        else:
            url = f"{self._user_url(user_id)}/albumid/{album_id_or_url}"
        return self.get_url(url, options, kind=Album)

    def recent_photos(
        self, user_id: str = "default", options: dict | None = None
    ) -> RecentPhotos:
        """The user's most recently uploaded photos."""
        params = {"kind": "photo", **(options or {})}
        return self.get_url(self._user_url(user_id), params, kind=RecentPhotos)

    def search(
        self,
        q: str,
        options: dict | None = None,
        user_id: str | None = None,
    ) -> Search:
        """Search the user's photos, or all public photos when no user is given."""
        params = {"q": q, "kind": "photo", **(options or {})}
        url = self._user_url(user_id) if user_id else f"{self.base_url}/all"
        return self.get_url(url, params, kind=Search)

    def iter_pages(
        self,
        entity: FeedEntity,
        max_pages: int = 50,
        delay: float = 0,
    ) -> Iterator[FeedEntity]:
        """Yield ``entity`` and each following page of its feed."""
        page = entity
        for page_num in range(max_pages):
            if page_num > 0:
                if page.link("next") is None:
                    logger.info("No more pages. Pagination complete.")
                    break
                if delay > 0:
                    logger.debug("Sleeping %.1fs before next request...", delay)
                    time.sleep(delay)
                page = page.next()
                logger.info("Fetched page %d of %s", page_num + 1, entity.id)
            yield page

    def _user_url(self, user_id: str) -> str:
        if "/" in user_id:
            return user_id
        return f"{self.base_url}/user/{user_id}"

    @staticmethod
    def _check_response(response: httpx.Response, url: str) -> None:
        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(
                "Authentication failed. Your AuthSub token may be expired "
                "or revoked. Run `picasa-feeds setup` again.",
                status,
            )
        if status == 404:
            raise NotFoundError(f"No feed at {url} (404).", status)
        if status in (429, 503):
            retry_after = response.headers.get("retry-after")
            wait_msg = f" Retry in {retry_after}s." if retry_after else ""
            raise RateLimitError(f"Rate limited by Picasa.{wait_msg}", status)
        response.raise_for_status()

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
