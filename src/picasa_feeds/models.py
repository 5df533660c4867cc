"""Entity graph for parsed Picasa Web Albums feeds.

Every entity is built by the parser from a fetched document. Entities keep a
weak reference to their enclosing entity and resolve the client ("session")
that fetched them by walking up that chain, so any node in the graph can
fetch further data on demand.
"""

import logging
import re
import threading
import weakref
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, NoReturn
from urllib.parse import urlsplit

from .errors import MissingSessionError

if TYPE_CHECKING:
    from .client import PicasaClient

logger = logging.getLogger(__name__)

# Last directory segment before the file name, e.g. ".../160c/photo.jpg"
_SIZE_TOKEN_RE = re.compile(r"/([^/]+)/[^/]+$")


@dataclass(frozen=True)
class Link:
    rel: str
    href: str
    type: str | None = None


@dataclass(frozen=True)
class Author:
    name: str | None = None
    uri: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class PhotoUrl:
    url: str
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True)
class ThumbnailUrl(PhotoUrl):
    @property
    def size_token(self) -> str | None:
        """Size name of this thumbnail, e.g. "160c". See Photo.url."""
        match = _SIZE_TOKEN_RE.search(urlsplit(self.url).path)
        return match.group(1) if match else None


class FetchState(Enum):
    NOT_REQUESTED = "not_requested"
    REQUESTED = "requested"


@dataclass(eq=False)
class FeedEntity:
    """Behaviour shared by User, Album, Photo and the other feed types.

    Not used independently.
    """

    id: str = ""
    updated: datetime | None = None
    title: str | None = None
    links: list[Link] = field(default_factory=list)
    content: PhotoUrl | None = None
    thumbnails: list[ThumbnailUrl] = field(default_factory=list)
    author: Author | None = None
    entries: list["FeedEntity"] = field(default_factory=list)

    _session: "PicasaClient | None" = field(
        default=None, init=False, repr=False, compare=False
    )
    _parent_ref: "weakref.ref[FeedEntity] | None" = field(
        default=None, init=False, repr=False, compare=False
    )

    @property
    def parent(self) -> "FeedEntity | None":
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @parent.setter
    def parent(self, parent: "FeedEntity | None") -> None:
        self._parent_ref = weakref.ref(parent) if parent is not None else None

    @property
    def session(self) -> "PicasaClient | None":
        """The client that retrieved this data, or None if detached.

        Looks up the parent chain when no session was bound directly and
        caches the first one found.
        """
        if self._session is not None:
            return self._session
        node = self.parent
        while node is not None:
            if node._session is not None:
                self._session = node._session
                return self._session
            node = node.parent
        return None

    @session.setter
    def session(self, session: "PicasaClient | None") -> None:
        self._session = session

    def children(self) -> list["FeedEntity"]:
        return self.entries

    def link(self, rel: str) -> Link | None:
        """Return the first link with the given rel attribute value."""
        for link in self.links:
            if link.rel == rel:
                return link
        return None

    def _require_session(self) -> "PicasaClient":
        session = self.session
        if session is None:
            raise MissingSessionError(
                f"{type(self).__name__} {self.id or '<no id>'} has no session; "
                "it was not fetched through a PicasaClient"
            )
        return session

    def load(self, options: dict | None = None) -> "FeedEntity":
        """Retrieve the data at the url of the current record."""
        return self._require_session().get_url(self.id, options or {})

    def next(self) -> "FeedEntity | None":
        """If the results are paginated, retrieve the next page."""
        link = self.link("next")
        if link is None:
            return None
        return self._require_session().get_url(link.href, kind=type(self))

    def previous(self) -> "FeedEntity | None":
        """If the results are paginated, retrieve the previous page."""
        link = self.link("previous")
        if link is None:
            return None
        return self._require_session().get_url(link.href, kind=type(self))


@dataclass(eq=False)
class User(FeedEntity):
    total_results: int | None = None  # total number of albums
    start_index: int | None = None
    items_per_page: int | None = None
    thumbnail: str | None = None

    def albums(self) -> list["FeedEntity"]:
        """The current page of albums associated to the user."""
        return self.entries


@dataclass(eq=False)
class RecentPhotos(User):
    def photos(self) -> list["FeedEntity"]:
        """The current page of recently updated photos associated to the user."""
        return self.entries

    @property
    def albums(self) -> NoReturn:
        """Not offered: recently updated feeds list photos only."""
        raise AttributeError(
            "'RecentPhotos' feeds list photos, not albums; use photos()"
        )


@dataclass(eq=False)
class Album(FeedEntity):
    published: datetime | None = None
    summary: str | None = None
    rights: str | None = None
    gphoto_id: str | None = None
    name: str | None = None
    access: str | None = None
    numphotos: int | None = None  # number of pictures in this album
    total_results: int | None = None  # number of pictures matching a search
    start_index: int | None = None
    items_per_page: int | None = None
    allow_downloads: bool | None = None

    _photos_state: FetchState = field(
        default=FetchState.NOT_REQUESTED, init=False, repr=False, compare=False
    )
    _photos_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def is_public(self) -> bool:
        return self.rights == "public"

    def is_private(self) -> bool:
        return self.rights == "private"

    @property
    def photos_state(self) -> FetchState:
        return self._photos_state

    def mark_photos_loaded(self) -> None:
        """Record that ``entries`` already holds this album's photo listing."""
        self._photos_state = FetchState.REQUESTED

    def photos(self, options: dict | None = None) -> list["FeedEntity"]:
        """The current page of photos in the album.

        Albums listed inside a user feed carry no photo entries, so the album
        detail feed is fetched on first call. The fetch is attempted at most
        once per instance; without a session the current (possibly empty)
        entries are returned.
        """
        with self._photos_lock:
            if self.entries or self._photos_state is FetchState.REQUESTED:
                return self.entries
            self._photos_state = FetchState.REQUESTED

            session = self.session
            if session is None:
                logger.debug(
                    "No session for album %s; returning cached entries", self.id
                )
                return self.entries
            self.session = session

            logger.debug("Fetching photos for album %s", self.id)
            detail = session.album(self.id, options or {})
            self.entries = detail.entries
            for photo in self.entries:
                photo.parent = self
            return self.entries


@dataclass(eq=False)
class Search(Album):
    """Photos matching a search. Shaped like an album, but not one."""


@dataclass(eq=False)
class Photo(FeedEntity):
    published: datetime | None = None
    summary: str | None = None
    gphoto_id: str | None = None
    version: str | None = None  # changes whenever the photo is updated
    position: float | None = None
    albumid: str | None = None  # set in the recently updated feed, for instance
    width: int | None = None
    height: int | None = None
    description: str | None = None
    keywords: str | None = None
    credit: str | None = None

    def url(self, thumb_name: str | None = None) -> str | None:
        """Return the URL of the full image or of a named thumbnail.

        Thumbnail names are by image width in pixels. Sizes up to 160 may be
        either cropped (square) or uncropped:

            cropped:        32c, 48c, 64c, 72c, 144c, 160c
            uncropped:      32u, 48u, 64u, 72u, 144u, 160u

        Larger sizes are named by the width alone. Widths up to 800px may be
        embedded on a webpage:

            embeddable:     200, 288, 320, 400, 512, 576, 640, 720, 800
            not embeddable: 912, 1024, 1152, 1280, 1440, 1600

        Only thumbnails present in the fetched feed can be found; request the
        sizes you need with the ``thumbsize`` option.
        """
        if thumb_name is not None:
            thumb = self.thumbnail(thumb_name)
            return thumb.url if thumb else None
        return self.content.url if self.content else None

    def thumbnail(self, thumb_name: str) -> ThumbnailUrl | None:
        for thumb in self.thumbnails:
            if thumb.size_token == thumb_name:
                return thumb
        return None
