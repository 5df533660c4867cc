"""Map Picasa Web Albums Atom/GData documents onto the entity graph.

A document is either a <feed> (user, album, recently updated or search
results) or a single <entry>. Only elements in the Atom, openSearch, gphoto
and media namespaces are read; everything else is ignored. The contents of
<media:group> are treated as if they were direct children of the entry:

    entry -> media:group -> media:content / media:thumbnail / media:credit
"""

import logging
from collections.abc import Callable, Iterator
from datetime import datetime
from typing import TYPE_CHECKING
from xml.etree import ElementTree

from .models import (
    Album,
    Author,
    FeedEntity,
    Link,
    Photo,
    PhotoUrl,
    RecentPhotos,
    Search,
    ThumbnailUrl,
    User,
)

if TYPE_CHECKING:
    from .client import PicasaClient

logger = logging.getLogger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"
GPHOTO_NS = "http://schemas.google.com/photos/2007"
MEDIA_NS = "http://search.yahoo.com/mrss/"
# GData v1 and v2 feeds use different openSearch namespaces
OPENSEARCH_NS = (
    "http://a9.com/-/spec/opensearchrss/1.0/",
    "http://a9.com/-/spec/opensearch/1.1/",
)
SUPPORTED_NAMESPACES = {ATOM_NS, GPHOTO_NS, MEDIA_NS, *OPENSEARCH_NS}

KIND_SCHEME = "http://schemas.google.com/g/2005#kind"
KIND_PREFIX = GPHOTO_NS + "#"


def _atom(name: str) -> str:
    return f"{{{ATOM_NS}}}{name}"


def _gphoto(name: str) -> str:
    return f"{{{GPHOTO_NS}}}{name}"


def _media(name: str) -> str:
    return f"{{{MEDIA_NS}}}{name}"


def _opensearch(name: str) -> list[str]:
    return [f"{{{ns}}}{name}" for ns in OPENSEARCH_NS]


FEED = _atom("feed")
ENTRY = _atom("entry")
LINK = _atom("link")
AUTHOR = _atom("author")
CATEGORY = _atom("category")
MEDIA_GROUP = _media("group")
MEDIA_CONTENT = _media("content")
MEDIA_THUMBNAIL = _media("thumbnail")


def _to_int(value: str) -> int:
    return int(value)


def _to_float(value: str) -> float:
    return float(value)


def _to_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def _to_datetime(value: str) -> datetime:
    # GData timestamps: "2008-05-21T02:23:33.000Z"
    return datetime.fromisoformat(value.strip())


def _to_str(value: str) -> str:
    return value


Converter = Callable[[str], object]

_BASE_FIELDS: dict[str, tuple[str, Converter]] = {
    _atom("id"): ("id", _to_str),
    _atom("updated"): ("updated", _to_datetime),
    _atom("title"): ("title", _to_str),
}

_PAGING_FIELDS: dict[str, tuple[str, Converter]] = {
    **{tag: ("total_results", _to_int) for tag in _opensearch("totalResults")},
    **{tag: ("start_index", _to_int) for tag in _opensearch("startIndex")},
    **{tag: ("items_per_page", _to_int) for tag in _opensearch("itemsPerPage")},
}

_USER_FIELDS = {
    **_BASE_FIELDS,
    **_PAGING_FIELDS,
    _gphoto("thumbnail"): ("thumbnail", _to_str),
}

_ALBUM_FIELDS = {
    **_BASE_FIELDS,
    **_PAGING_FIELDS,
    _atom("published"): ("published", _to_datetime),
    _atom("summary"): ("summary", _to_str),
    _atom("rights"): ("rights", _to_str),
    _gphoto("id"): ("gphoto_id", _to_str),
    _gphoto("name"): ("name", _to_str),
    _gphoto("access"): ("access", _to_str),
    _gphoto("numphotos"): ("numphotos", _to_int),
    _gphoto("allowDownloads"): ("allow_downloads", _to_bool),
}

_PHOTO_FIELDS = {
    **_BASE_FIELDS,
    _atom("published"): ("published", _to_datetime),
    _atom("summary"): ("summary", _to_str),
    _gphoto("id"): ("gphoto_id", _to_str),
    _gphoto("version"): ("version", _to_str),
    _gphoto("position"): ("position", _to_float),
    _gphoto("albumid"): ("albumid", _to_str),
    _gphoto("width"): ("width", _to_int),
    _gphoto("height"): ("height", _to_int),
    _media("description"): ("description", _to_str),
    _media("keywords"): ("keywords", _to_str),
    _media("credit"): ("credit", _to_str),
}

# Subclasses share their base type's fields (RecentPhotos -> User, Search -> Album)
_FIELDS_BY_TYPE: dict[type[FeedEntity], dict[str, tuple[str, Converter]]] = {
    User: _USER_FIELDS,
    Album: _ALBUM_FIELDS,
    Photo: _PHOTO_FIELDS,
}

# Entry type used when an <entry> carries no kind category of its own
_DEFAULT_ENTRY_TYPE: dict[type[FeedEntity], type[FeedEntity] | None] = {
    User: Album,
    RecentPhotos: Photo,
    Album: Photo,
    Photo: None,
}

_TYPE_BY_KIND: dict[str, type[FeedEntity]] = {
    "user": User,
    "album": Album,
    "photo": Photo,
}


def parse_feed(
    xml: bytes | str,
    kind: type[FeedEntity] | None = None,
    session: "PicasaClient | None" = None,
) -> FeedEntity:
    """Parse a feed or entry document into an entity graph.

    Args:
        xml: The response body.
        kind: Entity type of the document root. Detected from the GData kind
            category when omitted.
        session: Client to bind to the resulting graph.

    Raises:
        xml.etree.ElementTree.ParseError: The body is not well-formed XML.
        ValueError: The root element is neither an Atom feed nor an entry.
    """
    root = ElementTree.fromstring(xml)
    if root.tag not in (FEED, ENTRY):
        raise ValueError(f"Not an Atom feed or entry: <{root.tag}>")

    cls = kind or detect_kind(root)
    logger.debug("Mapping <%s> as %s", root.tag, cls.__name__)
    entity = _build(cls, root, parent=None)
    if isinstance(entity, Album) and root.tag == FEED:
        # An album feed lists its photos; an album entry does not
        entity.mark_photos_loaded()

    if session is not None:
        bind_session(entity, session)
    return entity


def detect_kind(root: ElementTree.Element) -> type[FeedEntity]:
    """Choose the entity type for a feed or entry element.

    A user feed whose entries are photos is a RecentPhotos feed. A feed
    without a kind category holds search results.
    """
    kind = _kind_of(root)
    if kind == "user":
        entry_kinds = {_kind_of(entry) for entry in root.findall(ENTRY)}
        if "photo" in entry_kinds and "album" not in entry_kinds:
            return RecentPhotos
        return User
    if kind in _TYPE_BY_KIND:
        return _TYPE_BY_KIND[kind]
    return Search if root.tag == FEED else Photo


def bind_session(root: FeedEntity, session: "PicasaClient") -> None:
    """Bind a client to the root and resolve it on every node below it.

    Resolving now caches the session on each node, so an entity stays usable
    after the rest of its graph has been garbage collected.
    """
    root.session = session
    for node in walk(root):
        node.session = node.session


def walk(root: FeedEntity) -> Iterator[FeedEntity]:
    """Yield every entity in the graph, parents before their children."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children()))


def _kind_of(element: ElementTree.Element) -> str | None:
    for category in element.findall(CATEGORY):
        term = category.get("term", "")
        if category.get("scheme") == KIND_SCHEME and term.startswith(KIND_PREFIX):
            return term[len(KIND_PREFIX):]
    return None


def _fields_for(cls: type[FeedEntity]) -> dict[str, tuple[str, Converter]]:
    for klass in cls.__mro__:
        if klass in _FIELDS_BY_TYPE:
            return _FIELDS_BY_TYPE[klass]
    return _BASE_FIELDS


def _entry_type_for(cls: type[FeedEntity], entry: ElementTree.Element):
    kind = _kind_of(entry)
    if kind in ("album", "photo"):
        return _TYPE_BY_KIND[kind]
    if kind is not None:
        # Tags, comments and other kinds have no entity type
        return None
    for klass in cls.__mro__:
        if klass in _DEFAULT_ENTRY_TYPE:
            return _DEFAULT_ENTRY_TYPE[klass]
    return None


def _children(element: ElementTree.Element) -> Iterator[ElementTree.Element]:
    """Direct children in supported namespaces, with media:group flattened."""
    for child in element:
        if child.tag == MEDIA_GROUP:
            yield from _children(child)
        elif _namespace(child.tag) in SUPPORTED_NAMESPACES:
            yield child


def _namespace(tag: str) -> str | None:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def _build(
    cls: type[FeedEntity],
    element: ElementTree.Element,
    parent: FeedEntity | None,
) -> FeedEntity:
    entity = cls()
    entity.parent = parent
    fields = _fields_for(cls)

    for child in _children(element):
        tag = child.tag
        if tag in fields:
            name, convert = fields[tag]
            value = _convert(convert, child.text, tag, entity)
            if value is not None:
                setattr(entity, name, value)
        elif tag == LINK:
            entity.links.append(
                Link(
                    rel=child.get("rel", ""),
                    href=child.get("href", ""),
                    type=child.get("type"),
                )
            )
        elif tag == MEDIA_CONTENT:
            if entity.content is None and child.get("url"):
                entity.content = _media_url(PhotoUrl, child)
        elif tag == MEDIA_THUMBNAIL:
            if child.get("url"):
                entity.thumbnails.append(_media_url(ThumbnailUrl, child))
        elif tag == AUTHOR:
            if entity.author is None:
                entity.author = _author(child)
        elif tag == ENTRY:
            entry_cls = _entry_type_for(cls, child)
            if entry_cls is None:
                continue
            entry = _build(entry_cls, child, parent=entity)
            if not entry.id:
                logger.warning(
                    "Skipping %s entry without an id in %s",
                    entry_cls.__name__,
                    entity.id or "<no id>",
                )
                continue
            entity.entries.append(entry)

    return entity


def _convert(convert: Converter, text: str | None, tag: str, entity: FeedEntity):
    if text is None:
        return None
    try:
        return convert(text)
    except ValueError as e:
        logger.warning(
            "Ignoring malformed %s value %r in %s: %s",
            tag,
            text,
            entity.id or "<no id>",
            e,
        )
        return None


def _optional_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring non-integer media dimension %r", value)
        return None


def _media_url(cls, element: ElementTree.Element):
    return cls(
        url=element.get("url"),
        width=_optional_int(element.get("width")),
        height=_optional_int(element.get("height")),
    )


def _author(element: ElementTree.Element) -> Author:
    return Author(
        name=element.findtext(_atom("name")),
        uri=element.findtext(_atom("uri")),
        email=element.findtext(_atom("email")),
    )
