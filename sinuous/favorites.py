"""Favorite playlists stored on the speaker ("My Sonos").

The browse result is scanned with plain substring matching rather than a
DIDL parser: only the fields listed below are extracted, and an item is kept
when it looks like a playlist.
"""

import logging

from sonos import SonosError

from . import config
from .errors import FavoritesFetchFailed
from .models import FavoriteEntry

logger = logging.getLogger(__name__)

CONTAINER_SCHEME = 'x-rincon-cpcontainer:'
PLAYLIST_CLASS_MARKER = 'playlistContainer'

HTML_ENTITIES = (
    ('&amp;', '&'),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&quot;', '"'),
    ('&apos;', "'"),
)


def html_unescape(text):
    """Replaces the five XML entities, in order, and nothing else."""
    for entity, char in HTML_ENTITIES:
        text = text.replace(entity, char)
    return text


def extract_tag_content(text, start_tag, end_tag):
    """Returns the text between the first start_tag and the end_tag after it."""
    start = text.find(start_tag)
    if start == -1:
        return None
    content_start = start + len(start_tag)
    end = text.find(end_tag, content_start)
    if end == -1:
        return None
    return text[content_start:end]


def is_playlist(uri, item):
    return (
        'playlist' in uri
        or uri.startswith(CONTAINER_SCHEME)
        or PLAYLIST_CLASS_MARKER in item
    )


def parse_favorites(xml):
    """Extracts the playlist-like favorites from a DIDL browse result."""
    favorites = []
    for item in xml.split('<item ')[1:]:
        res_block = extract_tag_content(item, '<res', '</res>')
        uri = ''
        if res_block is not None and '>' in res_block:
            uri = res_block[res_block.index('>') + 1:]

        if not is_playlist(uri, item):
            continue

        title = extract_tag_content(item, '<dc:title>', '</dc:title>')
        description = extract_tag_content(item, '<r:description>', '</r:description>')
        metadata = extract_tag_content(item, '<r:resMD>', '</r:resMD>')
        favorites.append(FavoriteEntry(
            title='Unknown' if title is None else title,
            description='' if description is None else description,
            uri=uri,
            metadata='' if metadata is None else metadata,
        ))
    return favorites


async def fetch_favorites(client, speaker):
    """Fetches the favorites catalog from one speaker."""
    try:
        xml = await client.browse(
            speaker, config.FAVORITES_CONTAINER, count=config.FAVORITES_PAGE_SIZE
        )
    except SonosError as e:
        raise FavoritesFetchFailed(f"Failed to browse favorites: {e}") from e
    return parse_favorites(xml)
