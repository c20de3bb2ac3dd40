import logging
import xml.etree.ElementTree as ET

from .models import Track
from .utils import get_xml_text

logger = logging.getLogger(__name__)


def parse_duration(value):
    """Converts an H:MM:SS(.fff) duration string to whole seconds."""
    if not value or value == 'NOT_IMPLEMENTED':
        return None
    try:
        parts = [float(p) for p in value.split(':')]
    except ValueError:
        logger.debug(f"Unparseable duration: {value}")
        return None
    seconds = 0
    for part in parts:
        seconds = seconds * 60 + part
    return int(seconds)


def _track_from_item(item):
    res = item.find('{*}res')
    return Track(
        title=get_xml_text(item, '{*}title') or 'Unknown',
        creator=get_xml_text(item, '{*}creator'),
        album=get_xml_text(item, '{*}album'),
        uri=res.text if res is not None else None,
        duration=parse_duration(res.get('duration')) if res is not None else None,
    )


def parse_tracks(didl):
    """Parses a DIDL-Lite document into a list of tracks."""
    if not didl:
        return []
    root = ET.fromstring(didl)
    return [_track_from_item(item) for item in root.iter('{urn:schemas-upnp-org:metadata-1-0/DIDL-Lite/}item')]


def parse_track_metadata(didl, uri=None):
    """Parses the single-item metadata of the current track."""
    if not didl or didl == 'NOT_IMPLEMENTED':
        return Track(title=uri, uri=uri) if uri else None
    try:
        tracks = parse_tracks(didl)
    except ET.ParseError:
        logger.debug(f"Unparseable track metadata: {didl}")
        tracks = []
    if not tracks:
        return Track(title=uri, uri=uri) if uri else None
    track = tracks[0]
    if track.uri is None and uri:
        track = Track(track.title, track.creator, track.album, uri, track.duration)
    return track
