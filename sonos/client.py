import asyncio
import logging
import xml.etree.ElementTree as ET
from urllib.parse import urlparse

import aiohttp

from .control import description_url, get_device_info, send_action
from .didl import parse_duration, parse_track_metadata, parse_tracks
from .discovery import discover_locations, parse_zone_group_state
from .errors import SonosConnectionError, SonosError
from .models import Speaker, TrackInfo
from .utils import SONOS_PORT, soap_args

logger = logging.getLogger(__name__)

QUEUE_CONTAINER = 'Q:0'
QUEUE_PAGE_SIZE = 1000


class SonosClient:
    """Async client for discovering and controlling Sonos zone players.

    Owns one aiohttp session for the lifetime of the client; use it as an
    async context manager or call close() when done. Every operation raises
    a SonosError subclass on failure.
    """

    def __init__(self, http_timeout=5.0, session=None):
        self._timeout = aiohttp.ClientTimeout(total=http_timeout)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    @property
    def session(self):
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self):
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    # Discovery

    async def _speaker_from_location(self, location):
        info = await get_device_info(self.session, location)
        if not info.get('model', '').startswith('Sonos') or not info.get('uuid'):
            logger.debug(f"Ignoring non-Sonos device at {location}")
            return None
        parsed = urlparse(location)
        return Speaker(
            uuid=info['uuid'],
            ip=parsed.hostname,
            port=parsed.port or SONOS_PORT,
            location=location,
            name=info.get('room') or info.get('name') or 'Unknown',
            model=info['model'],
        )

    async def resolve_by_address(self, ip):
        """Connects directly to the speaker at the given address."""
        return await self._speaker_from_location(description_url(ip))

    async def discover(self, timeout):
        """Discovers every zone player answering an SSDP search within timeout."""
        locations = await discover_locations(timeout)
        tasks = [
            (location, asyncio.create_task(self._speaker_from_location(location)))
            for location in locations
        ]

        speakers = {}
        for location, task in tasks:
            try:
                speaker = await task
            except SonosError as e:
                logger.error(f"Failed to get device info for {location}: {e}")
                continue
            if speaker is not None:
                speakers.setdefault(speaker.uuid, speaker)
        return list(speakers.values())

    async def resolve_by_name(self, name, timeout):
        """Finds the speaker whose room name matches, or None."""
        for speaker in await self.discover(timeout):
            if speaker.name.casefold() == name.casefold():
                return speaker
        return None

    def identifier(self, speaker):
        return speaker.uuid

    async def group_topology(self, speaker):
        """Returns [(coordinator_uuid, [MemberInfo, ...]), ...] as the speaker reports it."""
        result = await self.invoke_action(speaker, 'ZoneGroupTopology', 'GetZoneGroupState')
        zone_state = result.get('ZoneGroupState')
        if not zone_state:
            raise SonosConnectionError(f"{speaker.name} returned an empty zone group state")
        try:
            return parse_zone_group_state(zone_state)
        except ET.ParseError as e:
            raise SonosConnectionError(f"Malformed zone group state from {speaker.name}: {e}") from e

    # Queries

    async def invoke_action(self, speaker, service, action, payload=''):
        """Sends a raw SOAP action with a literal XML payload."""
        return await send_action(self.session, speaker.ip, service, action, payload, port=speaker.port)

    async def is_playing(self, speaker):
        result = await self.invoke_action(speaker, 'AVTransport', 'GetTransportInfo', soap_args(InstanceID=0))
        return result.get('CurrentTransportState') == 'PLAYING'

    async def volume(self, speaker):
        result = await self.invoke_action(
            speaker, 'RenderingControl', 'GetVolume', soap_args(InstanceID=0, Channel='Master')
        )
        try:
            return int(result.get('CurrentVolume', ''))
        except ValueError:
            raise SonosConnectionError(f"Invalid volume from {speaker.name}: {result}") from None

    async def current_track(self, speaker):
        """Returns the TrackInfo of the current track, or None if nothing is loaded."""
        result = await self.invoke_action(speaker, 'AVTransport', 'GetPositionInfo', soap_args(InstanceID=0))
        track = parse_track_metadata(result.get('TrackMetaData'), result.get('TrackURI') or None)
        if track is None:
            return None
        return TrackInfo(
            track=track,
            elapsed=parse_duration(result.get('RelTime')) or 0,
            duration=parse_duration(result.get('TrackDuration')) or 0,
        )

    async def browse(self, speaker, container_id, start=0, count=100):
        """Browses a ContentDirectory container and returns the raw DIDL result."""
        payload = soap_args(
            ObjectID=container_id,
            BrowseFlag='BrowseDirectChildren',
            Filter='*',
            StartingIndex=start,
            RequestedCount=count,
            SortCriteria='',
        )
        result = await self.invoke_action(speaker, 'ContentDirectory', 'Browse', payload)
        if 'Result' not in result:
            raise SonosConnectionError(f"No Result in browse response for {container_id}")
        return result['Result']

    async def queue(self, speaker):
        didl = await self.browse(speaker, QUEUE_CONTAINER, count=QUEUE_PAGE_SIZE)
        try:
            return parse_tracks(didl)
        except ET.ParseError as e:
            raise SonosConnectionError(f"Malformed queue from {speaker.name}: {e}") from e

    # Transport

    async def play(self, speaker):
        await self.invoke_action(speaker, 'AVTransport', 'Play', soap_args(InstanceID=0, Speed=1))

    async def pause(self, speaker):
        await self.invoke_action(speaker, 'AVTransport', 'Pause', soap_args(InstanceID=0))

    async def next(self, speaker):
        await self.invoke_action(speaker, 'AVTransport', 'Next', soap_args(InstanceID=0))

    async def previous(self, speaker):
        await self.invoke_action(speaker, 'AVTransport', 'Previous', soap_args(InstanceID=0))

    async def set_volume_relative(self, speaker, adjustment):
        """Adjusts the volume by a signed amount and returns the new volume."""
        result = await self.invoke_action(
            speaker,
            'RenderingControl',
            'SetRelativeVolume',
            soap_args(InstanceID=0, Channel='Master', Adjustment=adjustment),
        )
        try:
            return int(result.get('NewVolume') or 0)
        except ValueError:
            raise SonosConnectionError(f"Invalid volume from {speaker.name}: {result}") from None

    async def clear_queue(self, speaker):
        await self.invoke_action(speaker, 'AVTransport', 'RemoveAllTracksFromQueue', soap_args(InstanceID=0))

    async def queue_next(self, speaker, uri, metadata):
        """Enqueues a URI right after the current track."""
        payload = soap_args(
            InstanceID=0,
            EnqueuedURI=uri,
            EnqueuedURIMetaData=metadata,
            DesiredFirstTrackNumberEnqueued=0,
            EnqueueAsNext=1,
        )
        await self.invoke_action(speaker, 'AVTransport', 'AddURIToQueue', payload)
