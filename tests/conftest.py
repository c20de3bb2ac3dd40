"""Shared fixtures: a recording stand-in for SonosClient and a small household."""

import pytest

from sonos import MemberInfo, SonosConnectionError, Speaker, Track, TrackInfo
from sinuous.groups import Group, GroupModel
from sinuous.models import FavoriteEntry, Selection
from sinuous.router import CommandRouter

KITCHEN = Speaker(uuid='RINCON_A', ip='10.0.0.1', location='http://10.0.0.1:1400/xml/device_description.xml', name='Kitchen', model='Sonos One')
LIVING = Speaker(uuid='RINCON_B', ip='10.0.0.2', location='http://10.0.0.2:1400/xml/device_description.xml', name='Living Room', model='Sonos Five')
OFFICE = Speaker(uuid='RINCON_C', ip='10.0.0.3', location='http://10.0.0.3:1400/xml/device_description.xml', name='Office', model='Sonos Era 100')

SPEAKERS = (KITCHEN, LIVING, OFFICE)


def member(speaker):
    return MemberInfo(uuid=speaker.uuid, name=speaker.name, location=speaker.location)


TOPOLOGY = [
    # Living Room coordinates, Kitchen joined it
    ('RINCON_B', [member(KITCHEN), member(LIVING)]),
    ('RINCON_C', [member(OFFICE)]),
]

FAVORITES_XML = (
    '<DIDL-Lite xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:upnp="urn:schemas-upnp-org:metadata-1-0/upnp/" '
    'xmlns:r="urn:schemas-rinconnetworks-com:metadata-1-0/" '
    'xmlns="urn:schemas-upnp-org:metadata-1-0/DIDL-Lite/">'
    '<item id="FV:2/11" parentID="FV:2" restricted="false">'
    '<dc:title>Morning Mix</dc:title>'
    '<upnp:class>object.itemobject.item.sonos-favorite</upnp:class>'
    '<r:ordinal>0</r:ordinal>'
    '<res protocolInfo="sonos.com-spotify:*:audio/x-spotify:*">'
    'x-sonos-spotify:spotify%3aplaylist%3a37i9dQZF1DX?sid=9&amp;flags=8232&amp;sn=1</res>'
    '<r:type>instantPlay</r:type>'
    '<r:description>Spotify Playlist</r:description>'
    '<r:resMD>&lt;DIDL-Lite&gt;&lt;item id=&quot;mix&quot;&gt;&lt;/item&gt;&lt;/DIDL-Lite&gt;</r:resMD>'
    '</item>'
    '<item id="FV:2/12" parentID="FV:2" restricted="false">'
    '<dc:title>Radio Paradise</dc:title>'
    '<upnp:class>object.itemobject.item.sonos-favorite</upnp:class>'
    '<res protocolInfo="x-sonosapi-stream:*:*:*">'
    'x-sonosapi-stream:s13606?sid=254&amp;flags=8224&amp;sn=0</res>'
    '<r:description>TuneIn Station</r:description>'
    '<r:resMD>&lt;DIDL-Lite&gt;&lt;/DIDL-Lite&gt;</r:resMD>'
    '</item>'
    '</DIDL-Lite>'
)

QUEUE = [
    Track(title='So What', creator='Miles Davis', album='Kind of Blue', uri='x-file-cifs://nas/so-what.flac', duration=562),
    Track(title='Blue in Green', creator='Miles Davis', album='Kind of Blue', uri='x-file-cifs://nas/blue-in-green.flac', duration=337),
]


class FakeSonosClient:
    """Records every call and answers from in-memory state.

    Set ``failures[name]`` to an exception to make that operation raise it.
    """

    def __init__(self, speakers=SPEAKERS, topology=None, favorites_xml=FAVORITES_XML):
        self.speakers = {speaker.ip: speaker for speaker in speakers}
        self.topology = TOPOLOGY if topology is None else topology
        self.favorites_xml = favorites_xml
        self.failures = {}
        self.calls = []

        self.playing = False
        self.volume_level = 10
        self.now_playing = TrackInfo(track=QUEUE[0], elapsed=30, duration=562)
        self.tracks = list(QUEUE)

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        failure = self.failures.get(name)
        if failure is not None:
            raise failure

    def calls_named(self, name):
        return [call for call in self.calls if call[0] == name]

    def call_names(self):
        return [call[0] for call in self.calls]

    async def resolve_by_address(self, ip):
        self._record('resolve_by_address', ip)
        return self.speakers.get(ip)

    async def resolve_by_name(self, name, timeout):
        self._record('resolve_by_name', name, timeout)
        for speaker in self.speakers.values():
            if speaker.name == name:
                return speaker
        return None

    async def discover(self, timeout):
        self._record('discover', timeout)
        return list(self.speakers.values())

    def identifier(self, speaker):
        return speaker.uuid

    async def group_topology(self, speaker):
        self._record('group_topology', speaker.uuid)
        return self.topology

    async def is_playing(self, speaker):
        self._record('is_playing', speaker.uuid)
        return self.playing

    async def volume(self, speaker):
        self._record('volume', speaker.uuid)
        return self.volume_level

    async def current_track(self, speaker):
        self._record('current_track', speaker.uuid)
        return self.now_playing

    async def queue(self, speaker):
        self._record('queue', speaker.uuid)
        return list(self.tracks)

    async def play(self, speaker):
        self._record('play', speaker.uuid)
        self.playing = True

    async def pause(self, speaker):
        self._record('pause', speaker.uuid)
        self.playing = False

    async def next(self, speaker):
        self._record('next', speaker.uuid)

    async def previous(self, speaker):
        self._record('previous', speaker.uuid)

    async def set_volume_relative(self, speaker, adjustment):
        self._record('set_volume_relative', speaker.uuid, adjustment)
        self.volume_level = max(0, min(100, self.volume_level + adjustment))
        return self.volume_level

    async def clear_queue(self, speaker):
        self._record('clear_queue', speaker.uuid)
        self.tracks = []

    async def queue_next(self, speaker, uri, metadata):
        self._record('queue_next', speaker.uuid, uri, metadata)

    async def invoke_action(self, speaker, service, action, payload=''):
        self._record('invoke_action', speaker.uuid, service, action, payload)
        return {}

    async def browse(self, speaker, container_id, start=0, count=100):
        self._record('browse', speaker.uuid, container_id)
        return self.favorites_xml


def device_error(message='device went away'):
    return SonosConnectionError(message)


@pytest.fixture
def client():
    return FakeSonosClient()


@pytest.fixture
def devices():
    return {speaker.uuid: speaker for speaker in SPEAKERS}


@pytest.fixture
def groups():
    return GroupModel([Group(coordinator, members) for coordinator, members in TOPOLOGY])


@pytest.fixture
def favorites():
    return [
        FavoriteEntry(
            title='Morning Mix',
            description='Spotify Playlist',
            uri='x-rincon-cpcontainer:1006206cspotify%3aplaylist%3a37i9?sid=9&amp;flags=8300&amp;sn=1',
            metadata='&lt;DIDL-Lite&gt;&lt;/DIDL-Lite&gt;',
        ),
        FavoriteEntry(
            title='So What',
            description='Miles Davis',
            uri='x-sonos-spotify:spotify%3atrack%3a4vLYewWIvqHfKtJDk8c8tq?sid=9&amp;flags=8224&amp;sn=1',
            metadata='&lt;DIDL-Lite&gt;&lt;item id=&quot;t&quot;/&gt;&lt;/DIDL-Lite&gt;',
        ),
        FavoriteEntry(title='Focus', description='', uri='file:///jffs/settings/savedqueues.rsq#3', metadata=''),
    ]


@pytest.fixture
def router(client, devices, groups, favorites):
    router = CommandRouter(client, devices, groups, Selection())
    router.set_favorites(favorites)
    return router
