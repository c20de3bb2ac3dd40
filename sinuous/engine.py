"""Sync engine: the single task that owns all speaker state.

It alternates between two event sources, a refresh timer and the command
channel, and publishes one NewState update per cycle on the update channel.
"""

import asyncio
import enum
import logging

from sonos import SonosError

from . import config
from .directory import resolve_devices
from .errors import ChannelClosed, FavoritesFetchFailed, NoSelectedGroup, RefreshFailed, SinuousError
from .favorites import fetch_favorites
from .groups import load_groups
from .models import NewState, NopUpdate, Selection
from .router import CommandRouter
from .snapshot import PlaybackCache, build_snapshot

logger = logging.getLogger(__name__)


class EngineState(enum.Enum):
    INITIALIZING = 'initializing'
    RUNNING = 'running'
    TERMINATED = 'terminated'


class SyncEngine:
    def __init__(
        self,
        client,
        commands,
        updates,
        addresses=(),
        names=(),
        refresh_interval=config.REFRESH_INTERVAL,
        discovery_timeout=config.DISCOVERY_TIMEOUT,
    ):
        self.client = client
        self.commands = commands
        self.updates = updates
        self.addresses = list(addresses)
        self.names = list(names)
        self.refresh_interval = refresh_interval
        self.discovery_timeout = discovery_timeout

        self.state = EngineState.INITIALIZING
        self.devices = {}
        self.groups = None
        self.selection = Selection()
        self.favorites = []
        self.playback = PlaybackCache()
        self.router = None

    async def run(self):
        """Initializes, then runs the loop until the command channel closes."""
        try:
            await self.initialize()
            await self.run_loop()
        finally:
            self.state = EngineState.TERMINATED

    async def initialize(self):
        self.state = EngineState.INITIALIZING
        self.devices = await resolve_devices(
            self.client, self.addresses, self.names, self.discovery_timeout
        )
        self.groups = await load_groups(self.client, self.devices)
        self.router = CommandRouter(self.client, self.devices, self.groups, self.selection)

        # Favorites come from the same speaker the topology came from
        speaker = self.devices[min(self.devices)]
        logger.debug("Fetching favorites...")
        try:
            self.favorites = await fetch_favorites(self.client, speaker)
            logger.info(f"Found {len(self.favorites)} favorite playlists")
        except FavoritesFetchFailed as e:
            logger.warning(f"Failed to fetch favorites: {e}")
            self.favorites = []
        self.router.set_favorites(self.favorites)

        try:
            await self.refresh()
        except RefreshFailed as e:
            logger.warning(f"Failed to fetch initial state: {e}")

        self.state = EngineState.RUNNING
        await self.publish()

    async def run_loop(self):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.refresh_interval
        logger.debug("Starting sonos loop")

        while self.state is EngineState.RUNNING:
            timeout = max(0.0, deadline - loop.time())
            try:
                command = await asyncio.wait_for(self.commands.recv(), timeout)
            except asyncio.TimeoutError:
                await self.on_tick()
                # Next tick is one full interval after this one finished
                deadline = loop.time() + self.refresh_interval
                continue

            if command is None:
                logger.warning("Command channel was closed: exiting...")
                self.state = EngineState.TERMINATED
                break
            await self.on_commands(command)

    async def on_tick(self):
        try:
            await self.refresh()
        except RefreshFailed as e:
            logger.warning(f"Failed to refresh state: {e}")
            # Nothing changed since the last publish
            await self.publish(NopUpdate())
            return
        await self.publish()

    async def on_commands(self, first):
        """Handles a command plus everything queued behind it, then refreshes once."""
        needs_refresh = await self._handle(first)

        closed = False
        while True:
            try:
                command = self.commands.try_recv()
            except ChannelClosed:
                closed = True
                break
            if command is None:
                break
            needs_refresh = await self._handle(command) or needs_refresh

        if needs_refresh:
            try:
                await self.refresh()
            except RefreshFailed as e:
                logger.warning(f"Failed to refresh state after commands: {e}")
        await self.publish()

        if closed:
            logger.warning("Command channel was closed: exiting...")
            self.state = EngineState.TERMINATED

    async def _handle(self, command):
        try:
            return await self.router.handle(command)
        except SinuousError as e:
            logger.warning(f"Error handling command: {e}")
            return False

    async def refresh(self):
        """Polls the selected coordinator and replaces the playback cache."""
        if self.router is None:
            raise RefreshFailed("No selected group")
        try:
            speaker = self.router.require_speaker()
        except NoSelectedGroup as e:
            raise RefreshFailed(str(e)) from e

        try:
            is_playing = await self.client.is_playing(speaker)
            volume = await self.client.volume(speaker)
            now_playing = await self.client.current_track(speaker)
            queue = await self.client.queue(speaker)
        except SonosError as e:
            raise RefreshFailed(f"Failed to poll {speaker.name}: {e}") from e

        self.playback = PlaybackCache(
            is_playing=is_playing,
            current_volume=volume,
            now_playing=now_playing,
            queue=tuple(queue),
        )

    def snapshot(self):
        return build_snapshot(self.playback, self.groups, self.selection, self.favorites)

    async def publish(self, update=None):
        if update is None:
            update = NewState(self.snapshot())
        try:
            await self.updates.send(update)
        except ChannelClosed:
            logger.warning("Updates channel was closed")
