import logging

from sonos import SonosError

from .errors import CommandFailed, CoordinatorNotResolved, NoSelectedGroup
from .favorites import CONTAINER_SCHEME, html_unescape
from .models import (
    Direction,
    NavigateFavorites,
    Next,
    NextGroup,
    Nop,
    Pause,
    Play,
    PlayFavorite,
    Previous,
    PreviousGroup,
    SwitchView,
    VolumeAdjust,
)

logger = logging.getLogger(__name__)

ADD_CONTAINER_PAYLOAD = """<InstanceID>0</InstanceID>
<EnqueuedURI>{uri}</EnqueuedURI>
<EnqueuedURIMetaData>{metadata}</EnqueuedURIMetaData>
<DesiredFirstTrackNumberEnqueued>0</DesiredFirstTrackNumberEnqueued>
<EnqueueAsNext>1</EnqueueAsNext>"""


class CommandRouter:
    """Applies operator commands to the selected group or to local view state.

    handle() returns True when the command changed something on a speaker
    and the cached playback state should be refreshed.
    """

    def __init__(self, client, devices, groups, selection, favorites=()):
        self.client = client
        self.devices = devices
        self.groups = groups
        self.selection = selection
        self.favorites = list(favorites)

    def set_favorites(self, favorites):
        self.favorites = list(favorites)
        self.selection.set_favorites_count(len(self.favorites))

    def require_speaker(self):
        """Returns the selected coordinator or raises NoSelectedGroup."""
        group = self.groups.selected_group()
        if group is None:
            raise NoSelectedGroup("No selected group")
        speaker = self.devices.get(group.coordinator)
        if speaker is None:
            raise CoordinatorNotResolved(f"Coordinator {group.coordinator} of {group.name} was not resolved")
        return speaker

    async def handle(self, command):
        logger.debug(f"Handling command {command}")
        try:
            return await self._dispatch(command)
        except SonosError as e:
            raise CommandFailed(f"Error while handling {command}: {e}") from e

    async def _dispatch(self, command):
        # Playback controls
        if isinstance(command, Play):
            await self.client.play(self.require_speaker())
            return True
        if isinstance(command, Pause):
            await self.client.pause(self.require_speaker())
            return True
        if isinstance(command, Next):
            await self.client.next(self.require_speaker())
            return True
        if isinstance(command, Previous):
            await self.client.previous(self.require_speaker())
            return True
        if isinstance(command, VolumeAdjust):
            await self.client.set_volume_relative(self.require_speaker(), command.delta)
            return True

        # Group switching only moves the selection; the next tick polls it
        if isinstance(command, NextGroup):
            self.groups.select_next()
            return False
        if isinstance(command, PreviousGroup):
            self.groups.select_previous()
            return False

        if isinstance(command, SwitchView):
            self.selection.current_view = command.mode
            return False
        if isinstance(command, NavigateFavorites):
            self.selection.set_favorites_count(len(self.favorites))
            if command.direction is Direction.UP:
                self.selection.favorite_up()
            else:
                self.selection.favorite_down()
            return False

        if isinstance(command, PlayFavorite):
            return await self.play_favorite(command.index)
        if isinstance(command, Nop):
            return False

        raise TypeError(f"Unhandled command: {command!r}")

    async def play_favorite(self, index):
        if not 0 <= index < len(self.favorites):
            logger.warning(f"Invalid favorite index: {index}")
            return False

        favorite = self.favorites[index]
        logger.info(f"Attempting to play favorite: {favorite.title}")
        logger.debug(f"Favorite URI: {favorite.uri}")
        speaker = self.require_speaker()

        try:
            await self.client.clear_queue(speaker)
        except SonosError as e:
            logger.warning(f"Failed to clear queue: {e}")

        uri = html_unescape(favorite.uri)
        metadata = html_unescape(favorite.metadata)

        if uri.startswith(CONTAINER_SCHEME):
            # The browse result is still entity-escaped, which is what the
            # SOAP payload needs
            payload = ADD_CONTAINER_PAYLOAD.format(uri=favorite.uri, metadata=favorite.metadata)
            try:
                await self.client.invoke_action(speaker, 'AVTransport', 'AddURIToQueue', payload)
            except SonosError as e:
                logger.error(f"AddURIToQueue failed: {e}")
                raise CommandFailed(f"Failed to add playlist to queue: {e}") from e
            await self.client.play(speaker)
        else:
            await self.client.queue_next(speaker, uri, metadata)
            await self.client.next(speaker)

        logger.info(f"Successfully started playing: {favorite.title}")
        return True
