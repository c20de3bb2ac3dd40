"""Commands, updates and the state published to the presentation layer."""

import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple

from sonos import Track, TrackInfo


class ViewMode(enum.Enum):
    QUEUE = 'queue'
    FAVORITES = 'favorites'


class Direction(enum.Enum):
    UP = 'up'
    DOWN = 'down'


@dataclass(frozen=True)
class FavoriteEntry:
    title: str
    description: str
    uri: str
    metadata: str


# Commands


class Command:
    """Base class of the operator commands the router understands."""


@dataclass(frozen=True)
class Play(Command):
    pass


@dataclass(frozen=True)
class Pause(Command):
    pass


@dataclass(frozen=True)
class Next(Command):
    pass


@dataclass(frozen=True)
class Previous(Command):
    pass


@dataclass(frozen=True)
class VolumeAdjust(Command):
    delta: int


@dataclass(frozen=True)
class NextGroup(Command):
    pass


@dataclass(frozen=True)
class PreviousGroup(Command):
    pass


@dataclass(frozen=True)
class SwitchView(Command):
    mode: ViewMode


@dataclass(frozen=True)
class NavigateFavorites(Command):
    direction: Direction


@dataclass(frozen=True)
class PlayFavorite(Command):
    index: int


@dataclass(frozen=True)
class Nop(Command):
    pass


# Updates


@dataclass(frozen=True)
class SpeakerState:
    """Everything the presenter needs to draw one frame."""

    is_playing: bool
    current_volume: int
    group_names: Tuple[str, ...]
    selected_group: int
    now_playing: Optional[TrackInfo] = None
    queue: Tuple[Track, ...] = ()
    current_view: ViewMode = ViewMode.QUEUE
    favorites: Tuple[FavoriteEntry, ...] = ()
    selected_favorite: int = 0

    @property
    def group_name(self):
        return self.group_names[self.selected_group]


class Update:
    """Base class of engine-to-presenter messages."""


@dataclass(frozen=True)
class NewState(Update):
    state: SpeakerState


@dataclass(frozen=True)
class NopUpdate(Update):
    pass


@dataclass
class Selection:
    """Local view state that never touches the network."""

    selected_favorite: int = 0
    current_view: ViewMode = ViewMode.QUEUE
    favorites_count: int = field(default=0, repr=False)

    def favorite_up(self):
        if self.selected_favorite > 0:
            self.selected_favorite -= 1

    def favorite_down(self):
        if self.selected_favorite < max(self.favorites_count - 1, 0):
            self.selected_favorite += 1

    def set_favorites_count(self, count):
        self.favorites_count = count
        self.selected_favorite = min(self.selected_favorite, max(count - 1, 0))
