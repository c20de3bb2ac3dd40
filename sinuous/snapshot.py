from dataclasses import dataclass
from typing import Optional, Tuple

from sonos import Track, TrackInfo

from .models import SpeakerState


@dataclass(frozen=True)
class PlaybackCache:
    """The polled playback fields, always replaced as one value."""

    is_playing: bool = False
    current_volume: int = 0
    now_playing: Optional[TrackInfo] = None
    queue: Tuple[Track, ...] = ()


def build_snapshot(playback, groups, selection, favorites):
    """Assembles the immutable state handed to the presenter."""
    return SpeakerState(
        is_playing=playback.is_playing,
        current_volume=playback.current_volume,
        group_names=groups.names,
        selected_group=groups.selected,
        now_playing=playback.now_playing,
        queue=playback.queue,
        current_view=selection.current_view,
        favorites=tuple(favorites),
        selected_favorite=min(selection.selected_favorite, max(len(favorites) - 1, 0)),
    )
