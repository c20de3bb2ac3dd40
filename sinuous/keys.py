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
    ViewMode,
    VolumeAdjust,
)

VOLUME_STEP = 2
QUIT_KEYS = ('q', 'quit')

# Keys that only mean something in the favorites view
_FAVORITES_KEYS = {
    'up': NavigateFavorites(Direction.UP),
    'k': NavigateFavorites(Direction.UP),
    'down': NavigateFavorites(Direction.DOWN),
    'j': NavigateFavorites(Direction.DOWN),
}

_KEYS = {
    '1': SwitchView(ViewMode.QUEUE),
    '2': SwitchView(ViewMode.FAVORITES),
    'n': Next(),
    'p': Previous(),
    '[': VolumeAdjust(-VOLUME_STEP),
    ']': VolumeAdjust(VOLUME_STEP),
    'tab': NextGroup(),
    'shift-tab': PreviousGroup(),
}


def should_quit(key):
    return key in QUIT_KEYS


def command_for_key(key, state):
    """Translates a key name into a command, given the last published state."""
    favorites_view = state.current_view is ViewMode.FAVORITES
    if favorites_view and key in _FAVORITES_KEYS:
        return _FAVORITES_KEYS[key]
    if favorites_view and key == 'enter':
        return PlayFavorite(state.selected_favorite)
    if key == 'space':
        return Pause() if state.is_playing else Play()
    return _KEYS.get(key, Nop())
