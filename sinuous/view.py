from .models import ViewMode

HELP_QUEUE = "space play/pause | n next | p prev | [ ] volume | tab group | 2 favorites | q quit"
HELP_FAVORITES = "k/j navigate | enter play | 1 queue | q quit"


def format_duration(secs):
    minutes, seconds = divmod(int(secs or 0), 60)
    return f"{minutes}:{seconds:02}"


def describe_track(track):
    return f"{track.creator or 'Unknown'} - {track.album or 'Unknown'} - {track.title}"


def render_playbar(state, width=40):
    symbol = "⏵" if state.is_playing else "⏸"
    info = state.now_playing
    if info is None:
        return [f"{symbol} Nothing currently playing", f"  [{' ' * width}] 0:00 / 0:00"]
    ratio = min(max(info.elapsed / info.duration, 0.0), 1.0) if info.duration else 0.0
    filled = int(round(ratio * width))
    return [
        f"{symbol} {describe_track(info.track)}",
        f"  [{'#' * filled}{' ' * (width - filled)}] "
        f"{format_duration(info.elapsed)} / {format_duration(info.duration)}",
    ]


def render_queue(state):
    current_uri = state.now_playing.track.uri if state.now_playing else None
    lines = []
    for track in state.queue:
        marker = "⏵" if current_uri and track.uri == current_uri else " "
        lines.append(f"{marker} {describe_track(track)} ({format_duration(track.duration)})")
    return lines or ["  (queue is empty)"]


def render_favorites(state):
    lines = []
    for i, favorite in enumerate(state.favorites):
        marker = "⏵" if i == state.selected_favorite else " "
        lines.append(f"{marker} {favorite.title} - {favorite.description}")
    return lines or ["  (no favorite playlists)"]


def render(state, version=''):
    """Renders a snapshot as a list of text lines."""
    tabs = " | ".join(
        f"[{name}]" if i == state.selected_group else name
        for i, name in enumerate(state.group_names)
    )
    if state.current_view is ViewMode.FAVORITES:
        header, body, help_text = "Queue | [Favorites]", render_favorites(state), HELP_FAVORITES
    else:
        header, body, help_text = "[Queue] | Favorites", render_queue(state), HELP_QUEUE
    return [
        f"Sinuous {version} -- Playing on {state.group_name}    vol: {state.current_volume:2}",
        f"Groups: {tabs}",
        *render_playbar(state),
        header,
        *body,
        help_text,
    ]
