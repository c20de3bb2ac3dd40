"""
Sinuous

Terminal controller for Sonos speakers. The sync engine discovers speakers,
polls the selected group and applies operator commands; the presenter in
app.py draws the snapshots it publishes.
"""

from .channel import Channel
from .engine import EngineState, SyncEngine
from .errors import (
    ChannelClosed,
    CommandFailed,
    CoordinatorNotResolved,
    FavoritesFetchFailed,
    InconsistentTopology,
    NoDevicesFound,
    NoSelectedGroup,
    NoSpeakerDiscovered,
    RefreshFailed,
    SinuousError,
    TopologyQueryFailed,
)

__all__ = [
    'Channel',
    'EngineState',
    'SyncEngine',
    'SinuousError',
    'NoDevicesFound',
    'NoSpeakerDiscovered',
    'TopologyQueryFailed',
    'InconsistentTopology',
    'NoSelectedGroup',
    'CoordinatorNotResolved',
    'CommandFailed',
    'RefreshFailed',
    'FavoritesFetchFailed',
    'ChannelClosed',
]
