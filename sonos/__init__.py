"""
Sonos Control Library

This library provides functionality to discover and control Sonos speakers on a local network.
It uses UPnP/SOAP to communicate with Sonos devices and provides an async interface for all operations.
"""

from .client import SonosClient
from .discovery import discover_locations, parse_zone_group_state
from .errors import SoapFault, SonosConnectionError, SonosError
from .models import MemberInfo, Speaker, Track, TrackInfo

__all__ = [
    'SonosClient',
    'discover_locations',
    'parse_zone_group_state',
    'SonosError',
    'SonosConnectionError',
    'SoapFault',
    'Speaker',
    'MemberInfo',
    'Track',
    'TrackInfo',
]
