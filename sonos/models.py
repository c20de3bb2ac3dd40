from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Speaker:
    """A zone player reachable on the local network."""

    uuid: str
    ip: str
    location: str
    name: str = 'Unknown'
    model: str = 'Unknown'
    port: int = 1400


@dataclass(frozen=True)
class MemberInfo:
    """A group member as reported by the zone group topology."""

    uuid: str
    name: str
    location: Optional[str] = None


@dataclass(frozen=True)
class Track:
    title: str
    creator: Optional[str] = None
    album: Optional[str] = None
    uri: Optional[str] = None
    duration: Optional[int] = None


@dataclass(frozen=True)
class TrackInfo:
    """The track currently loaded in a transport, with its position."""

    track: Track
    elapsed: int = 0
    duration: int = 0
