import asyncio
import math
import logging
import xml.etree.ElementTree as ET

from async_upnp_client.search import async_search

from .models import MemberInfo

logger = logging.getLogger(__name__)

SEARCH_TARGET = "urn:schemas-upnp-org:device:ZonePlayer:1"


async def discover_locations(timeout):
    """Sends an SSDP search for zone players and collects their description URLs."""
    locations = []

    async def on_response(headers):
        location = headers.get('location')
        if location and location not in locations:
            logger.debug(f"SSDP response from {location}")
            locations.append(location)

    try:
        await async_search(
            on_response,
            timeout=max(1, math.ceil(timeout)),
            search_target=SEARCH_TARGET,
        )
    except OSError as e:
        logger.error(f"SSDP search failed: {e}")
    # Let late responses already in flight land
    await asyncio.sleep(0.1)
    return locations


def parse_zone_group_state(zone_state):
    """Parses a ZoneGroupState document into (coordinator, members) pairs.

    Members keep the order the device reports them in. Invisible members
    (bonded surrounds, subs) are skipped unless they coordinate the group.
    """
    state_root = ET.fromstring(zone_state)
    groups = []
    for group in state_root.iter('ZoneGroup'):
        coordinator = group.get('Coordinator')
        members = []
        for member in group.iter('ZoneGroupMember'):
            uuid = member.get('UUID')
            if member.get('Invisible', '0') != '0' and uuid != coordinator:
                continue
            members.append(MemberInfo(
                uuid=uuid,
                name=member.get('ZoneName') or 'Unknown',
                location=member.get('Location'),
            ))
        groups.append((coordinator, members))
    return groups
