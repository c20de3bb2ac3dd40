import ipaddress
import logging

from sonos import SonosError

from .errors import NoDevicesFound

logger = logging.getLogger(__name__)


def parse_device_selector(selector):
    """Splits a comma separated selector into (addresses, names).

    Each element is taken as an IPv4 address if it parses as one, and as a
    room name otherwise.
    """
    addresses, names = [], []
    if not selector:
        return addresses, names
    for element in selector.split(','):
        element = element.strip()
        if not element:
            continue
        try:
            addresses.append(str(ipaddress.IPv4Address(element)))
        except ValueError:
            names.append(element)
    return addresses, names


async def resolve_devices(client, addresses, names, timeout):
    """Resolves the speakers to control, keyed by their stable identifier."""
    speakers = []

    logger.debug("Connecting to provided speakers...")
    for address in addresses:
        try:
            speaker = await client.resolve_by_address(address)
        except SonosError as e:
            logger.error(f"Not connecting to {address}: {e}")
            continue
        if speaker is None:
            logger.warning(f"Not connecting to {address}: not a Sonos speaker")
            continue
        speakers.append(speaker)

    for name in names:
        try:
            speaker = await client.resolve_by_name(name, timeout)
        except SonosError as e:
            logger.error(f"Not connecting to {name}: {e}")
            continue
        if speaker is None:
            logger.warning(f"No speaker named {name} answered within {timeout}s")
            continue
        speakers.append(speaker)

    if not addresses and not names:
        logger.debug("Discovering speakers...")
        try:
            speakers.extend(await client.discover(timeout))
        except SonosError as e:
            logger.error(f"Discovery failed: {e}")

    devices = {}
    for speaker in speakers:
        devices.setdefault(client.identifier(speaker), speaker)

    if not devices:
        raise NoDevicesFound("No Sonos speakers found")

    logger.info(f"Found {len(devices)} speakers")
    return dict(sorted(devices.items()))
