import asyncio
import logging
import xml.etree.ElementTree as ET

import aiohttp

from .errors import SoapFault, SonosConnectionError
from .utils import (
    SONOS_PORT,
    control_url,
    create_soap_body,
    create_soap_headers,
    parse_soap_fault,
    parse_soap_response,
)

logger = logging.getLogger(__name__)

DEVICE_NS = '{urn:schemas-upnp-org:device-1-0}'


def description_url(ip):
    return f'http://{ip}:1400/xml/device_description.xml'


async def get_device_info(session, location):
    """Gets detailed device information from a Sonos device."""
    try:
        async with session.get(location) as response:
            if response.status != 200:
                raise SonosConnectionError(f"{location} answered HTTP {response.status}")
            text = await response.text()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise SonosConnectionError(f"Could not reach {location}: {e}") from e

    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise SonosConnectionError(f"Malformed device description at {location}: {e}") from e

    device = root.find(f'.//{DEVICE_NS}device')
    if device is None:
        raise SonosConnectionError(f"No device element in description at {location}")

    friendly_name = device.find(f'.//{DEVICE_NS}friendlyName')
    room_name = device.find(f'.//{DEVICE_NS}roomName')
    model_name = device.find(f'.//{DEVICE_NS}modelName')
    udn = device.find(f'{DEVICE_NS}UDN')

    return {
        'name': friendly_name.text if friendly_name is not None else 'Unknown',
        'room': room_name.text if room_name is not None else None,
        'model': model_name.text if model_name is not None else 'Unknown',
        'uuid': udn.text.replace('uuid:', '', 1) if udn is not None and udn.text else None,
    }


async def send_action(session, ip, service, action, payload='', port=SONOS_PORT):
    """Sends a SOAP action to a Sonos device and returns its output arguments."""
    url = control_url(ip, service, port)
    soap_body = create_soap_body(service, action, payload)
    headers = create_soap_headers(service, action)

    try:
        async with session.post(url, data=soap_body, headers=headers) as response:
            text = await response.text()
            status = response.status
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise SonosConnectionError(f"{action} on {ip} failed: {e}") from e

    if status != 200:
        error_code = parse_soap_fault(text)
        if error_code is not None:
            logger.error(f"{action} on {ip} failed with error code: {error_code}")
            raise SoapFault(action, error_code)
        raise SonosConnectionError(f"{action} on {ip} answered HTTP {status}")

    return parse_soap_response(text, action)
