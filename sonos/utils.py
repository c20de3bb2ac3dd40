import xml.etree.ElementTree as ET
import logging
from xml.sax.saxutils import escape

from .errors import SoapFault, SonosConnectionError

logger = logging.getLogger(__name__)

SONOS_PORT = 1400

# Control URL for each UPnP service we talk to
SERVICE_PATHS = {
    'AVTransport': '/MediaRenderer/AVTransport/Control',
    'RenderingControl': '/MediaRenderer/RenderingControl/Control',
    'ContentDirectory': '/MediaServer/ContentDirectory/Control',
    'ZoneGroupTopology': '/ZoneGroupTopology/Control',
}


def get_xml_text(element, path, namespaces=None):
    """Helper function to safely get text from an XML element."""
    if namespaces:
        found = element.find(path, namespaces)
    else:
        found = element.find(path)
    return found.text if found is not None else None


def control_url(ip, service, port=SONOS_PORT):
    """Returns the control endpoint of a service on the given device."""
    try:
        path = SERVICE_PATHS[service]
    except KeyError:
        raise ValueError(f"Unknown UPnP service: {service}") from None
    return f'http://{ip}:{port}{path}'


def soap_args(**kwargs):
    """Renders keyword arguments as escaped SOAP argument elements."""
    return "\n".join(
        f"<{key}>{escape(str(value))}</{key}>" for key, value in kwargs.items()
    )


def create_soap_body(service, action, payload=''):
    """Helper function to create SOAP request bodies."""
    return f"""<?xml version="1.0"?>
<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/" s:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">
    <s:Body>
        <u:{action} xmlns:u="urn:schemas-upnp-org:service:{service}:1">
{payload}
        </u:{action}>
    </s:Body>
</s:Envelope>"""


def create_soap_headers(service, action):
    """Helper function to create SOAP headers."""
    return {
        'Content-Type': 'text/xml; charset="utf-8"',
        'SOAPACTION': f'"urn:schemas-upnp-org:service:{service}:1#{action}"'
    }


def parse_soap_fault(response_text):
    """Extracts the UPnP error code from a fault response, if any."""
    try:
        root = ET.fromstring(response_text)
    except ET.ParseError:
        return None
    return get_xml_text(root, './/{*}errorCode')


def parse_soap_response(response_text, action):
    """Parses a SOAP response into a dict of output argument names to values."""
    try:
        root = ET.fromstring(response_text)
    except ET.ParseError as e:
        raise SonosConnectionError(f"Malformed SOAP response for {action}: {e}") from e

    if root.find('.//{*}Fault') is not None:
        raise SoapFault(action, get_xml_text(root, './/{*}errorCode'))

    response = root.find(f'.//{{*}}{action}Response')
    if response is None:
        raise SonosConnectionError(f"No {action}Response element in SOAP response")

    return {child.tag.split('}')[-1]: child.text or '' for child in response}
