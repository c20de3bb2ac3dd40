class SonosError(Exception):
    """Base class for failures talking to a Sonos device."""


class SonosConnectionError(SonosError):
    """The device could not be reached or answered with a non-SOAP error."""


class SoapFault(SonosError):
    """The device answered with a UPnP fault."""

    def __init__(self, action, error_code=None):
        self.action = action
        self.error_code = error_code
        super().__init__(f"{action} failed with UPnP error code {error_code}")
