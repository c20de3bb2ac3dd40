"""
Runtime defaults for sinuous.

Each value can be overridden from the environment:
  SINUOUS_REFRESH_INTERVAL   seconds between state polls (default 1)
  SINUOUS_DISCOVERY_TIMEOUT  seconds to wait for SSDP answers (default 2)
  SINUOUS_HTTP_TIMEOUT       total timeout of one SOAP request (default 5)
  SINUOUS_LOG_LEVEL          logging level name (default INFO)
  SINUOUS_LOG_FILE           log file path (default <tempdir>/sinuous.log)
"""

import logging
import os
import tempfile

logger = logging.getLogger(__name__)


def env_float(name, default):
    """Reads a positive float from the environment, falling back to default."""
    raw = os.environ.get(name)
    if raw is None or raw == '':
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not a number")
        return default
    if value <= 0:
        logger.warning(f"Ignoring {name}={raw!r}: must be positive")
        return default
    return value


REFRESH_INTERVAL = env_float('SINUOUS_REFRESH_INTERVAL', 1.0)
DISCOVERY_TIMEOUT = env_float('SINUOUS_DISCOVERY_TIMEOUT', 2.0)
HTTP_TIMEOUT = env_float('SINUOUS_HTTP_TIMEOUT', 5.0)

COMMAND_CHANNEL_CAPACITY = 2
UPDATE_CHANNEL_CAPACITY = 2

FAVORITES_CONTAINER = 'FV:2'
FAVORITES_PAGE_SIZE = 100

LOG_LEVEL = os.environ.get('SINUOUS_LOG_LEVEL', 'INFO').upper()
LOG_FILE = os.environ.get('SINUOUS_LOG_FILE') or os.path.join(tempfile.gettempdir(), 'sinuous.log')
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
