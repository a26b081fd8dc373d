"""Configuration loaded from environment variables and invocation events."""
import logging
import os
from datetime import date, datetime
from typing import Any, Mapping, Optional, Tuple

from authentication.models import SyncRequestConfig
from calendar_client.request_builder import CONNECT_TIMEOUT

logger = logging.getLogger(__name__)

TRUE_VALUES = ('1', 'true', 'yes', 'on')

# Event keys that override the matching environment variables
OVERRIDE_KEYS = {
    'server': 'CALENDAR_SERVER',
    'calendar': 'CALENDAR_NAME',
    'additional_parameters': 'ADDITIONAL_PARAMETERS',
    'min_date': 'MIN_DATE',
    'max_date': 'MAX_DATE'
}


def parse_date(value: Any) -> Optional[date]:
    """
    Parse an optional date bound.

    Args:
        value: None, an empty string, a date, or an ISO "YYYY-MM-DD" string

    Returns:
        The date, or None when unset

    Raises:
        ValueError: If the string is not a valid ISO date
    """
    if value is None or value == '':
        return None
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()


def load_sync_request_config(
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None
) -> SyncRequestConfig:
    """
    Build the request configuration from the environment.

    Args:
        environ: Environment mapping (defaults to os.environ)
        overrides: Event values keyed by "server", "calendar",
            "additional_parameters", "min_date" and "max_date"

    Returns:
        SyncRequestConfig for one request

    Raises:
        ValueError: If a date bound is malformed
    """
    environ = os.environ if environ is None else environ
    values = {env_name: environ.get(env_name, '') for env_name in OVERRIDE_KEYS.values()}

    for key, env_name in OVERRIDE_KEYS.items():
        if overrides and overrides.get(key) is not None:
            values[env_name] = overrides[key]

    return SyncRequestConfig(
        base_server_url=values['CALENDAR_SERVER'],
        calendar_name=values['CALENDAR_NAME'],
        min_date=parse_date(values['MIN_DATE']),
        max_date=parse_date(values['MAX_DATE']),
        extra_query_parameters=values['ADDITIONAL_PARAMETERS']
    )


def network_access_allowed(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Whether the process is allowed to reach the network."""
    environ = os.environ if environ is None else environ
    return environ.get('NETWORK_ACCESS', 'true').strip().lower() in TRUE_VALUES


def load_timeout(environ: Optional[Mapping[str, str]] = None) -> Tuple[int, int]:
    """
    Read the connect and read timeout.

    Returns:
        (connect, read) timeout tuple in seconds
    """
    environ = os.environ if environ is None else environ
    seconds = int(environ.get('TIMEOUT_SECONDS', str(CONNECT_TIMEOUT)))
    return seconds, seconds
