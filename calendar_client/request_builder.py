"""Request construction for the calendar feed server."""
import logging
from datetime import date
from typing import Optional, Tuple
from urllib.parse import quote

import requests
from requests.auth import HTTPBasicAuth

from authentication.models import Credentials, SyncRequestConfig

logger = logging.getLogger(__name__)

# Connect and read timeouts in seconds
CONNECT_TIMEOUT = 15
READ_TIMEOUT = 15
DEFAULT_TIMEOUT: Tuple[int, int] = (CONNECT_TIMEOUT, READ_TIMEOUT)

DATE_FORMAT = '%Y/%m/%d'

# Characters left unescaped in path segments, on top of letters, digits and "_.-~"
SEGMENT_SAFE_CHARACTERS = "!'()*"


def encode_segment(value: str) -> str:
    """
    Percent-encode a single URL path segment.

    Args:
        value: Raw segment value (a "/" inside it is encoded too)

    Returns:
        Encoded segment
    """
    return quote(value, safe=SEGMENT_SAFE_CHARACTERS)


def format_date(value: date) -> str:
    """Format a date bound the way the server's query parser expects."""
    return value.strftime(DATE_FORMAT)


def build_calendar_url(config: SyncRequestConfig, username: str) -> str:
    """
    Build the calendar feed URL for a user.

    The base URL and the extra query parameters are used verbatim. When an
    extra parameter block is present, the "&" before the first date bound is
    only written once, while "end" always carries its own "&". The server
    tolerates the resulting doubled separator, so it is kept as is.

    Args:
        config: Server, calendar and date bounds
        username: Account name used as the first path segment

    Returns:
        Fully-qualified calendar feed URL
    """
    extra = config.extra_query_parameters or ''
    add_and = bool(extra)

    url = (
        f"{config.base_server_url}/home/{encode_segment(username)}"
        f"/{encode_segment(config.calendar_name)}?{extra}"
    )

    if config.min_date is not None:
        if add_and:
            url += '&'
            add_and = False
        url += f"start={format_date(config.min_date)}"

    if config.max_date is not None:
        if add_and:
            url += '&'
        url += f"&end={format_date(config.max_date)}"

    return url


def build_request(config: SyncRequestConfig, credentials: Credentials) -> requests.Request:
    """
    Build the authenticated GET request for the calendar feed.

    Credentials are UTF-8 encoded before going into the Authorization
    header. When there are no extra parameters and no date bounds, the
    prepared request drops the empty query, so the trailing "?" of the
    calendar URL is not sent.

    Args:
        config: Server, calendar and date bounds
        credentials: Username and password sent with basic authentication

    Returns:
        Unprepared request, to be sent through a session
    """
    url = build_calendar_url(config, credentials.username)
    logger.debug(f"Built calendar request for {url}")
    return requests.Request(
        'GET',
        url,
        auth=HTTPBasicAuth(
            credentials.username.encode('utf-8'),
            credentials.password.encode('utf-8')
        )
    )


def build_session(headers: Optional[dict] = None) -> requests.Session:
    """
    Create the HTTP session used to reach the calendar server.

    Args:
        headers: Optional headers added to every request

    Returns:
        New requests session
    """
    session = requests.Session()
    if headers:
        session.headers.update(headers)
    return session
