"""Classification of calendar server responses."""
import logging
from typing import Optional, Union

from authentication.models import AuthenticationResponse, AuthenticationResult, Credentials

logger = logging.getLogger(__name__)

HTTP_UNAUTHORIZED = 401
HTTP_NOT_FOUND = 404


def classify_status(status_code: int, credentials: Optional[Credentials]) -> AuthenticationResponse:
    """
    Map an HTTP status code to an authentication response.

    Only 404 and 401 are told apart. Every other status, server errors
    included, counts as a successful authentication.

    Args:
        status_code: HTTP status returned by the calendar server
        credentials: Credentials used for the request

    Returns:
        AuthenticationResponse carrying the credentials on success
    """
    if status_code == HTTP_NOT_FOUND:
        return AuthenticationResponse(AuthenticationResult.NOT_FOUND)
    if status_code == HTTP_UNAUTHORIZED:
        return AuthenticationResponse(AuthenticationResult.UNAUTHORIZED)

    if status_code >= 500:
        logger.warning(f"Calendar server answered {status_code}, treating it as a success")
    return AuthenticationResponse(AuthenticationResult.SUCCESS, credentials=credentials)


def classify_failure(error: BaseException) -> AuthenticationResponse:
    """Wrap a transport failure in an authentication response."""
    return AuthenticationResponse(AuthenticationResult.TRANSPORT_ERROR, error=error)


def classify(
    transport_result: Union[int, BaseException],
    credentials: Optional[Credentials] = None
) -> AuthenticationResponse:
    """
    Classify the outcome of a calendar request.

    Args:
        transport_result: HTTP status code, or the exception raised by the transport
        credentials: Credentials used for the request

    Returns:
        AuthenticationResponse for the outcome
    """
    if isinstance(transport_result, BaseException):
        return classify_failure(transport_result)
    return classify_status(transport_result, credentials)
