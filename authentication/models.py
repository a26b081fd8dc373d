"""Data models for calendar authentication."""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional


class AuthenticationResult(Enum):
    """Coarse outcome of an authentication attempt."""
    SUCCESS = 100
    NO_ACCOUNT = 200
    NOT_FOUND = 300
    UNAUTHORIZED = 400
    TRANSPORT_ERROR = 500


@dataclass(frozen=True)
class Credentials:
    """Username and password used for basic authentication."""
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class SyncRequestConfig:
    """Calendar feed location and date bounds for one request."""
    base_server_url: str
    calendar_name: str
    min_date: Optional[date] = None
    max_date: Optional[date] = None
    extra_query_parameters: str = ''


@dataclass
class AuthenticationResponse:
    """Result of an authentication attempt."""
    result: AuthenticationResult
    error: Optional[BaseException] = None
    credentials: Optional[Credentials] = None

    @property
    def is_success(self) -> bool:
        return self.result is AuthenticationResult.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """
        Summarize the response as a JSON-serializable dict.

        The password is never included.
        """
        data = {
            'result': self.result.name,
            'code': self.result.value
        }
        if self.credentials is not None:
            data['username'] = self.credentials.username
        if self.error is not None:
            data['error'] = str(self.error)
            data['error_type'] = type(self.error).__name__
        return data
