"""AWS Lambda handler for calendar server authentication."""
import json
import logging
import os
import time
from typing import Dict, Any

from authentication.authentication_task import AuthenticationTask
from authentication.models import AuthenticationResponse, AuthenticationResult, Credentials
from authentication.settings import load_sync_request_config, load_timeout


STATUS_CODES = {
    AuthenticationResult.SUCCESS: 200,
    AuthenticationResult.NO_ACCOUNT: 400,
    AuthenticationResult.UNAUTHORIZED: 401,
    AuthenticationResult.NOT_FOUND: 404,
    AuthenticationResult.TRANSPORT_ERROR: 502
}

MESSAGES = {
    AuthenticationResult.SUCCESS: 'Authentication succeeded',
    AuthenticationResult.NO_ACCOUNT: 'No account provided',
    AuthenticationResult.UNAUTHORIZED: 'Not permitted to access the calendar',
    AuthenticationResult.NOT_FOUND: 'Calendar not found',
    AuthenticationResult.TRANSPORT_ERROR: 'Unable to reach the calendar server'
}


# Attributes every LogRecord carries; anything else came in through extra=
RESERVED_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord('', logging.INFO, '', 0, '', (), None))
) | {'message', 'asctime'}


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in record.__dict__.items():
            if key not in RESERVED_RECORD_ATTRIBUTES and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


class LoggingListener:
    """Logs the signals of a synchronous authentication run."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def on_authentication_task_started(self) -> None:
        self.logger.info("Authentication task started")

    def on_authentication_result(self, response: AuthenticationResponse) -> None:
        self.logger.info(f"Authentication result: {response.result.name}")


def build_response(response: AuthenticationResponse, duration: float) -> Dict[str, Any]:
    """
    Turn an authentication response into a Lambda response.

    Args:
        response: Outcome of the authentication
        duration: Elapsed seconds

    Returns:
        Response dict with statusCode and a JSON body
    """
    body = {'message': MESSAGES[response.result]}
    body.update(response.to_dict())
    body['duration_seconds'] = round(duration, 2)
    return {
        'statusCode': STATUS_CODES[response.result],
        'body': json.dumps(body)
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Authenticate the credentials carried by an invocation event.

    Args:
        event: Payload with "username" and "password", plus optional
            "server", "calendar", "additional_parameters", "min_date"
            and "max_date" overrides
        context: Lambda context object

    Returns:
        Response dict with statusCode and authentication outcome
    """
    log_level = os.environ.get('LOG_LEVEL', 'INFO')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    event = event or {}
    username = event.get('username')
    password = event.get('password')

    logger.info("Lambda execution started", extra={'username': username})

    if not username or password is None:
        logger.warning("No credentials in event, nothing to authenticate")
        return build_response(
            AuthenticationResponse(AuthenticationResult.NO_ACCOUNT),
            time.time() - start_time
        )

    try:
        config = load_sync_request_config(overrides=event)
        timeout = load_timeout()
    except ValueError as e:
        logger.error(
            f"Invalid configuration: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        duration = time.time() - start_time
        return {
            'statusCode': 500,
            'body': json.dumps({
                'message': 'Invalid configuration',
                'error': str(e),
                'error_type': type(e).__name__,
                'duration_seconds': round(duration, 2)
            })
        }

    listener = LoggingListener(logger)
    task = AuthenticationTask(
        Credentials(username, password),
        config,
        listener,
        timeout=timeout
    )
    response = task.run()

    duration = time.time() - start_time
    logger.info(
        f"Lambda execution completed with {response.result.name}",
        extra={
            'duration_seconds': round(duration, 2),
            'result': response.result.name
        }
    )
    return build_response(response, duration)
