"""Background task that authenticates a user against the calendar server."""
import logging
import threading
import weakref
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Optional, Protocol, Tuple

import requests

from authentication.caller_context import CallerContext
from authentication.models import (
    AuthenticationResponse,
    AuthenticationResult,
    Credentials,
    SyncRequestConfig
)
from authentication.settings import network_access_allowed
from calendar_client.request_builder import DEFAULT_TIMEOUT, build_request, build_session
from calendar_client.response_classifier import classify_failure, classify_status

logger = logging.getLogger(__name__)

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def get_default_executor() -> ThreadPoolExecutor:
    """Return the shared worker pool, creating it on first use."""
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(thread_name_prefix='authentication')
        return _executor


class AuthenticationListener(Protocol):
    """Receives the life cycle signals of an authentication task."""

    def on_authentication_task_started(self) -> None:
        ...

    def on_authentication_result(self, response: AuthenticationResponse) -> None:
        ...


class AuthenticationTask:
    """
    Authenticates a user by requesting their calendar feed.

    The start signal is sent on the thread calling execute(). The request
    runs on a worker thread, and the result is posted back to the caller
    context, whose owner delivers it by calling process_pending(). A task
    runs once and delivers at most one result.
    """

    def __init__(
        self,
        credentials: Credentials,
        config: SyncRequestConfig,
        listener: AuthenticationListener,
        context: Optional[CallerContext] = None,
        permission_checker: Optional[Callable[[], bool]] = None,
        session_factory: Callable[[], requests.Session] = build_session,
        timeout: Tuple[float, float] = DEFAULT_TIMEOUT,
        executor: Optional[Executor] = None
    ):
        """
        Initialize the authentication task.

        Args:
            credentials: Username and password to check
            config: Calendar server location and date bounds
            listener: Receives the start and result signals
            context: Context the result is delivered to. Without one, the
                result is delivered on the worker thread.
            permission_checker: Returns False when network access is not
                permitted (defaults to the NETWORK_ACCESS setting)
            session_factory: Creates the HTTP session for the request
            timeout: (connect, read) timeout in seconds
            executor: Runs the background work (defaults to a shared pool)
        """
        self.credentials = credentials
        self.config = config
        self.listener = listener
        self._context_ref = weakref.ref(context) if context is not None else None
        self.permission_checker = permission_checker or network_access_allowed
        self.session_factory = session_factory
        self.timeout = timeout
        self.executor = executor

        self._lock = threading.Lock()
        self._started = False
        self._delivered = False

    @property
    def context(self) -> Optional[CallerContext]:
        """The caller context, or None if it was never given or has been collected."""
        if self._context_ref is None:
            return None
        return self._context_ref()

    def execute(self) -> 'Future[AuthenticationResponse]':
        """
        Start the task in the background.

        Returns:
            Future resolved with the response once it has been posted for delivery

        Raises:
            RuntimeError: If the task was already started
        """
        self._mark_started()
        self._on_pre_execute()
        executor = self.executor or get_default_executor()
        return executor.submit(self._run_in_background)

    def run(self) -> AuthenticationResponse:
        """
        Run the whole task on the calling thread.

        Returns:
            The authentication response

        Raises:
            RuntimeError: If the task was already started
        """
        self._mark_started()
        self._on_pre_execute()
        response = self.do_in_background()
        self._on_post_execute(response)
        return response

    def do_in_background(self) -> AuthenticationResponse:
        """
        Check permissions, send the request and classify the answer.

        Never raises: any failure is returned as a TRANSPORT_ERROR response.
        """
        try:
            if self._context_ref is not None:
                context = self.context
                if context is None or not context.is_valid:
                    raise ReferenceError('Unable to access the caller context.')

            if not self.permission_checker():
                logger.warning("Network access is not permitted, skipping authentication request")
                return AuthenticationResponse(AuthenticationResult.UNAUTHORIZED)

            request = build_request(self.config, self.credentials)
            with self.session_factory() as session:
                prepared = session.prepare_request(request)
                logger.info(f"Authenticating '{self.credentials.username}' against {prepared.url}")
                response = session.send(prepared, timeout=self.timeout)
                status_code = response.status_code
                response.close()

            logger.info(
                f"Calendar server answered {status_code}",
                extra={'username': self.credentials.username, 'status_code': status_code}
            )
            return classify_status(status_code, self.credentials)

        except Exception as e:
            logger.error(
                f"Authentication request failed: {e}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            return classify_failure(e)

    def _mark_started(self) -> None:
        with self._lock:
            if self._started:
                raise RuntimeError('Cannot execute task: the task has already been executed.')
            self._started = True

    def _run_in_background(self) -> AuthenticationResponse:
        response = self.do_in_background()

        if self._context_ref is None:
            self._on_post_execute(response)
            return response

        context = self.context
        if context is None or not context.post(self._on_post_execute, response):
            logger.info(f"Caller context is gone, dropping {response.result.name} result")
        return response

    def _on_pre_execute(self) -> None:
        self.listener.on_authentication_task_started()

    def _on_post_execute(self, response: AuthenticationResponse) -> None:
        if self._context_ref is not None:
            context = self.context
            if context is None or not context.is_valid:
                logger.info(f"Caller context is gone, dropping {response.result.name} result")
                return

        with self._lock:
            if self._delivered:
                return
            self._delivered = True

        self.listener.on_authentication_result(response)
