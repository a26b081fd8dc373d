"""Unit tests for calendar response classification."""
import pytest
from requests.exceptions import ConnectionError, Timeout

from authentication.models import AuthenticationResult, Credentials
from calendar_client.response_classifier import classify, classify_failure, classify_status


CREDENTIALS = Credentials('alice', 's3cret')


class TestClassifyStatus:
    """Test cases for classify_status."""

    def test_not_found(self):
        """Test 404 maps to NOT_FOUND without credentials."""
        response = classify_status(404, CREDENTIALS)

        assert response.result is AuthenticationResult.NOT_FOUND
        assert response.credentials is None

    def test_unauthorized(self):
        """Test 401 maps to UNAUTHORIZED without credentials."""
        response = classify_status(401, CREDENTIALS)

        assert response.result is AuthenticationResult.UNAUTHORIZED
        assert response.credentials is None

    @pytest.mark.parametrize('status_code', [200, 204, 302, 403, 500, 503])
    def test_other_statuses_are_success(self, status_code):
        """Test every other status counts as success and carries credentials."""
        response = classify_status(status_code, CREDENTIALS)

        assert response.is_success
        assert response.credentials == CREDENTIALS
        assert response.error is None


class TestClassify:
    """Test cases for classify."""

    def test_timeout_is_transport_error(self):
        """Test a timeout becomes TRANSPORT_ERROR with the error attached."""
        error = Timeout("Request timed out")

        response = classify(error, CREDENTIALS)

        assert response.result is AuthenticationResult.TRANSPORT_ERROR
        assert response.error is error
        assert response.credentials is None

    def test_connection_error_is_transport_error(self):
        """Test a connection failure becomes TRANSPORT_ERROR."""
        response = classify_failure(ConnectionError("Connection refused"))

        assert response.result is AuthenticationResult.TRANSPORT_ERROR

    def test_status_code(self):
        """Test status codes are passed to classify_status."""
        assert classify(404).result is AuthenticationResult.NOT_FOUND
        assert classify(200, CREDENTIALS).credentials == CREDENTIALS


class TestAuthenticationResponse:
    """Test cases for the response summary."""

    def test_to_dict_success_hides_password(self):
        """Test success summary names the user but not the password."""
        data = classify_status(200, CREDENTIALS).to_dict()

        assert data == {'result': 'SUCCESS', 'code': 100, 'username': 'alice'}
        assert 's3cret' not in str(data)

    def test_to_dict_error(self):
        """Test error summary carries the error type."""
        data = classify_failure(Timeout("Request timed out")).to_dict()

        assert data['result'] == 'TRANSPORT_ERROR'
        assert data['code'] == 500
        assert data['error'] == "Request timed out"
        assert data['error_type'] == 'Timeout'

    def test_credentials_repr_hides_password(self):
        """Test credentials never print their password."""
        assert 's3cret' not in repr(CREDENTIALS)
