"""
Toggl time-tracking API client.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from toggl_billing.models.toggl import (
    Account,
    Client,
    MalformedRecordError,
    Project,
    TimeEntry,
)
from toggl_billing.services.retry_handler import (
    RetryExhaustedException,
    RetryHandler,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.track.toggl.com/api/v8"

# Toggl accepts the API token as the basic-auth user with this fixed password
API_TOKEN_PASSWORD = "api_token"


class TogglAPIError(Exception):
    """Raised when a request fails at the transport or protocol level."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TogglClient:
    """
    Read-only client for the endpoints the reconciler consumes.

    Every call is a single blocking GET. Failures are raised as
    ``TogglAPIError``; retries only happen when the ``RetryHandler`` is
    configured with ``max_retries > 0``.

    Example:
        >>> client = TogglClient("my-token")
        >>> account = client.get_account()
        >>> entries = client.get_time_entries(
        ...     "2024-10-01T00:00:00+02:00", "2024-10-31T23:59:59+01:00"
        ... )
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        retry_handler: Optional[RetryHandler] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_handler = retry_handler or RetryHandler()
        self.session = session or requests.Session()
        self.session.auth = (api_token, API_TOKEN_PASSWORD)

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        """Perform a GET request and return the decoded JSON body."""
        url = f"{self.base_url}/{path.lstrip('/')}"

        def _request():
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response

        logger.debug(f"GET {url} params={params}")
        try:
            response = self.retry_handler.execute_with_retry(_request)
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise TogglAPIError(
                f"GET /{path.lstrip('/')} failed with HTTP {status}", status_code=status
            ) from e
        except (requests.exceptions.RequestException, RetryExhaustedException) as e:
            raise TogglAPIError(f"GET /{path.lstrip('/')} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise TogglAPIError(
                f"GET /{path.lstrip('/')} returned malformed JSON: {e}"
            ) from e

    def _get_data(self, path: str) -> Dict[str, Any]:
        """GET an endpoint that wraps its record in a ``data`` envelope."""
        payload = self._get(path)
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            raise TogglAPIError(f"GET /{path.lstrip('/')} returned no data object")
        return payload["data"]

    def get_account(self) -> Account:
        """Fetch the authenticated account (``GET /me``)."""
        return _validate(Account, self._get_data("me"))

    def get_time_entries(self, start_date: str, end_date: str) -> List[TimeEntry]:
        """
        Fetch time entries started within the window.

        Args:
            start_date: ISO-8601 timestamp with offset
            end_date: ISO-8601 timestamp with offset

        Returns:
            Entries in the order the API returned them
        """
        payload = self._get(
            "time_entries", params={"start_date": start_date, "end_date": end_date}
        )
        if not isinstance(payload, list):
            raise TogglAPIError("GET /time_entries did not return a list")

        entries = [_validate(TimeEntry, item) for item in payload]
        logger.info(f"Fetched {len(entries)} time entries")
        return entries

    def get_project(self, project_id: int) -> Project:
        """Fetch a single project (``GET /projects/<id>``)."""
        return _validate(Project, self._get_data(f"projects/{project_id}"))

    def get_client(self, client_id: int) -> Client:
        """Fetch a single client (``GET /clients/<id>``)."""
        return _validate(Client, self._get_data(f"clients/{client_id}"))


def _validate(model, payload: Any):
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise MalformedRecordError(
            f"Malformed {model.__name__} record: {e.errors()[0]['msg']}"
        ) from e
