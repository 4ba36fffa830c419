"""
REST pipe implementation.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..data_manager.targets import identity_of
from .bridge import SyncTarget, apply_read, apply_remove, apply_save

logger = logging.getLogger(__name__)

Stores = SyncTarget | Iterable[SyncTarget] | None


class PipeError(Exception):
    """Base exception for pipe errors."""

    pass


class PipeAPIError(PipeError):
    """Endpoint returned an error response."""

    def __init__(
        self,
        status_code: int,
        message: str,
        response_body: str | None = None,
    ):
        self.status_code = status_code
        self.message = message
        self.response_body = response_body
        super().__init__(f"Pipe API error {status_code}: {message}")


class PipeConnectionError(PipeError):
    """Failed to reach the endpoint."""

    pass


class InvalidArgumentError(PipeError, ValueError):
    """A request was built without the arguments it needs."""

    pass


class RestPipe:
    """
    Pipe to a RESTful collection endpoint.

    Features:
    - read (GET), save (POST/PUT), remove (DELETE)
    - JSON request and response bodies
    - Automatic retry with backoff
    - Results applied to attached stores through the sync bridge
    """

    type = "Rest"

    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        name: str,
        record_id: str = "id",
        base_url: str = "",
        endpoint: str | None = None,
        token: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
    ):
        """
        Initialize REST pipe.

        Args:
            name: Name used to reference this pipe (default endpoint path)
            record_id: Field that uniquely identifies a record
            base_url: Server URL the endpoint is relative to
            endpoint: Endpoint path if different from ``name``
            token: Optional bearer token
            timeout: Request timeout in seconds
            max_retries: Maximum retry attempts
            backoff_factor: Backoff factor for retries
        """
        self.name = name
        self.record_id = record_id or "id"
        self.timeout = timeout

        path = (endpoint or name).strip("/")
        self.url = f"{base_url.rstrip('/')}/{path}" if base_url else path

        self.session = requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "POST", "PUT", "DELETE"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def __repr__(self) -> str:
        return f"RestPipe(name={self.name!r}, url={self.url!r})"

    def _request(
        self,
        method: str,
        url: str,
        params: dict | None = None,
        json_data: Any = None,
    ) -> requests.Response:
        """Make a request with error handling."""
        logger.debug(f"Pipe request: {method} {url}")
        if json_data is not None:
            logger.debug(f"Request body: {json.dumps(json_data, indent=2, default=str)}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                timeout=self.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error to {url}: {e}")
            raise PipeConnectionError(f"Failed to connect to {url}: {e}") from e
        except requests.exceptions.Timeout as e:
            logger.error(f"Timeout for {url}: {e}")
            raise PipeConnectionError(f"Request to {url} timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error for {url}: {e}")
            raise PipeError(f"Request failed: {e}") from e

        logger.debug(f"Response status: {response.status_code}")

        if not response.ok:
            error_body = response.text
            try:
                error_json = response.json()
                message = error_json.get("message", response.reason)
            except (ValueError, AttributeError):
                message = response.reason

            logger.error(f"Pipe {self.name}: API error {response.status_code}: {message}")
            logger.debug(f"Full response body: {error_body}")

            raise PipeAPIError(
                status_code=response.status_code,
                message=message,
                response_body=error_body,
            )

        return response

    @staticmethod
    def _parse(response: requests.Response) -> Any:
        """Parsed JSON body, or None for empty bodies."""
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise PipeError(f"Invalid JSON response from {response.url}: {e}") from e

    def _record_url(self, identity: Any) -> str:
        return f"{self.url}/{identity}"

    def read(self, params: dict | None = None, stores: Stores = None) -> list[dict]:
        """
        Read the collection.

        Args:
            params: Query string parameters for the server
            stores: Store(s) to reset with the returned records

        Returns:
            List of records returned by the server
        """
        body = self._parse(self._request("GET", self.url, params=params))

        if body is None:
            records = []
        elif isinstance(body, list):
            records = body
        else:
            records = [body]

        logger.info(f"Pipe {self.name}: read {len(records)} record(s)")
        apply_read(stores, records)
        return records

    def save(self, record: Mapping[str, Any], stores: Stores = None) -> dict | None:
        """
        Save a record.

        Records without an identity are created (POST to the collection);
        records with one are updated (PUT to the record URL).

        Args:
            record: Record to save
            stores: Store(s) to update with the saved record

        Returns:
            The record returned by the server (or the sent record if the
            response body is empty)
        """
        record = dict(record or {})
        identity = record.get(self.record_id)

        if identity is None:
            response = self._request("POST", self.url, json_data=record)
        else:
            response = self._request("PUT", self._record_url(identity), json_data=record)

        body = self._parse(response)
        saved = body if isinstance(body, dict) else record

        logger.info(
            f"Pipe {self.name}: {'updated' if identity is not None else 'created'} "
            f"record {saved.get(self.record_id)}"
        )
        apply_save(stores, saved)
        return body if body is not None else record

    def remove(
        self,
        target: Any = None,
        stores: Stores = None,
        remove_all: bool = False,
    ) -> Any:
        """
        Remove a record, or the whole collection.

        Args:
            target: Identity value or record to delete
            stores: Store(s) to remove the record from
            remove_all: Delete the whole collection when no target is given

        Returns:
            Parsed response body (None if empty)

        Raises:
            InvalidArgumentError: If there is neither a usable identity nor
                remove_all
        """
        identity = identity_of(target, self.record_id)

        if identity is None and not remove_all:
            raise InvalidArgumentError(
                f"Pipe {self.name}: remove needs a record identity or remove_all=True"
            )

        url = self.url if identity is None else self._record_url(identity)
        body = self._parse(self._request("DELETE", url))

        logger.info(f"Pipe {self.name}: removed {'all records' if identity is None else identity}")
        apply_remove(stores, identity)
        return body
