"""Async REST transport for the reservations service."""

from __future__ import annotations
from tracking import t

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Protocol, Union

import httpx

from infrastructure.settings import AppSettings


class AuthContext(Protocol):
    async def get_token(self) -> Optional[str]:
        ...


class StaticTokenAuth:
    """Auth context backed by a token held in memory."""

    def __init__(self, token: Optional[str] = None) -> None:
        self.token = token

    async def get_token(self) -> Optional[str]:
        return self.token

    def clear(self) -> None:
        self.token = None


class ApiHttpError(Exception):
    """Non-2xx response from the remote service.

    ``details`` keeps the structured error payload (e.g. ``conflicts``);
    ``post_logout`` marks a 401 received after the session token is gone.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        path: str = "",
        timestamp: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        post_logout: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.path = path
        self.timestamp = timestamp or datetime.now(timezone.utc).isoformat()
        self.details: Dict[str, Any] = dict(details or {})
        self.post_logout = post_logout

    @property
    def conflicts(self) -> list:
        raw = self.details.get('conflicts')
        return list(raw) if isinstance(raw, list) else []


class ApiTransportError(Exception):
    """Network failure or timeout before a response was received."""

    def __init__(self, message: str, *, path: str = "", timed_out: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.timed_out = timed_out


JsonBody = Union[Dict[str, Any], list, None]


class ApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` returning decoded JSON envelopes."""

    def __init__(
        self,
        settings: AppSettings,
        *,
        auth: Optional[AuthContext] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('infrastructure.http_client.ApiClient.__init__')
        self.settings = settings
        self.auth = auth
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._client = httpx.AsyncClient(
            base_url=settings.api_base_url,
            timeout=settings.request_timeout_seconds,
            transport=transport,
            headers={'Accept': 'application/json'},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------
    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request('GET', path, params=params)

    async def post(
        self,
        path: str,
        json: JsonBody = None,
        *,
        data: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        return await self.request('POST', path, json=json, data=data, files=files)

    async def put(self, path: str, json: JsonBody = None) -> Any:
        return await self.request('PUT', path, json=json)

    async def patch(self, path: str, json: JsonBody = None) -> Any:
        return await self.request('PATCH', path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request('DELETE', path)

    # ------------------------------------------------------------------
    # Core request
    # ------------------------------------------------------------------
    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: JsonBody = None,
        data: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Send one request and return the decoded body.

        Raises:
            ApiHttpError: for any non-2xx status.
            ApiTransportError: for network failures and timeouts.
        """

        t('infrastructure.http_client.ApiClient.request')

        headers = await self._auth_headers()
        timeout = self._timeout_for(path, json)

        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                json=json,
                data=data,
                files=files,
                headers=headers,
                timeout=timeout,
            )
        except httpx.TimeoutException as exc:
            self.logger.warning("%s %s timed out after %.0fs", method, path, timeout)
            raise ApiTransportError("Request timeout", path=path, timed_out=True) from exc
        except httpx.HTTPError as exc:
            self.logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiTransportError(str(exc) or exc.__class__.__name__, path=path) from exc

        if response.is_success:
            return self._decode(response)

        raise await self._error_from(response, path)

    def _timeout_for(self, path: str, body: JsonBody) -> float:
        t('infrastructure.http_client.ApiClient._timeout_for')
        if (
            path.rstrip('/').endswith('/state')
            and isinstance(body, dict)
            and body.get('additionalReservationIds')
        ):
            return self.settings.bulk_request_timeout_seconds
        return self.settings.request_timeout_seconds

    async def _auth_headers(self) -> Dict[str, str]:
        if self.auth is None:
            return {}
        token = await self.auth.get_token()
        return {'Authorization': f"Bearer {token}"} if token else {}

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    async def _error_from(self, response: httpx.Response, path: str) -> ApiHttpError:
        t('infrastructure.http_client.ApiClient._error_from')

        payload = self._decode(response)
        body = payload if isinstance(payload, dict) else {}

        if response.status_code == 401:
            token = await self.auth.get_token() if self.auth is not None else None
            if not token:
                self.logger.warning("401 after session end, suppressing error for %s", path)
                return ApiHttpError(
                    401,
                    "Authentication required - session ended",
                    path=body.get('path') or path,
                    timestamp=body.get('timestamp'),
                    post_logout=True,
                )

        message = body.get('message') or response.reason_phrase or f"HTTP {response.status_code}"
        if isinstance(message, list):
            message = ", ".join(str(item) for item in message)

        details = body.get('details') if isinstance(body.get('details'), dict) else None
        status = body.get('statusCode') if isinstance(body.get('statusCode'), int) else response.status_code

        self.logger.debug("HTTP %s on %s: %s", status, path, message)
        return ApiHttpError(
            status,
            str(message),
            path=body.get('path') or path,
            timestamp=body.get('timestamp'),
            details=details,
        )
