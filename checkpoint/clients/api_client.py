# =======================================================================================
# checkpoint/clients/api_client.py - Remote Service Client
# =======================================================================================
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..config import config
from ..utils.exceptions import AuthenticationError, LocalStorageError, RemoteUnavailableError

logger = logging.getLogger(__name__)

TOKEN_DOCUMENT = "auth_tokens"


@dataclass
class AuthTokens:
    access_token: str
    refresh_token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"accessToken": self.access_token, "refreshToken": self.refresh_token}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Optional["AuthTokens"]:
        access = payload.get("accessToken") or payload.get("access_token")
        if not access:
            return None
        refresh = payload.get("refreshToken") or payload.get("refresh_token")
        return cls(access_token=access, refresh_token=refresh)


@dataclass
class ApiErrorInfo:
    message: str
    status: int
    errors: Optional[Dict[str, List[str]]] = None


def _unwrap(payload: Any) -> Any:
    """Accept both bare bodies and `{data: ...}` envelopes."""
    if isinstance(payload, dict) and "data" in payload and isinstance(payload["data"], (dict, list)):
        return payload["data"]
    return payload


class ApiClient:
    """
    Async client for the remote log/employee service.

    Holds its own bearer tokens and refresh state; create one per process and
    hand it to the stores that need it.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        token_storage=None,
    ):
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.api_timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        # token_storage is a DatabaseManager-like object with get/put/remove_document
        self._token_storage = token_storage
        self._tokens: Optional[AuthTokens] = None
        self._tokens_loaded = False
        self.is_refreshing = False
        self.refresh_subscribers: List[asyncio.Future] = []

    # ------------------------------------------------------------------
    # Token handling
    # ------------------------------------------------------------------
    def _load_tokens(self) -> Optional[AuthTokens]:
        if not self._tokens_loaded:
            self._tokens_loaded = True
            if self._token_storage is not None:
                try:
                    stored = self._token_storage.get_document(TOKEN_DOCUMENT)
                except LocalStorageError as e:
                    logger.error("Error retrieving auth tokens: %s", e)
                    stored = None
                if isinstance(stored, dict):
                    self._tokens = AuthTokens.from_payload(stored)
        return self._tokens

    def set_tokens(self, tokens: Optional[AuthTokens]) -> None:
        self._tokens = tokens
        self._tokens_loaded = True
        if self._token_storage is None:
            return
        try:
            if tokens is None:
                self._token_storage.remove_document(TOKEN_DOCUMENT)
            else:
                self._token_storage.put_document(TOKEN_DOCUMENT, tokens.to_dict())
        except LocalStorageError as e:
            logger.error("Error storing auth tokens: %s", e)

    def clear_tokens(self) -> None:
        self.set_tokens(None)

    def is_authenticated(self) -> bool:
        tokens = self._load_tokens()
        return bool(tokens and tokens.access_token)

    def get_access_token(self) -> Optional[str]:
        tokens = self._load_tokens()
        return tokens.access_token if tokens else None

    async def _refresh_access_token(self) -> str:
        """Refresh once; concurrent callers wait for the refresh in flight."""
        if self.is_refreshing:
            waiter = asyncio.get_running_loop().create_future()
            self.refresh_subscribers.append(waiter)
            return await waiter

        self.is_refreshing = True
        try:
            tokens = self._load_tokens()
            if not tokens or not tokens.refresh_token:
                raise AuthenticationError("No refresh token available", status_code=401)

            response = await self._client.post(
                "/auth/refresh", json={"refreshToken": tokens.refresh_token}
            )
            if response.status_code >= 400:
                raise AuthenticationError("Token refresh rejected", status_code=response.status_code)

            new_tokens = AuthTokens.from_payload(_unwrap(response.json()) or {})
            if new_tokens is None:
                raise AuthenticationError("Token refresh returned no access token", status_code=401)
            if new_tokens.refresh_token is None:
                new_tokens.refresh_token = tokens.refresh_token
            self.set_tokens(new_tokens)

            for waiter in self.refresh_subscribers:
                if not waiter.done():
                    waiter.set_result(new_tokens.access_token)
            return new_tokens.access_token
        except Exception as e:
            self.clear_tokens()
            if isinstance(e, AuthenticationError):
                error = e
            else:
                error = AuthenticationError(f"Token refresh failed: {e}", status_code=401)
                error.__cause__ = e
            for waiter in self.refresh_subscribers:
                if not waiter.done():
                    waiter.set_exception(error)
            raise error
        finally:
            self.refresh_subscribers = []
            self.is_refreshing = False

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    async def _send(self, method: str, path: str, token: Optional[str], **kwargs) -> httpx.Response:
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            return await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteUnavailableError(f"{method} {path} failed: {e.__class__.__name__}: {e}") from e

    async def request(self, method: str, path: str, **kwargs) -> Any:
        """Perform a request and return the unwrapped JSON body (or None)."""
        response = await self._send(method, path, self.get_access_token(), **kwargs)

        tokens = self._load_tokens()
        if response.status_code == 401 and not path.startswith("/auth/") and tokens and tokens.refresh_token:
            new_token = await self._refresh_access_token()
            response = await self._send(method, path, new_token, **kwargs)

        if response.status_code == 401:
            raise AuthenticationError(f"{method} {path} unauthorized", status_code=401)
        if response.status_code >= 400:
            detail = self._error_message(response)
            raise RemoteUnavailableError(
                f"{method} {path} returned {response.status_code}: {detail}",
                status_code=response.status_code,
                detail=detail,
            )
        if not response.content:
            return None
        try:
            return _unwrap(response.json())
        except ValueError as e:
            raise RemoteUnavailableError(f"{method} {path} returned invalid JSON") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict) and body.get("message"):
            message = body["message"]
            return ", ".join(message) if isinstance(message, list) else str(message)
        return response.reason_phrase

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        return await self.request("GET", path, params=params or None)

    async def post(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, json=data)

    async def put(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PUT", path, json=data)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------
    async def login(self, email: str, password: str) -> Dict[str, Any]:
        try:
            payload = await self.post("/auth/login", {"email": email, "password": password})
        except RemoteUnavailableError as e:
            if e.status_code == 401:
                raise AuthenticationError("Invalid credentials", status_code=401) from e
            raise
        tokens = AuthTokens.from_payload(payload or {})
        if tokens is None:
            raise AuthenticationError("Login response carried no access token", status_code=401)
        self.set_tokens(tokens)
        return payload

    async def logout(self) -> None:
        try:
            await self.post("/auth/logout")
        except RemoteUnavailableError as e:
            logger.warning("Logout error: %s", e)
        finally:
            self.clear_tokens()

    async def aclose(self) -> None:
        await self._client.aclose()


def describe_api_error(error: Exception) -> ApiErrorInfo:
    """Flatten any client-side failure into a message/status pair for display."""
    if isinstance(error, RemoteUnavailableError):
        return ApiErrorInfo(message=str(error) or "An error occurred", status=error.status_code or 500)
    if isinstance(error, httpx.HTTPStatusError):
        try:
            body = error.response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return ApiErrorInfo(
            message=body.get("message") or str(error) or "An error occurred",
            status=error.response.status_code,
            errors=body.get("errors"),
        )
    return ApiErrorInfo(message=str(error) or "An unexpected error occurred", status=500)
