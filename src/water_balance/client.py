"""HTTP client for the hosted Supabase project (edge functions and auth)."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Type

import httpx

from .config import SupabaseConfig, load_supabase_config
from .exceptions import AuthenticationError, RemoteCallError

logger = logging.getLogger(__name__)

_ERROR_KEYS = ("msg", "message", "error_description", "error")
# Statuses GoTrue returns for a token that is already gone; sign-out still succeeds locally.
_SIGNED_OUT_STATUSES = {401, 403, 404}


def _extract_error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in _ERROR_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    text = response.text.strip()
    if text:
        return text[:200]
    return f"HTTP {response.status_code}"


class SupabaseClient:
    """
    Minimal async wrapper around the Supabase REST surface used by the report.

    The signed-in session lives in memory only; it is dropped on ``sign_out``
    or when the client is discarded.
    """

    def __init__(
        self,
        config: SupabaseConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._session: Optional[Dict[str, Any]] = None

    async def __aenter__(self) -> "SupabaseClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @property
    def session(self) -> Optional[Dict[str, Any]]:
        return self._session

    @property
    def access_token(self) -> Optional[str]:
        if self._session is None:
            return None
        return self._session.get("access_token")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.url,
                timeout=self.config.timeout_seconds,
                headers={"apikey": self.config.anon_key},
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, str]] = None,
        error_cls: Type[RemoteCallError] = RemoteCallError,
    ) -> httpx.Response:
        bearer = self.access_token or self.config.anon_key
        client = self._get_client()
        try:
            response = await client.request(
                method,
                path,
                json=json,
                params=params,
                headers={"Authorization": f"Bearer {bearer}"},
            )
        except httpx.HTTPError as exc:
            logger.warning("Supabase request %s %s failed: %s", method, path, exc)
            raise error_cls(str(exc) or type(exc).__name__) from exc

        if response.is_error:
            message = _extract_error_message(response)
            logger.warning(
                "Supabase request %s %s returned %d: %s",
                method,
                path,
                response.status_code,
                message,
            )
            raise error_cls(message, status_code=response.status_code)
        return response

    # -------------------------------------------------------------------------
    # Edge functions
    # -------------------------------------------------------------------------

    async def invoke_function(self, name: str, body: Mapping[str, Any]) -> Any:
        """POST ``body`` to the named edge function and decode its reply."""
        response = await self._request("POST", f"{self.config.functions_path}/{name}", json=body)
        try:
            return response.json()
        except RecursionError as exc:
            logger.warning("Reply from function %s is nested too deeply to decode", name)
            raise RemoteCallError(
                f"Reply from function {name} is nested too deeply to decode",
                status_code=response.status_code,
            ) from exc
        except ValueError:
            return response.text

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    async def sign_in_with_password(self, phone: str, password: str) -> Dict[str, Any]:
        response = await self._request(
            "POST",
            f"{self.config.auth_path}/token",
            params={"grant_type": "password"},
            json={"phone": phone, "password": password},
            error_cls=AuthenticationError,
        )
        payload = response.json()
        if isinstance(payload, dict) and payload.get("access_token"):
            self._session = payload
        return payload

    async def sign_out(self) -> None:
        if self._session is None:
            return
        try:
            await self._request("POST", f"{self.config.auth_path}/logout", error_cls=AuthenticationError)
        except AuthenticationError as exc:
            if exc.status_code not in _SIGNED_OUT_STATUSES:
                raise
            logger.debug("Session already invalid on the server: %s", exc)
        self._session = None

    async def get_user(self) -> Optional[Dict[str, Any]]:
        """Fetch the current user, or ``None`` when nobody is signed in."""
        if self._session is None:
            return None
        response = await self._request("GET", f"{self.config.auth_path}/user", error_cls=AuthenticationError)
        payload = response.json()
        if not isinstance(payload, dict) or not payload.get("id"):
            return None
        return payload


def build_client_from_env(
    config: Optional[SupabaseConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SupabaseClient:
    cfg = config or load_supabase_config()
    return SupabaseClient(cfg, transport=transport)
