"""Async API client that mirrors what the dashboard front-end keeps in memory.

It holds the authenticated user and the department list, resyncs the user
with ``/verify_auth`` instead of trusting its cache, and keeps "server not
reachable" apart from "server said no".
"""
import logging
from typing import List, Optional

import httpx

logger = logging.getLogger(__name__)

REQUIRED_USER_FIELDS = ("id", "username", "name", "email", "department", "role")


class ServerUnreachable(Exception):
    def __init__(self, message: str = "Unable to connect to the server. Please check your network and backend."):
        super().__init__(message)


class ApiError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class AuthError(ApiError):
    pass


def _detail(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        return body.get("detail") or body.get("message") or default
    return default


class InsightPulseClient:
    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 10.0):
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
        self.user: Optional[dict] = None
        self.departments: List[dict] = []

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self._http.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.error("Request %s %s failed: %s", method, url, exc)
            raise ServerUnreachable() from exc

    async def refresh_auth(self) -> Optional[dict]:
        try:
            response = await self._request("GET", "/verify_auth")
        except ServerUnreachable:
            self.user = None
            raise
        data = response.json() if response.status_code == 200 else {}
        if data.get("isAuthenticated") and data.get("user"):
            self.user = data["user"]
        else:
            logger.info("Server reports no active session (status %s)", response.status_code)
            self.user = None
        return self.user

    async def login(self, username: str, password: str) -> dict:
        try:
            response = await self._request("POST", "/login", json={"username": username, "password": password})
        except ServerUnreachable:
            self.user = None
            raise
        if response.status_code != 200:
            self.user = None
            raise AuthError(response.status_code, _detail(response, "Invalid username or password"))

        user = response.json()
        if not isinstance(user, dict) or any(field not in user for field in REQUIRED_USER_FIELDS):
            self.user = None
            raise ApiError(response.status_code, "Invalid user data received from server")
        self.user = user
        return user

    async def logout(self) -> bool:
        """Log out on the server. The local user is cleared whatever happens."""
        try:
            response = await self._request("POST", "/logout")
            if response.status_code != 200:
                logger.error("Logout failed on server: %s", _detail(response, "unknown error"))
                return False
            return True
        finally:
            self.user = None

    async def refresh_departments(self) -> List[dict]:
        response = await self._request("GET", "/api/departments")
        if response.status_code != 200:
            raise ApiError(response.status_code, _detail(response, "Failed to load departments"))
        self.departments = response.json()
        return self.departments
