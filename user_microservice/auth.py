"""
Auth client for the user API.

Bearer tokens are validated by an external auth service; this module only
forwards them and turns the verdict into an authenticated identity that
protected handlers receive. Token issuance lives elsewhere.
"""

import logging
from typing import Callable

import httpx
from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .config import Settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class AuthenticatedIdentity(BaseModel):
    """Verdict returned by the auth service for a bearer token."""
    valid: bool
    id: str | None = None
    scopes: list[str] = []
    token_id: str | None = None
    name: str | None = None
    error: str | None = None
    detail: str | None = None



# auth service error code -> (status, client message)
_REJECTIONS = {
    "token_expired": (401, "Token expired"),
    "token_revoked": (401, "Token has been revoked"),
    "token_not_found": (401, "Invalid token"),
    "insufficient_scopes": (403, "Insufficient permissions"),
}


def _reject(status_code: int, detail: str) -> HTTPException:
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return HTTPException(status_code=status_code, detail=detail, headers=headers)


class AuthClient:
    """Asks the auth service who a bearer token belongs to."""

    def __init__(
        self,
        auth_service_url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.auth_service_url = auth_service_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, config: Settings) -> "AuthClient":
        return cls(config.auth_service_url, timeout=config.auth_timeout)

    async def authenticate(
        self,
        token: str,
        required_scopes: list[str] | None = None,
        service_name: str | None = None,
        action_name: str | None = None,
    ) -> AuthenticatedIdentity:
        """
        Resolve a bearer token to an identity.

        Transport failures surface as 504 (timeout), 503 (unreachable) and
        502 (any non-200 answer). The auth service body is never echoed.
        """
        try:
            response = await self._client.post(
                f"{self.auth_service_url}/auth/validate",
                json={
                    "token": token,
                    "required_scopes": required_scopes or [],
                    "service_name": service_name,
                    "action_name": action_name,
                },
            )
        except httpx.TimeoutException:
            logger.error("Auth service timeout")
            raise HTTPException(status_code=504, detail="Auth service timeout")
        except httpx.RequestError as e:
            logger.error("Auth service connection error: %s", e)
            raise HTTPException(status_code=503, detail="Auth service unavailable")

        if response.status_code != 200:
            logger.error("Auth service returned %d", response.status_code)
            raise HTTPException(status_code=502, detail="Auth service error")

        data = response.json()
        data.setdefault("id", data.get("user_id"))
        return AuthenticatedIdentity(**data)

    def require_identity(self, required_scopes: list[str] | None = None) -> Callable:
        """FastAPI dependency rejecting callers before the handler runs."""

        async def dependency(
            request: Request,
            credentials: HTTPAuthorizationCredentials | None = Security(security),
        ) -> AuthenticatedIdentity:
            if credentials is None:
                raise _reject(401, "Authentication required")

            identity = await self.authenticate(
                token=credentials.credentials,
                required_scopes=required_scopes,
                service_name=getattr(request.app.state, "service_name", None),
                action_name=request.url.path,
            )

            if not identity.valid:
                status_code, detail = _REJECTIONS.get(identity.error, (401, "Authentication failed"))
                if status_code == 403 and required_scopes:
                    detail = f"{detail}. Required: {required_scopes}"
                raise _reject(status_code, detail)

            if not identity.id:
                raise _reject(401, "Token is not bound to a user")

            return identity

        return dependency

    async def close(self):
        await self._client.aclose()
