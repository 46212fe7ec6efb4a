"""Request handlers for the user API."""

import inspect
import logging
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .auth import AuthenticatedIdentity
from .config import Settings, settings
from .errors import ApiError, NotImplementedApiError, RequestValidationError, normalize_error
from .service import UserService
from .validation import PasswordPolicy, validate_registration

logger = logging.getLogger(__name__)


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


def redact_email(email: str, keep: int = 3) -> str:
    """Keep only a short prefix of an email address for logging."""
    return f"{email[:keep]}..."


class UserController:
    """
    Handlers for registration, profile and password operations.

    Each handler either returns exactly one success envelope or raises an
    ApiError for the error sink; nothing else leaves a handler.

    Args:
        service: User service collaborator
        log: Logger for audit lines (defaults to this module's logger)
        config: Settings providing the password policy and redaction length
    """

    def __init__(
        self,
        service: UserService,
        log: logging.Logger | None = None,
        config: Settings | None = None,
    ):
        self.service = service
        self.log = log or logger
        self.config = config or settings
        self.policy = PasswordPolicy.from_settings(self.config)

    async def register(self, payload: Any) -> JSONResponse:
        """POST /createUser"""
        try:
            result = validate_registration(payload, self.policy)
            if not result.ok:
                raise RequestValidationError([failure.model_dump() for failure in result.errors])

            user_input = result.value
            self.log.info(
                "Registration attempt for email: %s",
                redact_email(user_input.email, self.config.email_log_prefix_length),
            )

            user = await _resolve(self.service.register_user(user_input))

            self.log.info("User registered successfully: %s", user.id)

            return JSONResponse(
                status_code=201,
                content={
                    "status": "success",
                    "message": "User registered successfully",
                    "user": {"id": user.id, "status": user.status},
                },
            )
        except ApiError:
            raise
        except Exception as exc:
            raise normalize_error(
                exc, "Failed to register user", attach_cause=True, detect_conflict=True
            ) from exc

    async def get_user_profile(self, identity: AuthenticatedIdentity) -> JSONResponse:
        """GET /getUserProfile"""
        try:
            profile = await _resolve(self.service.get_user_profile(identity.id))
            return JSONResponse(
                status_code=200, content={"status": "success", "data": jsonable_encoder(profile)}
            )
        except ApiError:
            raise
        except Exception as exc:
            # cause is not attached here, unlike register
            raise normalize_error(exc, "Failed to retrieve user profile") from exc

    async def update_user_profile(self, identity: AuthenticatedIdentity, payload: Any) -> JSONResponse:
        """PUT /user/update"""
        raise NotImplementedApiError()

    async def change_password(self, identity: AuthenticatedIdentity, payload: Any) -> JSONResponse:
        """PUT /change-password"""
        try:
            body = payload if isinstance(payload, dict) else {}
            current_password = body.get("currentPassword")
            new_password = body.get("newPassword")

            if not current_password or not new_password:
                raise ApiError(400, "Current password and new password are required")

            await _resolve(
                self.service.change_password(identity.id, current_password, new_password)
            )

            return JSONResponse(
                status_code=200,
                content={"status": "success", "message": "Password changed successfully"},
            )
        except ApiError:
            raise
        except Exception as exc:
            raise normalize_error(exc, "Failed to change password") from exc
