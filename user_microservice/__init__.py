"""User registration and profile API built on FastAPI."""

from .api import create_app
from .auth import AuthClient, AuthenticatedIdentity
from .config import Settings, settings
from .errors import (
    ApiError,
    ConflictError,
    NotImplementedApiError,
    RequestValidationError,
    UnexpectedError,
    UserAlreadyRegisteredError,
    UserServiceError,
)
from .handlers import UserController
from .processor import UserAction, UserProcessor
from .service import InMemoryUserService, UserService
from .validation import PasswordPolicy, ValidationResult, validate_registration

__version__ = "1.0.0"


__all__ = [
    "create_app",
    "AuthClient",
    "AuthenticatedIdentity",
    "Settings",
    "settings",
    "ApiError",
    "ConflictError",
    "NotImplementedApiError",
    "RequestValidationError",
    "UnexpectedError",
    "UserAlreadyRegisteredError",
    "UserServiceError",
    "UserController",
    "UserAction",
    "UserProcessor",
    "InMemoryUserService",
    "UserService",
    "PasswordPolicy",
    "ValidationResult",
    "validate_registration",
]
