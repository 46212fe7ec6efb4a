"""Route table binding HTTP paths to user handlers."""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List

from .config import Settings, settings
from .handlers import UserController
from .service import UserService


@dataclass
class UserAction:
    """
    Definition of an API route backed by a controller method.

    Attributes:
        name: Short identifier used for logging and OpenAPI docs.
        path: FastAPI route path (e.g., "/createUser").
        handler: Controller coroutine. Receives the identity first when
            requires_auth is set, then the decoded body when reads_body is set.
        methods: HTTP methods to expose (defaults to POST).
        requires_auth: Reject callers without a valid bearer token.
        reads_body: Decode the JSON body and pass it to the handler.
        status_code: Success status, for OpenAPI docs.
        summary: Optional OpenAPI summary.
        tags: Optional OpenAPI tags.
    """

    name: str
    path: str
    handler: Callable[..., Awaitable[Any]]
    methods: tuple[str, ...] = ("POST",)
    requires_auth: bool = False
    reads_body: bool = False
    status_code: int = 200
    summary: str | None = None
    tags: tuple[str, ...] | None = ("users",)


class UserProcessor:
    """Exposes the user handlers as a list of routes."""

    def __init__(
        self,
        service: UserService,
        config: Settings | None = None,
        controller: UserController | None = None,
    ):
        self.config = config or settings
        self.controller = controller or UserController(service, config=self.config)

    @property
    def name(self) -> str:
        return self.config.service_name

    @property
    def version(self) -> str:
        return self.config.service_version

    def get_actions(self) -> List[UserAction]:
        """Return the routes served by this processor."""
        controller = self.controller
        return [
            # Public routes
            UserAction(
                name="register",
                path="/createUser",
                handler=controller.register,
                methods=("POST",),
                reads_body=True,
                status_code=201,
                summary="Register a new user",
            ),
            # Protected routes
            UserAction(
                name="get_user_profile",
                path="/getUserProfile",
                handler=controller.get_user_profile,
                methods=("GET",),
                requires_auth=True,
                summary="Fetch the caller's profile",
            ),
            UserAction(
                name="update_user_profile",
                path="/user/update",
                handler=controller.update_user_profile,
                methods=("PUT",),
                requires_auth=True,
                reads_body=True,
                status_code=501,
                summary="Update the caller's profile (not implemented)",
            ),
            UserAction(
                name="change_password",
                path="/change-password",
                handler=controller.change_password,
                methods=("PUT",),
                requires_auth=True,
                reads_body=True,
                summary="Change the caller's password",
            ),
        ]
