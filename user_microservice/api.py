"""FastAPI application factory for the user API."""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request

from .auth import AuthClient
from .config import Settings, settings
from .errors import RequestValidationError, register_error_handlers
from .models import ErrorResponse, HealthResponse
from .processor import UserAction, UserProcessor
from .service import InMemoryUserService, UserService

logger = logging.getLogger(__name__)


async def read_json_body(request: Request) -> Any:
    """Decode the request body; an empty body reads as an empty object."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        raise RequestValidationError([{"field": "body", "message": "Malformed JSON body"}])


def create_app(
    service: UserService | None = None,
    config: Settings | None = None,
    auth_client: AuthClient | None = None,
) -> FastAPI:
    """
    Create a FastAPI application serving the user routes.

    Args:
        service: User service collaborator (defaults to an in-memory store)
        config: Optional settings (defaults to the environment-loaded settings)
        auth_client: AuthClient validating bearer tokens on protected routes
    """

    config = config or settings
    service = service if service is not None else InMemoryUserService()
    auth_client = auth_client or AuthClient.from_settings(config)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    processor = UserProcessor(service, config=config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s %s", processor.name, processor.version)
        yield
        await auth_client.close()
        logger.info("Stopped %s", processor.name)

    app = FastAPI(
        title=f"{processor.name.title()} API",
        description=config.service_description,
        version=processor.version,
        lifespan=lifespan,
    )

    require_identity = auth_client.require_identity(config.required_scopes or None)

    app.state.service_name = processor.name
    app.state.processor = processor
    # Exposed so tests can swap authentication via app.dependency_overrides
    app.state.require_identity = require_identity

    register_error_handlers(app, config)

    @app.get("/", response_model=HealthResponse)
    async def root():
        return HealthResponse(status="healthy", version=processor.version)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(status="healthy", version=processor.version)

    def make_endpoint(action: UserAction):
        handler = action.handler

        if action.requires_auth and action.reads_body:
            async def endpoint(request: Request, identity=Depends(require_identity)):
                return await handler(identity, await read_json_body(request))
        elif action.requires_auth:
            async def endpoint(identity=Depends(require_identity)):
                return await handler(identity)
        else:
            async def endpoint(request: Request):
                return await handler(await read_json_body(request))

        return endpoint

    router = APIRouter(prefix=config.route_prefix)

    for action in processor.get_actions():
        logger.info("Registering action '%s' at %s", action.name, action.path)

        route_kwargs = {
            "methods": list(action.methods),
            "status_code": action.status_code,
            "summary": action.summary,
            "tags": list(action.tags) if action.tags else None,
            "responses": {
                400: {"model": ErrorResponse},
                500: {"model": ErrorResponse},
                **({401: {"model": ErrorResponse}} if action.requires_auth else {}),
            },
            "name": action.name,
        }
        route_kwargs = {k: v for k, v in route_kwargs.items() if v is not None}

        router.add_api_route(action.path, make_endpoint(action), **route_kwargs)

    app.include_router(router)

    return app
