"""Main entrypoint for the user service."""

import uvicorn

from .api import create_app
from .config import settings

app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "user_microservice.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
