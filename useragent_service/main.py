import uvicorn

from useragent_service.core.app_factory import create_app
from useragent_service.core.config import settings

app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "useragent_service.main:app",
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
