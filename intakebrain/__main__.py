"""Run the intake API server: ``python -m intakebrain``."""
import uvicorn

from intakebrain.config import get_settings
from intakebrain.logging_config import configure_logging


def main():
    settings = get_settings()
    configure_logging(settings.log_level)

    uvicorn.run(
        "intakebrain.api.main:create_app",
        factory=True,
        host=settings.api_bind_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
