from fastapi import FastAPI

from triage_link.api.routes import router as api_router
from triage_link.core.config import get_settings
from triage_link.core.logging import configure_logging


def create_app() -> FastAPI:
    """애플리케이션을 생성하고 FastAPI를 설정"""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Triage Link", version=settings.version)
    app.include_router(api_router)
    return app


app = create_app()
