"""
ASGI entry point.

Run with:  uvicorn tarot42.asgi:app --reload
           tarot42-api            (console script, honours PORT)
"""
import uvicorn

from tarot42.core.config import settings
from tarot42.main import configure_logging, create_app

configure_logging()

app = create_app()


def run() -> None:
    uvicorn.run("tarot42.asgi:app", host="0.0.0.0", port=settings.PORT)
