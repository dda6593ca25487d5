"""ASGI entrypoint: ``uvicorn diet_helper.api.asgi:app``."""

from fastapi import FastAPI

from diet_helper.api.app import create_app
from diet_helper.config import Settings
from diet_helper.containers import build_container


def build_app(settings: Settings | None = None) -> FastAPI:
    """Build the app from settings, reading the environment by default."""
    return create_app(build_container(settings or Settings()))


app = build_app()
