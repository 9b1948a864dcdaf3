"""ASGI entrypoint for the nutrition dashboard API."""

from nutrition_dashboard.api.app import create_app
from nutrition_dashboard.containers import build_container

app = create_app(build_container())
