"""ASGI entrypoint for the nutrition filter API."""

from nutrition_filter.api.app import create_app
from nutrition_filter.containers import build_container

app = create_app(build_container())
