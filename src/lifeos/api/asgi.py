"""ASGI entrypoint for the LifeOS API."""

from lifeos.api.app import create_app
from lifeos.containers import build_container

app = create_app(build_container())
