"""ASGI entrypoint for the VidProof API."""

from vidproof.api.app import create_app
from vidproof.containers import build_container

app = create_app(build_container())
