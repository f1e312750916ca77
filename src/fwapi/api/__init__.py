"""HTTP API over the chain and interface services."""

from fwapi.api.app import create_app

__all__ = ["create_app"]
