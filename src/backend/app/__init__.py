"""Vegobolt API application: ``create_app`` builds the FastAPI instance."""

from .factory import create_app

__all__ = ["create_app"]
