"""
Application package initializer.

The project is organised into logical pieces: ``core`` holds
configuration, logging, the file-backed store and cache validation;
``services`` holds the query engine; ``schemas`` the pydantic models and
``api`` the versioned FastAPI routers.
"""

from .main import app  # noqa: F401
