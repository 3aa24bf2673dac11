"""FastAPI application package for the adaptive grant application forms.

This package exposes a small FastAPI application factory. It wires only
cross-cutting middleware (request-id) and problem+json handlers and mounts
the API routers. The form engine lives in `grantforms/logic/`, concrete form
definitions in `grantforms/forms/` and route handlers in `grantforms/routes/`.
"""

from __future__ import annotations

from grantforms.main import create_app

__all__ = ["create_app"]
