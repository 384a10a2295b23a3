"""Entrypoint for the customer HTTP API package.

The package exposes a FastAPI application that seeds an in-memory table of
customers at startup and serves it read-only under ``/customers``.
You can import :data:`customer_api.main.app` to run the server using Uvicorn:

>>> uvicorn customer_api.main:app --reload

or start it with the ``customer-api`` console script, which reads its
configuration from environment variables.
"""

from .main import app, create_app  # noqa: F401
