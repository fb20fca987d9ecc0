"""ASGI middleware and exception handlers for the wallet service."""
