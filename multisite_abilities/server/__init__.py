"""
Multisite Abilities Server Package.

This package exposes the ability catalogue over HTTP with FastAPI.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Constants shared by the routes.
    exception_handlers: Application-wide exception handlers.
    services: Dependencies injected into the routes.
"""
