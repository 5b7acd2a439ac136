"""
REST API layer for minutely.

Quick start::

    from minutely.api import create_app

    app = create_app()  # ready for uvicorn

This package owns the HTTP boundary only; job semantics live in
``minutely.jobs`` and scheduling in ``minutely.scheduling``.
"""

from minutely.api.app import create_app

__all__ = ["create_app"]
