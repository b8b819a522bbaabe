"""
Middleware package for the rentals API.
"""

from .request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
