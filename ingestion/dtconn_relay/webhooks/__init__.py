"""Webhook handlers."""

from .dtconn import router as dtconn_router

__all__ = ["dtconn_router"]
