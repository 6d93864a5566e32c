"""Goguma feature package: plants, daily growth actions, decay, and ranking."""

from .routes import goguma_bp

__all__ = ["goguma_bp"]
