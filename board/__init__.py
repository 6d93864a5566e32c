"""Message board package (public list, logged-in posting)."""

from .routes import board_bp

__all__ = ["board_bp"]
