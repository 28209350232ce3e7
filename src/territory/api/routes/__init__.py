"""Route group exports."""

from . import detection, health, routes

__all__ = ["detection", "routes", "health"]
