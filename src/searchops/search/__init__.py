"""Search request bodies and scroll pagination."""

from .query import RootQuery
from .scroll import Scroll

__all__ = ["RootQuery", "Scroll"]
