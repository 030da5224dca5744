"""Composition root for the reservation client."""

from .container import DependencyContainer

__all__ = ["DependencyContainer"]
