"""Repositories package - export only."""

from .impl import ProductRepository

__all__ = ["ProductRepository"]
