"""Catalog storage collaborator (read side)."""

from .repository import CatalogRepository, SqlCatalogRepository

__all__ = ["CatalogRepository", "SqlCatalogRepository"]
