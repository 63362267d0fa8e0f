from .console import CatalogReporter


__all__ = ["CatalogReporter"]
