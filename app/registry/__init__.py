# Identifier registry

from app.registry.base import FileRegistry, IdentifierConflict

__all__ = ["FileRegistry", "IdentifierConflict"]
