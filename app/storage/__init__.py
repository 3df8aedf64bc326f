# Storage backends

from app.config import STORAGE_BACKEND
from app.storage.base import StorageBackend


def build_storage(backend: str = STORAGE_BACKEND) -> StorageBackend:
    """Create the configured backend. Called once at app creation."""
    if backend == "supabase":
        from app.storage.supabase_storage import SupabaseStorage

        return SupabaseStorage()
    from app.storage.local_storage import LocalStorage

    return LocalStorage()


__all__ = ["build_storage", "StorageBackend"]
