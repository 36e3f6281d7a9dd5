"""Cache sub-package for the pr-console project.

Exports the core cache functions so that other modules can import
them directly from ``pr_console.cache``:

    from pr_console.cache import get_connection, init_db, cache_get
"""

from pr_console.cache.manager import (
    cache_delete,
    cache_get,
    cache_set,
    get_connection,
    init_db,
    invalidate_pull_request_cache,
    revalidate_path,
)

__all__ = [
    "cache_delete",
    "cache_get",
    "cache_set",
    "get_connection",
    "init_db",
    "invalidate_pull_request_cache",
    "revalidate_path",
]
