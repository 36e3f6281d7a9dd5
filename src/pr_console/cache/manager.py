"""Cache manager for the pr-console project.

Provides connection management, schema initialization, a small TTL
key/value cache for GitHub responses, and the revalidation log that
records which rendered views became stale after a mutation.  All
functions take a connection object as their first parameter and do not
manage global state.
"""

import json
import logging
import pathlib
import sqlite3
from typing import Any

logger = logging.getLogger(__name__)

README_TTL_SECONDS = 60 * 60

_NOW_SQL = "strftime('%Y-%m-%d %H:%M:%f', 'now')"


def get_connection(db_path: str) -> sqlite3.Connection:
    """Open a SQLite connection with Row factory enabled.

    Args:
        db_path: Filesystem path to the SQLite database file, or ":memory:"
                 for an in-memory database.

    Returns:
        A ``sqlite3.Connection`` configured with ``sqlite3.Row`` as
        ``row_factory``.
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes by executing ``schema.sql``.

    Args:
        conn: An open SQLite connection.
    """
    schema_path = pathlib.Path(__file__).with_name("schema.sql")
    schema_sql = schema_path.read_text(encoding="utf-8")
    conn.executescript(schema_sql)
    logger.debug("Cache schema initialized from %s", schema_path)


# ---------------------------------------------------------------------------
# Key/value cache
# ---------------------------------------------------------------------------

def cache_get(conn: sqlite3.Connection, key: str) -> Any:
    """Return the decoded value stored under *key*, or ``None``.

    Entries past their ``expires_at`` are treated as missing.
    """
    row = conn.execute(
        f"""
        SELECT value
        FROM cache_entries
        WHERE key = :key
          AND (expires_at IS NULL OR expires_at > {_NOW_SQL})
        """,
        {"key": key},
    ).fetchone()
    if row is None:
        return None
    return json.loads(row["value"])


def cache_set(
    conn: sqlite3.Connection,
    key: str,
    value: Any,
    ttl_seconds: int | None = None,
) -> None:
    """Store *value* (JSON-serialisable) under *key*.

    Args:
        conn: An open SQLite connection.
        key: Cache key; existing entries are replaced.
        value: Any JSON-serialisable value.
        ttl_seconds: Lifetime in seconds, or ``None`` to never expire.
    """
    if ttl_seconds is None:
        expires_sql = "NULL"
        params = {"key": key, "value": json.dumps(value)}
    else:
        expires_sql = "strftime('%Y-%m-%d %H:%M:%f', 'now', :offset)"
        params = {
            "key": key,
            "value": json.dumps(value),
            "offset": f"{int(ttl_seconds):+d} seconds",
        }
    conn.execute(
        f"""
        INSERT OR REPLACE INTO cache_entries (key, value, expires_at, updated_at)
        VALUES (:key, :value, {expires_sql}, {_NOW_SQL})
        """,
        params,
    )
    conn.commit()
    logger.debug("Cached %s (ttl=%s)", key, ttl_seconds)


def cache_delete(conn: sqlite3.Connection, key: str) -> bool:
    """Delete *key*; return ``True`` when an entry was removed."""
    cursor = conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
    conn.commit()
    return cursor.rowcount > 0


def delete_prefix(conn: sqlite3.Connection, prefix: str) -> int:
    """Delete every entry whose key starts with *prefix*; return the count."""
    cursor = conn.execute(
        "DELETE FROM cache_entries WHERE substr(key, 1, length(:prefix)) = :prefix",
        {"prefix": prefix},
    )
    conn.commit()
    return cursor.rowcount


# ---------------------------------------------------------------------------
# Pull request views
# ---------------------------------------------------------------------------

def pull_request_prefix(owner: str, repo: str, pull_number: int) -> str:
    return f"pr:{owner}/{repo}/{pull_number}:".lower()


def pull_request_key(
    owner: str, repo: str, pull_number: int, part: str = "detail"
) -> str:
    """Return the cache key for one cached view of a pull request."""
    return pull_request_prefix(owner, repo, pull_number) + part.lower()


def invalidate_pull_request_cache(
    conn: sqlite3.Connection, owner: str, repo: str, pull_number: int
) -> int:
    """Drop every cached entry belonging to one pull request.

    Returns:
        The number of entries removed.
    """
    removed = delete_prefix(conn, pull_request_prefix(owner, repo, pull_number))
    logger.info(
        "Invalidated %d cache entries for %s/%s#%d",
        removed, owner, repo, pull_number,
    )
    return removed


def revalidate_path(
    conn: sqlite3.Connection, path: str, kind: str = "page"
) -> int:
    """Record that the view at *path* must be rebuilt.

    Args:
        conn: An open SQLite connection.
        path: The view path, e.g. ``/repos/octo/app/pulls/7``.
        kind: ``"page"`` for the path alone or ``"layout"`` for the path
              and everything nested under it.

    Returns:
        The ``id`` of the new revalidation row.
    """
    cursor = conn.execute(
        "INSERT INTO revalidations (path, kind) VALUES (:path, :kind)",
        {"path": path, "kind": kind},
    )
    conn.commit()
    logger.debug("Revalidation recorded: %s (%s)", path, kind)
    return cursor.lastrowid


def get_revalidations(conn: sqlite3.Connection, since_id: int = 0) -> list[dict]:
    """Return revalidations newer than *since_id*, oldest first."""
    rows = conn.execute(
        """
        SELECT id, path, kind, created_at
        FROM revalidations
        WHERE id > :since_id
        ORDER BY id
        """,
        {"since_id": since_id},
    ).fetchall()
    return [dict(row) for row in rows]


# ---------------------------------------------------------------------------
# README HTML
# ---------------------------------------------------------------------------

def readme_key(owner: str, repo: str) -> str:
    return f"readme_html:{owner.lower()}/{repo.lower()}"


def get_cached_readme_html(
    conn: sqlite3.Connection, owner: str, repo: str
) -> str | None:
    """Return the cached rendered README for *owner*/*repo*, if fresh."""
    return cache_get(conn, readme_key(owner, repo))


def set_cached_readme_html(
    conn: sqlite3.Connection, owner: str, repo: str, html: str
) -> None:
    """Cache rendered README HTML for one hour."""
    cache_set(conn, readme_key(owner, repo), html, ttl_seconds=README_TTL_SECONDS)


def delete_cached_readme_html(
    conn: sqlite3.Connection, owner: str, repo: str
) -> None:
    cache_delete(conn, readme_key(owner, repo))
