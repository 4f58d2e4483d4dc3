#!/usr/bin/env python3
"""
Cookie Bridge - Store Copy Module
=================================
Reads a browser's SQLite store through a private temporary copy, so the
live file the browser holds open and locked is never opened directly.
"""

import logging
import shutil
import sqlite3
import tempfile
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

# Write-ahead log sidecars that may hold rows not yet checkpointed
SIDECAR_SUFFIXES = ("-wal", "-shm")


@contextmanager
def temporary_store_copy(store_path: Path, prefix: str = "cookie_store_") -> Iterator[Path]:
    """Copy ``store_path`` (and its WAL sidecars) to a fresh temp directory.

    The directory is unique per call and removed on every exit path;
    removal errors are ignored.

    Yields:
        Path of the copied database inside the temp directory.
    """
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix))
    temp_db = temp_dir / store_path.name

    try:
        shutil.copy2(store_path, temp_db)

        for suffix in SIDECAR_SUFFIXES:
            sidecar = store_path.parent / f"{store_path.name}{suffix}"
            if sidecar.exists():
                shutil.copy2(sidecar, temp_dir / sidecar.name)

        yield temp_db
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)
        logger.debug("Removed temporary copy %s", temp_dir)


def connect_readonly(db_path: Path) -> sqlite3.Connection:
    """Open a SQLite file read-only."""
    uri = f"{db_path.resolve().as_uri()}?mode=ro"
    return sqlite3.connect(uri, uri=True)


@contextmanager
def open_store_copy(store_path: Path, prefix: str = "cookie_store_") -> Iterator[sqlite3.Connection]:
    """Copy a store and yield a read-only connection to the copy.

    The connection is closed before the copy is deleted.
    """
    with temporary_store_copy(store_path, prefix) as temp_db:
        with closing(connect_readonly(temp_db)) as conn:
            yield conn
