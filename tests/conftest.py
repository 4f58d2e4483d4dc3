"""
Pytest Configuration and Shared Fixtures

Builds real SQLite cookie stores, Local State files and Firefox profile
trees inside tmp_path, so the readers run end to end without a browser.
"""
import base64
import json
import os
import sqlite3
import sys
from contextlib import closing
from pathlib import Path
from typing import Iterable, Tuple

import pytest
from Crypto.Cipher import AES

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from browser_profiles import ChromiumLocation, FirefoxLocation  # noqa: E402


TEST_KEY = bytes(range(32))
TEST_NONCE = b"0123456789ab"


def encrypt_v10(plaintext: bytes, key: bytes = TEST_KEY, nonce: bytes = TEST_NONCE, prefix: bytes = b"v10") -> bytes:
    """Encrypt a value the way Chromium stores it."""
    cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
    ciphertext, tag = cipher.encrypt_and_digest(plaintext)
    return prefix + nonce + ciphertext + tag


def write_chromium_store(path: Path, rows: Iterable[Tuple]) -> Path:
    """rows: (name, encrypted_value, host_key, path, expires_utc, is_secure, is_httponly, value)"""
    path.parent.mkdir(parents=True, exist_ok=True)
    with closing(sqlite3.connect(path)) as conn:
        conn.execute("""
            CREATE TABLE cookies (
                creation_utc INTEGER NOT NULL DEFAULT 0,
                host_key TEXT NOT NULL,
                name TEXT NOT NULL,
                value TEXT NOT NULL DEFAULT '',
                path TEXT NOT NULL,
                expires_utc INTEGER NOT NULL,
                is_secure INTEGER NOT NULL,
                is_httponly INTEGER NOT NULL,
                encrypted_value BLOB DEFAULT ''
            )
        """)
        conn.executemany(
            "INSERT INTO cookies (name, encrypted_value, host_key, path, expires_utc, is_secure, is_httponly, value) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            list(rows),
        )
        conn.commit()
    return path


def write_firefox_store(path: Path, rows: Iterable[Tuple]) -> Path:
    """rows: (name, value, host, path, expiry, isSecure, isHttpOnly)"""
    path.parent.mkdir(parents=True, exist_ok=True)
    with closing(sqlite3.connect(path)) as conn:
        conn.execute("""
            CREATE TABLE moz_cookies (
                id INTEGER PRIMARY KEY,
                originAttributes TEXT NOT NULL DEFAULT '',
                name TEXT,
                value TEXT,
                host TEXT,
                path TEXT,
                expiry INTEGER,
                isSecure INTEGER,
                isHttpOnly INTEGER
            )
        """)
        conn.executemany(
            "INSERT INTO moz_cookies (name, value, host, path, expiry, isSecure, isHttpOnly) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            list(rows),
        )
        conn.commit()
    return path


def write_local_state(path: Path, wrapped_key: bytes = TEST_KEY, prefix: bytes = b"DPAPI") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = base64.b64encode(prefix + wrapped_key).decode("ascii")
    path.write_text(json.dumps({"os_crypt": {"encrypted_key": encoded}}), encoding="utf-8")
    return path


# ==================== Location Fixtures ====================

@pytest.fixture
def chromium_location(tmp_path) -> ChromiumLocation:
    """Empty Chrome-style user data directory"""
    user_data = tmp_path / "Chrome" / "User Data"
    return ChromiumLocation(user_data_dir=user_data, profile_dir=user_data / "Default")


@pytest.fixture
def firefox_location(tmp_path) -> FirefoxLocation:
    """Windows-style Firefox root with a Profiles directory"""
    root = tmp_path / "Mozilla" / "Firefox"
    (root / "Profiles").mkdir(parents=True)
    return FirefoxLocation(root=root, profiles_dir=root / "Profiles")


# ==================== DPAPI Fixtures ====================

@pytest.fixture
def fake_dpapi(monkeypatch):
    """Replace DPAPI with an identity unwrap and count the calls"""
    import chromium_decrypt

    calls = []

    def unprotect(data: bytes) -> bytes:
        calls.append(data)
        return data

    monkeypatch.setattr(chromium_decrypt, "dpapi_unprotect", unprotect)
    return calls


@pytest.fixture
def no_dpapi(monkeypatch):
    """Force the non-Windows behaviour regardless of the host platform"""
    import chromium_decrypt

    def unprotect(data: bytes) -> bytes:
        raise chromium_decrypt.DependencyMissing("DPAPI is not available")

    monkeypatch.setattr(chromium_decrypt, "dpapi_unprotect", unprotect)


@pytest.fixture
def temp_dirs(monkeypatch):
    """Record every temporary directory the store copy creates"""
    import tempfile

    created = []
    original = tempfile.mkdtemp

    def recording_mkdtemp(*args, **kwargs):
        path = original(*args, **kwargs)
        created.append(Path(path))
        return path

    monkeypatch.setattr(tempfile, "mkdtemp", recording_mkdtemp)
    return created
