#!/usr/bin/env python3
"""Chromium Cookie Decryption (Chrome, Edge, Brave, Opera).

Encryption: v10/v11 (AES-256-GCM, key wrapped with DPAPI), legacy whole-value DPAPI
Requires: pycryptodome; DPAPI unwrap is Windows only
"""

import asyncio
import base64
import binascii
import hashlib
import json
import logging
import sqlite3
import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from browser_profiles import ChromiumLocation, chromium_location
from cookie_models import BrowserType, Cookie, ReadOutcome
from cookie_reader import CookieStoreError, CookieStoreReader, StoreUnavailable, column_text, host_patterns
from store_copy import open_store_copy
from timestamp_utils import chromium_time_to_datetime

# Platform-specific imports
IS_WINDOWS = sys.platform == "win32"

if IS_WINDOWS:
    import ctypes
    from ctypes import wintypes

logger = logging.getLogger(__name__)


class ChromiumDecryptionError(CookieStoreError): pass
class EncryptionKeyNotFound(ChromiumDecryptionError): pass
class DecryptionFailed(ChromiumDecryptionError): pass
class DependencyMissing(ChromiumDecryptionError): pass


AES_GCM_PREFIXES = (b"v10", b"v11")
DPAPI_KEY_PREFIX = b"DPAPI"
NONCE_LENGTH = 12
TAG_LENGTH = 16
KEY_LENGTH = 32
HOST_DIGEST_LENGTH = 32

COOKIE_QUERY = """
    SELECT name, encrypted_value, host_key, path,
           expires_utc, is_secure, is_httponly, value
    FROM cookies
    WHERE host_key LIKE ? OR host_key LIKE ?
"""


# Windows DPAPI
if IS_WINDOWS:
    class DATA_BLOB(ctypes.Structure):
        _fields_ = [("cbData", wintypes.DWORD), ("pbData", ctypes.POINTER(ctypes.c_char))]

    def _win_dpapi_decrypt(encrypted_data: bytes) -> bytes:
        crypt32 = ctypes.windll.crypt32
        kernel32 = ctypes.windll.kernel32

        input_blob = DATA_BLOB()
        input_blob.cbData = len(encrypted_data)
        input_blob.pbData = ctypes.cast(
            ctypes.create_string_buffer(encrypted_data, len(encrypted_data)),
            ctypes.POINTER(ctypes.c_char)
        )

        output_blob = DATA_BLOB()

        result = crypt32.CryptUnprotectData(
            ctypes.byref(input_blob),
            None, None, None, None, 0,
            ctypes.byref(output_blob)
        )

        if not result:
            raise DecryptionFailed(f"DPAPI decryption failed: {ctypes.GetLastError()}")

        decrypted = ctypes.string_at(output_blob.pbData, output_blob.cbData)
        kernel32.LocalFree(output_blob.pbData)

        return decrypted


def dpapi_unprotect(encrypted_data: bytes) -> bytes:
    """Unwrap a blob with the current user's DPAPI key."""
    if not IS_WINDOWS:
        raise DependencyMissing(f"DPAPI is not available on {sys.platform}")
    return _win_dpapi_decrypt(encrypted_data)


# AES Decryption
def _aes_gcm_decrypt(encrypted_data: bytes, key: bytes) -> bytes:
    """AES-GCM decrypt. Format: nonce(12) + ciphertext + tag(16)"""
    try:
        from Crypto.Cipher import AES
    except ImportError:
        raise DependencyMissing(
            "pycryptodome is required for AES decryption. "
            "Install with: pip install pycryptodome"
        )

    if len(encrypted_data) < NONCE_LENGTH + TAG_LENGTH:
        raise DecryptionFailed("AES-GCM payload is truncated")

    nonce = encrypted_data[:NONCE_LENGTH]
    ciphertext = encrypted_data[NONCE_LENGTH:-TAG_LENGTH]
    tag = encrypted_data[-TAG_LENGTH:]

    cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
    return cipher.decrypt_and_verify(ciphertext, tag)


# Key Extraction
def load_wrapped_key(local_state_path: Path) -> bytes:
    """Read ``os_crypt.encrypted_key`` from Local State, DPAPI prefix removed."""
    if not local_state_path.exists():
        raise EncryptionKeyNotFound(f"Local State not found: {local_state_path}")

    try:
        with open(local_state_path, "r", encoding="utf-8") as f:
            local_state = json.load(f)
        encrypted_key_b64 = local_state.get("os_crypt", {}).get("encrypted_key")
    except (OSError, ValueError, AttributeError) as e:
        raise EncryptionKeyNotFound(f"Unreadable Local State: {e}")

    if not encrypted_key_b64:
        raise EncryptionKeyNotFound("encrypted_key not found in Local State")
    if not isinstance(encrypted_key_b64, str):
        raise EncryptionKeyNotFound(f"encrypted_key is a {type(encrypted_key_b64).__name__}, not a string")

    try:
        encrypted_key = base64.b64decode(encrypted_key_b64)
    except (binascii.Error, ValueError) as e:
        raise EncryptionKeyNotFound(f"encrypted_key is not valid base64: {e}")

    if encrypted_key[:len(DPAPI_KEY_PREFIX)] == DPAPI_KEY_PREFIX:
        encrypted_key = encrypted_key[len(DPAPI_KEY_PREFIX):]

    return encrypted_key


def get_encryption_key(local_state_path: Path) -> bytes:
    """Get the AES-256 master key from Local State (DPAPI wrapped)."""
    key = dpapi_unprotect(load_wrapped_key(local_state_path))
    if len(key) != KEY_LENGTH:
        raise EncryptionKeyNotFound(f"Unexpected master key length: {len(key)}")
    return key


class KeyCache:
    """Once-initialized cell holding a browser's master key.

    Concurrent first calls are not serialized: each may run the derivation
    and store its result. Every successful derivation yields the same key, so
    the last write wins harmlessly. A failed or cancelled derivation never
    writes the cell.
    """

    def __init__(self):
        self._key: Optional[bytes] = None

    @property
    def value(self) -> Optional[bytes]:
        return self._key

    async def get(self, derive: Callable[[], bytes]) -> bytes:
        if self._key is not None:
            return self._key
        key = await asyncio.to_thread(derive)
        self._key = key
        return key


# Cookie Decryption
def _strip_host_digest(plaintext: bytes, host_key: Optional[str]) -> bytes:
    # Chromium 130+ prefixes the value with SHA-256(host_key)
    if host_key and len(plaintext) >= HOST_DIGEST_LENGTH:
        if plaintext[:HOST_DIGEST_LENGTH] == hashlib.sha256(host_key.encode("utf-8")).digest():
            return plaintext[HOST_DIGEST_LENGTH:]
    return plaintext


def decrypt_cookie_value(encrypted_value: bytes, key: Optional[bytes], host_key: Optional[str] = None) -> str:
    """Decrypt cookie: v10/v11 (AES-GCM) or legacy DPAPI."""
    if encrypted_value[:3] in AES_GCM_PREFIXES:
        if key is None:
            raise EncryptionKeyNotFound("No master key for AES-GCM cookie")
        try:
            plaintext = _aes_gcm_decrypt(encrypted_value[3:], key)
        except ValueError as e:
            raise DecryptionFailed(f"AES-GCM cookie decryption failed: {e}")
        plaintext = _strip_host_digest(plaintext, host_key)
    else:
        # Legacy format: Direct DPAPI
        plaintext = dpapi_unprotect(encrypted_value)

    try:
        return plaintext.decode("utf-8").rstrip("\x00")
    except UnicodeDecodeError as e:
        raise DecryptionFailed(f"Cookie value is not UTF-8: {e}")


class ChromiumCookieReader(CookieStoreReader):
    """Reads cookies from a Chromium-based browser's default profile."""

    def __init__(self, browser_type: BrowserType, location: Optional[ChromiumLocation] = None):
        if not browser_type.is_chromium:
            raise ValueError(f"Unsupported browser type: {browser_type.value}")

        self.browser_type = browser_type
        self.location = location or chromium_location(browser_type)
        self._key_cache = KeyCache()

    @property
    def cookie_path(self) -> Optional[Path]:
        for path in self.location.cookie_candidates:
            if path.is_file():
                return path
        return None

    @property
    def is_installed(self) -> bool:
        return self.cookie_path is not None

    async def encryption_key(self) -> Optional[bytes]:
        """Master key, derived on first success and cached afterwards."""
        try:
            return await self._key_cache.get(
                lambda: get_encryption_key(self.location.local_state)
            )
        except ChromiumDecryptionError as e:
            logger.info("No %s master key: %s", self.browser_type.value, e)
            return None

    async def read_cookies(self, domain: str) -> ReadOutcome:
        cookie_path = self.cookie_path
        if cookie_path is None:
            return ReadOutcome.not_installed(self.browser_type)

        key = await self.encryption_key()

        try:
            cookies, skipped = await asyncio.to_thread(self._read_store, cookie_path, domain, key)
        except StoreUnavailable as e:
            logger.warning("Could not read %s cookie store: %s", self.browser_type.value, e)
            return ReadOutcome.unavailable(self.browser_type, str(e))

        if skipped:
            logger.info("%s: skipped %d undecryptable cookie(s) for %s",
                        self.browser_type.value, skipped, domain)

        return ReadOutcome.found(self.browser_type, cookies, skipped)

    def _read_store(self, cookie_path: Path, domain: str, key: Optional[bytes]) -> Tuple[List[Cookie], int]:
        try:
            with open_store_copy(cookie_path, prefix="chromium_cookies_") as conn:
                # Use bytes text_factory so undecodable text columns do not abort the query
                conn.text_factory = bytes
                rows = conn.execute(COOKIE_QUERY, host_patterns(domain)).fetchall()
        except (OSError, sqlite3.Error) as e:
            raise StoreUnavailable(f"{cookie_path}: {e}") from e

        cookies: List[Cookie] = []
        skipped = 0

        for row in rows:
            name = column_text(row[0])
            encrypted_value = row[1] or b""
            host_key = column_text(row[2])
            plain_value = column_text(row[7])

            if encrypted_value:
                try:
                    value = decrypt_cookie_value(encrypted_value, key, host_key)
                except ChromiumDecryptionError as e:
                    logger.debug("Cookie %s@%s: %s", name, host_key, e)
                    skipped += 1
                    continue
            elif plain_value:
                value = plain_value
            else:
                continue

            cookies.append(Cookie(
                name=name,
                value=value,
                domain=host_key,
                path=column_text(row[3], "/"),
                expires=chromium_time_to_datetime(row[4]),
                secure=bool(row[5]),
                http_only=bool(row[6]),
            ))

        return cookies, skipped
