#!/usr/bin/env python3
"""
Cookie Bridge - Firefox Cookie Reader
=====================================
Finds the default Firefox profile through profiles.ini and reads its
cookies.sqlite. Firefox stores cookie values in plaintext.
"""

import asyncio
import configparser
import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from browser_profiles import FirefoxLocation, firefox_location
from cookie_models import BrowserType, Cookie, ReadOutcome
from cookie_reader import CookieStoreReader, StoreUnavailable, column_text, host_patterns
from store_copy import open_store_copy
from timestamp_utils import firefox_expiry_to_datetime

logger = logging.getLogger(__name__)

COOKIE_DB = "cookies.sqlite"
DEFAULT_PROFILE_MARKER = ".default"

COOKIE_QUERY = """
    SELECT name, value, host, path, expiry, isSecure, isHttpOnly
    FROM moz_cookies
    WHERE host LIKE ? OR host LIKE ?
"""


@dataclass(frozen=True)
class ProfileEntry:
    """One [Profile] section of profiles.ini."""
    section: str
    path: str
    is_relative: bool = True
    is_default: bool = False

    def resolve(self, root: Path) -> Path:
        return root / self.path if self.is_relative else Path(self.path)


def parse_profiles_ini(ini_path: Path) -> List[ProfileEntry]:
    """Parse profiles.ini into profile entries, in file order.

    Sections without a ``Path=`` line (``[General]``, ``[Install...]``) are
    ignored. An unreadable file yields no entries.
    """
    parser = configparser.ConfigParser(strict=False, interpolation=None)
    try:
        with open(ini_path, "r", encoding="utf-8-sig") as f:
            parser.read_file(f)
    except (OSError, configparser.Error) as e:
        logger.warning("Could not parse %s: %s", ini_path, e)
        return []

    entries = []
    for section in parser.sections():
        options = parser[section]
        path = options.get("path")
        if not path:
            continue
        entries.append(ProfileEntry(
            section=section,
            path=path,
            is_relative=options.get("isrelative", "1").strip() == "1",
            is_default=options.get("default", "0").strip() == "1",
        ))
    return entries


def find_default_profile(location: FirefoxLocation) -> Optional[Path]:
    """Resolve the active profile directory, or None."""
    if not location.profiles_dir.is_dir():
        return None

    if location.profiles_ini.is_file():
        for entry in parse_profiles_ini(location.profiles_ini):
            if entry.is_default:
                return entry.resolve(location.root)

    # Fallback: first profile directory with a .default suffix
    for candidate in sorted(location.profiles_dir.iterdir()):
        if candidate.is_dir() and DEFAULT_PROFILE_MARKER in candidate.name:
            return candidate
    return None


class FirefoxCookieReader(CookieStoreReader):
    """Reads cookies from the default Firefox profile."""

    browser_type = BrowserType.FIREFOX

    def __init__(self, location: Optional[FirefoxLocation] = None):
        self.location = location or firefox_location()

    @property
    def profile_path(self) -> Optional[Path]:
        return find_default_profile(self.location)

    @property
    def is_installed(self) -> bool:
        return self.profile_path is not None

    async def read_cookies(self, domain: str) -> ReadOutcome:
        profile = await asyncio.to_thread(find_default_profile, self.location)
        if profile is None:
            return ReadOutcome.not_installed(self.browser_type)

        cookie_path = profile / COOKIE_DB
        if not cookie_path.is_file():
            return ReadOutcome.unavailable(self.browser_type, f"{COOKIE_DB} not found in {profile}")

        try:
            cookies, skipped = await asyncio.to_thread(self._read_store, cookie_path, domain)
        except StoreUnavailable as e:
            logger.warning("Could not read Firefox cookie store: %s", e)
            return ReadOutcome.unavailable(self.browser_type, str(e))

        if skipped:
            logger.info("Firefox: skipped %d undecodable cookie(s) for %s", skipped, domain)

        return ReadOutcome.found(self.browser_type, cookies, skipped)

    def _read_store(self, cookie_path: Path, domain: str) -> Tuple[List[Cookie], int]:
        try:
            with open_store_copy(cookie_path, prefix="firefox_cookies_") as conn:
                # Bytes rows, so one non-UTF-8 value cannot abort the whole query
                conn.text_factory = bytes
                rows = conn.execute(COOKIE_QUERY, host_patterns(domain)).fetchall()
        except (OSError, sqlite3.Error) as e:
            raise StoreUnavailable(f"{cookie_path}: {e}") from e

        cookies: List[Cookie] = []
        skipped = 0

        for row in rows:
            try:
                name, value, host = [column.decode("utf-8") if column else "" for column in row[:3]]
            except UnicodeDecodeError as e:
                logger.debug("Cookie %r@%r: %s", row[0], row[2], e)
                skipped += 1
                continue

            cookies.append(Cookie(
                name=name,
                value=value,
                domain=host,
                path=column_text(row[3], "/"),
                expires=firefox_expiry_to_datetime(row[4]),
                secure=bool(row[5]),
                http_only=bool(row[6]),
            ))

        return cookies, skipped
