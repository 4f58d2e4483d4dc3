#!/usr/bin/env python3
"""
Cookie Bridge - Browser Cookie Service
======================================
Single entry point over every supported browser. Backends are tried in a
priority order (preferred browser first); a browser that is missing, whose
store cannot be read or that holds nothing for the domain is skipped in
favour of the next one.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from chromium_decrypt import ChromiumCookieReader
from cookie_models import DEFAULT_BROWSER_ORDER, BrowserType, Cookie, ReadOutcome
from cookie_reader import CookieStoreError, CookieStoreReader
from firefox_cookies import FirefoxCookieReader

logger = logging.getLogger(__name__)


def create_default_readers() -> Dict[BrowserType, CookieStoreReader]:
    """One reader per supported browser, at its default location."""
    readers: Dict[BrowserType, CookieStoreReader] = {}
    for browser_type in BrowserType:
        if browser_type.is_chromium:
            readers[browser_type] = ChromiumCookieReader(browser_type)
        else:
            readers[browser_type] = FirefoxCookieReader()
    return readers


def build_priority(preferred: BrowserType, order: Sequence[BrowserType]) -> List[BrowserType]:
    """Preferred browser first, then ``order``, each browser once."""
    priority = [preferred]
    for browser_type in order:
        if browser_type not in priority:
            priority.append(browser_type)
    return priority


class BrowserCookieService:
    """Reads cookies from installed browsers with fallback between them."""

    def __init__(
        self,
        preferred_browser: BrowserType = BrowserType.CHROME,
        browser_order: Sequence[BrowserType] = DEFAULT_BROWSER_ORDER,
        readers: Optional[Mapping[BrowserType, CookieStoreReader]] = None,
    ):
        self.preferred_browser = preferred_browser
        self._readers = dict(readers) if readers is not None else create_default_readers()
        self.browser_order = build_priority(preferred_browser, browser_order)

    @staticmethod
    async def _is_installed(reader: CookieStoreReader) -> bool:
        # Firefox discovery parses profiles.ini and lists the profiles directory
        try:
            return await asyncio.to_thread(lambda: reader.is_installed)
        except OSError as e:
            logger.warning("Could not check %s installation: %s", reader.browser_type.value, e)
            return False

    async def _backends(self) -> List[CookieStoreReader]:
        """Installed readers in priority order."""
        backends = []
        for browser_type in self.browser_order:
            reader = self._readers.get(browser_type)
            if reader is not None and await self._is_installed(reader):
                backends.append(reader)
        return backends

    async def _read(self, reader: CookieStoreReader, domain: str) -> ReadOutcome:
        try:
            return await reader.read_cookies(domain)
        except (CookieStoreError, OSError) as e:
            logger.warning("%s reader failed for %s: %s", reader.browser_type.value, domain, e)
            return ReadOutcome.unavailable(reader.browser_type, str(e))

    async def installed_browsers(self) -> List[BrowserType]:
        """Configured browsers that report themselves installed, in priority order."""
        return [reader.browser_type for reader in await self._backends()]

    async def list_cookies(self, domain: str) -> List[Cookie]:
        """Cookies for ``domain`` from the first browser that has any."""
        for reader in await self._backends():
            outcome = await self._read(reader, domain)
            if outcome.has_cookies:
                logger.info("Using %s cookies for %s", reader.browser_type.value, domain)
                return outcome.cookies
            logger.debug("%s: %s for %s", reader.browser_type.value, outcome.status.value, domain)
        return []

    async def get_cookie(self, domain: str, name: str) -> Optional[Cookie]:
        """First unexpired cookie named ``name`` across browsers."""
        for reader in await self._backends():
            outcome = await self._read(reader, domain)
            for cookie in outcome.cookies:
                if cookie.name == name and not cookie.is_expired:
                    return cookie
        return None

    async def has_session(self, domain: str, name: str) -> bool:
        """Whether any browser holds a usable ``name`` cookie for ``domain``."""
        return await self.get_cookie(domain, name) is not None

    async def get_cookies_from_browser(self, browser_type: BrowserType, domain: str) -> List[Cookie]:
        """Cookies from exactly one browser, without fallback."""
        reader = self._readers.get(browser_type)
        if reader is None or not await self._is_installed(reader):
            return []
        outcome = await self._read(reader, domain)
        return outcome.cookies

    async def get_cookie_header_from_browser(self, browser_type: BrowserType, domain: str) -> str:
        """Cookie header built from exactly one browser; empty when it has none."""
        cookies = await self.get_cookies_from_browser(browser_type, domain)
        return self.format_header(cookies)

    @staticmethod
    def format_header(cookies: Iterable[Cookie]) -> str:
        """Join unexpired cookies as ``name=value; name=value``, order kept."""
        return "; ".join(cookie.header_pair() for cookie in cookies if not cookie.is_expired)

    async def get_cookie_header(self, domain: str, cookie_names: Iterable[str]) -> Optional[str]:
        """Cookie header holding only the named cookies, or None if none match."""
        wanted = {name.lower() for name in cookie_names}
        cookies = await self.list_cookies(domain)
        matched = [c for c in cookies if c.name.lower() in wanted and not c.is_expired]

        if not matched:
            return None
        return self.format_header(matched)
