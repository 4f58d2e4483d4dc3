#!/usr/bin/env python3
"""
Cookie Bridge - Cookie Store Reader Interface
=============================================
Common interface of the per-browser cookie store readers.

Every reader answers the same three questions (is the browser installed,
which cookies does it hold for a domain, does it hold one named cookie) and
reports store or row failures through ``ReadOutcome`` instead of raising, so
a caller can move on to the next browser.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from cookie_models import BrowserType, Cookie, ReadOutcome


class CookieStoreError(Exception): pass
class StoreUnavailable(CookieStoreError): pass


def column_text(value, default: str = "") -> str:
    """Text of a column read with ``text_factory = bytes``."""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value or default


def host_patterns(domain: str) -> Tuple[str, str]:
    """SQL LIKE patterns matching ``domain`` and its dotted subdomain form."""
    domain = domain.strip().lstrip(".")
    return f"%{domain}%", f"%.{domain}%"


class CookieStoreReader(ABC):
    """A browser cookie store that can be queried by domain."""

    browser_type: BrowserType

    @property
    @abstractmethod
    def is_installed(self) -> bool:
        """Whether the browser's store exists for the current user."""

    @abstractmethod
    async def read_cookies(self, domain: str) -> ReadOutcome:
        """Read cookies for ``domain``; never raises for store or row errors."""

    async def list_cookies(self, domain: str) -> List[Cookie]:
        outcome = await self.read_cookies(domain)
        return outcome.cookies

    async def get_cookie(self, domain: str, name: str) -> Optional[Cookie]:
        """First unexpired cookie named exactly ``name``."""
        for cookie in await self.list_cookies(domain):
            if cookie.name == name and not cookie.is_expired:
                return cookie
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.browser_type.value})"
