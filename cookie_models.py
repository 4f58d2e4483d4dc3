#!/usr/bin/env python3
"""
Cookie Bridge - Data Models
===========================
Cookie records, supported browsers and per-backend read outcomes shared by
every cookie store reader.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class BrowserType(Enum):
    """Browsers whose cookie stores can be read."""
    CHROME = "Chrome"
    EDGE = "Edge"
    FIREFOX = "Firefox"
    BRAVE = "Brave"
    OPERA = "Opera"

    @property
    def is_chromium(self) -> bool:
        return self is not BrowserType.FIREFOX

    @classmethod
    def parse(cls, name: str) -> "BrowserType":
        """Look up a browser by value or member name, ignoring case."""
        key = name.strip().lower()
        for member in cls:
            if key in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown browser: {name}")


# Fallback order used when no explicit order is configured
DEFAULT_BROWSER_ORDER: Tuple[BrowserType, ...] = (
    BrowserType.CHROME,
    BrowserType.EDGE,
    BrowserType.FIREFOX,
    BrowserType.BRAVE,
    BrowserType.OPERA,
)


class ReadStatus(Enum):
    """Result of reading one browser's cookie store."""
    OK = "OK"
    EMPTY = "EMPTY"
    NOT_INSTALLED = "NOT_INSTALLED"
    UNAVAILABLE = "UNAVAILABLE"


@dataclass(frozen=True)
class Cookie:
    """A browser cookie with its value already decrypted."""
    name: str
    value: str
    domain: str
    path: str = "/"
    expires: Optional[datetime] = None  # UTC; None = session cookie
    secure: bool = False
    http_only: bool = False

    @property
    def is_expired(self) -> bool:
        return self.expires is not None and self.expires < datetime.now(timezone.utc)

    def header_pair(self) -> str:
        return f"{self.name}={self.value}"

    def __str__(self) -> str:
        return self.header_pair()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "path": self.path,
            "expires": self.expires.strftime('%Y-%m-%dT%H:%M:%SZ') if self.expires else None,
            "secure": self.secure,
            "http_only": self.http_only,
            "expired": self.is_expired,
        }


@dataclass
class ReadOutcome:
    """What a single backend produced for one query."""
    browser_type: BrowserType
    status: ReadStatus
    cookies: List[Cookie] = field(default_factory=list)
    skipped: int = 0  # rows dropped because they could not be decrypted
    message: Optional[str] = None

    @property
    def has_cookies(self) -> bool:
        return self.status is ReadStatus.OK and bool(self.cookies)

    @classmethod
    def found(cls, browser_type: BrowserType, cookies: List[Cookie], skipped: int = 0) -> "ReadOutcome":
        status = ReadStatus.OK if cookies else ReadStatus.EMPTY
        return cls(browser_type, status, list(cookies), skipped)

    @classmethod
    def not_installed(cls, browser_type: BrowserType) -> "ReadOutcome":
        return cls(browser_type, ReadStatus.NOT_INSTALLED, message=f"{browser_type.value} is not installed")

    @classmethod
    def unavailable(cls, browser_type: BrowserType, message: str) -> "ReadOutcome":
        return cls(browser_type, ReadStatus.UNAVAILABLE, message=message)
