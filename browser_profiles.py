#!/usr/bin/env python3
"""
Cookie Bridge - Browser Profile Locations
=========================================
Fixed, per-platform file-system locations of each supported browser's
cookie store and key material.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from cookie_models import BrowserType


@dataclass(frozen=True)
class ChromiumLocation:
    """Where a Chromium-family browser keeps its default profile."""
    user_data_dir: Path
    profile_dir: Path

    @property
    def local_state(self) -> Path:
        return self.user_data_dir / "Local State"

    @property
    def cookie_candidates(self) -> List[Path]:
        # Chromium 96+ moved the store under Network/
        return [
            self.profile_dir / "Network" / "Cookies",
            self.profile_dir / "Cookies",
        ]


@dataclass(frozen=True)
class FirefoxLocation:
    """Firefox root (holds profiles.ini) and the directory holding profiles."""
    root: Path
    profiles_dir: Path

    @property
    def profiles_ini(self) -> Path:
        return self.root / "profiles.ini"


def _platform_name(platform: Optional[str]) -> str:
    platform = platform or sys.platform
    if platform == "win32":
        return "windows"
    if platform == "darwin":
        return "macos"
    return "linux"


def _windows_dirs(env: Mapping[str, str], home: Path):
    local = Path(env.get("LOCALAPPDATA") or home / "AppData" / "Local")
    roaming = Path(env.get("APPDATA") or home / "AppData" / "Roaming")
    return local, roaming


def chromium_location(
    browser_type: BrowserType,
    platform: Optional[str] = None,
    home: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ChromiumLocation:
    """Resolve the default profile location of a Chromium-family browser."""
    if not browser_type.is_chromium:
        raise ValueError(f"Not a Chromium-based browser: {browser_type.value}")

    home = Path(home) if home else Path.home()
    env = os.environ if env is None else env
    system = _platform_name(platform)

    if system == "windows":
        local, roaming = _windows_dirs(env, home)
        user_data = {
            BrowserType.CHROME: local / "Google" / "Chrome" / "User Data",
            BrowserType.EDGE: local / "Microsoft" / "Edge" / "User Data",
            BrowserType.BRAVE: local / "BraveSoftware" / "Brave-Browser" / "User Data",
            BrowserType.OPERA: roaming / "Opera Software" / "Opera Stable",
        }[browser_type]
    elif system == "macos":
        support = home / "Library" / "Application Support"
        user_data = {
            BrowserType.CHROME: support / "Google" / "Chrome",
            BrowserType.EDGE: support / "Microsoft Edge",
            BrowserType.BRAVE: support / "BraveSoftware" / "Brave-Browser",
            BrowserType.OPERA: support / "com.operasoftware.Opera",
        }[browser_type]
    else:
        config = Path(env.get("XDG_CONFIG_HOME") or home / ".config")
        user_data = {
            BrowserType.CHROME: config / "google-chrome",
            BrowserType.EDGE: config / "microsoft-edge",
            BrowserType.BRAVE: config / "BraveSoftware" / "Brave-Browser",
            BrowserType.OPERA: config / "opera",
        }[browser_type]

    # Opera keeps its profile directly in the user data directory
    if browser_type is BrowserType.OPERA:
        return ChromiumLocation(user_data_dir=user_data, profile_dir=user_data)
    return ChromiumLocation(user_data_dir=user_data, profile_dir=user_data / "Default")


def firefox_location(
    platform: Optional[str] = None,
    home: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> FirefoxLocation:
    """Resolve the Firefox root for the current user.

    On Linux the Snap package keeps its own root; it is used when the regular
    one does not exist.
    """
    home = Path(home) if home else Path.home()
    env = os.environ if env is None else env
    system = _platform_name(platform)

    if system == "windows":
        _, roaming = _windows_dirs(env, home)
        root = roaming / "Mozilla" / "Firefox"
        return FirefoxLocation(root=root, profiles_dir=root / "Profiles")

    if system == "macos":
        root = home / "Library" / "Application Support" / "Firefox"
        return FirefoxLocation(root=root, profiles_dir=root / "Profiles")

    candidates = [
        home / ".mozilla" / "firefox",
        home / "snap" / "firefox" / "common" / ".mozilla" / "firefox",
    ]
    root = next((c for c in candidates if c.exists()), candidates[0])
    return FirefoxLocation(root=root, profiles_dir=root)
