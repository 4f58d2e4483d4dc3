#!/usr/bin/env python3
"""
Cookie Bridge - Settings
========================
Preferred browser, fallback order and log level.

Values come from a JSON settings file and are overridden by environment
variables (a ``.env`` file in the working directory is loaded first):

    COOKIE_BRIDGE_SETTINGS           path of the settings file
    COOKIE_BRIDGE_PREFERRED_BROWSER  e.g. "Firefox"
    COOKIE_BRIDGE_BROWSER_ORDER      comma separated, e.g. "Edge,Chrome"
    COOKIE_BRIDGE_LOG_LEVEL          e.g. "INFO"
"""

import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv

from cookie_models import DEFAULT_BROWSER_ORDER, BrowserType

logger = logging.getLogger(__name__)

ENV_PREFIX = "COOKIE_BRIDGE_"


def default_settings_path(env: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if env is None else env
    if env.get(f"{ENV_PREFIX}SETTINGS"):
        return Path(env[f"{ENV_PREFIX}SETTINGS"])
    if sys.platform == "win32":
        base = Path(env.get("LOCALAPPDATA") or Path.home() / "AppData" / "Local")
        return base / "CookieBridge" / "settings.json"
    base = Path(env.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return base / "cookie-bridge" / "settings.json"


def parse_browser_order(value: Any) -> List[BrowserType]:
    """Accept a list or a comma separated string of browser names."""
    if isinstance(value, str):
        value = [part for part in value.split(",") if part.strip()]
    return [BrowserType.parse(name) for name in value]


@dataclass
class CookieSettings:
    """Cookie reading configuration"""
    preferred_browser: BrowserType = BrowserType.CHROME
    browser_order: List[BrowserType] = field(default_factory=lambda: list(DEFAULT_BROWSER_ORDER))
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CookieSettings":
        settings = cls()
        if data.get("preferred_browser"):
            settings.preferred_browser = BrowserType.parse(data["preferred_browser"])
        if data.get("browser_order"):
            settings.browser_order = parse_browser_order(data["browser_order"])
        if data.get("log_level"):
            settings.log_level = str(data["log_level"]).upper()
        return settings

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "preferred_browser": self.preferred_browser.value,
            "browser_order": [b.value for b in self.browser_order],
            "log_level": self.log_level,
        }

    def apply_env(self, env: Mapping[str, str]) -> "CookieSettings":
        overrides = {
            key: env.get(f"{ENV_PREFIX}{key.upper()}")
            for key in ("preferred_browser", "browser_order", "log_level")
        }
        merged = self.to_dict()
        merged.update({k: v for k, v in overrides.items() if v})
        return CookieSettings.from_dict(merged)

    @classmethod
    def load(cls, path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> "CookieSettings":
        """Load settings; a missing or malformed file yields defaults."""
        if env is None:
            load_dotenv()
            env = os.environ
        path = Path(path) if path else default_settings_path(env)

        settings = cls()
        if path.is_file():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    settings = cls.from_dict(json.load(f))
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logger.warning("Ignoring settings file %s: %s", path, e)

        try:
            return settings.apply_env(env)
        except ValueError as e:
            logger.warning("Ignoring environment overrides: %s", e)
            return settings

    def save(self, path: Optional[Path] = None) -> Path:
        path = Path(path) if path else default_settings_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        return path
