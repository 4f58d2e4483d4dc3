"""
Tests for Settings
"""
import json

from cookie_models import DEFAULT_BROWSER_ORDER, BrowserType
from settings import CookieSettings, default_settings_path, parse_browser_order


class TestLoad:
    """Tests for CookieSettings.load"""

    def test_defaults_without_file(self, tmp_path):
        settings = CookieSettings.load(tmp_path / "missing.json", env={})

        assert settings.preferred_browser is BrowserType.CHROME
        assert settings.browser_order == list(DEFAULT_BROWSER_ORDER)
        assert settings.log_level == "WARNING"

    def test_reads_json_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({
            "preferred_browser": "firefox",
            "browser_order": ["Edge", "Chrome"],
            "log_level": "info",
        }), encoding="utf-8")

        settings = CookieSettings.load(path, env={})

        assert settings.preferred_browser is BrowserType.FIREFOX
        assert settings.browser_order == [BrowserType.EDGE, BrowserType.CHROME]
        assert settings.log_level == "INFO"

    def test_malformed_file_yields_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{broken", encoding="utf-8")

        assert CookieSettings.load(path, env={}).preferred_browser is BrowserType.CHROME

    def test_unknown_browser_in_file_yields_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text('{"preferred_browser": "Netscape"}', encoding="utf-8")

        assert CookieSettings.load(path, env={}).preferred_browser is BrowserType.CHROME

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text('{"preferred_browser": "Edge"}', encoding="utf-8")
        env = {
            "COOKIE_BRIDGE_PREFERRED_BROWSER": "Brave",
            "COOKIE_BRIDGE_BROWSER_ORDER": "opera, firefox",
        }

        settings = CookieSettings.load(path, env=env)

        assert settings.preferred_browser is BrowserType.BRAVE
        assert settings.browser_order == [BrowserType.OPERA, BrowserType.FIREFOX]

    def test_bad_environment_value_is_ignored(self, tmp_path):
        settings = CookieSettings.load(tmp_path / "missing.json", env={"COOKIE_BRIDGE_PREFERRED_BROWSER": "lynx"})
        assert settings.preferred_browser is BrowserType.CHROME


class TestSave:
    """Tests for CookieSettings.save"""

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        CookieSettings(preferred_browser=BrowserType.OPERA).save(path)

        assert json.loads(path.read_text(encoding="utf-8"))["preferred_browser"] == "Opera"
        assert CookieSettings.load(path, env={}).preferred_browser is BrowserType.OPERA


class TestHelpers:
    """Tests for module helpers"""

    def test_settings_path_from_environment(self, tmp_path):
        target = tmp_path / "custom.json"
        assert default_settings_path({"COOKIE_BRIDGE_SETTINGS": str(target)}) == target

    def test_parse_browser_order(self):
        assert parse_browser_order("chrome,,edge") == [BrowserType.CHROME, BrowserType.EDGE]
        assert parse_browser_order(["Firefox"]) == [BrowserType.FIREFOX]
