#!/usr/bin/env python3
"""
Cookie Bridge - Command Line Interface
Read session cookies from locally installed browsers.

Usage:
    python3 main.py browsers
    python3 main.py cookies claude.ai --json
    python3 main.py header claude.ai sessionKey
    python3 main.py check claude.ai sessionKey
    python3 main.py config --set-preferred firefox
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from cookie_models import BrowserType, Cookie
from cookie_service import BrowserCookieService
from settings import CookieSettings
from timestamp_utils import format_utc, get_current_timestamp_utc


# Colors for terminal output
class Colors:
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    BOLD = '\033[1m'
    END = '\033[0m'


def colorize(text: str, color: str) -> str:
    """Add color to text if terminal supports it."""
    if sys.stdout.isatty():
        return f"{color}{text}{Colors.END}"
    return text


def mask_value(value: str) -> str:
    """Show only the first characters of a cookie value."""
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{'*' * 4} ({len(value)} chars)"


def browser_arg(value: str) -> BrowserType:
    try:
        return BrowserType.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def print_cookies(cookies: List[Cookie], reveal: bool):
    for cookie in cookies:
        status = colorize('[expired]', Colors.YELLOW) if cookie.is_expired else colorize('[ok]', Colors.GREEN)
        value = cookie.value if reveal else mask_value(cookie.value)
        flags = ", ".join(f for f, on in (("secure", cookie.secure), ("httponly", cookie.http_only)) if on)
        print(f"{status} {colorize(cookie.name, Colors.BOLD)} = {value}")
        print(f"    Domain: {cookie.domain}  Path: {cookie.path}  Expires: {format_utc(cookie.expires)}")
        if flags:
            print(f"    Flags: {flags}")


async def cmd_browsers(service: BrowserCookieService, args) -> int:
    installed = set(await service.installed_browsers())
    print("Supported Browsers (priority order):")
    print()
    for browser_type in service.browser_order:
        mark = colorize('[✓]', Colors.GREEN) if browser_type in installed else colorize('[ ]', Colors.RED)
        print(f"  {mark} {browser_type.value}")
    return 0


async def cmd_cookies(service: BrowserCookieService, args) -> int:
    if args.browser:
        cookies = await service.get_cookies_from_browser(args.browser, args.domain)
    else:
        cookies = await service.list_cookies(args.domain)

    if args.json:
        output = {
            "domain": args.domain,
            "generated_at": get_current_timestamp_utc(),
            "cookies": [c.to_dict() for c in cookies],
        }
        if not args.reveal:
            for item in output["cookies"]:
                item["value"] = mask_value(item["value"])
        print(json.dumps(output, indent=2))
        return 0

    if not cookies:
        print(f"{colorize('[!]', Colors.YELLOW)} No cookies found for {args.domain}")
        return 1

    print_cookies(cookies, args.reveal)
    return 0


async def cmd_header(service: BrowserCookieService, args) -> int:
    if args.browser:
        wanted = {n.lower() for n in args.names}
        cookies = await service.get_cookies_from_browser(args.browser, args.domain)
        header = service.format_header(c for c in cookies if c.name.lower() in wanted) or None
    else:
        header = await service.get_cookie_header(args.domain, args.names)

    if header is None:
        print(f"{colorize('[✗]', Colors.RED)} No matching cookies for {args.domain}", file=sys.stderr)
        return 1

    print(header)
    return 0


async def cmd_check(service: BrowserCookieService, args) -> int:
    if await service.has_session(args.domain, args.name):
        print(f"{colorize('[✓]', Colors.GREEN)} Session cookie {args.name} found for {args.domain}")
        return 0
    print(f"{colorize('[✗]', Colors.RED)} No usable {args.name} cookie for {args.domain}")
    return 1


def cmd_config(settings: CookieSettings, args) -> int:
    if args.set_preferred:
        settings.preferred_browser = args.set_preferred
        path = settings.save(args.settings)
        print(f"{colorize('[✓]', Colors.GREEN)} Saved {path}")

    print("Current Configuration:")
    print()
    print(f"  Preferred Browser: {settings.preferred_browser.value}")
    print(f"  Browser Order:     {', '.join(b.value for b in settings.browser_order)}")
    print(f"  Log Level:         {settings.log_level}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Read session cookies from installed browsers')
    parser.add_argument('--preferred', type=browser_arg, help='Browser to try first')
    parser.add_argument('--settings', help='Path of the settings file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('browsers', help='List supported browsers and whether they are installed')

    cookies = sub.add_parser('cookies', help='List cookies for a domain')
    cookies.add_argument('domain')
    cookies.add_argument('--browser', type=browser_arg, help='Read only this browser')
    cookies.add_argument('--json', action='store_true', help='Output in JSON format')
    cookies.add_argument('--reveal', action='store_true', help='Print full cookie values')

    header = sub.add_parser('header', help='Print a Cookie header for named cookies')
    header.add_argument('domain')
    header.add_argument('names', nargs='+')
    header.add_argument('--browser', type=browser_arg, help='Read only this browser')

    check = sub.add_parser('check', help='Exit 0 when a usable session cookie exists')
    check.add_argument('domain')
    check.add_argument('name')

    config = sub.add_parser('config', help='Show or modify configuration')
    config.add_argument('--set-preferred', type=browser_arg, help='Save a new preferred browser')

    return parser


COMMANDS = {
    'browsers': cmd_browsers,
    'cookies': cmd_cookies,
    'header': cmd_header,
    'check': cmd_check,
}


def main(argv: Optional[List[str]] = None, service: Optional[BrowserCookieService] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = CookieSettings.load(args.settings)

    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    if args.command == 'config':
        return cmd_config(settings, args)

    if service is None:
        service = BrowserCookieService(
            preferred_browser=args.preferred or settings.preferred_browser,
            browser_order=settings.browser_order,
        )

    return asyncio.run(COMMANDS[args.command](service, args))


if __name__ == '__main__':
    sys.exit(main())
