"""
User-agent classification.

Maps a raw user-agent string to device/os/browser labels and a bot flag.

Key behaviors:
- Rules are ordered; the first match wins because tokens overlap
  (Android phones and tablets, Edge carrying "Chrome", Chrome carrying "Safari")
- Bot detection is a case-insensitive substring match against a fixed token list
- An empty user agent is non-bot unless configured otherwise
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .models import DeviceInfo, UAClassification

# --- Configuration ---


@dataclass(frozen=True)
class UAConfig:
    """User-agent classification configuration."""

    bot_tokens: tuple[str, ...] = (
        "bot",
        "crawl",
        "spider",
        "slurp",
        "bingpreview",
        "facebookexternalhit",
        "pingdom",
        "monitor",
        "headlesschrome",
        "google-pagespeed",
        "semrush",
    )
    treat_empty_as_bot: bool = False


DEFAULT_CONFIG = UAConfig()


# --- Pattern Tables ---

_DEVICE_RULES: tuple[tuple[tuple[re.Pattern[str], ...], str], ...] = (
    ((re.compile(r"iphone|ipod", re.I),), "iPhone"),
    ((re.compile(r"ipad", re.I),), "iPad"),
    ((re.compile(r"android", re.I), re.compile(r"mobile", re.I)), "Android Phone"),
    ((re.compile(r"android", re.I),), "Android Tablet"),
    ((re.compile(r"tablet|kindle|playbook|silk", re.I),), "Tablet"),
    ((re.compile(r"mobile", re.I),), "Mobile"),
)

_WINDOWS_VERSIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"windows nt 10", re.I), "Windows 10/11"),
    (re.compile(r"windows nt 6\.3", re.I), "Windows 8.1"),
    (re.compile(r"windows nt 6\.2", re.I), "Windows 8"),
    (re.compile(r"windows nt 6\.1", re.I), "Windows 7"),
    (re.compile(r"windows", re.I), "Windows"),
)

_IOS_DEVICE = re.compile(r"iphone|ipad|ipod", re.I)
_IOS_VERSION = re.compile(r"OS (\d+)[_\d]*")
_ANDROID = re.compile(r"android", re.I)
_ANDROID_VERSION = re.compile(r"android (\d+)", re.I)
_MACOS = re.compile(r"mac os x", re.I)
_MACOS_VERSION = re.compile(r"Mac OS X (\d+)[_\d]*")
_CHROME_OS = re.compile(r"cros", re.I)
_LINUX = re.compile(r"linux", re.I)

_EDGE = re.compile(r"edg", re.I)
_CHROME = re.compile(r"chrome", re.I)
_SAFARI = re.compile(r"safari", re.I)
_FIREFOX = re.compile(r"firefox", re.I)
_OPERA = re.compile(r"opera|opr", re.I)


# --- Classification Functions ---


def classify_device(user_agent: str) -> str:
    for patterns, label in _DEVICE_RULES:
        if all(p.search(user_agent) for p in patterns):
            return label
    return "Desktop"


def classify_os(user_agent: str) -> str:
    for pattern, label in _WINDOWS_VERSIONS:
        if pattern.search(user_agent):
            return label

    if _IOS_DEVICE.search(user_agent):
        match = _IOS_VERSION.search(user_agent)
        return f"iOS {match.group(1)}" if match else "iOS"

    if _ANDROID.search(user_agent):
        match = _ANDROID_VERSION.search(user_agent)
        return f"Android {match.group(1)}" if match else "Android"

    if _MACOS.search(user_agent):
        match = _MACOS_VERSION.search(user_agent)
        return f"macOS {match.group(1)}" if match else "macOS"

    # CrOS before Linux: some Chrome OS builds also advertise Linux
    if _CHROME_OS.search(user_agent):
        return "Chrome OS"

    if _LINUX.search(user_agent):
        return "Linux"

    return "Unknown"


def classify_browser(user_agent: str) -> str:
    """
    Classify the browser family.

    Edge is checked before Chrome and Chrome before Safari; independent
    substring checks would report Edge as Chrome and Chrome as Safari.
    """
    if _EDGE.search(user_agent):
        return "Edge"
    if _CHROME.search(user_agent):
        return "Chrome"
    if _SAFARI.search(user_agent):
        return "Safari"
    if _FIREFOX.search(user_agent):
        return "Firefox"
    if _OPERA.search(user_agent):
        return "Opera"
    return "Unknown"


def parse_device_info(user_agent: str | None) -> DeviceInfo:
    ua = user_agent or ""
    return DeviceInfo(
        device=classify_device(ua),
        os=classify_os(ua),
        browser=classify_browser(ua),
    )


def is_bot(user_agent: str | None, config: UAConfig = DEFAULT_CONFIG) -> bool:
    """Check the user agent against the known bot/crawler/monitor tokens."""
    if not user_agent or not user_agent.strip():
        return config.treat_empty_as_bot

    ua_lower = user_agent.lower()
    return any(token in ua_lower for token in config.bot_tokens)


def classify_user_agent(
    user_agent: str | None,
    config: UAConfig = DEFAULT_CONFIG,
) -> UAClassification:
    """Classify a user agent into device labels and a bot flag."""
    return UAClassification(
        device_info=parse_device_info(user_agent),
        is_bot=is_bot(user_agent, config),
    )
