"""Randomized browser fingerprints for the headless renderer."""

import random
from dataclasses import dataclass, field
from typing import Any, Optional

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

USER_AGENTS = [
    DEFAULT_USER_AGENT,
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_4) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
]

VIEWPORTS = [
    {"width": 1920, "height": 1080},
    {"width": 1536, "height": 864},
    {"width": 1440, "height": 900},
    {"width": 1366, "height": 768},
]

LOCALES = [
    ("en-US", "en-US,en;q=0.9"),
    ("en-GB", "en-GB,en;q=0.9,en-US;q=0.8"),
]

PERMISSIONS = ["geolocation", "notifications"]

ACCEPT_HEADER = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,*/*;q=0.8"
)

# Runs before any page script; hides the usual automation giveaways
STEALTH_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => %(languages)s });
window.chrome = window.chrome || { runtime: {} };
const originalQuery = window.navigator.permissions && window.navigator.permissions.query;
if (originalQuery) {
  window.navigator.permissions.query = (parameters) =>
    parameters.name === 'notifications'
      ? Promise.resolve({ state: Notification.permission })
      : originalQuery(parameters);
}
"""


@dataclass
class Fingerprint:
    """Request identity applied to one browser context."""

    user_agent: str
    viewport: dict[str, int]
    locale: str
    accept_language: str
    permissions: list[str] = field(default_factory=lambda: list(PERMISSIONS))

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Accept": ACCEPT_HEADER,
            "Accept-Language": self.accept_language,
        }

    @property
    def init_script(self) -> str:
        languages = [part.split(";")[0] for part in self.accept_language.split(",")]
        quoted = ", ".join(f"'{lang}'" for lang in languages)
        return STEALTH_SCRIPT % {"languages": f"[{quoted}]"}

    def context_options(self) -> dict[str, Any]:
        """Keyword arguments for ``Browser.new_context``."""
        return {
            "user_agent": self.user_agent,
            "viewport": dict(self.viewport),
            "locale": self.locale,
            "extra_http_headers": self.headers,
            "permissions": list(self.permissions),
        }


def random_fingerprint(rng: Optional[random.Random] = None) -> Fingerprint:
    """Pick a realistic fingerprint at random."""
    rng = rng or random.Random()
    locale, accept_language = rng.choice(LOCALES)
    return Fingerprint(
        user_agent=rng.choice(USER_AGENTS),
        viewport=dict(rng.choice(VIEWPORTS)),
        locale=locale,
        accept_language=accept_language,
    )
