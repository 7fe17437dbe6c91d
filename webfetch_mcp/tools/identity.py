"""Browser identity randomization for outbound page fetches."""
import random
from typing import Dict, Optional

from ..config import RequestIdentity, ScrapingConfig, get_config


# Modern desktop browser user agents for rotation
BROWSER_USER_AGENTS = [
    # Chrome on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    # Chrome on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    # Chrome on Linux
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    # Firefox on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    # Firefox on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:121.0) Gecko/20100101 Firefox/121.0",
    # Safari on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
    # Edge on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0",
]

CLIENT_HINT_HEADERS = ("sec-ch-ua", "sec-ch-ua-mobile", "sec-ch-ua-platform")

ACCEPT_HTML = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,"
    "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
)


def _platform_for(user_agent: str) -> str:
    if "Windows" in user_agent:
        return '"Windows"'
    if "Macintosh" in user_agent:
        return '"macOS"'
    return '"Linux"'


def _brand_for(user_agent: str) -> str:
    if "Edg/" in user_agent:
        return '"Not_A Brand";v="8", "Chromium";v="120", "Microsoft Edge";v="120"'
    return '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"'


class IdentityRandomizer:
    """Builds a fresh, plausible header set for every fetch."""

    def __init__(self, config: Optional[ScrapingConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or get_config().scraping
        self.rng = rng or random.Random()

    def random_user_agent(self) -> str:
        return self.rng.choice(BROWSER_USER_AGENTS)

    def build(self, hostname: str) -> RequestIdentity:
        """Pick a user agent and assemble headers for a request to ``hostname``.

        DNT and the client-hint trio are each dropped on an independent coin
        flip so consecutive requests don't share one static fingerprint.
        """
        user_agent = self.random_user_agent()
        headers: Dict[str, str] = {
            "User-Agent": user_agent,
            "Accept": ACCEPT_HTML,
            "Accept-Language": "en-US,en;q=0.9",
            "Accept-Encoding": "gzip, deflate, br",
            "DNT": "1",
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "none",
            "Sec-Fetch-User": "?1",
            "Cache-Control": "max-age=0",
            "sec-ch-ua": _brand_for(user_agent),
            "sec-ch-ua-mobile": "?0",
            "sec-ch-ua-platform": _platform_for(user_agent),
            "Referer": f"https://{hostname}/",
        }

        if self.rng.random() < self.config.drop_dnt_probability:
            del headers["DNT"]
        if self.rng.random() < self.config.drop_client_hints_probability:
            for name in CLIENT_HINT_HEADERS:
                del headers[name]

        return RequestIdentity(user_agent=user_agent, headers=headers)


def search_headers(user_agent: Optional[str] = None) -> Dict[str, str]:
    """Fixed, self-identifying headers for the trusted search backend."""
    return {
        "User-Agent": user_agent or get_config().search.user_agent,
        "Accept": "application/json",
    }
