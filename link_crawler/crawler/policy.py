# link_crawler/crawler/policy.py
"""
Domain admission policy: decides whether a link may be followed.
"""
from __future__ import annotations

import logging
from urllib.parse import urlsplit

from link_crawler.config import DomainPolicyConfig


class DomainPolicy:
    """Permitted/blacklisted host filter with an optional free-crawl mode."""

    def __init__(self, config: DomainPolicyConfig, *, debug: bool = False) -> None:
        self.config = config
        self.debug = debug
        self.logger = logging.getLogger("LinkCrawler")

    def is_eligible(self, url: str) -> bool:
        """Return True if *url* is absolute and its host passes the allow/deny lists.

        Relative links (no scheme or host) are never eligible.
        """
        try:
            parts = urlsplit(url)
            host = parts.hostname
        except ValueError as exc:
            self._trace("URL %s could not be parsed: %s", url, exc)
            return False

        if not parts.scheme or not host:
            self._trace("URL %s doesn't have a domain: %r", url, parts)
            return False

        cfg = self.config
        if (cfg.free_crawl or host in cfg.permitted_domains) and host not in cfg.blacklist_domains:
            return True

        self._trace("Domain %s isn't in the list of permitted domains: %r", host, parts)
        return False

    __call__ = is_eligible

    def _trace(self, msg: str, *args: object) -> None:
        if self.debug:
            self.logger.debug(msg, *args)
