# File: link_crawler/utils.py
"""link_crawler.utils: URL helpers shared by the crawler and the reports."""

from __future__ import annotations

import re
from typing import Sequence

__all__: Sequence[str] = ("canonical_key",)

# scheme and optional "www." label, then everything up to the query string
_CANONICAL_RE = re.compile(r"^https?://(?:www\.)?([^?]*)", re.IGNORECASE)


def _strip_once(url: str) -> str:
    match = _CANONICAL_RE.match(url)
    key = match.group(1) if match else url.split("?", 1)[0]
    return key.rstrip("/")


def canonical_key(url: str) -> str:
    """Reduce *url* to the key used for deduplication.

    Strips the ``http``/``https`` scheme, a leading ``www.`` label, the query
    string and trailing slashes, so that ``https://www.cnn.com/`` and
    ``http://cnn.com`` collapse to ``cnn.com``. Never raises: input that does
    not look like an http(s) URL goes through the same rules on a best-effort
    basis.

    The rules are applied until the key stops changing, which keeps the
    function idempotent even for oddities such as ``http://http://a.com``.
    """
    key = _strip_once(url)
    # every non-trivial pass shortens the string, so this terminates
    while True:
        again = _strip_once(key)
        if again == key:
            return key
        key = again
