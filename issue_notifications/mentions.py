from __future__ import annotations

import re
from typing import Iterable, List, Optional

MENTION_RE = re.compile(r"@([A-Za-z0-9._-]+)")


def extract_mentions(text: Optional[str]) -> List[str]:
    """Return the distinct ``@handle`` logins found in text, first occurrence first."""
    if not text:
        return []
    seen = dict.fromkeys(match.group(1) for match in MENTION_RE.finditer(text))
    return list(seen)


def extract_mentions_from(texts: Iterable[Optional[str]]) -> List[str]:
    """Mentions across several texts, deduplicated over all of them."""
    seen = {}
    for text in texts:
        for login in extract_mentions(text):
            seen.setdefault(login)
    return list(seen)
