# Sitemap parsing. A regex over <loc> entries is enough for the flat
# sitemaps documentation sites publish; nested sitemap indexes are not followed.

import re
from typing import List

_LOC_RE = re.compile(r'<loc>(.*?)</loc>', re.IGNORECASE | re.DOTALL)


def parse_sitemap(xml: str) -> List[str]:
    """Return every absolute ``<loc>`` URL in document order."""
    urls = []
    for match in _LOC_RE.finditer(xml or ''):
        url = match.group(1).strip()
        if url and url.startswith('http'):
            urls.append(url)
    return urls
