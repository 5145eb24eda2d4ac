"""HTTP and text helpers shared by source adapters and the media enricher.

http_client:
    fetch / get_text / get_json with SSL fallback and status logging.
    Failures return None instead of raising.

utils:
    SSL context, User-Agent strings, keyword extraction and slugs.

Example:
    >>> from tools import http_client
    >>> data = await http_client.get_json(session, "https://dev.to/api/articles")
"""

from tools import http_client
from tools.utils import USER_AGENT, create_ssl_context, extract_keywords, relevant_tokens, slugify

__all__ = [
    "http_client",
    "create_ssl_context",
    "extract_keywords",
    "relevant_tokens",
    "slugify",
    "USER_AGENT",
]
