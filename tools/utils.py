"""Shared utilities for the tools and sources modules.

Constants and helpers used by the HTTP layer, the source adapters and the
media enricher.
"""

import re
import ssl

import certifi

# Browser-like User-Agent to avoid being blocked by some servers
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# Identifies the bot to JSON APIs that ask for one (GitHub)
BOT_USER_AGENT = "TrendWise-Bot"

# Words too common to be useful as keywords
STOPWORDS = frozenset({
    "the", "is", "at", "which", "on", "and", "a", "to", "an", "as",
    "are", "was", "for", "with", "how", "what", "this", "that", "from",
    "your", "into", "about", "have", "will", "why",
})

_TOKEN_PATTERN = re.compile(r"[a-z0-9][a-z0-9+#.-]*")


def create_ssl_context(verify: bool = True) -> ssl.SSLContext:
    """Create SSL context with optional certificate verification.

    Args:
        verify: If True, verify SSL certificates using certifi bundle.
                If False, disable verification (for problematic servers).

    Returns:
        Configured SSL context
    """
    if verify:
        return ssl.create_default_context(cafile=certifi.where())
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def tokenize(text: str) -> list[str]:
    """Split text into lowercase word tokens (punctuation dropped)."""
    return [t.rstrip(".-") for t in _TOKEN_PATTERN.findall(text.lower()) if t.rstrip(".-")]


def relevant_tokens(text: str, stopwords: frozenset[str] = STOPWORDS) -> list[str]:
    """Tokens longer than 3 characters that are not stopwords, in order."""
    return [t for t in tokenize(text) if len(t) > 3 and t not in stopwords]


def extract_keywords(text: str, limit: int = 5) -> list[str]:
    """Extract up to `limit` unique keywords from text, preserving order.

    Example:
        >>> extract_keywords("Show HN: A tiny compiler written in Rust")
        ['show', 'tiny', 'compiler', 'written', 'rust']
    """
    return list(dict.fromkeys(relevant_tokens(text)))[:limit]


def slugify(text: str, max_length: int | None = None) -> str:
    """Convert text to a URL slug.

    Example:
        >>> slugify("React 19: What's New?")
        'react-19-whats-new'
    """
    slug = re.sub(r"[^a-z0-9\s-]", "", text.lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug).strip("-")
    if max_length is not None:
        slug = slug[:max_length]
    return slug
