import re
from typing import Optional

SUPPORTED_LOCALES = ("en", "ru")
DEFAULT_LOCALE = "en"

_CYRILLIC = re.compile(r"[А-Яа-яЁё]")


def detect_query_locale(query: Optional[str], locale: Optional[str] = None) -> str:
    """
    Resolve the search language for a query.

    An explicit supported locale wins. Otherwise an empty query is English and
    a query with at least one Cyrillic letter is Russian, no matter how many
    Latin letters it also contains.

    Args:
        query: Raw search text
        locale: Explicit locale override such as "ru" or "en-US"

    Returns:
        "ru" or "en"
    """
    explicit = normalize_locale(locale)
    if explicit:
        return explicit

    if not query:
        return DEFAULT_LOCALE

    if _CYRILLIC.search(query):
        return "ru"
    return "en"


def normalize_locale(locale: Optional[str]) -> Optional[str]:
    """Map "ru", "RU", "ru-RU" and the like to a supported locale, else None."""
    if not locale:
        return None
    primary = locale.strip().lower().replace("_", "-").split("-")[0]
    if primary in SUPPORTED_LOCALES:
        return primary
    return None
