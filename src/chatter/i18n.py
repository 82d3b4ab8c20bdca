"""
Translations for server-generated, user-facing strings (push notification bodies).
"""

from .config import settings

CATALOG: dict[str, dict[str, str]] = {
    "en": {
        "PHOTO": "Sent a photo.",
        "FILE": "Sent a file.",
    },
    "ko": {
        "PHOTO": "사진을 보냈습니다.",
        "FILE": "파일을 보냈습니다.",
    },
}


def parse_accept_language(header: str | None) -> list[str]:
    """Return the primary language tags of an Accept-Language header, best first."""
    if not header:
        return []

    weighted: list[tuple[float, int, str]] = []
    for index, part in enumerate(header.split(",")):
        piece = part.strip()
        if not piece:
            continue
        tag, _, params = piece.partition(";")
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
        language = tag.strip().split("-")[0].lower()
        if language and language != "*" and quality > 0:
            weighted.append((-quality, index, language))

    return [language for _, _, language in sorted(weighted)]


def negotiate_locale(accept_language: str | None) -> str:
    for language in parse_accept_language(accept_language):
        if language in CATALOG:
            return language
    return settings.default_locale


def translate(key: str, locale: str | None = None) -> str:
    """Translate `key`, falling back to the default locale and then to the key itself."""
    messages = CATALOG.get(locale or settings.default_locale) or {}
    if key in messages:
        return messages[key]
    return CATALOG.get(settings.default_locale, {}).get(key, key)
