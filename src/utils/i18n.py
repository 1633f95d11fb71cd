from __future__ import annotations

"""
Internationalization (i18n) utility module for translated messages.

This module provides functionality for:
- Loading gettext catalogues for every supported locale (English, Indonesian)
- Translating message keys, with fallback to the default locale and then the key
- A Babel-parsed *.po* fallback catalogue for environments where the compiled
  *.mo* files are missing or stale

Locale *negotiation* (URL segment, cookie, Accept-Language) belongs to the
request gate; see :mod:`src.core.gate.locale`.
"""

import os
import gettext
from typing import Dict

from babel.messages.pofile import read_po

from src.core.config.settings import settings
from src.core.logging import logger

# Store translations for each language
_translations: Dict[str, gettext.NullTranslations] = {}

# ---------------------------------------------------------------------------
# Fallback catalogue (parsed from *.po* files)
# ---------------------------------------------------------------------------

# When the compiled *.mo* files are out of date, or the compilation step was
# skipped, gettext returns the original msgid. The *.po* sources are parsed at
# startup and kept as a secondary lookup so user-visible strings stay translated.

_fallback_catalogs: Dict[str, Dict[str, str]] = {}

LOCALES_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "../..", "locales"))

# Basic safety limit on catalogue size
MAX_PO_FILE_SIZE = 10 * 1024 * 1024


def _load_po_catalog(lang: str) -> Dict[str, str]:
    po_path = os.path.join(LOCALES_PATH, lang, "LC_MESSAGES", "messages.po")
    if not os.path.exists(po_path):
        return {}

    file_size = os.path.getsize(po_path)
    if file_size > MAX_PO_FILE_SIZE:
        logger.warning("i18n_po_file_too_large", lang=lang, size=file_size)
        return {}

    with open(po_path, "rb") as po_file:
        catalog = read_po(po_file, locale=lang)

    return {
        str(message.id): str(message.string or message.id)
        for message in catalog
        if message.id and isinstance(message.id, str)
    }


def setup_i18n() -> None:
    """
    Initialize the internationalization system by loading translations.

    Loads gettext translations for each supported locale and parses the .po
    sources as a fallback catalogue.

    Raises:
        FileNotFoundError: If the locales directory is not found.
    """
    if not os.path.exists(LOCALES_PATH):
        raise FileNotFoundError(f"Locales directory not found: {LOCALES_PATH}")

    for lang in settings.SUPPORTED_LOCALES:
        _translations[lang] = gettext.translation(
            domain="messages",
            localedir=LOCALES_PATH,
            languages=[lang],
            fallback=True,
        )
        _fallback_catalogs[lang] = _load_po_catalog(lang)
        logger.info("i18n_initialized", language=lang, entries=len(_fallback_catalogs[lang]))

    logger.info("i18n_setup_complete", default_locale=settings.DEFAULT_LOCALE)


def get_translated_message(key: str, locale: str = settings.DEFAULT_LOCALE) -> str:
    """
    Retrieve a translated message for the given key and locale.

    Args:
        key: The message key to translate.
        locale: The target locale code (defaults to DEFAULT_LOCALE).

    Returns:
        The translated message or the original key if no translation exists.
    """
    if locale not in settings.SUPPORTED_LOCALES:
        logger.warning("unsupported_locale_requested", requested_locale=locale,
                       fallback_locale=settings.DEFAULT_LOCALE)
        locale = settings.DEFAULT_LOCALE

    if locale not in _translations:
        setup_i18n()

    translated = _translations[locale].gettext(key)
    if translated == key:  # Translation not found in .mo
        translated = _fallback_catalogs.get(locale, {}).get(key, key)
        if translated == key and locale != settings.DEFAULT_LOCALE:
            translated = _fallback_catalogs.get(settings.DEFAULT_LOCALE, {}).get(key, key)
        if translated == key:
            logger.warning("translation_key_not_found", key=key, locale=locale)

    return translated
