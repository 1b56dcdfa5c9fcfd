"""
Internationalization (i18n) utilities for user-facing messages.

This module provides:
- Loading of the gettext catalogs shipped in ``warden/locales``
- Translation of message keys for a requested locale
- Resolution of a preferred language from an Accept-Language value
- Fallback to the default language and then to the key itself

Catalogs are read straight from the ``.po`` files with Babel, so no compile
step is needed before the messages are available.
"""

import os
from typing import Dict, Optional

import structlog
from babel.messages.pofile import read_po

from warden.core.config.settings import settings

logger = structlog.get_logger(__name__)

LOCALES_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "locales")

_catalogs: Dict[str, Dict[str, str]] = {}


def setup_i18n(locales_path: str = LOCALES_PATH) -> None:
    """
    Load the message catalog of every supported language.

    Raises:
        FileNotFoundError: If the locales directory is not found.
    """
    if not os.path.isdir(locales_path):
        raise FileNotFoundError(f"Locales directory not found: {locales_path}")

    _catalogs.clear()
    for lang in settings.SUPPORTED_LANGUAGES:
        po_path = os.path.join(locales_path, lang, "LC_MESSAGES", "messages.po")
        if not os.path.exists(po_path):
            logger.warning("i18n_catalog_missing", language=lang, path=po_path)
            continue
        with open(po_path, "rb") as po_file:
            catalog = read_po(po_file, locale=lang)
        _catalogs[lang] = {
            message.id: message.string
            for message in catalog
            if message.id and message.string
        }
        logger.debug("i18n_initialized", language=lang, entries=len(_catalogs[lang]))

    logger.debug("i18n_setup_complete", default_locale=settings.DEFAULT_LANGUAGE)


def get_translated_message(key: str, locale: Optional[str] = None) -> str:
    """
    Retrieve a translated message for the given key and locale.

    ``locale`` may be a language code or an Accept-Language value; it is
    resolved with :func:`resolve_language`, so ``pt-BR`` selects ``pt_BR`` and
    unsupported locales fall back to the default language; keys missing from
    the catalog fall back to the default language and finally to the key.

    Args:
        key: The message key to translate.
        locale: The target language code or Accept-Language value (defaults to DEFAULT_LANGUAGE).

    Returns:
        The translated message or the original key if no translation exists.
    """
    if not _catalogs:
        setup_i18n()

    requested = locale
    locale = resolve_language(requested)
    if requested and requested != locale:
        logger.debug("locale_resolved", requested_locale=requested, resolved_locale=locale)
    if locale not in _catalogs:
        logger.warning("i18n_catalog_not_loaded", locale=locale, fallback_locale=settings.DEFAULT_LANGUAGE)
        locale = settings.DEFAULT_LANGUAGE

    translated = _catalogs.get(locale, {}).get(key)
    if translated is None:
        translated = _catalogs.get(settings.DEFAULT_LANGUAGE, {}).get(key)
    if translated is None:
        logger.warning("translation_key_not_found", key=key, locale=locale)
        return key
    return translated


def resolve_language(accept_language: Optional[str]) -> str:
    """
    Pick the first supported language from an Accept-Language style value.

    ``pt-BR`` and ``pt_BR`` both select ``pt_BR``; a bare ``pt`` selects the
    first supported language with that prefix.
    """
    if not accept_language:
        return settings.DEFAULT_LANGUAGE

    supported = list(settings.SUPPORTED_LANGUAGES)
    for part in accept_language.split(","):
        tag = part.split(";")[0].strip().replace("-", "_")
        if not tag:
            continue
        for lang in supported:
            if lang.lower() == tag.lower():
                return lang
        prefix = tag.split("_")[0].lower()
        for lang in supported:
            if lang.split("_")[0].lower() == prefix:
                return lang

    return settings.DEFAULT_LANGUAGE
