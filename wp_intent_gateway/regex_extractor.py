"""
Regex fallback for simple French commands.

Substring and regex matching only; no model calls. Returns None when
nothing matches so callers move on instead of treating it as success.
"""

import re
from typing import Optional

from .models import RestOperation

_CREATE_VERBS = ("crée", "créer", "créé", "creer", "ajoute", "ajouter")
_LIST_VERBS = ("liste", "lister", "affiche", "afficher", "montre", "montrer")
_POST_NOUNS = ("article", "post")

_TITLE_RE = re.compile(r"(intitulé|titre|nommé)\s+[\"']?([^\"']+)[\"']?", re.I)
_CONTENT_RE = re.compile(r"(contenu|texte|corps)\s+[\"']?([^\"']+)[\"']?", re.I)

DEFAULT_TITLE = "Nouvel article"
DEFAULT_CONTENT = "Contenu de l'article"


def _mentions(text: str, words) -> bool:
    return any(w in text for w in words)


def _capture(pattern: re.Pattern, text: str, default: str) -> str:
    m = pattern.search(text)
    if m and m.group(2).strip():
        return m.group(2).strip()
    return default


def extract(text: str) -> Optional[RestOperation]:
    """
    Match creation and listing commands.

    Detection runs on the lower-cased text; titles and contents are
    captured from the original so their casing survives.
    """
    if not text:
        return None
    lowered = text.lower()

    if _mentions(lowered, _CREATE_VERBS) and _mentions(lowered, _POST_NOUNS):
        return RestOperation(
            method="POST",
            endpoint="posts",
            data={
                "title": _capture(_TITLE_RE, text, DEFAULT_TITLE),
                "content": _capture(_CONTENT_RE, text, DEFAULT_CONTENT),
                "status": "publish",
            },
        )

    if _mentions(lowered, _LIST_VERBS):
        if _mentions(lowered, _POST_NOUNS):
            return RestOperation(method="GET", endpoint="posts")
        if "page" in lowered:
            return RestOperation(method="GET", endpoint="pages")

    return None
