"""Declarative keyword sets used to tag KPIs once, at ingestion time."""

from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

THEMES: Tuple[str, ...] = ("LEAN", "DIGITAL", "GREEN", "RESILIENCE")

THEME_KEYWORDS: Dict[str, FrozenSet[str]] = {
    "LEAN": frozenset({"verim", "oee", "iyileştirme", "standart", "yalın", "kaizen", "israf"}),
    "DIGITAL": frozenset({"dijital", "erp", "crm", "lms", "otomasyon", "platform", "simülasyon"}),
    "GREEN": frozenset({"yeşil", "enerji", "karbon", "çevre", "sürdürülebil", "atık"}),
    "RESILIENCE": frozenset({"risk", "güvenlik", "direnç", "kriz", "süreklilik"}),
}

THEME_NAMES: Dict[str, str] = {
    "LEAN": "Yalın Dönüşüm",
    "DIGITAL": "Dijital Dönüşüm",
    "GREEN": "Yeşil Dönüşüm",
    "RESILIENCE": "Dirençlilik",
}


def _normalize_text(text: str | None) -> str:
    return (text or "").casefold()


def tag_themes(description: str | None) -> Tuple[str, ...]:
    """Tags whose keyword set has a hit in the description, in THEMES order."""
    text = _normalize_text(description)
    if not text:
        return ()
    return tuple(theme for theme in THEMES if any(word in text for word in THEME_KEYWORDS[theme]))
