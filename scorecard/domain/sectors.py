"""NACE industry code helpers and the 2-digit prefix -> sector label table."""

from __future__ import annotations

import re
from typing import Dict

OTHER_SECTOR = "Diğer"
UNKNOWN_NACE2 = "NA"

SECTOR_BY_NACE2: Dict[int, str] = {
    3: "Su Ürünleri",
    10: "Gıda/İçecek",
    11: "Gıda/İçecek",
    12: "Gıda/İçecek",
    13: "Tekstil",
    14: "Tekstil",
    15: "Tekstil",
    16: "Mobilya",
    17: OTHER_SECTOR,
    18: OTHER_SECTOR,
    19: OTHER_SECTOR,
    20: "Kimya",
    22: "Plastik/Kauçuk",
    23: "Mermer/Doğal Taş",
    24: "Çelik",
    25: "Metal (Fabrikasyon)",
    26: "Elektrik-Elektronik",
    27: "Demir Dışı Metaller",
    28: "Makine",
    29: "Otomotiv",
    30: "Otomotiv",
    31: "Mobilya",
    32: "Medikal Cihaz",
}

_TWO_DIGITS = re.compile(r"\d{2}")


def nace_prefix(code: str | None) -> str | None:
    """First two-digit run of a NACE code ("29.10" -> "29")."""
    if not code:
        return None
    match = _TWO_DIGITS.search(str(code))
    return match.group(0) if match else None


def to_nace2d(nace4d: str | None, nace2d: str | None) -> str:
    """Explicit 2-digit code wins, else the prefix of the 4-digit code, else "NA"."""
    if nace2d:
        return str(nace2d).strip()
    return nace_prefix(nace4d) or UNKNOWN_NACE2


def sector_for_nace(code: str | None) -> str:
    prefix = nace_prefix(code)
    if prefix is None:
        return OTHER_SECTOR
    return SECTOR_BY_NACE2.get(int(prefix), OTHER_SECTOR)
