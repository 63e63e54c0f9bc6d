"""
Standardized ring sizes.

This module handles:
- The fixed US/UK/EU ring-size table
- Nearest-size lookup from a diameter or circumference
- Band-width size adjustment and range validation
"""

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class RingSizeEntry:
    us: float
    uk: str
    eu: int
    diameter_mm: float
    circumference_mm: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Ascending by size; immutable at runtime
RING_SIZE_TABLE: Tuple[RingSizeEntry, ...] = (
    RingSizeEntry(3, "F", 44, 14.0, 44.0),
    RingSizeEntry(3.5, "G", 45, 14.4, 45.2),
    RingSizeEntry(4, "H", 47, 14.9, 46.8),
    RingSizeEntry(4.5, "I", 48, 15.3, 48.0),
    RingSizeEntry(5, "J", 49, 15.7, 49.3),
    RingSizeEntry(5.5, "K", 51, 16.1, 50.6),
    RingSizeEntry(6, "L", 52, 16.5, 51.9),
    RingSizeEntry(6.5, "M", 53, 16.9, 53.1),
    RingSizeEntry(7, "N", 54, 17.3, 54.4),
    RingSizeEntry(7.5, "O", 56, 17.7, 55.7),
    RingSizeEntry(8, "P", 57, 18.1, 57.0),
    RingSizeEntry(8.5, "Q", 58, 18.5, 58.3),
    RingSizeEntry(9, "R", 60, 19.0, 59.5),
    RingSizeEntry(9.5, "S", 61, 19.4, 60.8),
    RingSizeEntry(10, "T", 62, 19.8, 62.1),
    RingSizeEntry(10.5, "U", 64, 20.2, 63.4),
    RingSizeEntry(11, "V", 65, 20.6, 64.6),
    RingSizeEntry(11.5, "W", 66, 21.0, 65.9),
    RingSizeEntry(12, "X", 68, 21.4, 67.2),
    RingSizeEntry(12.5, "Y", 69, 21.8, 68.5),
    RingSizeEntry(13, "Z", 70, 22.2, 69.7),
)

# Nearest match further than this means the measurement is implausible (mm)
MAX_MATCH_DISTANCE_MM = 5.0

# Band widths up to this fit true to size (mm)
TRUE_TO_SIZE_BAND_MM = 2.0


def size_from_circumference(circumference_mm: float) -> Optional[RingSizeEntry]:
    """
    Nearest table entry by circumference.

    Returns:
        The closest entry (first one on ties), or None when even the closest
        entry is more than MAX_MATCH_DISTANCE_MM away
    """
    closest = None
    min_diff = math.inf
    for entry in RING_SIZE_TABLE:
        diff = abs(circumference_mm - entry.circumference_mm)
        if diff < min_diff:
            min_diff = diff
            closest = entry

    if closest is None or min_diff > MAX_MATCH_DISTANCE_MM:
        return None
    return closest


def size_from_diameter(diameter_mm: float) -> Optional[RingSizeEntry]:
    return size_from_circumference(diameter_mm * math.pi)


def find_by_us_size(us_size: float) -> Optional[RingSizeEntry]:
    return next((entry for entry in RING_SIZE_TABLE if entry.us == us_size), None)


def find_by_uk_size(uk_size: str) -> Optional[RingSizeEntry]:
    key = uk_size.strip().upper()
    return next((entry for entry in RING_SIZE_TABLE if entry.uk == key), None)


def find_by_eu_size(eu_size: int) -> Optional[RingSizeEntry]:
    return next((entry for entry in RING_SIZE_TABLE if entry.eu == eu_size), None)


def adjust_size_for_band_width(base_us_size: float, band_width_mm: float) -> float:
    """
    Wider bands need a slightly larger size: +0.25 for every 2mm above 2mm,
    rounded to the nearest half size.
    """
    if band_width_mm <= TRUE_TO_SIZE_BAND_MM:
        return base_us_size

    adjustment = ((band_width_mm - TRUE_TO_SIZE_BAND_MM) / 2.0) * 0.25
    return math.floor((base_us_size + adjustment) * 2 + 0.5) / 2


def band_width_recommendation(band_width_mm: float) -> str:
    if band_width_mm <= 2:
        return "Thin bands (<=2mm) typically fit true to size."
    if band_width_mm <= 4:
        return "Medium bands may require going up 0.25 size for comfort."
    if band_width_mm <= 6:
        return "Wide bands often need 0.25-0.5 size larger."
    return "Very wide bands (>6mm) may need 0.5-1 full size larger."


def validate_diameter(diameter_mm: float) -> bool:
    return 14 <= diameter_mm <= 23


def validate_circumference(circumference_mm: float) -> bool:
    return 44 <= circumference_mm <= 72


def validate_us_size(size: float) -> bool:
    return 3 <= size <= 13


def validate_eu_size(size: float) -> bool:
    return 44 <= size <= 70
