from __future__ import annotations

from typing import Dict, List

OTHERS = "Others"

CATEGORY_SUBCATEGORIES: Dict[str, List[str]] = {
    "Infrastructure": [
        "Pothole",
        "Road Damage",
        "Broken Sidewalk",
        "Streetlight",
        "Damaged Bridge",
        "Drainage Issue",
        OTHERS,
    ],
    "Utilities": [
        "No Water",
        "Low Water Pressure",
        "Pipe Leak",
        "Power Outage",
        "Damaged Power Line",
        "Internet Issue",
        OTHERS,
    ],
    "Public Safety": [
        "Fire",
        "Crime",
        "Stray Animals",
        "Vandalism",
        "Unsafe Structure",
        "Missing Signage",
        OTHERS,
    ],
    "Sanitation": [
        "Garbage Collection",
        "Illegal Dumping",
        "Overflowing Trash",
        "Clogged Drain",
        "Bad Odor",
        "Pest Infestation",
        OTHERS,
    ],
    "Traffic": [
        "Traffic Light Issue",
        "Road Obstruction",
        "Illegal Parking",
        "Missing Road Signs",
        "Traffic Congestion",
        "Accident",
        OTHERS,
    ],
    "Environment": [
        "Flood",
        "Fallen Tree",
        "Air Pollution",
        "Water Pollution",
        "Soil Erosion",
        "Illegal Burning",
        OTHERS,
    ],
    OTHERS: [OTHERS],
}


def subcategories_for(category: str) -> List[str]:
    return list(CATEGORY_SUBCATEGORIES.get(category) or CATEGORY_SUBCATEGORIES[OTHERS])


def category_for(subcategory: str) -> str:
    """
    Category listing `subcategory`. "Others" appears under every category and
    always maps to the "Others" category.
    """
    if subcategory == OTHERS:
        return OTHERS
    for category, subs in CATEGORY_SUBCATEGORIES.items():
        if subcategory in subs:
            return category
    return OTHERS


def is_valid_pair(category: str, subcategory: str) -> bool:
    return category in CATEGORY_SUBCATEGORIES and subcategory in CATEGORY_SUBCATEGORIES[category]
