"""
Interest Tag Catalog
This config defines the static interest taxonomy used for matching users into groups.
Tag ids are stored in user_static_tags and group_tags; they are not database entities.
"""

from typing import Dict, Iterable, List, Optional

# Categories and their selectable options
INTEREST_CATEGORIES = [
    {
        "id": "tech",
        "name": "Technology",
        "options": [
            {"id": "tech_programming", "name": "Programming"},
            {"id": "tech_ai", "name": "Artificial Intelligence"},
            {"id": "tech_gaming", "name": "Gaming"},
            {"id": "tech_cybersecurity", "name": "Cybersecurity"},
            {"id": "tech_other", "name": "Other Tech"},
        ],
    },
    {
        "id": "sports",
        "name": "Sports",
        "options": [
            {"id": "sports_football", "name": "Football/Soccer"},
            {"id": "sports_basketball", "name": "Basketball"},
            {"id": "sports_running", "name": "Running"},
            {"id": "sports_swimming", "name": "Swimming"},
            {"id": "sports_other", "name": "Other Sports"},
        ],
    },
    {
        "id": "hobbies",
        "name": "Hobbies",
        "options": [
            {"id": "hobbies_reading", "name": "Reading"},
            {"id": "hobbies_music", "name": "Music"},
            {"id": "hobbies_cooking", "name": "Cooking"},
            {"id": "hobbies_art", "name": "Art & Crafts"},
            {"id": "hobbies_other", "name": "Other Hobbies"},
        ],
    },
    {
        "id": "education",
        "name": "Education",
        "options": [
            {"id": "edu_science", "name": "Science"},
            {"id": "edu_languages", "name": "Languages"},
            {"id": "edu_history", "name": "History"},
            {"id": "edu_mathematics", "name": "Mathematics"},
            {"id": "edu_other", "name": "Other Educational Topics"},
        ],
    },
    {
        "id": "lifestyle",
        "name": "Lifestyle",
        "options": [
            {"id": "lifestyle_travel", "name": "Travel"},
            {"id": "lifestyle_fitness", "name": "Fitness"},
            {"id": "lifestyle_fashion", "name": "Fashion"},
            {"id": "lifestyle_food", "name": "Food & Dining"},
            {"id": "lifestyle_other", "name": "Other Lifestyle"},
        ],
    },
    {
        "id": "age_group",
        "name": "Age Group",
        "options": [
            {"id": "age_18_24", "name": "18-24"},
            {"id": "age_25_34", "name": "25-34"},
            {"id": "age_35_44", "name": "35-44"},
            {"id": "age_45_54", "name": "45-54"},
            {"id": "age_55_plus", "name": "55+"},
        ],
    },
]


def get_all_options() -> List[Dict[str, str]]:
    """
    Returns every option as a flat list annotated with its category
    Format: [
        {"id": "tech_ai", "name": "Artificial Intelligence", "category": "tech", "category_name": "Technology"},
        ...
    ]
    """
    options = []
    for category in INTEREST_CATEGORIES:
        for option in category["options"]:
            options.append({
                **option,
                "category": category["id"],
                "category_name": category["name"],
            })
    return options


def get_category(category_id: str) -> Optional[Dict]:
    for category in INTEREST_CATEGORIES:
        if category["id"] == category_id:
            return category
    return None


def filter_options(category_id: str, query: str = "") -> List[Dict[str, str]]:
    """Options of a category whose name contains query (case-insensitive). Unknown category falls back to the first one."""
    category = get_category(category_id) or INTEREST_CATEGORIES[0]
    needle = query.strip().lower()
    if not needle:
        return list(category["options"])
    return [o for o in category["options"] if needle in o["name"].lower()]


def is_valid_tag(tag_id: str) -> bool:
    return tag_id in ALL_TAG_IDS


def validate_tags(tag_ids: Iterable[str]) -> List[str]:
    """Return the ids not present in the catalog"""
    return [t for t in tag_ids if not is_valid_tag(t)]


def calculate_match_score(user_interests_1: Iterable[str], user_interests_2: Iterable[str]) -> Dict[str, float]:
    """
    Overlap between two interest selections.
    score: shared tags, max_possible: size of the larger selection,
    percentage: Dice coefficient scaled to 0-100.
    """
    set1 = set(user_interests_1)
    set2 = set(user_interests_2)
    match_count = len(set1 & set2)
    total = len(set1) + len(set2)
    return {
        "score": match_count,
        "max_possible": max(len(set1), len(set2)),
        "percentage": (match_count * 2 / total * 100) if total > 0 else 0,
    }


ALL_TAG_IDS = frozenset(o["id"] for o in get_all_options())
