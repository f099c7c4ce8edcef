"""Prospect / merchant scoring.

Rule-based 0-100 score from business type, discovery source, social media
presence and city. Pure functions, no database access.

    score = 50 + business_type_bonus + source_bonus
            + 5 (social links longer than 20 chars)
            + 5 (city in a major metro)
    clamped to [0, 100]
"""

BASE_SCORE = 50

BUSINESS_TYPE_BONUSES = {
    "Distributor": 25,
    "Retailer": 20,
    "E-commerce": 18,
    "Salon": 15,
    "Spa": 15,
    "Kiosk": 10,
}
UNKNOWN_BUSINESS_TYPE_BONUS = 10

DEFAULT_SOURCE_BONUSES = {
    "Lead Conversion": 20,
    "Partnership": 15,
    "Online Web": 12,
    "Offline": 10,
    "Other": 5,
}
UNKNOWN_SOURCE_BONUS = 5

SOCIAL_MEDIA_MIN_LENGTH = 20
SOCIAL_MEDIA_BONUS = 5

MAJOR_CITIES = ["Kuala Lumpur", "Petaling Jaya", "Johor Bahru", "Penang"]
MAJOR_CITY_BONUS = 5


def clamp_score(score):
    """Clamp to the 0-100 range."""
    return min(100, max(0, int(score)))


def calculate_score(business_type, discovery_source, social_media_links, city,
                    source_bonuses=None):
    """Score a prospect or merchant.

    Args:
        business_type: e.g. "Salon". Unknown or None earns the fallback bonus.
        discovery_source: e.g. "Partnership". Unknown or None earns the fallback.
        social_media_links: Free text; only its length matters.
        city: Free text; a substring match against MAJOR_CITIES.
        source_bonuses: Per-entity source table. Defaults to DEFAULT_SOURCE_BONUSES.

    Returns:
        int in [0, 100].
    """
    if source_bonuses is None:
        source_bonuses = DEFAULT_SOURCE_BONUSES

    score = BASE_SCORE
    score += BUSINESS_TYPE_BONUSES.get(business_type, UNKNOWN_BUSINESS_TYPE_BONUS)
    score += source_bonuses.get(discovery_source, UNKNOWN_SOURCE_BONUS)

    if social_media_links and len(social_media_links) > SOCIAL_MEDIA_MIN_LENGTH:
        score += SOCIAL_MEDIA_BONUS

    city = city or ""
    if any(major in city for major in MAJOR_CITIES):
        score += MAJOR_CITY_BONUS

    return clamp_score(score)


def score_from_data(data, source_bonuses=None):
    """Score a raw import row (dict with camelCase or snake_case keys)."""
    return calculate_score(
        business_type=data.get("businessType", data.get("business_type")),
        discovery_source=data.get("discoverySource", data.get("discovery_source")),
        social_media_links=data.get("socialMediaLinks", data.get("social_media_links")) or "",
        city=data.get("city") or "",
        source_bonuses=source_bonuses,
    )
