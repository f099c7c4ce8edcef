"""Territory-based sales rep auto-assignment.

Region is inferred from the city text; the rep is the active "Sales Rep" in
that region with the highest quota.
"""

from beauty_crm.models.user import User

DEFAULT_REGION = "Central"

# (region, city substrings) checked in order
REGION_CITY_HINTS = [
    ("South", ["Johor", "Melaka"]),
    ("North", ["Penang", "Ipoh"]),
]


def infer_region(city):
    city = city or ""
    for region, hints in REGION_CITY_HINTS:
        if any(hint in city for hint in hints):
            return region
    return DEFAULT_REGION


def pick_sales_rep(city):
    """Return the best rep for a city, or None when the region has no active rep."""
    region = infer_region(city)
    return (
        User.query
        .filter(
            User.region == region,
            User.role == "Sales Rep",
            User.is_active.is_(True),
        )
        .order_by(User.quota.desc())
        .first()
    )
