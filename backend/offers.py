OFFERS = {
    "mat": {
        "name": "Introduction Mat Pilates Session",
        "price": 3000,
        "duration": 60,
        "description": "One hour semi-private introduction class on the mat. "
                       "Posture assessment, breathing fundamentals and a gentle "
                       "full-body sequence adapted to your medical declaration."
    },
    "reformer": {
        "name": "Introduction Reformer Session",
        "price": 3000,
        "duration": 60,
        "description": "One hour semi-private introduction class on the reformer. "
                       "Equipment set-up, spring loads explained and a beginner "
                       "sequence adapted to your medical declaration."
    }
}


def price_for(class_type: str) -> int:
    """Fixed price in cents for an offering variant."""
    return OFFERS[class_type]["price"]


def format_amount(cents: int, currency: str) -> str:
    return f"${cents / 100:.2f} {currency.upper()}"
