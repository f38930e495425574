from .base import OfferCandidate, PriceExtractor, collect_offer_candidates, to_number
from .regex import RegexPriceExtractor

__all__ = [
    "OfferCandidate",
    "PriceExtractor",
    "RegexPriceExtractor",
    "collect_offer_candidates",
    "to_number",
]
