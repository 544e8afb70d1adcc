"""
Completeness score for canonical events.
"""

from eventsphere.records import CanonicalEvent


MAX_SCORE = 100


def score_event(event: CanonicalEvent) -> int:
    """
    Additive 0-100 completeness score.

    Fields that the normalizer filled from defaults count as missing, so a
    provider that sends more real data always scores at least as high.
    """
    defaulted = event.defaulted_fields
    score = 0

    if event.title and 'title' not in defaulted:
        score += 20
    if event.description and len(event.description) > 50:
        score += 20
    if event.venue_name and 'venue_name' not in defaulted:
        score += 15
    if event.venue_address:
        score += 15
    if event.image_url and 'image_url' not in defaulted:
        score += 10
    # Defined, not nonzero: a free event with an explicit 0 price still earns it
    if event.price is not None and 'price' not in defaulted:
        score += 10
    if event.latitude is not None and event.longitude is not None and 'coordinates' not in defaulted:
        score += 10

    return min(score, MAX_SCORE)
