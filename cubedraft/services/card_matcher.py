"""
Card name resolution for typed picks.

Matches a free-text query against a candidate list, preferring an exact
name, then a unique substring match, then a unique in-order (subsequence)
match. Anything else fails with the candidates so the user can retype.
"""

from collections.abc import Iterable

from cubedraft.models.card import Card
from cubedraft.models.failure import AmbiguousCardError, CardNotFoundError


def _is_subsequence(query: str, name: str) -> bool:
    remaining = iter(name)
    return all(char in remaining for char in query)


def find_card(cards: Iterable[Card], query: str, scope: str = "the cube") -> Card:
    """
    Resolve a query to exactly one card.

    Args:
        cards: Candidate cards
        query: Free-text card name, possibly partial or misspelled by omission
        scope: Human-readable name of the candidate set, used in errors

    Returns:
        The matched card

    Raises:
        CardNotFoundError: If no candidate matches
        AmbiguousCardError: If more than one candidate matches
    """
    needle = query.lower()

    contiguous: list[Card] = []
    subsequence: list[Card] = []
    for card in cards:
        name = card.name.lower()
        if name == needle:
            return card
        if needle in name:
            contiguous.append(card)
        if _is_subsequence(needle, name):
            subsequence.append(card)

    if len(contiguous) == 1:
        return contiguous[0]
    if len(subsequence) == 1:
        return subsequence[0]

    if not subsequence:
        raise CardNotFoundError(query, scope)

    candidates = contiguous if len(contiguous) > 1 else subsequence
    raise AmbiguousCardError(query, [card.name for card in candidates])

