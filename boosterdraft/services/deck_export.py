"""
Deck and pool export rendering.

Arena format:
    <quantity> <card name> (<SET>) <collector_number>

Scryfall pool format is the same line shape under a `// Pool - <title>`
header, with ` *F*` marking foils.
"""

from collections.abc import Iterable, Mapping

from boosterdraft.models.card import Card


def _count_by(cards: Iterable[Card], key) -> list[tuple[Card, int]]:
    """Group cards by key, keeping first-seen order."""
    counts: dict[object, list] = {}
    for card in cards:
        entry = counts.setdefault(key(card), [card, 0])
        entry[1] += 1
    return [(card, count) for card, count in counts.values()]


def _arena_key(card: Card) -> tuple[str, str, str]:
    return (card.name, card.set_code.lower(), card.collector_number)


def _format_card_line(card: Card, count: int) -> str:
    """Format a single card line in Arena format."""
    return f"{count} {card.name} ({card.set_code.upper()}) {card.collector_number}"


def format_arena_export(
    cards: Iterable[Card],
    sideboard: Iterable[Card] | None = None,
    basic_lands: Mapping[str, int] | None = None,
) -> str:
    """
    Format a deck as Arena import text.

    Args:
        cards: Main deck cards, one entry per copy
        sideboard: Cards for the Sideboard section, omitted when None
        basic_lands: Basic land name to count, added to the main deck
            without set info

    Returns:
        Arena format string ready for import
    """
    lines: list[str] = ["Deck"]

    for card, count in _count_by(cards, _arena_key):
        lines.append(_format_card_line(card, count))

    for land, count in (basic_lands or {}).items():
        if count > 0:
            lines.append(f"{count} {land}")

    if sideboard is not None:
        lines.append("")
        lines.append("Sideboard")
        for card, count in _count_by(sideboard, _arena_key):
            lines.append(_format_card_line(card, count))

    return "\n".join(lines)


def format_scryfall_export(cards: Iterable[Card], title: str) -> str:
    """
    Format an opened pool for Scryfall deck import.

    Foil and non-foil copies of the same printing get separate lines.
    """
    lines: list[str] = [f"// Pool - {title}", ""]

    for card, count in _count_by(cards, lambda c: (c.id, c.is_foil)):
        foil_mark = " *F*" if card.is_foil else ""
        lines.append(f"{_format_card_line(card, count)}{foil_mark}")

    return "\n".join(lines)
