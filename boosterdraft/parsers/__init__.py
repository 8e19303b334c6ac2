from boosterdraft.parsers.scryfall import (
    DRAFTABLE_SET_TYPES,
    SetData,
    is_draftable_set,
    parse_card,
    parse_cards,
    parse_set,
)

__all__ = [
    "DRAFTABLE_SET_TYPES",
    "SetData",
    "is_draftable_set",
    "parse_card",
    "parse_cards",
    "parse_set",
]
