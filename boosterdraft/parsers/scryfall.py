"""
Scryfall card parser.

Converts Scryfall card and set JSON objects into the immutable models
used by the booster generator.

Card objects: https://scryfall.com/docs/api/cards
"""

from typing import Any, TypedDict

from boosterdraft.models.card import Card, CardFace

# Set types that are opened in boosters and drafted
DRAFTABLE_SET_TYPES = frozenset({"core", "expansion", "draft_innovation", "masters"})


class SetData(TypedDict):
    """Minimal set data we need from Scryfall."""

    code: str
    name: str
    released_at: str | None
    set_type: str
    card_count: int


def _normalize_rarity(rarity: str | None) -> str:
    """
    Lowercase the rarity.

    Unrecognized rarities are kept as-is so the pool builder can drop them.
    """
    if not rarity:
        return "common"
    return rarity.lower()


def _parse_face(data: dict[str, Any]) -> CardFace:
    return CardFace(
        name=data.get("name", ""),
        colors=tuple(data.get("colors") or ()),
        type_line=data.get("type_line") or "",
        mana_cost=data.get("mana_cost") or "",
    )


def parse_card(data: dict[str, Any]) -> Card:
    """
    Build a Card from a Scryfall card object.

    Args:
        data: Card JSON as returned by the Scryfall API

    Returns:
        Immutable Card

    Raises:
        KeyError: If the object has no id or name
    """
    faces = tuple(_parse_face(face) for face in data.get("card_faces") or ())

    # Multi-faced cards keep their type line on the faces
    type_line = data.get("type_line") or (faces[0].type_line if faces else "")

    return Card(
        id=data["id"],
        name=data["name"],
        set_code=data.get("set", ""),
        collector_number=str(data.get("collector_number", "")),
        rarity=_normalize_rarity(data.get("rarity")),
        type_line=type_line,
        oracle_id=data.get("oracle_id"),
        set_name=data.get("set_name", ""),
        mana_cost=data.get("mana_cost") or "",
        cmc=float(data.get("cmc") or 0.0),
        colors=tuple(data.get("colors") or ()),
        color_identity=tuple(data.get("color_identity") or ()),
        booster=bool(data.get("booster", False)),
        finishes=frozenset(data.get("finishes") or ("nonfoil",)),
        released_at=data.get("released_at"),
        layout=data.get("layout") or "normal",
        frame=data.get("frame"),
        frame_effects=tuple(data.get("frame_effects") or ()),
        border_color=data.get("border_color"),
        full_art=bool(data.get("full_art", False)),
        promo=bool(data.get("promo", False)),
        promo_types=tuple(data.get("promo_types") or ()),
        faces=faces,
    )


def parse_cards(objects: list[dict[str, Any]]) -> list[Card]:
    """Parse a list of Scryfall card objects, skipping non-card entries."""
    return [parse_card(obj) for obj in objects if obj.get("object", "card") == "card"]


def parse_set(data: dict[str, Any]) -> SetData:
    """Extract the set fields used for set selection."""
    return SetData(
        code=data["code"],
        name=data.get("name", data["code"]),
        released_at=data.get("released_at"),
        set_type=data.get("set_type", ""),
        card_count=int(data.get("card_count", 0)),
    )


def is_draftable_set(data: SetData) -> bool:
    """True if the set type is opened in draft boosters."""
    return data["set_type"] in DRAFTABLE_SET_TYPES
