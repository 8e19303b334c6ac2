import dataclasses
from dataclasses import dataclass, field

# Rarities Scryfall may report for a printing
RARITIES = ("common", "uncommon", "rare", "mythic", "special", "bonus")


@dataclass(frozen=True, slots=True)
class CardFace:
    """One face of a multi-faced card (transform, MDFC, adventure, split)."""

    name: str
    colors: tuple[str, ...] = ()
    type_line: str = ""
    mana_cost: str = ""


@dataclass(frozen=True, slots=True)
class Card:
    """
    A single printing of a card.

    Cards are value objects. Pack-specific flags (foil, bonus-sheet origin)
    are applied with `as_foil()` / `as_list_card()`, which return copies.

    Attributes:
        id: Scryfall printing ID (unique per printing)
        name: Card name
        set_code: Lowercase Scryfall set code (e.g., "mkm")
        collector_number: Collector number within set
        rarity: common, uncommon, rare, mythic, special or bonus
        type_line: Full type line (e.g., "Basic Land — Forest")
        colors: Color letters (W, U, B, R, G); empty for colorless
        booster: Whether the printing appears in regular boosters
        finishes: Available finishes ("foil", "nonfoil", "etched")
        faces: Faces of multi-faced cards, front face first
        is_foil: Opened as a foil in this pack
        is_from_list: Opened from the bonus sheet in this pack
    """

    id: str
    name: str
    set_code: str = ""
    collector_number: str = ""
    rarity: str = "common"
    type_line: str = ""
    oracle_id: str | None = None
    set_name: str = ""
    mana_cost: str = ""
    cmc: float = 0.0
    colors: tuple[str, ...] = ()
    color_identity: tuple[str, ...] = ()
    booster: bool = True
    finishes: frozenset[str] = field(default_factory=lambda: frozenset({"nonfoil"}))
    released_at: str | None = None
    layout: str = "normal"
    frame: str | None = None
    frame_effects: tuple[str, ...] = ()
    border_color: str | None = None
    full_art: bool = False
    promo: bool = False
    promo_types: tuple[str, ...] = ()
    faces: tuple[CardFace, ...] = ()
    is_foil: bool = False
    is_from_list: bool = False

    @property
    def can_be_foil(self) -> bool:
        """True if the printing exists with a foil finish."""
        return "foil" in self.finishes

    @property
    def is_foil_only(self) -> bool:
        """True if the printing only exists as a foil."""
        return "foil" in self.finishes and "nonfoil" not in self.finishes

    @property
    def effective_colors(self) -> tuple[str, ...]:
        """Card colors, falling back to the front face for multi-faced cards."""
        if self.colors:
            return self.colors
        if self.faces:
            return self.faces[0].colors
        return ()

    def as_foil(self) -> "Card":
        """Copy of this card opened as a foil."""
        return dataclasses.replace(self, is_foil=True)

    def as_list_card(self) -> "Card":
        """Copy of this card opened from the bonus sheet."""
        return dataclasses.replace(self, is_from_list=True)
