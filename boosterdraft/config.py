from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="BOOSTERDRAFT_")

    app_name: str = "BoosterDraft"
    debug: bool = False
    log_level: str = "INFO"

    scryfall_api_url: str = "https://api.scryfall.com"
    user_agent: str = "BoosterDraft/1.0"
    request_timeout_seconds: float = 30.0

    # Scryfall asks for at most 10 requests per second
    rate_limit_ms: int = 100

    # Card lists for a set rarely change once released
    set_cache_ttl_seconds: int = 7 * 24 * 60 * 60
    sets_cache_ttl_seconds: int = 24 * 60 * 60

    default_pick_time_seconds: int = 0
    max_players: int = 8


settings = Settings()


# =============================================================================
# BOOSTER TUNING CONSTANTS
# =============================================================================
#
# Literal odds used by the slot pickers. These approximate the printed
# products and are not verified insert rates.

# Play boosters print mythics at 1:7, draft/set boosters at 1:8
MYTHIC_CHANCE_PLAY = 1 / 7
MYTHIC_CHANCE_DRAFT = 1 / 8

# Cumulative wildcard rarity thresholds (C 49%, U 35%, R 12.5%, M 3.5%)
WILDCARD_COMMON_THRESHOLD = 0.49
WILDCARD_UNCOMMON_THRESHOLD = 0.84
WILDCARD_RARE_THRESHOLD = 0.965

# Chance a wildcard slot shows a special-frame variant of the rolled rarity
VARIANT_SUBSTITUTION_CHANCE = 0.3

# Chance the foil slot shows a foil-only print
FOIL_ONLY_CHANCE = 0.15

# Chance the seventh play-booster slot comes from the bonus sheet
LIST_SLOT_CHANCE = 0.125

# Chance the tenth set-booster slot is a foil instead of a second rare
SET_BOOSTER_FOIL_SLOT_CHANCE = 0.5

# Bonus-sheet cards are kept within this many months of the set release
BONUS_SHEET_WINDOW_MONTHS = 6

# Below this many date-filtered cards, use the whole bonus sheet
MIN_BONUS_SHEET_SIZE = 50
