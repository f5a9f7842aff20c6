from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CUBEDRAFT_")

    app_name: str = "CubeDraft"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./cubedraft.db"

    cube_csv_url: str = (
        "https://cubecobra.com/cube/download/csv/5eae7a67a85ffb101d7fd244"
        "?primary=Color%20Category&secondary=Types-Multicolor"
        "&tertiary=Mana%20Value&quaternary=Alphabetical&showother=undefined"
    )
    scryfall_api_url: str = "https://api.scryfall.com"
    http_timeout: float = 30.0

    # Draft shape, fixed for the lifetime of a draft
    seat_count: int = 8
    packs_per_seat: int = 3
    pack_size: int = 15

    image_cache_size: int = 15


settings = Settings()


# =============================================================================
# CARD IMAGE LAYOUT
# =============================================================================

# Scryfall "png" version dimensions
CARD_WIDTH = 745
CARD_HEIGHT = 1040

# Cards per row in the grid layout
GRID_COLUMNS = 5

# Mana values at or above this share a single pile
MAX_CMC_PILE = 7
