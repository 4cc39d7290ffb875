# looproute/core/config.py
from typing import List, Tuple

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class GenerationConfig(BaseModel):
    """
    Tunables for loop generation against the routing engine.

    GraphHopper's round_trip.distance is a beeline target, not the actual path
    length, so each tier fires a menu of (distance factor, seed offset)
    attempts and keeps whatever comes back.
    """

    attempts: List[Tuple[float, int]] = [
        # Around the target
        (1.0, 0),
        (1.0, 1000),
        (1.0, 2000),
        # Engine tends to come back short
        (1.2, 100),
        (1.3, 200),
        (1.4, 300),
        (1.5, 400),
        (0.9, 500),
        (0.8, 600),
        (0.7, 700),
        # Difficult areas
        (1.8, 800),
        (2.0, 900),
    ]
    # Outer retry: fractions of the requested distance, tried in order
    distance_tiers: List[float] = [1.0, 0.8, 0.6]
    seed_range: int = 100_000
    # Longest loop a request may ask for
    max_distance_km: float = 100.0

    # Two candidates closer than both thresholds are the same loop
    dedup_distance_km: float = 0.05
    dedup_ascend_m: float = 5.0

    # Naming tiers by elevation gain (metres)
    flat_max_ascend_m: float = 20.0
    rolling_max_ascend_m: float = 50.0

    # Fallback geometry
    fallback_segments: int = 40
    fallback_minutes_per_km: float = 12.0


class NavigationConfig(BaseModel):
    """
    Tunables for turn extraction and live progress tracking.
    """

    # Turn extraction
    turn_lookahead: int = 3
    turn_threshold_deg: float = 30.0
    turn_min_spacing_m: float = 30.0

    # Progress tracking
    start_fraction: float = 0.05
    start_search_fraction: float = 0.25
    tail_fraction: float = 0.85
    window_behind: int = 20
    window_ahead: int = 50
    max_backtrack: int = 10
    arrival_threshold_m: float = 30.0
    off_route_warning_m: float = 100.0

    # Run recording
    min_record_step_m: float = 5.0
    kcal_per_km: float = 70.0

    # Sessions without a fix or lookup for this long are discarded
    session_ttl_s: float = 1800.0


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (.env file).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    APP_NAME: str = "Loop Route API"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Self-hosted or hosted GraphHopper, e.g. "https://graphhopper.com/api/1".
    # Empty means the engine is unconfigured and only fallback loops are produced.
    GRAPHHOPPER_URL: str = ""
    GRAPHHOPPER_API_KEY: str = ""
    GRAPHHOPPER_TIMEOUT_S: float = 10.0
    GRAPHHOPPER_LOCALE: str = "en"

    DEFAULT_ROUTE_COUNT: int = 3

    GENERATION: GenerationConfig = GenerationConfig()
    NAVIGATION: NavigationConfig = NavigationConfig()


settings = Settings()
