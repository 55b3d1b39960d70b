"""Application configuration."""

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # App settings
    app_name: str = "Wine Options API"
    debug: bool = False
    
    # CORS - Allow all origins for prototype (restrict in production)
    cors_origins: list[str] = ["*"]
    
    # Label hint heuristics
    # Earliest year accepted as a vintage. Older numbers on a label are
    # usually founding dates ("since 1898"), not harvests.
    vintage_year_floor: int = 1950
    
    # Question construction
    option_count: int = 4  # Choices per question (World is always 2)
    random_seed: Optional[int] = None  # Set to make option order reproducible
    
    # Candidate matching
    match_primary_tokens: int = 3  # Tokens OR-matched against display_name
    match_max_tokens: int = 8  # Distinct tokens kept from OCR text
    match_result_limit: int = 10
    
    # Catalog (hosted PostgREST backend)
    catalog_url: str = "http://localhost:54321"
    catalog_key: str = ""
    catalog_table: str = "wine_index"
    catalog_timeout_seconds: float = 4.0  # Per lookup; slow catalog falls back to seed lists

    # Shareable games (created for matched label photos)
    games_table: str = "wine_options_games"
    share_tokens_table: str = "share_tokens"
    share_base_url: str = "http://localhost:8888"  # Public site origin for share links

    # Label storage + vision OCR
    labels_bucket: str = "labels"
    signed_url_ttl_seconds: int = 600
    vision_endpoint: str = "https://vision.googleapis.com/v1/images:annotate"
    vision_api_key: Optional[str] = None
    ocr_timeout_seconds: float = 20.0
    
    # Points award collaborator
    points_award_url: str = "http://localhost:8888/.netlify/functions/award-points"
    points_timeout_seconds: float = 5.0
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
