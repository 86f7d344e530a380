"""
Core configuration and settings for the disease graph backend.
"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application Info
    app_name: str = "Disease Graph Backend"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS Settings
    cors_origins: list = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list = ["*"]
    cors_allow_headers: list = ["*"]

    # Graph document locations
    graph_source: str = "public/data/disease_symptom_graph.json"
    graph_output_path: str = "public/data/disease_symptom_graph.json"
    function_graph_path: str = (
        "supabase/functions/predict-diseases/disease_symptom_graph.json"
    )
    fetch_timeout_seconds: float = 10.0

    # Layout
    canvas_width: float = 800.0
    canvas_height: float = 600.0
    disease_node_size: float = 28.0
    symptom_node_size: float = 14.0
    link_distance: float = 120.0
    charge_strength: float = -200.0
    center_strength: float = 0.05
    alpha_target: float = 0.0
    layout_seed: Optional[int] = 42
    max_ticks_per_request: int = 1000
    layout_autorun: bool = True
    layout_tick_interval: float = 1 / 60

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Export settings instance
settings = get_settings()
