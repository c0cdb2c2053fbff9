"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from two sources (in priority order):
#
#   1. **Environment variables** - e.g., DUPLICATE_THRESHOLD=0.75
#   2. **.env file** - key=value lines in the project root .env file
#
# Field name `duplicate_hard_cutoff_m` maps to env var
# `DUPLICATE_HARD_CUTOFF_M`.  Defaults below apply when neither is set.
#
# These are the *static* tuning constants of the duplicate detector.  The
# per-session policy (batch size, dry run, auto-approve, ...) lives in
# ImportConfig and comes from config/config.yaml plus CLI flags.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mass_import.models.similarity import SimilarityWeights


class Settings(BaseSettings):
    """Mass-import application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Storage ===
    catalog_db_path: str = "data/catalog.db"
    audit_db_path: str = "data/audit.db"
    storage_timeout_seconds: float = 10.0

    # === Duplicate detection ===
    # Accept threshold on the weighted confidence.
    duplicate_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    # A match is only accepted this close, however similar the text is.
    duplicate_hard_cutoff_m: float = Field(default=50.0, gt=0.0)
    # Default candidate search radius when ImportConfig does not override it.
    duplicate_search_radius_m: float = Field(default=500.0, gt=0.0)
    max_candidates: int = Field(default=50, gt=0, le=50)

    # Weights for combining sub-scores into one confidence.
    similarity_weight_title: float = 0.4
    similarity_weight_artist: float = 0.2
    similarity_weight_location: float = 0.4
    similarity_weight_tags: float = 0.0

    # === Batching ===
    batch_delay_seconds: float = Field(default=0.0, ge=0.0)

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    def similarity_weights(self) -> SimilarityWeights:
        """Bundle the four weight fields into a SimilarityWeights model."""
        return SimilarityWeights(
            title=self.similarity_weight_title,
            artist=self.similarity_weight_artist,
            location=self.similarity_weight_location,
            tags=self.similarity_weight_tags,
        )
