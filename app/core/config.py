"""
Application configuration
Reads settings from environment variables
"""
from typing import Dict, List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Skincare Recommendation Service"
    DEBUG: bool = False
    PORT: int = 8080
    ENABLE_CRON: bool = False

    # Database
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "root"
    DB_NAME: str = "skincare"

    # Content-based matching
    ML_INGREDIENT_WEIGHTS: Dict[str, float] = {
        "hyaluronic acid": 0.9,
        "retinol": 0.8,
        "niacinamide": 0.7,
        "salicylic acid": 0.8,
        "glycolic acid": 0.7,
        "ceramides": 0.6,
    }
    ML_SKIN_TYPES: List[str] = ["oily", "dry", "combination", "normal", "sensitive"]
    ML_SKIN_CONCERNS: List[str] = [
        "acne", "aging", "dryness", "sensitivity", "hyperpigmentation", "redness"
    ]
    ML_PRICE_TIER_LOW: float = 20.0
    ML_PRICE_TIER_MEDIUM: float = 40.0
    ML_PRICE_TIER_HIGH: float = 60.0
    ML_DEFAULT_AVG_PRICE: float = 30.0
    ML_DEFAULT_AVG_RATING: float = 4.0

    # Collaborative filtering
    ML_VIEW_WEIGHT: float = 1.0
    ML_TIME_THRESHOLD: float = 30.0  # seconds
    ML_TIME_WEIGHT: float = 1.0
    ML_PURCHASE_WEIGHT: float = 3.0
    ML_FAVORITE_WEIGHT: float = 2.0
    ML_REVIEW_WEIGHT: float = 1.0
    ML_MAX_RATING: float = 5.0
    ML_MIN_COMMON_ITEMS: int = 2
    ML_PROFILE_SIMILARITY_WEIGHT: float = 0.4
    ML_INTERACTION_SIMILARITY_WEIGHT: float = 0.6

    # Hybrid blending
    ML_WEIGHT_CONTENT: float = 0.6
    ML_WEIGHT_COLLABORATIVE: float = 0.4
    ML_WEIGHT_POPULARITY: float = 0.1
    ML_WEIGHT_DIVERSITY: float = 0.1
    ML_MAX_WEIGHT: float = 0.8
    ML_MIN_WEIGHT: float = 0.2
    ML_WEIGHT_STEP: float = 0.1
    ML_HYBRID_DEFAULT_LIMIT: int = 10
    ML_HYBRID_MULTIPLIER: int = 2
    ML_SAME_BRAND_PENALTY: float = 0.8
    ML_SIMILAR_CONCERNS_PENALTY: float = 0.9
    ML_HIGH_OVERLAP_THRESHOLD: float = 0.8

    # General
    ML_MAX_RECOMMENDATIONS: int = 50
    RECOMMENDATION_TIMEOUT_SECONDS: float = 10.0
    DATA_CACHE_TTL: int = 60  # seconds
    EVALUATION_MIN_INTERACTIONS: int = 5
    EVALUATION_LIMIT: int = 10
    EVALUATION_HOLDOUT: int = 1  # most recently relevant products hidden per user

    @property
    def DATABASE_URL(self) -> str:
        """Construct database URL"""
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()
