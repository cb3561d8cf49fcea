"""
Configuration settings for the PlanVision generation backend
"""
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "PlanVision Generation Backend"
    VERSION: str = "0.1.0"

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./planvision.db"

    # CORS Configuration
    BACKEND_CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]

    # Logging
    LOG_LEVEL: str = "INFO"

    # Generated image storage
    STORAGE_DIR: str = "./storage/generations"
    STORAGE_PUBLIC_URL: str = "http://localhost:8000/static/generations"

    # AI Provider Configuration
    AI_PROVIDER: str = "gemini"
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_IMAGE_MODEL: str = "gemini-2.5-flash-image"
    GEMINI_TEXT_MODEL: str = "gemini-2.5-flash"
    GEMINI_TIMEOUT: int = 120

    # Reference image download
    REFERENCE_FETCH_TIMEOUT: int = 30

    # Rate limit backoff for generative calls (seconds)
    RETRY_MAX_RETRIES: int = 5
    RETRY_INITIAL_DELAY: float = 10.0
    RETRY_MAX_DELAY: float = 120.0

    # Client polling
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    POLL_INTERVAL_SECONDS: float = 2.0
    POLL_MAX_ATTEMPTS: int = 30

    class Config:
        case_sensitive = True
        env_file = ".env"
        extra = "ignore"


settings = Settings()
