from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "PharmaChain Access API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Dashboard Frontend Domains
    # -------------------------------------------------
    FRONTEND_DOMAINS: List[str] = [
        "http://localhost:8080",
        "http://localhost:5173",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # -------------------------------------------------
    # Remote authorization (Supabase RPC) transport
    # -------------------------------------------------
    RPC_TIMEOUT_SECONDS: float = Field(10.0, description="Per-attempt timeout for authorization RPCs")
    RPC_MAX_ATTEMPTS: int = Field(2, ge=1, description="Total attempts per authorization RPC (first try included)")
    RPC_RETRY_BACKOFF_SECONDS: float = Field(0.25, ge=0, description="Base delay between attempts, doubled each retry")

    # Audit writes are best-effort; they never block a permission decision
    AUDIT_LOG_MAX_ATTEMPTS: int = Field(3, ge=1)

    # -------------------------------------------------
    # Role guards
    # -------------------------------------------------
    # "enforcing"  -> reject with 403
    # "audit_only" -> log a warning and let the request through
    ROLE_GUARD_MODE: str = "enforcing"

    # -------------------------------------------------
    # Response cache
    # -------------------------------------------------
    CACHE_TTL_SECONDS: int = 300

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = [d.rstrip("/") for d in settings.FRONTEND_DOMAINS]

# remove duplicates
settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
