# core/config_validator.py

from typing import List
from core.config import settings
from core.logging_config import logger
from models.enums import GuardMode


def validate_required_config() -> List[str]:
    """
    Validate that all required environment variables are set.
    Returns list of missing required variables.
    """
    missing = []

    # Required for core functionality
    if not settings.SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        missing.append("SUPABASE_SERVICE_ROLE_KEY")

    return missing


def validate_optional_config() -> List[str]:
    """
    Validate optional but recommended configuration.
    Returns list of warnings.
    """
    warnings = []

    if not settings.SUPABASE_ANON_KEY:
        warnings.append("SUPABASE_ANON_KEY (optional but recommended)")

    if settings.ROLE_GUARD_MODE not in GuardMode.list():
        warnings.append(
            f"ROLE_GUARD_MODE={settings.ROLE_GUARD_MODE!r} is not one of "
            f"{GuardMode.list()}; falling back to 'enforcing'"
        )
    elif settings.ROLE_GUARD_MODE == GuardMode.audit_only:
        warnings.append("ROLE_GUARD_MODE is 'audit_only': role guards log but do not block")

    if settings.RPC_TIMEOUT_SECONDS <= 0:
        warnings.append("RPC_TIMEOUT_SECONDS must be positive; every authorization check will be 'unknown'")

    # Worst case a request waits on one authorization RPC
    worst_case = settings.RPC_TIMEOUT_SECONDS * settings.RPC_MAX_ATTEMPTS + sum(
        settings.RPC_RETRY_BACKOFF_SECONDS * (2 ** n) for n in range(settings.RPC_MAX_ATTEMPTS - 1)
    )
    if worst_case > 30:
        warnings.append(
            f"Authorization RPCs can block a request for {worst_case:.1f}s "
            "(RPC_TIMEOUT_SECONDS x RPC_MAX_ATTEMPTS + backoff)"
        )

    return warnings


def validate_config_on_startup():
    """
    Validate configuration on application startup.
    Raises RuntimeError if critical config is missing (except under ENV=test).
    Logs warnings for optional config.
    """
    missing_required = validate_required_config()
    missing_optional = validate_optional_config()

    if missing_required:
        error_msg = f"Missing required environment variables: {', '.join(missing_required)}"
        logger.error(error_msg)
        if settings.ENV != "test":
            raise RuntimeError(error_msg)

    for warning in missing_optional:
        logger.warning(f"Configuration warning: {warning}")

    logger.info("Configuration validation passed")
