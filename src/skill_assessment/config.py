"""Environment configuration for the skill assessment tool."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("skill_assessment.config")


def _mask_api_key(key: str) -> str:
    """Mask an API key for debug logs, keeping only its first and last 4 chars."""
    if not key or len(key) <= 8:
        return "***"
    return f"{key[:4]}...{key[-4:]}"


def get_base_url() -> str | None:
    """Get the endpoint used for skill-gap analysis and practice questions.

    LLM_BASE_URL points at an OpenAI-compatible server; None means OpenAI.
    """
    value = os.getenv("LLM_BASE_URL") or None
    logger.debug("base_url=%s", value)
    return value


def get_api_key() -> str:
    """Get API key. A local OpenAI-compatible server gets a placeholder."""
    key = os.getenv("OPENAI_API_KEY")
    if key:
        logger.debug("api_key=%s", _mask_api_key(key))
        return key
    if get_base_url():
        logger.debug("api_key=local (placeholder)")
        return "local"  # the SDK rejects an empty key
    logger.debug("api_key=(none)")
    return ""


def is_ai_configured() -> bool:
    """True when an API key or a local endpoint is available."""
    return bool(get_api_key() or get_base_url())


def get_model() -> str:
    """Get the model for AI analysis: LLM_MODEL, then OPENAI_MODEL, then a default."""
    model = os.getenv("LLM_MODEL") or os.getenv("OPENAI_MODEL")
    if model:
        logger.debug("model=%s", model)
        return model
    value = "local" if get_base_url() else "gpt-4o"
    logger.debug("model=%s (default)", value)
    return value


def get_temperature() -> float:
    """Get the sampling temperature for analysis and question generation."""
    value = float(os.getenv("OPENAI_TEMPERATURE", "0.3"))
    logger.debug("temperature=%s", value)
    return value


def get_catalog_path() -> Path | None:
    """Get the assessment catalog path from ASSESSMENT_CONFIG, if set."""
    value = os.getenv("ASSESSMENT_CONFIG")
    logger.debug("catalog_path=%s", value)
    return Path(value) if value else None
