"""
Configuration Management

Simple utility for loading and validating environment configuration.
"""

import logging
from typing import Optional
from dotenv import load_dotenv

from config import Config


def load_config(env_path: Optional[str] = None) -> bool:
    """
    Load environment configuration from .env file.

    Args:
        env_path: Optional path to .env file. If None, searches in current directory.

    Returns:
        bool: True if .env file was found and loaded, False otherwise
    """
    if env_path:
        return load_dotenv(env_path)
    return load_dotenv()


def get_fallback_yields() -> dict:
    """
    Get the fallback yield ratios (percent of raw material) per product stream.

    Returns:
        dict: {'sebo': float, 'fco': float, 'farinheta': float}
    """
    return {
        "sebo": Config.YIELD_FALLBACK_SEBO,
        "fco": Config.YIELD_FALLBACK_FCO,
        "farinheta": Config.YIELD_FALLBACK_FARINHETA,
    }


def get_engine_config() -> dict:
    """
    Get engine configuration settings.

    Returns:
        dict: Snapshot of the settings used by the process calculations
    """
    return {
        "timezone": Config.TIMEZONE,
        "fallback_yields": get_fallback_yields(),
        "bag_weight_small_kg": Config.BAG_WEIGHT_SMALL_KG,
        "bag_weight_large_kg": Config.BAG_WEIGHT_LARGE_KG,
        "bags_per_hour": Config.BAGS_PER_HOUR,
        "shift_hours": Config.SHIFT_HOURS,
        "target_flow_rate_ton_per_hour": Config.TARGET_FLOW_RATE_TON_PER_HOUR,
    }


def validate_config() -> list:
    """
    Validate all numeric configuration.

    Returns:
        list: List of configuration problems (empty if all valid)
    """
    missing = []

    try:
        Config.validate()
    except ValueError as e:
        missing.append(f"ENGINE: {str(e)}")

    return missing


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for scripts and notebooks using the engine.

    Args:
        level: Log level name. Defaults to Config.LOG_LEVEL.
    """
    logging.basicConfig(
        level=getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
