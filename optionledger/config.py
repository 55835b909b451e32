"""
Runtime configuration for OptionLedger.

Settings come from the environment (optionally a .env file loaded with
python-dotenv). Only logging is configurable; engine constants such as the
contract multiplier and leg bounds live in strategy_engine.constants.
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from loguru import logger


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_rotation: str = "1 day"
    log_retention: str = "7 days"


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Read Settings from the environment.

    Args:
        env_file: Optional path to a .env file. When None, python-dotenv
                  searches upward from the working directory.
    """
    load_dotenv(env_file)

    return Settings(
        log_level=os.getenv("OPTIONLEDGER_LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("OPTIONLEDGER_LOG_FILE") or None,
        log_rotation=os.getenv("OPTIONLEDGER_LOG_ROTATION", "1 day"),
        log_retention=os.getenv("OPTIONLEDGER_LOG_RETENTION", "7 days"),
    )


def configure_logging(settings: Optional[Settings] = None) -> Settings:
    """Replace loguru's default sink with the configured ones."""
    if settings is None:
        settings = load_settings()

    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)

    if settings.log_file:
        logger.add(
            settings.log_file,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            level=settings.log_level,
        )

    logger.debug(f"Logging configured at {settings.log_level}")
    return settings
