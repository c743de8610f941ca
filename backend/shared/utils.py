import time
from pathlib import Path

from shared.config import config
from shared.logging_utils import setup_logging

__all__ = ["config", "setup_logging", "ensure_directory", "epoch_millis"]


def ensure_directory(path: str) -> None:
    """Ensure directory exists, create if not"""
    Path(path).mkdir(parents=True, exist_ok=True)


def epoch_millis() -> int:
    """Current wall-clock time in integer milliseconds (slide id timestamps)."""
    return int(time.time() * 1000)
