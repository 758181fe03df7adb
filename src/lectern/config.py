"""Runtime configuration for package ingestion."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import Mapping

from lectern.ingestion.markup import BlockStrategy

DEFAULT_BLOCK_STRATEGY = BlockStrategy.SCAN
DEFAULT_LOG_LEVEL = "INFO"
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True, slots=True)
class IngestionSettings:
    """Validated ingestion settings."""

    block_strategy: BlockStrategy = DEFAULT_BLOCK_STRATEGY
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "IngestionSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        strategy_raw = source.get("LECTERN_BLOCK_STRATEGY", DEFAULT_BLOCK_STRATEGY.value).strip().lower()
        try:
            strategy = BlockStrategy(strategy_raw)
        except ValueError:
            choices = ", ".join(item.value for item in BlockStrategy)
            raise ValueError(f"LECTERN_BLOCK_STRATEGY must be one of: {choices}") from None

        log_level = source.get("LECTERN_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"LECTERN_LOG_LEVEL must be one of: {', '.join(_LOG_LEVELS)}")

        return cls(block_strategy=strategy, log_level=log_level)
