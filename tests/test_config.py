from __future__ import annotations

import logging

import pytest

from lectern.config import DEFAULT_LOG_LEVEL, IngestionSettings
from lectern.ingestion.markup import BlockStrategy


def test_settings_defaults_when_env_is_empty() -> None:
    settings = IngestionSettings.from_env({})

    assert settings.block_strategy is BlockStrategy.SCAN
    assert settings.log_level == DEFAULT_LOG_LEVEL
    assert settings.log_level_number == logging.INFO


def test_settings_read_and_normalize_env_values() -> None:
    settings = IngestionSettings.from_env({"LECTERN_BLOCK_STRATEGY": " Styled ", "LECTERN_LOG_LEVEL": "debug"})

    assert settings.block_strategy is BlockStrategy.STYLED
    assert settings.log_level == "DEBUG"
    assert settings.log_level_number == logging.DEBUG


def test_settings_reject_invalid_values() -> None:
    with pytest.raises(ValueError, match="LECTERN_BLOCK_STRATEGY"):
        IngestionSettings.from_env({"LECTERN_BLOCK_STRATEGY": "regex"})

    with pytest.raises(ValueError, match="LECTERN_LOG_LEVEL"):
        IngestionSettings.from_env({"LECTERN_LOG_LEVEL": "chatty"})
