"""Tests for settings parsing."""

import pytest
from pydantic import ValidationError

from nutrition_sync.config import Settings, parse_data_types


def test_parse_data_types() -> None:
    assert parse_data_types(" Foundation, ,Branded ") == ["Foundation", "Branded"]
    assert parse_data_types(None) == []


def test_settings_reject_non_positive_density() -> None:
    with pytest.raises(ValidationError):
        Settings(fdc_api_key="a", notion_api_key="b", default_density=0)
