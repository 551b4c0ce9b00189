"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import datetime

import pytest

from secure_qr_validator.config import ValidatorConfig
from tests.unit.helpers import FIXED_NOW, TEST_KEY


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock frozen at FIXED_NOW (the default issue time of test payloads)."""
    return lambda: FIXED_NOW


@pytest.fixture
def secure_config() -> ValidatorConfig:
    """Encryption + signature + expiration, 5 minute window."""
    return ValidatorConfig(
        secret_key=TEST_KEY,
        enable_encryption=True,
        enable_signature=True,
        enable_expiration_check=True,
    )
