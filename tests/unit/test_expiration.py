"""Expiration policy boundaries."""

import json
from datetime import timedelta

import pytest

from secure_qr_validator.config import ValidatorConfig
from secure_qr_validator.envelope import parse_envelope
from secure_qr_validator.errors import GateFailure, ValidationErrorKind
from secure_qr_validator.expiration import ExpirationPolicy
from tests.unit.helpers import FIXED_NOW, epoch_ms

_WINDOW = timedelta(minutes=5)
_WINDOW_MS = 300_000


def _envelope(timestamp_ms: int):
    return parse_envelope(
        json.dumps({"data": {}, "timestamp": timestamp_ms, "id": "e", "version": 1})
    )


def _policy(enabled: bool = True) -> ExpirationPolicy:
    config = ValidatorConfig(validity_duration=_WINDOW, enable_expiration_check=enabled)
    return ExpirationPolicy(config, clock=lambda: FIXED_NOW)


@pytest.mark.unit
@pytest.mark.parametrize("offset_ms", [_WINDOW_MS - 1, _WINDOW_MS, 0, -60_000])
def test_within_window_passes(offset_ms):
    """Age up to and including the window passes (future stamps too)."""
    _policy().check(_envelope(epoch_ms(FIXED_NOW) - offset_ms))


@pytest.mark.unit
def test_one_millisecond_past_window_expires():
    """now - validity - 1ms is expired."""
    envelope = _envelope(epoch_ms(FIXED_NOW) - _WINDOW_MS - 1)
    with pytest.raises(GateFailure, match="expired") as info:
        _policy().check(envelope)
    assert info.value.kind == ValidationErrorKind.EXPIRED
    assert info.value.details == {"age_ms": _WINDOW_MS + 1, "validity_ms": _WINDOW_MS}


@pytest.mark.unit
def test_age_uses_injected_clock():
    """Age is measured against the injected clock."""
    envelope = _envelope(epoch_ms(FIXED_NOW) - 1_500)
    assert _policy().age(envelope) == timedelta(milliseconds=1_500)


@pytest.mark.unit
def test_disabled_policy_never_expires():
    """Expiration check disabled: even ancient payloads pass."""
    _policy(enabled=False).check(_envelope(0))
