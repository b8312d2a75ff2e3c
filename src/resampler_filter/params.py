#!/usr/bin/env python3
"""
Filter parameter policy.

The table shape is fixed by three numbers: zero crossings per side, bits per
sample (which sets the angular resolution) and the target stopband
attenuation. Everything else is derived from them.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any

from scipy.optimize import brentq

log = logging.getLogger(__name__)

# Above this the I0 series runs into its precision/overflow ceiling.
MAX_SAFE_ATTENUATION_DB = 120.0


class ConfigurationError(ValueError):
    """Raised for parameters the generator cannot produce a valid table for."""


def kaiser_beta(stopband_attenuation_db: float) -> float:
    """
    Kaiser shape parameter for a target stopband attenuation.

    Uses beta = 0.1102 * (A - 8.7), which only holds for A > 50 dB.
    """
    if not stopband_attenuation_db > 50.0:
        raise ConfigurationError(
            f"Stopband attenuation {stopband_attenuation_db} dB is outside the "
            "range of the Kaiser beta formula (must be > 50 dB)"
        )
    if stopband_attenuation_db > MAX_SAFE_ATTENUATION_DB:
        log.warning("Attenuation %.1f dB exceeds %.0f dB; the I0 series may lose accuracy",
                    stopband_attenuation_db, MAX_SAFE_ATTENUATION_DB)
    return 0.1102 * (stopband_attenuation_db - 8.7)


def _kaiser_beta_mid(attenuation_db: float) -> float:
    # Kaiser's empirical formula for 21 <= A <= 50 dB
    return 0.5842 * (attenuation_db - 21) ** 0.4 + 0.07886 * (attenuation_db - 21)


def kaiser_beta_to_attenuation(beta: float) -> float:
    """
    Convert Kaiser β back to the stopband attenuation it was designed for.

    Inverts the same empirical formulas ``scipy.signal.kaiser_beta`` uses,
    numerically in the 21-50 dB range.
    """
    if beta > 0.1102 * (50.0 - 8.7):
        return beta / 0.1102 + 8.7
    elif beta >= _kaiser_beta_mid(50.0):
        return 50.0
    elif beta > 0:
        return brentq(lambda a: _kaiser_beta_mid(a) - beta, 21.0, 50.0)
    else:
        return 21.0


@dataclass(frozen=True)
class FilterParameters:
    """Shape of the generated resampler filter."""
    zero_crossings: int = 5
    bits_per_sample: int = 16
    stopband_attenuation_db: float = 80.0

    def __post_init__(self):
        if self.zero_crossings < 1:
            raise ConfigurationError(
                f"zero_crossings must be >= 1, got {self.zero_crossings}")
        if self.bits_per_sample < 0:
            raise ConfigurationError(
                f"bits_per_sample must be >= 0, got {self.bits_per_sample}")
        kaiser_beta(self.stopband_attenuation_db)

    @property
    def samples_per_zero_crossing(self) -> int:
        return 1 << ((self.bits_per_sample // 2) + 1)

    @property
    def filter_size(self) -> int:
        return self.samples_per_zero_crossing * self.zero_crossings + 1

    @property
    def beta(self) -> float:
        return kaiser_beta(self.stopband_attenuation_db)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'FilterParameters':
        return cls(**d)
