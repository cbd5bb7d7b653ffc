"""
Configuration for bignum contexts.

A config can be built directly, from a dict, or from a YAML file:

    config = load_config("configs/default.yaml")
    ctx = BnContext(config)
"""

import warnings
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .errors import ArgumentError


@dataclass
class BnConfig:
    """Tunables for the engine, the prime search and tracing."""
    word_bits: int = 64                 # Width of a scalar fast-path word
    small_prime_limit: int = 2048       # Sieve bound for the small-prime table
    prime_checks: Optional[int] = None  # Miller-Rabin rounds (None = by size)
    random_bits: int = 32               # Default bits for random()
    prime_bits: int = 32                # Default bits for prime()
    prime_search_window: int = 1 << 16  # Odd offsets tried per random start
    trace_dir: Optional[str] = None     # Write ops.jsonl here when set

    def __post_init__(self):
        if self.word_bits < 8:
            raise ArgumentError("config", f"word_bits must be >= 8, got {self.word_bits}")
        if self.small_prime_limit < 3:
            raise ArgumentError(
                "config", f"small_prime_limit must be >= 3, got {self.small_prime_limit}"
            )
        if self.prime_checks is not None and self.prime_checks < 1:
            raise ArgumentError(
                "config", f"prime_checks must be positive, got {self.prime_checks}"
            )
        if self.prime_search_window < 2:
            raise ArgumentError(
                "config", f"prime_search_window must be >= 2, got {self.prime_search_window}"
            )

    @property
    def word_max(self) -> int:
        return (1 << self.word_bits) - 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "BnConfig":
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            warnings.warn(f"Ignoring unknown config keys: {unknown}", RuntimeWarning)
        return cls(**{k: v for k, v in data.items() if k in known})


def load_config(config_path: Union[str, Path]) -> BnConfig:
    """Load a BnConfig from YAML. The ``bn:`` section is used when present."""
    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ArgumentError("config", f"{config_path} does not contain a mapping")
    return BnConfig.from_dict(data.get("bn", data))
