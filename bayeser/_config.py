"""Sampler configuration shared by every model-development function."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace

ENV_PREFIX = "BAYESER_"


@dataclass(frozen=True)
class SamplerConfig:
    """NUTS settings passed through to ``pymc.sample``.

    ``chains * draws`` posterior draws are kept after ``tune`` warm-up
    iterations per chain.
    """

    chains: int = 4
    draws: int = 1000
    tune: int = 1000
    target_accept: float = 0.9
    cores: int = 1
    random_seed: int | None = None
    progressbar: bool = False
    rhat_threshold: float = 1.01

    def __post_init__(self) -> None:
        if self.chains < 1:
            raise ValueError(f"chains must be >= 1, got {self.chains}")
        if self.draws < 1:
            raise ValueError(f"draws must be >= 1, got {self.draws}")
        if self.tune < 0:
            raise ValueError(f"tune must be >= 0, got {self.tune}")
        if not (0.0 < self.target_accept < 1.0):
            raise ValueError(f"target_accept must be in (0, 1), got {self.target_accept}")
        if self.cores < 1:
            raise ValueError(f"cores must be >= 1, got {self.cores}")

    @property
    def n_draws(self) -> int:
        """Total number of posterior draws across chains."""
        return self.chains * self.draws

    def sample_kwargs(self) -> dict:
        """Keyword arguments for ``pymc.sample``."""
        return {
            "draws": self.draws,
            "tune": self.tune,
            "chains": self.chains,
            "cores": self.cores,
            "target_accept": self.target_accept,
            "random_seed": self.random_seed,
            "progressbar": self.progressbar,
        }

    def with_overrides(self, **kwargs) -> SamplerConfig:
        return replace(self, **kwargs)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        prefix: str = ENV_PREFIX,
    ) -> SamplerConfig:
        """Build a config from ``BAYESER_``-prefixed environment variables.

        ``BAYESER_CHAINS=2 BAYESER_DRAWS=500`` overrides ``chains`` and
        ``draws``; unset fields keep their defaults.
        """
        if environ is None:
            environ = os.environ

        overrides: dict[str, object] = {}
        for f in fields(cls):
            raw = environ.get(prefix + f.name.upper())
            if raw is None or raw == "":
                continue
            overrides[f.name] = _coerce(f.name, raw)
        return cls(**overrides)


_INT_FIELDS = {"chains", "draws", "tune", "cores", "random_seed"}
_FLOAT_FIELDS = {"target_accept", "rhat_threshold"}


def _coerce(name: str, raw: str) -> object:
    try:
        if name in _INT_FIELDS:
            return int(raw)
        if name in _FLOAT_FIELDS:
            return float(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from None
    if name == "progressbar":
        return raw.strip().lower() in ("1", "true", "yes", "on")
    return raw
