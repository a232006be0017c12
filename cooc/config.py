from __future__ import annotations

import dataclasses
import json
import math
from pathlib import Path
from typing import Optional

from cooc.errors import ConfigError

SAMPLING_POLICIES = ("min", "product")


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclasses.dataclass(frozen=True)
class AnalyzeConfig:
    max_row_count: float = 500
    max_column_count: float = 500
    max_related: int = 100
    sampling_policy: str = "min"  # or "product"
    positive_only: bool = True  # drop scores <= 0 before top-K truncation
    seed: Optional[int] = None
    max_provenance: Optional[int] = None  # None keeps every origin row
    scratch_dir: Optional[str] = None

    def __post_init__(self):
        for name in ("max_row_count", "max_column_count"):
            cap = getattr(self, name)
            if not _is_number(cap) or math.isnan(cap) or cap <= 0:
                raise ConfigError(f"{name} must be a positive number, got {cap!r}")
        if not _is_int(self.max_related) or self.max_related < 0:
            raise ConfigError(f"max_related must be an integer >= 0, got {self.max_related!r}")
        if self.sampling_policy not in SAMPLING_POLICIES:
            raise ConfigError(
                f"unknown sampling policy {self.sampling_policy!r}; expected one of {', '.join(SAMPLING_POLICIES)}"
            )
        if self.max_provenance is not None and (not _is_int(self.max_provenance) or self.max_provenance < 0):
            raise ConfigError(f"max_provenance must be an integer >= 0, got {self.max_provenance!r}")
        if self.seed is not None and not _is_int(self.seed):
            raise ConfigError(f"seed must be an integer, got {self.seed!r}")

    def to_json(self) -> str:
        return json.dumps(dataclasses.asdict(self), sort_keys=True, separators=(",", ":"))


def load_config(path: str | Path | None) -> AnalyzeConfig:
    if not path:
        return AnalyzeConfig()
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConfigError(f"config file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must hold a JSON object")
    # allow partial configs
    base = dataclasses.asdict(AnalyzeConfig())
    base.update({k: data[k] for k in data.keys() if k in base})
    return AnalyzeConfig(**base)
