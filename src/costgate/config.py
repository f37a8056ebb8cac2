"""Configuration loader — reads optional YAML config and merges with defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

CONFIG_PATH = Path("~/.config/costgate/config.yaml")

DEFAULTS = {
    "encoding": "cl100k_base",
    "pricing": {},
    "extra_ignored_dirs": [],
    "extra_ignored_extensions": [],
    "risk_phrases": None,
    "log_level": "WARNING",
}


@dataclass
class CostgateConfig:
    encoding: str
    pricing: dict[str, float] = field(default_factory=dict)
    extra_ignored_dirs: list[str] = field(default_factory=list)
    extra_ignored_extensions: list[str] = field(default_factory=list)
    risk_phrases: list[str] | None = None
    log_level: str = "WARNING"


def _as_str_list(value: object) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return []


def _as_pricing(value: object) -> dict[str, float]:
    if not isinstance(value, dict):
        return {}
    pricing: dict[str, float] = {}
    for key, rate in value.items():
        try:
            pricing[str(key)] = float(rate)
        except (TypeError, ValueError):
            continue
    return pricing


def load_config(config_path: Path | None = None) -> CostgateConfig:
    """Load config from ~/.config/costgate/config.yaml, merged with defaults.

    If no config file exists, return defaults (don't error). Extension
    entries are normalized to lowercase with a leading dot.
    """
    if config_path is None:
        config_path = CONFIG_PATH

    config_path = config_path.expanduser()

    merged = dict(DEFAULTS)

    if config_path.is_file():
        with open(config_path) as f:
            user_config = yaml.safe_load(f)
        if isinstance(user_config, dict):
            for key in DEFAULTS:
                if key in user_config:
                    merged[key] = user_config[key]

    extensions = [
        ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        for ext in _as_str_list(merged["extra_ignored_extensions"])
    ]
    risk_phrases = merged["risk_phrases"]

    return CostgateConfig(
        encoding=str(merged["encoding"] or DEFAULTS["encoding"]),
        pricing=_as_pricing(merged["pricing"]),
        extra_ignored_dirs=_as_str_list(merged["extra_ignored_dirs"]),
        extra_ignored_extensions=extensions,
        risk_phrases=None if risk_phrases is None else _as_str_list(risk_phrases),
        log_level=str(merged["log_level"]).upper(),
    )
