"""Run configuration for the CHIP-8 VM."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

BACKEND_CHOICES = ("pygame", "headless")

ENV_DEBUG = "CHIP8VM_DEBUG"
ENV_BACKEND = "CHIP8VM_BACKEND"
ENV_HERTZ = "CHIP8VM_HERTZ"


def _env_flag(raw: Optional[str], default: bool = False) -> bool:
    if raw is None:
        return default
    normalized = raw.strip().casefold()
    return normalized not in {"0", "false", "off", ""}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _read_json_object(path: Union[str, Path]) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must hold a JSON object")
    return data


@dataclass(frozen=True)
class VMConfig:
    """Everything needed to start a ROM session."""

    rom: Optional[str] = None
    debug: bool = False
    backend: str = "pygame"
    hertz: float = 500.0
    window_width: int = 640
    window_height: int = 320
    stack_limit: Optional[int] = 16
    timer_hz: int = 60
    max_catchup_ms: int = 3000

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if self.rom is not None and not isinstance(self.rom, str):
            raise ValueError(f"Invalid rom path: {self.rom!r}")
        if not isinstance(self.debug, bool):
            raise ValueError(f"Invalid debug flag: {self.debug!r}")
        if not _is_number(self.hertz):
            raise ValueError(f"Invalid hertz value: {self.hertz!r}")
        for name in ("window_width", "window_height", "timer_hz", "max_catchup_ms"):
            if not _is_int(getattr(self, name)):
                raise ValueError(f"Invalid {name} value: {getattr(self, name)!r}")
        if self.stack_limit is not None and not _is_int(self.stack_limit):
            raise ValueError(f"Invalid stack limit: {self.stack_limit!r}")

        if self.backend not in BACKEND_CHOICES:
            raise ValueError(
                f"Invalid backend {self.backend!r} (expected one of {BACKEND_CHOICES})"
            )
        if not 0 < self.hertz < 100_000:
            raise ValueError(f"Invalid hertz value: {self.hertz}")
        if not 0 < self.window_width < 10_000:
            raise ValueError(f"Invalid width value: {self.window_width}")
        if not 0 < self.window_height < 10_000:
            raise ValueError(f"Invalid height value: {self.window_height}")
        if self.stack_limit is not None and self.stack_limit < 1:
            raise ValueError(f"Invalid stack limit: {self.stack_limit}")
        if self.timer_hz <= 0:
            raise ValueError(f"Invalid timer frequency: {self.timer_hz}")
        if self.max_catchup_ms <= 0:
            raise ValueError(f"Invalid catch-up cap: {self.max_catchup_ms}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VMConfig":
        cls._check_keys(data)
        return cls(**dict(data))

    @classmethod
    def _check_keys(cls, data: Mapping[str, Any]) -> None:
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "VMConfig":
        """Load configuration from JSON file."""
        return cls.from_dict(_read_json_object(path))

    @classmethod
    def from_env(
        cls,
        base: Optional["VMConfig"] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "VMConfig":
        """Apply ``CHIP8VM_*`` environment overrides on top of ``base``."""
        env = os.environ if environ is None else environ
        config = base if base is not None else cls()
        overrides: Dict[str, Any] = {}
        if ENV_DEBUG in env:
            overrides["debug"] = _env_flag(env[ENV_DEBUG])
        if env.get(ENV_BACKEND):
            overrides["backend"] = env[ENV_BACKEND].strip().lower()
        if env.get(ENV_HERTZ):
            try:
                overrides["hertz"] = float(env[ENV_HERTZ])
            except ValueError as exc:
                raise ValueError(f"Invalid {ENV_HERTZ} value: {env[ENV_HERTZ]!r}") from exc
        return replace(config, **overrides)

    def merged_with_file(self, path: Union[str, Path]) -> "VMConfig":
        """Return a copy with the keys present in the JSON file applied."""
        data = _read_json_object(path)
        self._check_keys(data)
        return replace(self, **data)

    def with_overrides(self, **overrides: Any) -> "VMConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


__all__ = ["VMConfig", "BACKEND_CHOICES"]
