"""Host backends (display, input, audio) selectable by name."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from ..config import BACKEND_CHOICES
from .base import AudioAdapter, DisplayAdapter, Host, InputAdapter
from .headless import (
    HeadlessDisplay,
    RecordingAudio,
    ScriptedInput,
    create_headless_host,
)


BACKENDS = BACKEND_CHOICES


def create_host(
    backend: str,
    *,
    window_width: int = 640,
    window_height: int = 320,
    frames_dir: Optional[Union[str, Path]] = None,
    script: Sequence[Iterable[int]] = (),
    quit_after: Optional[int] = None,
) -> Host:
    """Build the host for ``backend``; raises HostAdapterError on init failure."""
    if backend == "headless":
        return create_headless_host(
            frames_dir=frames_dir, script=script, quit_after=quit_after
        )
    if backend == "pygame":
        # Imported here so headless runs never open a display connection.
        from .pygame_backend import create_pygame_host

        return create_pygame_host(window_width, window_height)
    raise ValueError(f"Unknown backend {backend!r} (expected one of {BACKENDS})")


__all__ = [
    "BACKENDS",
    "create_host",
    "Host",
    "DisplayAdapter",
    "InputAdapter",
    "AudioAdapter",
    "HeadlessDisplay",
    "ScriptedInput",
    "RecordingAudio",
    "create_headless_host",
]
