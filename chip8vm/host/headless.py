"""Window-less backend: records frames, replays scripted input, logs beeps."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..display import FrameBuffer
from ..errors import HostAdapterError
from ..keypad import InputState
from .base import AudioAdapter, DisplayAdapter, Host, InputAdapter

logger = logging.getLogger(__name__)


class HeadlessDisplay(DisplayAdapter):
    """Keeps the last presented frame and optionally dumps changed frames as PNG."""

    def __init__(
        self, frames_dir: Optional[Union[str, Path]] = None, zoom: int = 4
    ) -> None:
        self.frames_dir = Path(frames_dir) if frames_dir is not None else None
        self.zoom = zoom
        self.present_count = 0
        self.frames_written = 0
        self.last_frame: Optional[np.ndarray] = None
        if self.frames_dir is not None:
            try:
                self.frames_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise HostAdapterError(
                    f"cannot create frames directory {self.frames_dir}: {exc}"
                ) from exc

    def present(self, frame: FrameBuffer) -> None:
        self.present_count += 1
        if not frame.dirty and self.last_frame is not None:
            return
        self.last_frame = frame.pixels
        frame.dirty = False
        if self.frames_dir is None:
            return
        path = self.frames_dir / f"frame_{self.frames_written:06d}.png"
        try:
            frame.save_png(str(path), zoom=self.zoom)
        except OSError as exc:
            raise HostAdapterError(f"cannot write frame {path}: {exc}") from exc
        self.frames_written += 1


class ScriptedInput(InputAdapter):
    """Replays a list of pressed-key sets, one entry per poll.

    After the script runs out the last state is held. ``quit_after`` stops
    the scheduler once that many polls have happened.
    """

    def __init__(
        self,
        script: Sequence[Iterable[int]] = (),
        *,
        quit_after: Optional[int] = None,
    ) -> None:
        self.script: List[Tuple[int, ...]] = [tuple(keys) for keys in script]
        self.quit_after = quit_after
        self.poll_count = 0

    def poll(self, keys: InputState) -> bool:
        if self.quit_after is not None and self.poll_count >= self.quit_after:
            return False
        if self.script:
            index = min(self.poll_count, len(self.script) - 1)
            keys.update(self.script[index])
        self.poll_count += 1
        return True


class RecordingAudio(AudioAdapter):
    """Silent audio adapter remembering beep transitions."""

    def __init__(self) -> None:
        self.events: List[str] = []
        self.playing = False

    def start_beep(self) -> None:
        self.playing = True
        self.events.append("start")

    def stop_beep(self) -> None:
        self.playing = False
        self.events.append("stop")


def create_headless_host(
    *,
    frames_dir: Optional[Union[str, Path]] = None,
    script: Sequence[Iterable[int]] = (),
    quit_after: Optional[int] = None,
) -> Host:
    logger.debug("Creating headless host (frames_dir=%s)", frames_dir)
    return Host(
        name="headless",
        display=HeadlessDisplay(frames_dir),
        input=ScriptedInput(script, quit_after=quit_after),
        audio=RecordingAudio(),
    )


__all__ = [
    "HeadlessDisplay",
    "ScriptedInput",
    "RecordingAudio",
    "create_headless_host",
]
