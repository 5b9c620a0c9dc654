"""Abstract host adapters consumed by the scheduler."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from ..display import FrameBuffer
from ..keypad import InputState


class DisplayAdapter(ABC):
    """Presents the frame buffer; owns its own presentation-rate limiting."""

    @abstractmethod
    def present(self, frame: FrameBuffer) -> None:
        """Show ``frame``. Raise HostAdapterError on I/O failure."""

    def close(self) -> None:
        pass


class InputAdapter(ABC):
    """Refreshes the keypad state once per scheduler iteration."""

    @abstractmethod
    def poll(self, keys: InputState) -> bool:
        """Update ``keys`` in place; return False when the user asked to quit."""

    def close(self) -> None:
        pass


class AudioAdapter(ABC):
    """Starts and stops the single-tone beeper."""

    @abstractmethod
    def start_beep(self) -> None:
        pass

    @abstractmethod
    def stop_beep(self) -> None:
        pass

    def close(self) -> None:
        pass


@dataclass
class Host:
    """Display, input and audio adapters of one backend.

    ``surface`` is the backend-specific window or event source shared by the
    display and input adapters; the host owns it and releases it on close.
    """

    name: str
    display: DisplayAdapter
    input: InputAdapter
    audio: AudioAdapter
    surface: Optional[Any] = field(default=None, repr=False)

    def close(self) -> None:
        """Close every adapter, then the surface, even if one of them raises."""
        try:
            try:
                self.audio.close()
            finally:
                try:
                    self.input.close()
                finally:
                    self.display.close()
        finally:
            closer = getattr(self.surface, "close", None)
            if callable(closer):
                closer()

    def __enter__(self) -> "Host":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["DisplayAdapter", "InputAdapter", "AudioAdapter", "Host"]
