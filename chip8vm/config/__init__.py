"""Configuration system for the CHIP-8 VM."""

from .vm_config import BACKEND_CHOICES, VMConfig

__all__ = ["VMConfig", "BACKEND_CHOICES"]
