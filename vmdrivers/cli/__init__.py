"""CLI package exports for top-level command entry points."""

from __future__ import annotations

from .main import VMDriversModalCLI, main

__all__ = ['VMDriversModalCLI', 'main']
