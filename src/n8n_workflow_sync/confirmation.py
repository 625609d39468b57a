"""Confirmation providers for the overwrite prompt.

The local repository asks a provider before replacing an existing file, so
tests and unattended runs can answer without a terminal.
"""

from __future__ import annotations

import logging
from typing import Protocol

import click

logger = logging.getLogger(__name__)


class ConfirmationProvider(Protocol):
    """Anything that can answer a yes/no question."""

    def confirm(self, prompt: str) -> bool: ...


class ClickConfirmation:
    """Interactive console prompt; the default answer is no."""

    def confirm(self, prompt: str) -> bool:
        return click.confirm(prompt, default=False)


class StaticConfirmation:
    """Always gives the same answer (``--yes`` and non-interactive runs)."""

    def __init__(self, answer: bool):
        self.answer = answer

    def confirm(self, prompt: str) -> bool:
        logger.info(f"{prompt} -> {'yes' if self.answer else 'no'} (non-interactive)")
        return self.answer
