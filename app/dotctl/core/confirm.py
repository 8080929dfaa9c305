"""Operator confirmation checkpoints.

Components never read a global "force" flag. They receive a Confirmer,
a callable taking the prompt text and returning the operator's answer.
"""

import logging
from typing import Protocol

import typer

from dotctl.utils.formatting import print_info

logger = logging.getLogger(__name__)


class Confirmer(Protocol):
    """Callable asking the operator to approve an action."""

    def __call__(self, prompt: str) -> bool: ...


def interactive_confirm(prompt: str) -> bool:
    """Ask on the terminal; anything but an explicit yes declines."""
    return typer.confirm(prompt, default=False)


def auto_confirm(prompt: str) -> bool:
    """Approve every checkpoint without asking."""
    logger.debug("Auto-confirming: %s", prompt)
    print_info(f"Non-interactive mode: auto-confirming '{prompt}'")
    return True


def get_confirmer(force: bool) -> Confirmer:
    """Return the confirmer matching the --force flag.

    Args:
        force: If True, every checkpoint auto-approves.

    Returns:
        auto_confirm when forced, interactive_confirm otherwise.
    """
    return auto_confirm if force else interactive_confirm
