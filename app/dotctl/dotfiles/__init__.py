"""Dotfile overlay deployment, backup generations and shell alias glue.

This module exports the classes used by the provisioner.
"""

from dotctl.dotfiles.backup import BackupGeneration, GenerationStore, backup_item, restore_item
from dotctl.dotfiles.git import RESERVED_NAMES, BareRepository
from dotctl.dotfiles.overlay import DotfileOverlay, RemovalReport

__all__ = [
    "RESERVED_NAMES",
    "BackupGeneration",
    "BareRepository",
    "DotfileOverlay",
    "GenerationStore",
    "RemovalReport",
    "backup_item",
    "restore_item",
]
