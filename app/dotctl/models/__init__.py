"""Data models for dotctl.

This module exports the package and action models.
"""

from dotctl.models.action import ActionResult, ActionType
from dotctl.models.package import PackageSpec

__all__ = ["ActionResult", "ActionType", "PackageSpec"]
