"""Package operators for installing and uninstalling packages.

This module provides the abstract Operator and one concrete variant per
supported package-manager family (APT, DNF, Pacman, Termux pkg, Homebrew).
"""

from dotctl.operators.apt import AptOperator
from dotctl.operators.base import Operator
from dotctl.operators.brew import BrewOperator
from dotctl.operators.dnf import DnfOperator
from dotctl.operators.pacman import PacmanOperator
from dotctl.operators.termux import TermuxOperator

__all__ = [
    "AptOperator",
    "BrewOperator",
    "DnfOperator",
    "Operator",
    "PacmanOperator",
    "TermuxOperator",
]
