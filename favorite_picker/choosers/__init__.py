"""
Chooser implementations.

Choosers stand in for the person in front of the picker: given a batch they
decide what to pick.
"""

from .interactive_chooser import InteractiveChooser
from .sim_chooser import SimulatedChooser

__all__ = ["InteractiveChooser", "SimulatedChooser"]
