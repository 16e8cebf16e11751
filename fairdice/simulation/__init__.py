"""Simulation module for fairdice."""
from .simulator import MatchupSimulator, SimulationResult

__all__ = [
    "MatchupSimulator",
    "SimulationResult",
]
