"""
RAM (reticular action model) adapter.

Public API:
    normalize_model(obj)                   - Any engine representation -> RAMModel
    RAMModel                               - A, S, F, M matrices plus variable names
    conditionals_from_model(model, data)   - Complete data and score latents
"""

from pysemstats.ram.model import RAMModel, normalize_model
from pysemstats.ram.solvers import conditionals_from_model

__all__ = [
    "RAMModel",
    "normalize_model",
    "conditionals_from_model",
]
