"""
PySemStats: numerical companions for structural equation modelling.

Conditional multivariate-normal moments for partially observed rows,
RAM-model expected moments, and the standard fit-index table for models
fitted by an external engine.

Submodules:
    conditional: Conditional means and covariances given observed values
    ram: RAM matrices, expected covariances, latent scoring
    fit: Fit indices, RMSEA interval, model comparison
    descriptive: Grouped means with standard errors and intervals
"""

__version__ = "0.1.0"

from pysemstats import conditional
from pysemstats import ram
from pysemstats import fit
from pysemstats import descriptive

__all__ = [
    "__version__",
    "conditional",
    "ram",
    "fit",
    "descriptive",
]
