"""
Probabilistic seismic hazard curve calculation.

Modules:
- calc: Hazard calculator, runs the calculation pipeline on a worker pool.
- config: Calculation configuration.
- constants: IM, source type and sigma model enumerations.
- curves: Hazard curves of single (cluster) sources.
- exceptions: Hazard calculation errors.
- gmm: Ground motion model interface.
- ground_motions: Evaluation of the ground motion models.
- hazard: Functions for computing exceedance probabilities.
- inputs: Creation of the ground motion model inputs.
- model: The hazard model, sources and sites.
- result: Aggregation of the hazard curves.
- site_source: Functions for computing site-source distances.
- uhs: Functions for computing uniform hazard spectra (UHS).
- utils: Utility functions.
"""

from . import (
    calc,
    config,
    constants,
    curves,
    exceptions,
    gmm,
    ground_motions,
    hazard,
    inputs,
    model,
    result,
    site_source,
    uhs,
    utils,
)
from .calc import HazardCalculator
from .config import CalcConfig
from .constants import Imt, SigmaModel, SourceType
from .exceptions import (
    CalculationError,
    ConfigurationError,
    EvaluationError,
    HazardError,
)
from .gmm import GmmInput, GmmSet
from .model import (
    ClusterSource,
    HazardModel,
    PlanarSurface,
    PointSurface,
    Rupture,
    Site,
    Source,
    SourceSet,
)
from .result import HazardCurveSet, HazardResult

__all__ = [
    "calc",
    "config",
    "constants",
    "curves",
    "exceptions",
    "gmm",
    "ground_motions",
    "hazard",
    "inputs",
    "model",
    "result",
    "site_source",
    "uhs",
    "utils",
    "CalcConfig",
    "CalculationError",
    "ClusterSource",
    "ConfigurationError",
    "EvaluationError",
    "GmmInput",
    "GmmSet",
    "HazardCalculator",
    "HazardCurveSet",
    "HazardError",
    "HazardModel",
    "HazardResult",
    "Imt",
    "PlanarSurface",
    "PointSurface",
    "Rupture",
    "SigmaModel",
    "Site",
    "Source",
    "SourceSet",
    "SourceType",
]
