"""
Ground motion model (GMM) interface

A GMM is any pure callable that takes a `GmmInput` and an `Imt`
and returns the mean (natural log of the IM) and the
total standard deviation (in natural log units).
"""

import dataclasses
from collections.abc import Callable, Mapping
from types import MappingProxyType

import numpy as np

from . import utils
from .constants import Imt
from .exceptions import ConfigurationError


@dataclasses.dataclass(frozen=True)
class GmmInput:
    """
    Rupture and site parameters of a single
    rupture-site pair, as required by the GMMs

    Attributes
    ----------
    mag: float
        Moment magnitude
    rjb: float
        Joyner-Boore distance (km)
    rrup: float
        Rupture distance (km)
    rx: float
        Site distance perpendicular to strike (km),
        positive on the hanging wall
    dip: float
        Rupture dip (degrees)
    width: float
        Down-dip rupture width (km)
    ztor: float
        Depth to the top of the rupture (km)
    zhyp: float
        Hypocentre depth (km)
    rake: float
        Rupture rake (degrees)
    vs30: float
        Average shear-wave velocity of the upper 30m (m/s)
    vs30measured: bool
        Whether the vs30 value is measured or not
    z1p0: float, optional
        Depth to the 1.0 km/s shear-wave velocity horizon (km)
    z2p5: float, optional
        Depth to the 2.5 km/s shear-wave velocity horizon (km)
    backarc: bool
        Whether the site is in the backarc region
    """

    mag: float
    rjb: float
    rrup: float
    rx: float
    dip: float
    width: float
    ztor: float
    zhyp: float
    rake: float
    vs30: float
    vs30measured: bool = True
    z1p0: float | None = None
    z2p5: float | None = None
    backarc: bool = False


# (GmmInput, Imt) -> (mean lnIM, sigma lnIM)
GroundMotionModel = Callable[[GmmInput, Imt], tuple[float, float]]


@dataclasses.dataclass(frozen=True, eq=False)
class GmmSet:
    """
    The weighted GMMs applied to the sources of a source set

    Attributes
    ----------
    gmms: mapping of str to GroundMotionModel
        The GMMs, keyed by their identifier
    weights: mapping of str to float
        The weight of each GMM, has to sum to one.
        Can be omitted for a single GMM.
    max_distance: float, optional
        Cutoff distance (km) for the source set, overrides
        the maximum distance of the calculation config
    """

    gmms: Mapping[str, GroundMotionModel]
    weights: Mapping[str, float] | None = None
    max_distance: float | None = None

    def __post_init__(self):
        if self.gmms is None or len(self.gmms) == 0:
            raise ConfigurationError("A GMM set requires at least one GMM")
        for gmm_id, gmm in self.gmms.items():
            if not callable(gmm):
                raise ConfigurationError(f"GMM {gmm_id} is not callable")

        weights = self.weights
        if weights is None:
            if len(self.gmms) != 1:
                raise ConfigurationError("Weights are required for multiple GMMs")
            weights = {gmm_id: 1.0 for gmm_id in self.gmms}

        if set(weights.keys()) != set(self.gmms.keys()):
            raise ConfigurationError(
                f"GMM weights {sorted(weights.keys())} do not "
                f"match the GMMs {sorted(self.gmms.keys())}"
            )
        weights = {
            gmm_id: utils.validate_weight(weights[gmm_id]) for gmm_id in self.gmms
        }
        if not np.isclose(sum(weights.values()), 1.0):
            raise ConfigurationError(
                f"GMM weights have to sum to one, got {sum(weights.values())}"
            )

        if self.max_distance is not None and not self.max_distance > 0:
            raise ConfigurationError(
                f"Maximum distance has to be positive, got {self.max_distance}"
            )

        object.__setattr__(self, "gmms", MappingProxyType(dict(self.gmms)))
        object.__setattr__(self, "weights", MappingProxyType(weights))

    def __reduce__(self):
        # Mapping proxies can't be pickled, the GMMs themselves
        # have to be picklable (module level functions)
        return (
            self.__class__,
            (dict(self.gmms), dict(self.weights), self.max_distance),
        )

    def __len__(self):
        return len(self.gmms)

    def __iter__(self):
        return iter(self.gmms)
