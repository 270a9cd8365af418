"""Configuration of a hazard calculation"""

import dataclasses
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

import numpy as np
import pandas as pd
import yaml

from . import utils
from .constants import Imt, SigmaModel
from .exceptions import ConfigurationError

DEFAULT_MAX_DISTANCE = 300.0
DEFAULT_TRUNCATION_LEVEL = 3.0
DEFAULT_N_IM_LEVELS = 200


def _to_imt(im) -> Imt:
    try:
        return Imt(im)
    except ValueError as e:
        raise ConfigurationError(f"Unknown IM {im!r}") from e


@dataclasses.dataclass(frozen=True, eq=False)
class CalcConfig:
    """
    Read-only configuration for a hazard calculation.

    Attributes
    ----------
    imts: tuple of Imt
        The IMs to compute hazard curves for
    sigma_model: SigmaModel
        Truncation policy for the ground motion uncertainty
    truncation_level: float
        Truncation level in number of standard deviations,
        ignored for SigmaModel.NONE
    max_distance: float
        Source to site cutoff distance (Rjb) in km
    im_levels: mapping of Imt to array
        The IM levels (x-values) of the hazard curves for each IM.
        IMs without levels get the default levels from
        `utils.get_im_levels`.
    """

    imts: tuple[Imt, ...]
    sigma_model: SigmaModel = SigmaModel.TWO_SIDED
    truncation_level: float = DEFAULT_TRUNCATION_LEVEL
    max_distance: float = DEFAULT_MAX_DISTANCE
    im_levels: Mapping[Imt, np.ndarray] = dataclasses.field(default_factory=dict)

    def __post_init__(self):
        imts = tuple(dict.fromkeys(_to_imt(im) for im in self.imts))
        if len(imts) == 0:
            raise ConfigurationError("At least one IM has to be specified")

        try:
            sigma_model = SigmaModel(self.sigma_model)
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown sigma model {self.sigma_model!r}"
            ) from e

        if sigma_model is not SigmaModel.NONE and not self.truncation_level > 0:
            raise ConfigurationError(
                f"Truncation level has to be positive, got {self.truncation_level}"
            )
        if not self.max_distance > 0:
            raise ConfigurationError(
                f"Maximum distance has to be positive, got {self.max_distance}"
            )

        specified_levels = {
            _to_imt(im): levels for im, levels in (self.im_levels or {}).items()
        }
        im_levels = {
            im: utils.validate_im_levels(
                im,
                specified_levels[im]
                if im in specified_levels
                else utils.get_im_levels(im, DEFAULT_N_IM_LEVELS),
            )
            for im in imts
        }

        # Normalise, frozen dataclass, hence object.__setattr__
        object.__setattr__(self, "imts", imts)
        object.__setattr__(self, "sigma_model", sigma_model)
        object.__setattr__(self, "truncation_level", float(self.truncation_level))
        object.__setattr__(self, "max_distance", float(self.max_distance))
        object.__setattr__(self, "im_levels", MappingProxyType(im_levels))

    def __reduce__(self):
        # Mapping proxies can't be pickled, required for process pools
        return (
            self.__class__,
            (
                self.imts,
                self.sigma_model,
                self.truncation_level,
                self.max_distance,
                dict(self.im_levels),
            ),
        )

    def model_curves(self) -> dict[Imt, pd.Series]:
        """
        Zero-valued curve for each IM, defining the
        shared x-domain all hazard curves are computed on
        """
        return {
            im: pd.Series(index=self.im_levels[im], data=0.0) for im in self.imts
        }

    @classmethod
    def from_dict(cls, config: Mapping):
        """
        Creates the config from a dictionary,
        e.g. as loaded from a yaml file

        Keys: imts (required), sigma_model, truncation_level,
        max_distance, n_im_levels, im_levels
        """
        if "imts" not in config:
            raise ConfigurationError("Config is missing the 'imts' entry")

        unknown_keys = set(config.keys()) - {
            "imts",
            "sigma_model",
            "truncation_level",
            "max_distance",
            "n_im_levels",
            "im_levels",
        }
        if unknown_keys:
            raise ConfigurationError(f"Unknown config entries: {sorted(unknown_keys)}")

        imts = [_to_imt(im) for im in config["imts"]]
        im_levels = {
            _to_imt(im): levels
            for im, levels in (config.get("im_levels") or {}).items()
        }
        if (n_im_levels := config.get("n_im_levels")) is not None:
            if int(n_im_levels) < 1:
                raise ConfigurationError("n_im_levels has to be positive")
            for im in imts:
                im_levels.setdefault(im, utils.get_im_levels(im, int(n_im_levels)))

        return cls(
            imts=tuple(imts),
            sigma_model=config.get("sigma_model", SigmaModel.TWO_SIDED),
            truncation_level=config.get("truncation_level", DEFAULT_TRUNCATION_LEVEL),
            max_distance=config.get("max_distance", DEFAULT_MAX_DISTANCE),
            im_levels=im_levels,
        )

    @classmethod
    def from_yaml(cls, config_ffp: Path):
        """Loads the config from a yaml file"""
        config = yaml.safe_load(Path(config_ffp).read_text())
        if not isinstance(config, Mapping):
            raise ConfigurationError(f"Invalid config file {config_ffp}")
        return cls.from_dict(config)
