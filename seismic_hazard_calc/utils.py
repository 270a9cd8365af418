import numpy as np
from scipy.interpolate import interp1d

from .constants import Imt
from .exceptions import ConfigurationError


def get_min_max_levels_for_im(im: Imt):
    """Get minimum and maximum for the given im. Values for velocity are
    given on cm/s and acceleration in g
    """
    match im:
        case _ if im.is_pSA:
            periods = np.array([0.5, 1.0, 3.0, 5.0, 10.0])
            bounds = [
                (0.005, 10.0),
                (0.005, 7.5),
                (0.0005, 5.0),
                (0.0005, 4.0),
                (0.0005, 3.0),
            ]
            idx = np.searchsorted(periods, im.period)
            return bounds[idx]
        case Imt.PGA:
            return 0.0001, 10.0
        case Imt.PGV:
            return 1.0, 400.0
        case _:
            raise ValueError(f"Invalid IM {im}")


def get_im_levels(im: Imt, n_values: int = 200):
    """
    Create a log-spaced range of values for a given
    IM according to their min, max
    as defined by get_min_max_levels_for_im

    Parameters
    ----------
    im: Imt
        The IM to get levels for
    n_values: int
        Number of levels

    Returns
    -------
    Array of IM values
    """
    start, end = get_min_max_levels_for_im(im)
    im_values = np.logspace(
        start=np.log(start), stop=np.log(end), num=n_values, base=np.e
    )
    return im_values


def validate_im_levels(im: Imt, im_levels) -> np.ndarray:
    """
    Checks that the IM levels are usable as the
    shared x-domain of the hazard curves, i.e.
    a non-empty, positive, strictly increasing 1D array

    Returns
    -------
    np.ndarray
        The IM levels as a read-only float array
    """
    im_levels = np.array(im_levels, dtype=float)
    if im_levels.ndim != 1 or im_levels.size == 0:
        raise ConfigurationError(f"IM levels for {im} must be a non-empty 1D array")
    if np.any(~np.isfinite(im_levels)) or np.any(im_levels <= 0):
        raise ConfigurationError(f"IM levels for {im} must be positive and finite")
    if np.any(np.diff(im_levels) <= 0):
        raise ConfigurationError(f"IM levels for {im} must be strictly increasing")

    im_levels.flags.writeable = False
    return im_levels


def validate_weight(weight: float) -> float:
    """Weights have to be in the range (0, 1]"""
    if not (0.0 < weight <= 1.0):
        raise ConfigurationError(f"Invalid weight {weight}, must be in (0, 1]")
    return float(weight)


def validate_name(name: str) -> str:
    """Names are non-empty and without leading/trailing whitespace"""
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(f"Invalid name {name!r}")
    return name.strip()


def rp_to_prob(rp: float, t: float = 1.0):
    """
    Converts return period to exceedance probability
    Based on Poisson distribution

    Parameters
    ----------
    rp: float
        Return period
    t: float
        Time period of interest

    Returns
    -------
    Exceedance probability
    """
    return 1 - np.exp(-t / rp)


def prob_to_rp(prob: float, t: float = 1.0):
    """
    Converts probability of exceedance to return period
    Based on Poisson distribution

    Parameters
    ----------
    prob: float
        Exceedance probability
    t: float
        Time period of interest

    Returns
    -------
    Return Period
    """
    return -t / np.log(1 - prob)


def exceedance_to_im(
    exceedances: np.ndarray, im_values: np.ndarray, hazard_values: np.ndarray
):
    """
    Converts the given exceedance probabilities to IM values, based on the
    provided im and hazard values, using log-log interpolation.

    Parameters
    ----------
    exceedances: array of float
        The exceedance values of interest
    im_values: numpy array
        The IM values corresponding to the hazard values
        Has to be the same shape as hazard_values
    hazard_values: numpy array
        The hazard values corresponding to the IM values
        Has to be the same shape as im_values

    Returns
    -------
    array of float
        The IM values corresponding to the provided exceedances
    """
    # Zero hazard values can't be interpolated in log-space
    mask = hazard_values > 0
    return np.exp(
        interp1d(
            np.log(hazard_values[mask]) * -1,
            np.log(im_values[mask]),
            kind="linear",
            bounds_error=True,
        )(np.log(exceedances) * -1)
    )


def get_im_file_format(im: str) -> str:
    """
    Get the file format for the given IM.
    """
    if im.startswith("pSA"):
        im = im.replace(".", "p")
    return im


def reverse_im_file_format(im: str) -> str:
    """
    Reverse the file format for the given IM.
    """
    if im.startswith("pSA"):
        split_im = im.split("_", 1)
        return f"{split_im[0]}_{split_im[1].replace('p', '.')}"

    return im
