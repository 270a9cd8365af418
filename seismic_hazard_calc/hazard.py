"""Module for computing the seismic hazard"""

from collections.abc import Sequence
from typing import Union

import numpy as np
import pandas as pd
import scipy as sp

from .constants import SigmaModel


def truncated_exceedance(
    ln_im_levels: np.ndarray,
    mu: np.ndarray,
    sigma: np.ndarray,
    sigma_model: SigmaModel = SigmaModel.NONE,
    truncation_level: float = 3.0,
):
    """
    Computes the probability of exceeding the IM levels for
    a lognormal IM distribution with optional truncation

    Parameters
    ----------
    ln_im_levels: array of floats
        The natural log of the IM levels
    mu: array of floats
        The mean lnIM values
    sigma: array of floats
        The standard deviation of the lnIM values
    sigma_model: SigmaModel
        NONE: No truncation
        ONE_SIDED: Upper tail truncated at truncation_level sigma
        TWO_SIDED: Both tails truncated at +/- truncation_level sigma
    truncation_level: float
        Number of standard deviations

    Note: All inputs have to be broadcastable

    Returns
    -------
    array of floats
        The exceedance probabilities
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        z = (ln_im_levels - mu) / sigma
    # Zero sigma, i.e. the IM is exactly the mean
    z = np.where(sigma > 0, z, np.where(ln_im_levels < mu, -np.inf, np.inf))

    excd_prob = sp.stats.norm.sf(z)
    match SigmaModel(sigma_model):
        case SigmaModel.NONE:
            return excd_prob
        case SigmaModel.ONE_SIDED:
            p_upper = sp.stats.norm.sf(truncation_level)
            excd_prob = (excd_prob - p_upper) / (1.0 - p_upper)
        case SigmaModel.TWO_SIDED:
            p_upper = sp.stats.norm.sf(truncation_level)
            p_lower = sp.stats.norm.sf(-truncation_level)
            excd_prob = (excd_prob - p_upper) / (p_lower - p_upper)

    return np.clip(excd_prob, 0.0, 1.0)


def parametric_gm_excd_prob(
    im_levels: Union[float, np.ndarray],
    im_params: pd.DataFrame,
    sigma_model: SigmaModel = SigmaModel.NONE,
    truncation_level: float = 3.0,
    mean_col: str = "mu",
    std_col: str = "sigma",
):
    """
    Computes the GM exceedance probability for each IM level over all
    ruptures based on the parametric GM predictions (e.g. empirical GMM)

    Parameters
    ----------
    im_levels: float or array
        The IM level(s) for which to calculate the ground motion
        exceedance probability
    im_params: pd.DataFrame
        The IM distribution parameters for each rupture
        format: index = rupture_id
    sigma_model: SigmaModel, optional
        The truncation of the IM distribution
    truncation_level: float, optional
        The truncation level in number of standard deviations
    mean_col: str, optional
        Name of the column containing the mean lnIM values
    std_col: str, optional
        Name of the column containing the standard deviation of lnIM values

    Returns
    -------
    pd.DataFrame
        The exceedance probability for each rupture at each IM level
        shape: [n_ruptures, n_im_levels]
    """
    im_levels = np.asarray(im_levels, dtype=float).reshape(1, -1)

    results = truncated_exceedance(
        np.log(im_levels),
        im_params[mean_col].values.reshape(-1, 1),
        im_params[std_col].values.reshape(-1, 1),
        sigma_model=sigma_model,
        truncation_level=truncation_level,
    )
    return pd.DataFrame(
        index=im_params.index.values, data=results, columns=im_levels.reshape(-1)
    )


def hazard_curve(gm_prob_df: pd.DataFrame, rec_rate: pd.Series):
    """
    Calculates the annual exceedance probabilities for the
    specified IM values (via the gm_prob_df)

    Assumes Poisson occurrence of the ruptures, i.e.
    the non-exceedance probabilities of the ruptures multiply,
    which is computed by accumulating the exceedance rates
    and converting once

    Note: All ruptures specified in gm_prob_df have to exist
    in rec_rate

    Parameters
    ----------
    gm_prob_df: pd.DataFrame
        The ground motion probabilities for every rupture
        for every IM level.
        format: index = rupture_id, columns = IM_levels
    rec_rate: pd.Series
        The annual recurrence rates of the ruptures
        format: index = rupture_id, values = rate

    Returns
    -------
    pd.Series
        The exceedance probabilities for the different IM levels
        format: index = IM_levels, values = exceedance probability
    """
    excd_rate = np.sum(
        gm_prob_df.values * rec_rate[gm_prob_df.index.values].values.reshape(-1, 1),
        axis=0,
    )
    return pd.Series(index=gm_prob_df.columns.values, data=-np.expm1(-excd_rate))


def conditional_excd_prob(gm_prob_df: pd.DataFrame, mag_weights: pd.Series):
    """
    Magnitude weighted exceedance probability of a fault,
    conditional on the fault rupturing

    Parameters
    ----------
    gm_prob_df: pd.DataFrame
        format: index = rupture_id, columns = IM_levels
    mag_weights: pd.Series
        format: index = rupture_id, values = weight

    Returns
    -------
    pd.Series
        format: index = IM_levels
    """
    data = np.sum(
        gm_prob_df.values
        * mag_weights[gm_prob_df.index.values].values.reshape(-1, 1),
        axis=0,
    )
    return pd.Series(index=gm_prob_df.columns.values, data=data)


def cluster_excd_prob(fault_excd_probs: Sequence[pd.Series]):
    """
    Joint exceedance probability of temporally linked faults,
    i.e. the probability that the ground motion from any
    of the faults exceeds the IM level, given a cluster event

    Parameters
    ----------
    fault_excd_probs: sequence of pd.Series
        The conditional exceedance probability of each fault,
        all with the same IM levels as index

    Returns
    -------
    pd.Series
        format: index = IM_levels
    """
    non_excd_prob = np.prod(
        1.0 - np.stack([cur_prob.values for cur_prob in fault_excd_probs], axis=0),
        axis=0,
    )
    return pd.Series(index=fault_excd_probs[0].index.values, data=1.0 - non_excd_prob)
