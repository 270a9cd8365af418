from collections.abc import Mapping

import numpy as np
import pandas as pd

from . import utils
from .constants import Imt


def compute_uhs(
    hcurves: Mapping[Imt, pd.Series],
    excd_probs: list[float],
    rps: list[float] | None = None,
):
    """
    Computes the Uniform Hazard Spectrum (UHS) from the given hazard curves.

    Parameters
    ----------
    hcurves: Mapping[Imt, pd.Series]
        The hazard curve for each IM, e.g. the
        total curves of a HazardResult. Only pSA IMs (and PGA,
        as zero period) are used.
    excd_probs: list[float]
        A list of exceedance probabilities for which to compute the UHS.
    rps: list[float] | None, optional
        Return periods corresponding to the exceedance probabilities.
        If provided, these will be used as columns in the output DataFrame.

    Returns
    -------
    pd.DataFrame
        A DataFrame containing the UHS values, indexed by pSA period.
    """
    ims = sorted(
        (Imt(cur_im) for cur_im in hcurves.keys() if Imt(cur_im) is not Imt.PGV),
        key=lambda cur_im: cur_im.period,
    )

    results = {}
    for cur_im in ims:
        results[cur_im.period] = utils.exceedance_to_im(
            np.asarray(excd_probs),
            hcurves[cur_im].index.values,
            hcurves[cur_im].values,
        )

    uhs_df = pd.DataFrame.from_dict(
        results, orient="index", columns=rps if rps else excd_probs
    )
    uhs_df.index.name = "period"

    return uhs_df
