"""Hazard curves for single sources, standard and cluster"""

import dataclasses
from collections.abc import Mapping

import numpy as np
import pandas as pd

from . import hazard
from .constants import Imt, SigmaModel
from .ground_motions import ClusterGroundMotions, SourceGroundMotions
from .gmm import GmmSet


@dataclasses.dataclass(frozen=True, eq=False)
class SourceCurves:
    """
    Hazard curves of a single source (or cluster)

    Attributes
    ----------
    source_name: str
    gmm_curves: mapping
        Per IM, the hazard curve for each GMM
    curves: mapping
        Per IM, the GMM weighted hazard curve
    """

    source_name: str
    gmm_curves: Mapping[Imt, Mapping[str, pd.Series]]
    curves: Mapping[Imt, pd.Series]


def weighted_gmm_curve(gmm_curves: Mapping[str, pd.Series], gmm_set: GmmSet):
    """Combines the GMM curves of a source using the GMM weights"""
    gmm_ids = list(gmm_set.gmms.keys())
    weights = np.asarray([gmm_set.weights[cur_id] for cur_id in gmm_ids])
    values = np.stack([gmm_curves[cur_id].values for cur_id in gmm_ids], axis=0)

    return pd.Series(
        index=gmm_curves[gmm_ids[0]].index.values,
        data=np.sum(values * weights[:, np.newaxis], axis=0),
    )


def source_curves(
    ground_motions: SourceGroundMotions,
    gmm_set: GmmSet,
    im_levels: Mapping[Imt, np.ndarray],
    sigma_model: SigmaModel,
    truncation_level: float,
) -> SourceCurves:
    """
    Computes the hazard curves of a source for each IM

    Parameters
    ----------
    ground_motions: SourceGroundMotions
    gmm_set: GmmSet
    im_levels: mapping
        The IM levels for each IM
    sigma_model: SigmaModel
    truncation_level: float

    Returns
    -------
    SourceCurves
    """
    rec_rate = ground_motions.inputs.rec_rate

    gmm_curves, curves = {}, {}
    for cur_imt, cur_gm_params in ground_motions.gm_params.items():
        gmm_curves[cur_imt] = {
            cur_gmm_id: hazard.hazard_curve(
                hazard.parametric_gm_excd_prob(
                    im_levels[cur_imt],
                    cur_gm_df,
                    sigma_model=sigma_model,
                    truncation_level=truncation_level,
                ),
                rec_rate,
            )
            for cur_gmm_id, cur_gm_df in cur_gm_params.items()
        }
        curves[cur_imt] = weighted_gmm_curve(gmm_curves[cur_imt], gmm_set)

    return SourceCurves(ground_motions.source_name, gmm_curves, curves)


def cluster_curves(
    ground_motions: ClusterGroundMotions,
    gmm_set: GmmSet,
    im_levels: Mapping[Imt, np.ndarray],
    sigma_model: SigmaModel,
    truncation_level: float,
) -> SourceCurves:
    """
    Computes the hazard curves of a cluster source for each IM.

    For each GMM, the magnitude weighted exceedance probabilities
    of the member faults are combined into the joint exceedance
    probability of the cluster event, which is then
    converted to an annual exceedance probability
    using the cluster rate.

    Parameters
    ----------
    ground_motions: ClusterGroundMotions
    gmm_set: GmmSet
    im_levels: mapping
        The IM levels for each IM
    sigma_model: SigmaModel
    truncation_level: float

    Returns
    -------
    SourceCurves
    """
    cluster_rate = ground_motions.inputs.rate

    gmm_curves, curves = {}, {}
    for cur_imt in ground_motions.fault_ground_motions[0].gm_params.keys():
        gmm_curves[cur_imt] = {}
        for cur_gmm_id in gmm_set.gmms:
            fault_excd_probs = [
                hazard.conditional_excd_prob(
                    hazard.parametric_gm_excd_prob(
                        im_levels[cur_imt],
                        cur_fault_gms.gm_params[cur_imt][cur_gmm_id],
                        sigma_model=sigma_model,
                        truncation_level=truncation_level,
                    ),
                    cur_fault_gms.inputs.rec_rate,
                )
                for cur_fault_gms in ground_motions.fault_ground_motions
            ]
            joint_excd_prob = hazard.cluster_excd_prob(fault_excd_probs)
            gmm_curves[cur_imt][cur_gmm_id] = pd.Series(
                index=joint_excd_prob.index.values,
                data=-np.expm1(-cluster_rate * joint_excd_prob.values),
            )
        curves[cur_imt] = weighted_gmm_curve(gmm_curves[cur_imt], gmm_set)

    return SourceCurves(ground_motions.source_name, gmm_curves, curves)
