"""Evaluation of the GMMs for the GMM inputs of each source"""

import dataclasses
from collections.abc import Mapping, Sequence

import numpy as np
import pandas as pd

from .constants import Imt
from .exceptions import EvaluationError
from .gmm import GmmInput, GmmSet, GroundMotionModel
from .inputs import ClusterInputs, SourceInputs


@dataclasses.dataclass(frozen=True, eq=False)
class SourceGroundMotions:
    """
    Ground motion parameters of the ruptures of a single source

    Attributes
    ----------
    inputs: SourceInputs
    gm_params: mapping
        Per IM and GMM the ground motion parameters,
        format: index = rupture_id, columns = [mu, sigma]
    """

    inputs: SourceInputs
    gm_params: Mapping[Imt, Mapping[str, pd.DataFrame]]

    @property
    def source_name(self):
        return self.inputs.source_name


@dataclasses.dataclass(frozen=True, eq=False)
class ClusterGroundMotions:
    """Ground motion parameters for each member fault of a cluster"""

    inputs: ClusterInputs
    fault_ground_motions: tuple[SourceGroundMotions, ...]

    @property
    def source_name(self):
        return self.inputs.cluster_name


def evaluate_gmm(
    gmm: GroundMotionModel,
    gmm_input: GmmInput,
    imt: Imt,
    gmm_id: str,
    source_name: str,
) -> tuple[float, float]:
    """
    Runs a single GMM for a single input

    Raises
    ------
    EvaluationError
        If the GMM fails or returns invalid parameters
    """
    try:
        mu, sigma = gmm(gmm_input, imt)
        mu, sigma = float(mu), float(sigma)
    except Exception as e:
        raise EvaluationError(
            f"GMM {gmm_id} failed for IM {imt} of source {source_name}: {e}"
        ) from e

    if not (np.isfinite(mu) and np.isfinite(sigma) and sigma >= 0):
        raise EvaluationError(
            f"GMM {gmm_id} returned invalid parameters (mu={mu}, sigma={sigma}) "
            f"for IM {imt} of source {source_name}"
        )
    return mu, sigma


def compute_ground_motions(
    source_inputs: SourceInputs, gmm_set: GmmSet, imts: Sequence[Imt]
) -> SourceGroundMotions:
    """
    Computes the GM parameters for the given
    inputs for every IM and GMM of the GMM set

    Parameters
    ----------
    source_inputs: SourceInputs
    gmm_set: GmmSet
    imts: sequence of Imt

    Returns
    -------
    SourceGroundMotions
    """
    gm_params = {}
    for cur_imt in imts:
        gm_params[cur_imt] = {}
        for cur_gmm_id, cur_gmm in gmm_set.gmms.items():
            cur_results = [
                evaluate_gmm(
                    cur_gmm, cur_input, cur_imt, cur_gmm_id, source_inputs.source_name
                )
                for cur_input in source_inputs.inputs
            ]
            gm_params[cur_imt][cur_gmm_id] = pd.DataFrame(
                data=np.asarray(cur_results, dtype=float).reshape(-1, 2),
                index=source_inputs.rupture_ids,
                columns=["mu", "sigma"],
            )

    return SourceGroundMotions(source_inputs, gm_params)


def compute_cluster_ground_motions(
    cluster_inputs: ClusterInputs, gmm_set: GmmSet, imts: Sequence[Imt]
) -> ClusterGroundMotions:
    """Computes the GM parameters for each member fault of the cluster"""
    return ClusterGroundMotions(
        cluster_inputs,
        tuple(
            compute_ground_motions(cur_inputs, gmm_set, imts)
            for cur_inputs in cluster_inputs.fault_inputs
        ),
    )
