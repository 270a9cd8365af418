"""Aggregation of the source curves into the hazard result"""

import dataclasses
from collections.abc import Mapping, Sequence

import numpy as np
import pandas as pd

from .constants import Imt, SourceType
from .curves import SourceCurves
from .model import SourceSet


def sum_curves(curves: Sequence[pd.Series], im_levels: np.ndarray, scale: float = 1.0):
    """
    Sums the curves as a single reduction in the given order,
    zero curve if there are none.

    Note: All curves have to be on the IM levels
    """
    if len(curves) == 0:
        return pd.Series(index=im_levels, data=0.0)

    values = np.stack([cur_curve.values for cur_curve in curves], axis=0)
    assert values.shape[1] == im_levels.size
    return pd.Series(index=im_levels, data=scale * np.sum(values, axis=0))


@dataclasses.dataclass(frozen=True, eq=False)
class HazardCurveSet:
    """
    The hazard curves of a single source set

    Attributes
    ----------
    source_set: SourceSet
    source_curves: tuple of SourceCurves
        The curves of each source in range, in model order
    gmm_curves: mapping
        Per IM and GMM, the weighted sum over all sources
    total_curves: mapping
        Per IM, the weighted sum over all source curves
    """

    source_set: SourceSet
    source_curves: tuple[SourceCurves, ...]
    gmm_curves: Mapping[Imt, Mapping[str, pd.Series]]
    total_curves: Mapping[Imt, pd.Series]

    @property
    def n_sources_used(self) -> int:
        """Number of sources within range of the site"""
        return len(self.source_curves)

    @property
    def n_sources(self) -> int:
        """Number of sources in the source set"""
        return len(self.source_set)


def hazard_curve_set(
    source_set: SourceSet,
    source_curves: Sequence[SourceCurves],
    im_levels: Mapping[Imt, np.ndarray],
) -> HazardCurveSet:
    """
    Combines the source curves of a source set

    Parameters
    ----------
    source_set: SourceSet
    source_curves: sequence of SourceCurves
        In model order
    im_levels: mapping
        The IM levels for each IM

    Returns
    -------
    HazardCurveSet
    """
    total_curves = {
        cur_imt: sum_curves(
            [cur_source.curves[cur_imt] for cur_source in source_curves],
            cur_levels,
            scale=source_set.weight,
        )
        for cur_imt, cur_levels in im_levels.items()
    }
    gmm_curves = {
        cur_imt: {
            cur_gmm_id: sum_curves(
                [
                    cur_source.gmm_curves[cur_imt][cur_gmm_id]
                    for cur_source in source_curves
                ],
                cur_levels,
                scale=source_set.weight,
            )
            for cur_gmm_id in source_set.gmm_set.gmms
        }
        for cur_imt, cur_levels in im_levels.items()
    }

    return HazardCurveSet(source_set, tuple(source_curves), gmm_curves, total_curves)


@dataclasses.dataclass(frozen=True, eq=False)
class HazardResult:
    """
    The result of a hazard calculation

    Attributes
    ----------
    curve_sets: tuple of HazardCurveSet
        The curve set of each contributing source set, in model order
    total_curves: mapping
        Per IM, the total hazard curve
    """

    curve_sets: tuple[HazardCurveSet, ...]
    total_curves: Mapping[Imt, pd.Series]

    @property
    def source_set_curves(self) -> dict[SourceType, list[HazardCurveSet]]:
        """The curve sets for each source type"""
        result = {}
        for cur_curve_set in self.curve_sets:
            result.setdefault(cur_curve_set.source_set.type, []).append(cur_curve_set)
        return result

    def curves(self) -> Mapping[Imt, pd.Series]:
        """The total hazard curve for each IM"""
        return self.total_curves

    def to_dataframe(self, im: Imt) -> pd.DataFrame:
        """
        The hazard curves of each source set and
        the total for the given IM

        format: index = IM_levels, columns = [source set names, total]
        """
        im = Imt(im)
        df = pd.DataFrame(
            {
                cur_curve_set.source_set.name: cur_curve_set.total_curves[im].values
                for cur_curve_set in self.curve_sets
            },
            index=self.total_curves[im].index,
        )
        df["total"] = self.total_curves[im].values
        df.index.name = "im_level"
        return df

    def summary_df(self) -> pd.DataFrame:
        """Number of sources used and declared per source set"""
        return pd.DataFrame(
            [
                {
                    "source_set": cur_curve_set.source_set.name,
                    "type": cur_curve_set.source_set.type.value,
                    "weight": cur_curve_set.source_set.weight,
                    "n_sources_used": cur_curve_set.n_sources_used,
                    "n_sources": cur_curve_set.n_sources,
                }
                for cur_curve_set in self.curve_sets
            ],
            columns=["source_set", "type", "weight", "n_sources_used", "n_sources"],
        )

    def __str__(self):
        lines = ["HazardResult:"]
        for cur_type, cur_curve_sets in self.source_set_curves.items():
            lines.append(f"{cur_type.value.capitalize()}SourceSet:")
            lines.extend(
                f"  {cur_curve_set.source_set} Used: {cur_curve_set.n_sources_used}"
                for cur_curve_set in cur_curve_sets
            )
        return "\n".join(lines)


def hazard_result(
    curve_sets: Sequence[HazardCurveSet | None],
    im_levels: Mapping[Imt, np.ndarray],
) -> HazardResult:
    """
    Combines the curve sets into the total hazard

    Parameters
    ----------
    curve_sets: sequence of HazardCurveSet
        In model order, None for source sets that
        did not contribute (i.e. out of range)
    im_levels: mapping
        The IM levels for each IM

    Returns
    -------
    HazardResult
    """
    curve_sets = tuple(
        cur_curve_set for cur_curve_set in curve_sets if cur_curve_set is not None
    )
    total_curves = {
        cur_imt: sum_curves(
            [cur_curve_set.total_curves[cur_imt] for cur_curve_set in curve_sets],
            cur_levels,
        )
        for cur_imt, cur_levels in im_levels.items()
    }
    return HazardResult(curve_sets, total_curves)
