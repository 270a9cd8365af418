"""Creation of the GMM inputs for each rupture-site pair"""

import dataclasses

import numpy as np
import pandas as pd

from .config import CalcConfig
from .gmm import GmmInput
from .model import ClusterSource, Rupture, Site, Source, SourceSet


@dataclasses.dataclass(frozen=True, eq=False)
class SourceInputs:
    """
    The GMM inputs of the (distance filtered)
    ruptures of a single source

    Attributes
    ----------
    source_name: str
    inputs: tuple of GmmInput
    rupture_ids: array of ints
        Index of each rupture in the source
    rates: array of floats
        The annual rate of each rupture, or
        the normalised magnitude weights for
        a cluster member fault
    """

    source_name: str
    inputs: tuple[GmmInput, ...]
    rupture_ids: np.ndarray
    rates: np.ndarray

    def __len__(self):
        return len(self.inputs)

    @property
    def rec_rate(self) -> pd.Series:
        """The rupture rates, format: index = rupture_id"""
        return pd.Series(index=self.rupture_ids, data=self.rates)

    def to_dataframe(self) -> pd.DataFrame:
        """The inputs as dataframe, format: index = rupture_id"""
        return pd.DataFrame(
            [dataclasses.asdict(cur_input) for cur_input in self.inputs],
            index=self.rupture_ids,
            columns=[cur_field.name for cur_field in dataclasses.fields(GmmInput)],
        ).assign(rate=self.rates)


@dataclasses.dataclass(frozen=True, eq=False)
class ClusterInputs:
    """
    The GMM inputs of a cluster source,
    one `SourceInputs` per member fault in range
    """

    cluster_name: str
    rate: float
    fault_inputs: tuple[SourceInputs, ...]

    def __len__(self):
        return len(self.fault_inputs)


def get_max_distance(source_set: SourceSet, config: CalcConfig) -> float:
    """The cutoff distance for the source set"""
    if source_set.gmm_set.max_distance is not None:
        return source_set.gmm_set.max_distance
    return config.max_distance


def rupture_input(rupture: Rupture, site: Site, distances=None) -> GmmInput:
    """Creates the GMM input for a single rupture"""
    if distances is None:
        distances = rupture.surface.distances(site)
    rjb, rrup, rx = distances

    surface = rupture.surface
    return GmmInput(
        mag=rupture.mag,
        rjb=rjb,
        rrup=rrup,
        rx=rx,
        dip=surface.dip,
        width=float(surface.width),
        ztor=surface.ztor,
        zhyp=surface.zhyp,
        rake=rupture.rake,
        vs30=site.vs30,
        vs30measured=site.vs30measured,
        z1p0=site.z1p0,
        z2p5=site.z2p5,
        backarc=site.backarc,
    )


def source_inputs(
    source: Source, site: Site, max_distance: float, rate_scale: float = 1.0
) -> SourceInputs:
    """
    Creates the GMM inputs for the ruptures of
    the source that are within the cutoff distance (Rjb)

    Parameters
    ----------
    source: Source
    site: Site
    max_distance: float
        Cutoff distance in km
    rate_scale: float, optional
        Scale factor for the rupture rates

    Returns
    -------
    SourceInputs
        Empty if no rupture is in range
    """
    inputs, rupture_ids, rates = [], [], []
    for i, cur_rupture in enumerate(source.ruptures):
        cur_distances = cur_rupture.surface.distances(site)
        if cur_distances[0] > max_distance:
            continue

        inputs.append(rupture_input(cur_rupture, site, distances=cur_distances))
        rupture_ids.append(i)
        rates.append(cur_rupture.rate * rate_scale)

    return SourceInputs(
        source.name,
        tuple(inputs),
        np.asarray(rupture_ids, dtype=int),
        np.asarray(rates, dtype=float),
    )


def source_set_inputs(
    source_set: SourceSet, site: Site, max_distance: float
) -> list[SourceInputs]:
    """
    Creates the GMM inputs for all sources of the
    source set, sources without any rupture in range
    are dropped. Order of the sources is preserved.
    """
    results = []
    for cur_source in source_set:
        cur_inputs = source_inputs(cur_source, site, max_distance)
        if len(cur_inputs) > 0:
            results.append(cur_inputs)
    return results


def cluster_inputs(
    cluster: ClusterSource, site: Site, max_distance: float
) -> ClusterInputs:
    """
    Creates the GMM inputs for the member faults of a cluster.

    The rupture rates of each fault are normalised
    by the total rate of the fault (before distance
    filtering), giving the magnitude weights.
    Faults without any rupture in range are dropped.
    """
    fault_inputs = []
    for cur_fault in cluster:
        total_rate = cur_fault.rate
        cur_inputs = source_inputs(
            cur_fault,
            site,
            max_distance,
            rate_scale=1.0 / total_rate if total_rate > 0 else 0.0,
        )
        if len(cur_inputs) > 0:
            fault_inputs.append(cur_inputs)

    return ClusterInputs(cluster.name, cluster.rate, tuple(fault_inputs))


def cluster_set_inputs(
    source_set: SourceSet, site: Site, max_distance: float
) -> list[ClusterInputs]:
    """Cluster equivalent of `source_set_inputs`"""
    results = []
    for cur_cluster in source_set:
        cur_inputs = cluster_inputs(cur_cluster, site, max_distance)
        if len(cur_inputs) > 0:
            results.append(cur_inputs)
    return results
