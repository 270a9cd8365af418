"""
The (read-only) hazard model, consisting of
source sets, sources, ruptures and rupture surfaces,
and the site of interest.

All locations are in a projected cartesian
coordinate system with units of km, depths are positive down.
"""

import dataclasses
from collections.abc import Iterator

import numpy as np

from . import site_source, utils
from .constants import SourceType
from .exceptions import ConfigurationError
from .gmm import GmmSet


@dataclasses.dataclass(frozen=True)
class Site:
    """
    Site of interest

    Attributes
    ----------
    name: str
    x, y: float
        Location of the site (km)
    vs30: float
        The average shear-wave velocity in the upper 30 meters of the site.
    vs30measured: bool
        Whether the Vs30 value is measured or not.
    z1p0: float, optional
        Depth to the 1.0 km/s shear-wave velocity horizon in km.
    z2p5: float, optional
        Depth to the 2.5 km/s shear-wave velocity horizon in km.
    backarc: bool
        Whether the site is in the backarc region.
    """

    name: str
    x: float
    y: float
    vs30: float = 760.0
    vs30measured: bool = True
    z1p0: float | None = None
    z2p5: float | None = None
    backarc: bool = False

    def __post_init__(self):
        object.__setattr__(self, "name", utils.validate_name(self.name))
        if not (np.isfinite(self.x) and np.isfinite(self.y)):
            raise ConfigurationError(f"Invalid location for site {self.name}")
        if not self.vs30 > 0:
            raise ConfigurationError(f"Invalid vs30 {self.vs30} for site {self.name}")

    @property
    def coords(self) -> np.ndarray:
        """Site coordinates (x, y, 0)"""
        return np.asarray([self.x, self.y, 0.0])


@dataclasses.dataclass(frozen=True)
class PointSurface:
    """
    Point rupture, used for grid and slab sources

    Attributes
    ----------
    x, y: float
        Location (km)
    depth: float
        Hypocentre depth (km)
    dip: float
    width: float
        Down-dip width (km), zero for a true point
    """

    x: float
    y: float
    depth: float
    dip: float = 90.0
    width: float = 0.0

    def __post_init__(self):
        if self.depth < 0:
            raise ConfigurationError(f"Invalid point source depth {self.depth}")

    @property
    def ztor(self):
        return self.depth

    @property
    def zhyp(self):
        return self.depth

    def distances(self, site: Site):
        return site_source.get_point_distances(
            np.asarray([self.x, self.y, self.depth]), site.coords
        )


@dataclasses.dataclass(frozen=True, eq=False)
class PlanarSurface:
    """
    Rupture surface consisting of one or more
    planar quadrilateral segments

    Attributes
    ----------
    segment_coords: array of floats
        Corner coordinates (x, y, depth) of each segment,
        points 0 and 2 define the top edge, points 1 and 3
        are the corresponding down-dip points
        shape: [n_segments, 4, 3]
    dip: float
        Dip (degrees)
    """

    segment_coords: np.ndarray
    dip: float

    def __post_init__(self):
        segment_coords = np.array(self.segment_coords, dtype=np.float64)
        if segment_coords.ndim != 3 or segment_coords.shape[1:] != (4, 3):
            raise ConfigurationError(
                f"Invalid segment coordinates shape {segment_coords.shape}, "
                "expected [n_segments, 4, 3]"
            )
        if not 0 < self.dip <= 90:
            raise ConfigurationError(f"Invalid dip {self.dip}")
        if np.any(
            np.linalg.norm(segment_coords[:, 2, :2] - segment_coords[:, 0, :2], axis=1)
            == 0
        ):
            raise ConfigurationError("Segments require a non-zero trace length")

        segment_coords.flags.writeable = False
        object.__setattr__(self, "segment_coords", segment_coords)

    @classmethod
    def from_trace(
        cls, trace_points: np.ndarray, ztor: float, zbot: float, dip: float
    ):
        """
        Creates the surface from a fault trace,
        following the right-hand rule for the dip direction

        Parameters
        ----------
        trace_points: array of floats
            The (x, y) coordinates of the trace points
            shape: [n_points, 2]
        ztor: float
            Depth to the top of the rupture (km)
        zbot: float
            Depth to the bottom of the rupture (km)
        dip: float
            Dip (degrees)
        """
        trace_points = np.asarray(trace_points, dtype=np.float64)
        if trace_points.ndim != 2 or trace_points.shape[0] < 2:
            raise ConfigurationError("A fault trace requires at least two points")
        if not 0 <= ztor < zbot:
            raise ConfigurationError(f"Invalid depths ztor={ztor}, zbot={zbot}")
        if not 0 < dip <= 90:
            raise ConfigurationError(f"Invalid dip {dip}")

        strike_vecs = np.diff(trace_points, axis=0)
        trace_lengths = np.linalg.norm(strike_vecs, axis=1)
        if np.any(trace_lengths == 0):
            raise ConfigurationError("Fault trace contains duplicate points")
        strike_vecs /= trace_lengths[:, np.newaxis]

        # Horizontal offset of the bottom edge in the dip direction
        dip_dir_vecs = np.stack([strike_vecs[:, 1], -strike_vecs[:, 0]], axis=1)
        offset = (zbot - ztor) * np.cos(np.radians(dip)) / np.sin(np.radians(dip))

        n_segments = trace_points.shape[0] - 1
        segment_coords = np.zeros((n_segments, 4, 3))
        segment_coords[:, 0, :2] = trace_points[:-1]
        segment_coords[:, 2, :2] = trace_points[1:]
        segment_coords[:, 1, :2] = trace_points[:-1] + offset * dip_dir_vecs
        segment_coords[:, 3, :2] = trace_points[1:] + offset * dip_dir_vecs
        segment_coords[:, [0, 2], 2] = ztor
        segment_coords[:, [1, 3], 2] = zbot

        return cls(segment_coords, dip)

    @property
    def ztor(self):
        return float(self.segment_coords[:, [0, 2], 2].min())

    @property
    def zbot(self):
        return float(self.segment_coords[:, [1, 3], 2].max())

    @property
    def zhyp(self):
        # Use hypocentre depth at 1/2
        return (self.ztor + self.zbot) / 2

    @property
    def width(self):
        return (self.zbot - self.ztor) / np.sin(np.radians(self.dip))

    def distances(self, site: Site):
        return site_source.get_planar_distances(self.segment_coords, site.coords)


@dataclasses.dataclass(frozen=True)
class Rupture:
    """
    A single rupture of a source

    Attributes
    ----------
    mag: float
        Moment magnitude
    rate: float
        Annual rate of occurrence, for ruptures of
        cluster member faults this is the relative
        magnitude weight instead
    rake: float
    surface: PointSurface or PlanarSurface
    """

    mag: float
    rate: float
    rake: float
    surface: PointSurface | PlanarSurface

    def __post_init__(self):
        if not (np.isfinite(self.rate) and self.rate >= 0):
            raise ConfigurationError(f"Invalid rupture rate {self.rate}")
        if not np.isfinite(self.mag):
            raise ConfigurationError(f"Invalid rupture magnitude {self.mag}")
        if self.surface is None:
            raise ConfigurationError("Rupture requires a surface")


@dataclasses.dataclass(frozen=True)
class Source:
    """
    A seismic source (fault, grid cell, ...), i.e.
    a named collection of ruptures
    """

    name: str
    ruptures: tuple[Rupture, ...]

    def __post_init__(self):
        object.__setattr__(self, "name", utils.validate_name(self.name))
        object.__setattr__(self, "ruptures", tuple(self.ruptures))

    @property
    def rate(self):
        """The total annual rate"""
        return sum(cur_rupture.rate for cur_rupture in self.ruptures)

    def __len__(self):
        return len(self.ruptures)

    def __iter__(self) -> Iterator[Rupture]:
        return iter(self.ruptures)


@dataclasses.dataclass(frozen=True)
class ClusterSource:
    """
    A cluster of faults whose ruptures are
    temporally linked, i.e. they occur together.

    Attributes
    ----------
    name: str
    rate: float
        The annual rate of the cluster event
    faults: tuple of Source
        The member faults, the rupture rates of each fault
        are treated as relative magnitude weights
    """

    name: str
    rate: float
    faults: tuple[Source, ...]

    def __post_init__(self):
        object.__setattr__(self, "name", utils.validate_name(self.name))
        object.__setattr__(self, "faults", tuple(self.faults))
        if not (np.isfinite(self.rate) and self.rate >= 0):
            raise ConfigurationError(f"Invalid cluster rate {self.rate}")
        if len(self.faults) == 0:
            raise ConfigurationError(f"Cluster {self.name} has no faults")
        if not all(isinstance(cur_fault, Source) for cur_fault in self.faults):
            raise ConfigurationError(f"Cluster {self.name} members must be Sources")

    def __len__(self):
        return len(self.faults)

    def __iter__(self) -> Iterator[Source]:
        return iter(self.faults)


@dataclasses.dataclass(frozen=True)
class SourceSet:
    """
    Named, weighted collection of sources of the same type
    and the GMMs to use for them

    Attributes
    ----------
    name: str
    type: SourceType
    weight: float
        Has to be in (0, 1]
    sources: tuple of Source, or of ClusterSource for cluster sets
    gmm_set: GmmSet
    """

    name: str
    type: SourceType
    weight: float
    sources: tuple[Source | ClusterSource, ...]
    gmm_set: GmmSet

    def __post_init__(self):
        object.__setattr__(self, "name", utils.validate_name(self.name))
        try:
            object.__setattr__(self, "type", SourceType(self.type))
        except ValueError as e:
            raise ConfigurationError(f"Unknown source type {self.type!r}") from e
        object.__setattr__(self, "weight", utils.validate_weight(self.weight))
        if not isinstance(self.gmm_set, GmmSet):
            raise ConfigurationError(f"Source set {self.name} requires a GMM set")

        sources = tuple(self.sources)
        expected_type = ClusterSource if self.type is SourceType.CLUSTER else Source
        if not all(isinstance(cur_source, expected_type) for cur_source in sources):
            raise ConfigurationError(
                f"Source set {self.name} of type {self.type} "
                f"only accepts {expected_type.__name__} sources"
            )
        object.__setattr__(self, "sources", sources)

    def __len__(self):
        return len(self.sources)

    def __iter__(self):
        return iter(self.sources)

    def __str__(self):
        return (
            f"{self.type.value.capitalize()}SourceSet[name={self.name}, "
            f"weight={self.weight}, size={len(self)}]"
        )


@dataclasses.dataclass(frozen=True)
class HazardModel:
    """
    Ordered collection of source sets
    """

    name: str
    source_sets: tuple[SourceSet, ...]

    def __post_init__(self):
        object.__setattr__(self, "name", utils.validate_name(self.name))
        source_sets = tuple(self.source_sets)
        if not all(isinstance(cur_set, SourceSet) for cur_set in source_sets):
            raise ConfigurationError("A hazard model only contains source sets")

        names = [cur_set.name for cur_set in source_sets]
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Duplicate source set names in model {self.name}")
        object.__setattr__(self, "source_sets", source_sets)

    def __len__(self):
        return len(self.source_sets)

    def __iter__(self) -> Iterator[SourceSet]:
        return iter(self.source_sets)
