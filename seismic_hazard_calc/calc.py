"""
Hazard curve calculation

Each source set is processed as an independent task on a
shared worker pool (inputs -> ground motions -> curves),
the completed curve sets are then combined in model order.
"""

import logging
import multiprocessing as mp
from collections.abc import Sequence
from multiprocessing.pool import ThreadPool

from tqdm import tqdm

from . import curves, ground_motions, inputs, result
from .config import CalcConfig
from .constants import SourceType
from .exceptions import CalculationError, ConfigurationError, HazardError
from .model import HazardModel, Site, SourceSet

logger = logging.getLogger(__name__)


def compute_source_set_curves(
    source_set: SourceSet, site: Site, config: CalcConfig
) -> result.HazardCurveSet | None:
    """
    Computes the hazard curve set for a single source set

    Parameters
    ----------
    source_set: SourceSet
    site: Site
    config: CalcConfig

    Returns
    -------
    HazardCurveSet
        None if no source of the set is within range of the site
    """
    max_distance = inputs.get_max_distance(source_set, config)
    gmm_set = source_set.gmm_set

    match source_set.type:
        case SourceType.CLUSTER:
            set_inputs = inputs.cluster_set_inputs(source_set, site, max_distance)
            if len(set_inputs) == 0:
                logger.debug("Skipping %s, all sources out of range", source_set)
                return None

            source_curves = [
                curves.cluster_curves(
                    ground_motions.compute_cluster_ground_motions(
                        cur_inputs, gmm_set, config.imts
                    ),
                    gmm_set,
                    config.im_levels,
                    config.sigma_model,
                    config.truncation_level,
                )
                for cur_inputs in set_inputs
            ]
        case _:
            set_inputs = inputs.source_set_inputs(source_set, site, max_distance)
            if len(set_inputs) == 0:
                logger.debug("Skipping %s, all sources out of range", source_set)
                return None

            source_curves = [
                curves.source_curves(
                    ground_motions.compute_ground_motions(
                        cur_inputs, gmm_set, config.imts
                    ),
                    gmm_set,
                    config.im_levels,
                    config.sigma_model,
                    config.truncation_level,
                )
                for cur_inputs in set_inputs
            ]

    return result.hazard_curve_set(source_set, source_curves, config.im_levels)


class HazardCalculator:
    """
    Runs hazard calculations on a fixed size worker pool.

    The pool is created once and shared by all calculations
    until `shutdown` is called, either explicitly or
    when used as a context manager.

    With `processes=True` the source sets are processed by a
    process pool, which scales with the number of workers but
    requires the GMMs to be picklable, i.e. module level functions.
    Otherwise a thread pool is used, which accepts any callable
    (closures, lambdas), but the GMM evaluation is limited by the GIL.

    Parameters
    ----------
    n_procs: int, optional
        Number of workers, defaults to the number of CPUs
    processes: bool, optional
        Use a process pool instead of a thread pool
    """

    def __init__(self, n_procs: int | None = None, processes: bool = False):
        self.n_procs = n_procs if n_procs is not None else mp.cpu_count()
        if self.n_procs < 1:
            raise ConfigurationError(f"Invalid number of workers {self.n_procs}")

        self.processes = processes
        self._pool = mp.Pool(self.n_procs) if processes else ThreadPool(self.n_procs)
        self._running = True
        logger.debug(
            "Started hazard worker pool with %d %s",
            self.n_procs,
            "processes" if processes else "threads",
        )

    @property
    def running(self) -> bool:
        return self._running

    def shutdown(self):
        """Stops accepting work and waits for the workers to finish"""
        if self._running:
            self._running = False
            self._pool.close()
            self._pool.join()
            logger.debug("Shut down hazard worker pool")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.shutdown()

    def hazard_curve(
        self, model: HazardModel, config: CalcConfig, site: Site
    ) -> result.HazardResult:
        """
        Computes the hazard curves for the given site

        Parameters
        ----------
        model: HazardModel
        config: CalcConfig
        site: Site

        Returns
        -------
        HazardResult

        Raises
        ------
        EvaluationError
            If any GMM fails
        CalculationError
            If the calculator has been shut down or
            a task fails unexpectedly
        """
        if not self._running:
            raise CalculationError("Hazard calculator has been shut down")

        logger.info(
            "Computing hazard for site %s with model %s (%d source sets)",
            site.name,
            model.name,
            len(model),
        )

        # Results are returned in model order, regardless of
        # which task completes first, fails on the first failed task
        try:
            curve_sets = self._pool.starmap(
                compute_source_set_curves,
                [(cur_source_set, site, config) for cur_source_set in model],
                chunksize=1,
            )
        except HazardError:
            raise
        except Exception as e:
            raise CalculationError(
                f"Hazard calculation failed for site {site.name}: {e}"
            ) from e

        hazard_result = result.hazard_result(curve_sets, config.im_levels)
        logger.info(
            "Completed hazard for site %s, %d of %d source sets contributed",
            site.name,
            len(hazard_result.curve_sets),
            len(model),
        )
        return hazard_result

    def hazard_curves(
        self,
        model: HazardModel,
        config: CalcConfig,
        sites: Sequence[Site],
        progress: bool = False,
    ) -> dict[str, result.HazardResult]:
        """
        Computes the hazard curves for each site

        Returns
        -------
        dict
            The hazard result for each site name
        """
        site_names = [cur_site.name for cur_site in sites]
        if len(set(site_names)) != len(site_names):
            raise ConfigurationError("Site names have to be unique")

        return {
            cur_site.name: self.hazard_curve(model, config, cur_site)
            for cur_site in tqdm(sites, desc="Sites", disable=not progress)
        }
