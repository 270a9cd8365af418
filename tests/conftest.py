import numpy as np
import pytest

import seismic_hazard_calc as shc


def constant_gmm(mu: float, sigma: float):
    """GMM that returns the same parameters for every input"""

    def gmm(gmm_input: shc.GmmInput, imt: shc.Imt):
        return mu, sigma

    return gmm


def simple_gmm(gmm_input: shc.GmmInput, imt: shc.Imt):
    """Basic magnitude-distance scaling"""
    mu = -1.5 + 0.8 * (gmm_input.mag - 6.0) - 1.1 * np.log(gmm_input.rrup + 10.0)
    if imt.is_pSA:
        mu -= 0.3 * np.log(1.0 + imt.period)
    return mu, 0.6


def fault_surface(x: float, y: float = 0.0, length: float = 20.0, dip: float = 90.0):
    """North striking fault with its trace starting at (x, y)"""
    return shc.PlanarSurface.from_trace(
        np.asarray([[x, y], [x, y + length]]), 0.0, 12.0, dip
    )


def fault_source(
    name: str,
    x: float,
    mags: tuple[float, ...] = (6.5,),
    rates: tuple[float, ...] = (0.01,),
):
    surface = fault_surface(x)
    return shc.Source(
        name,
        tuple(
            shc.Rupture(cur_mag, cur_rate, 90.0, surface)
            for cur_mag, cur_rate in zip(mags, rates)
        ),
    )


@pytest.fixture
def site() -> shc.Site:
    return shc.Site("test_site", 0.0, 10.0, vs30=400.0, z1p0=0.2)


@pytest.fixture(scope="module")
def calculator():
    with shc.HazardCalculator(n_procs=4) as calculator:
        yield calculator


@pytest.fixture
def gmm_set() -> shc.GmmSet:
    return shc.GmmSet({"simple": simple_gmm})


@pytest.fixture
def config() -> shc.CalcConfig:
    return shc.CalcConfig(
        imts=(shc.Imt.PGA, shc.Imt.SA1P0),
        sigma_model=shc.SigmaModel.TWO_SIDED,
        truncation_level=3.0,
        max_distance=200.0,
        im_levels={
            shc.Imt.PGA: np.logspace(-3, 0.5, 30),
            shc.Imt.SA1P0: np.logspace(-3, 0.5, 30),
        },
    )
