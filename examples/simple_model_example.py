"""
Example for computing the hazard for a small synthetic model,
consisting of a fault, a grid and a cluster source set.

Also usable as model factory for the CLI, e.g.
`shc-hazard compute-hazard simple_model_example:build_model
config.yaml out --site-x 5 --site-y 10`
(with the examples directory on the PYTHONPATH)
"""

import logging

import numpy as np

import seismic_hazard_calc as shc

# IMs to compute hazard for
IMS = [shc.Imt.PGA, shc.Imt.SA0P2, shc.Imt.SA1P0, shc.Imt.SA3P0]


def simple_gmm(gmm_input: shc.GmmInput, imt: shc.Imt):
    """Basic magnitude-distance scaling, not meant for real use"""
    period = imt.period
    mu = (
        -1.0
        + 0.9 * (gmm_input.mag - 6.0)
        - 0.1 * (gmm_input.mag - 6.0) ** 2
        - 1.2 * np.log(np.sqrt(gmm_input.rrup**2 + 36.0))
        - 0.4 * np.log(gmm_input.vs30 / 760.0)
        - 0.5 * np.log(1.0 + period)
    )
    return mu, 0.65 + 0.05 * np.log(1.0 + period)


def stiff_gmm(gmm_input: shc.GmmInput, imt: shc.Imt):
    mu, sigma = simple_gmm(gmm_input, imt)
    return mu - 0.2, sigma


def fault(name: str, trace: list[list[float]], dip: float, mags, rates):
    surface = shc.PlanarSurface.from_trace(np.asarray(trace), 0.0, 15.0, dip)
    return shc.Source(
        name,
        tuple(
            shc.Rupture(cur_mag, cur_rate, 90.0, surface)
            for cur_mag, cur_rate in zip(mags, rates)
        ),
    )


def build_model() -> shc.HazardModel:
    crustal_gmms = shc.GmmSet(
        {"simple": simple_gmm, "stiff": stiff_gmm}, {"simple": 0.6, "stiff": 0.4}
    )

    faults = shc.SourceSet(
        "crustal_faults",
        shc.SourceType.FAULT,
        1.0,
        (
            fault(
                "alpha",
                [[-20.0, -30.0], [-15.0, 10.0], [-5.0, 40.0]],
                60.0,
                [6.8, 7.2],
                [2e-3, 5e-4],
            ),
            fault(
                "hope", [[30.0, -10.0], [45.0, 25.0]], 80.0, [6.5, 7.0], [3e-3, 1e-3]
            ),
        ),
        crustal_gmms,
    )

    # Grid of point sources, magnitudes 5.0 - 6.5
    mags = np.arange(5.0, 6.6, 0.5)
    mag_rates = 1e-3 * 10 ** (-1.0 * (mags - 5.0))
    grid = shc.SourceSet(
        "background",
        shc.SourceType.GRID,
        1.0,
        tuple(
            shc.Source(
                f"cell_{i}_{j}",
                tuple(
                    shc.Rupture(cur_mag, cur_rate, 0.0, shc.PointSurface(x, y, 10.0))
                    for cur_mag, cur_rate in zip(mags, mag_rates)
                ),
            )
            for i, x in enumerate(np.arange(-50.0, 51.0, 25.0))
            for j, y in enumerate(np.arange(-50.0, 51.0, 25.0))
        ),
        shc.GmmSet({"simple": simple_gmm}, max_distance=100.0),
    )

    # Two faults that rupture together every ~2000 years
    cluster = shc.SourceSet(
        "linked_faults",
        shc.SourceType.CLUSTER,
        1.0,
        (
            shc.ClusterSource(
                "porter_pass",
                5e-4,
                (
                    fault(
                        "porter_a",
                        [[10.0, 20.0], [20.0, 35.0]],
                        70.0,
                        [6.6, 6.9],
                        [0.7, 0.3],
                    ),
                    fault(
                        "porter_b",
                        [[20.0, 35.0], [28.0, 52.0]],
                        70.0,
                        [6.6, 6.9],
                        [0.5, 0.5],
                    ),
                ),
            ),
        ),
        crustal_gmms,
    )

    return shc.HazardModel("simple_model", [faults, grid, cluster])


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    model = build_model()
    config = shc.CalcConfig.from_dict({"imts": IMS, "n_im_levels": 100})
    sites = [
        shc.Site("christchurch", 0.0, 0.0, vs30=250.0, z1p0=0.3),
        shc.Site("rock_site", 20.0, 30.0, vs30=760.0),
    ]

    with shc.HazardCalculator(processes=True) as calculator:
        results = calculator.hazard_curves(model, config, sites, progress=True)

    for cur_site_name, cur_result in results.items():
        print(cur_site_name)
        print(cur_result)
        print(cur_result.to_dataframe(shc.Imt.PGA).iloc[::20])

    uhs_df = shc.uhs.compute_uhs(
        results["christchurch"].curves(),
        [shc.utils.rp_to_prob(cur_rp) for cur_rp in [500, 2500]],
        rps=[500, 2500],
    )
    print(uhs_df)
