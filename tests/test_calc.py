import numpy as np
import pandas as pd
import pytest
import scipy as sp

import seismic_hazard_calc as shc
from conftest import constant_gmm, fault_source


def fault_set(name: str, sources, gmm_set: shc.GmmSet, weight: float = 1.0):
    return shc.SourceSet(name, shc.SourceType.FAULT, weight, sources, gmm_set)


@pytest.fixture
def golden_config() -> shc.CalcConfig:
    return shc.CalcConfig(
        imts=(shc.Imt.PGA,),
        sigma_model=shc.SigmaModel.NONE,
        im_levels={shc.Imt.PGA: [0.1, 0.2]},
    )


def test_single_fault_constant_gmm(
    calculator: shc.HazardCalculator, site: shc.Site, golden_config: shc.CalcConfig
):
    mu, sigma, rate = np.log(0.15), 0.5, 0.01
    model = shc.HazardModel(
        "golden",
        [
            fault_set(
                "faults",
                (fault_source("fault", 10.0, rates=(rate,)),),
                shc.GmmSet({"constant": constant_gmm(mu, sigma)}),
            )
        ],
    )

    hazard_result = calculator.hazard_curve(model, golden_config, site)

    im_levels = np.asarray([0.1, 0.2])
    expected = 1 - np.exp(-rate * sp.stats.norm.sf((np.log(im_levels) - mu) / sigma))
    total_curve = hazard_result.curves()[shc.Imt.PGA]
    assert np.allclose(total_curve.index.values, im_levels)
    assert np.allclose(total_curve.values, expected, rtol=1e-12)


@pytest.mark.parametrize("processes", [False, True])
def test_deterministic_results(
    site: shc.Site, gmm_set: shc.GmmSet, config: shc.CalcConfig, processes: bool
):
    model = shc.HazardModel(
        "model",
        [
            fault_set(
                f"set_{i}",
                tuple(
                    fault_source(
                        f"fault_{i}_{j}", 5.0 * j, mags=(6.0, 7.0), rates=(0.01, 0.001)
                    )
                    for j in range(5)
                ),
                gmm_set,
                weight=0.5,
            )
            for i in range(6)
        ],
    )

    results = []
    for cur_n_procs in [1, 4, 4]:
        with shc.HazardCalculator(cur_n_procs, processes=processes) as calculator:
            results.append(calculator.hazard_curve(model, config, site))

    for cur_result in results[1:]:
        assert [cur_set.source_set.name for cur_set in cur_result.curve_sets] == [
            f"set_{i}" for i in range(6)
        ]
        for cur_imt in config.imts:
            assert np.array_equal(
                cur_result.curves()[cur_imt].values, results[0].curves()[cur_imt].values
            )


def test_source_set_additivity(
    calculator: shc.HazardCalculator,
    site: shc.Site,
    gmm_set: shc.GmmSet,
    config: shc.CalcConfig,
):
    set_a = fault_set("a", (fault_source("fault_a", 5.0),), gmm_set, weight=0.6)
    set_b = shc.SourceSet(
        "b",
        shc.SourceType.GRID,
        0.4,
        (
            shc.Source(
                "cell",
                (shc.Rupture(5.5, 0.05, 0.0, shc.PointSurface(10.0, 10.0, 8.0)),),
            ),
        ),
        gmm_set,
    )

    result_a = calculator.hazard_curve(shc.HazardModel("a", [set_a]), config, site)
    result_b = calculator.hazard_curve(shc.HazardModel("b", [set_b]), config, site)
    result_ab = calculator.hazard_curve(
        shc.HazardModel("ab", [set_a, set_b]), config, site
    )

    for cur_imt in config.imts:
        assert np.allclose(
            result_ab.curves()[cur_imt].values,
            result_a.curves()[cur_imt].values + result_b.curves()[cur_imt].values,
        )

    # Source set totals include the set weight
    curve_set_a = result_ab.curve_sets[0]
    assert np.allclose(
        curve_set_a.total_curves[shc.Imt.PGA].values,
        0.6 * curve_set_a.source_curves[0].curves[shc.Imt.PGA].values,
    )


def test_cluster_matches_fault(
    calculator: shc.HazardCalculator,
    site: shc.Site,
    gmm_set: shc.GmmSet,
    config: shc.CalcConfig,
):
    fault = fault_source("fault", 10.0, mags=(6.0, 6.8), rates=(0.004, 0.001))
    fault_model = shc.HazardModel("fault", [fault_set("faults", (fault,), gmm_set)])
    cluster_model = shc.HazardModel(
        "cluster",
        [
            shc.SourceSet(
                "clusters",
                shc.SourceType.CLUSTER,
                1.0,
                (shc.ClusterSource("cluster", fault.rate, (fault,)),),
                gmm_set,
            )
        ],
    )

    fault_result = calculator.hazard_curve(fault_model, config, site)
    cluster_result = calculator.hazard_curve(cluster_model, config, site)

    for cur_imt in config.imts:
        assert np.allclose(
            cluster_result.curves()[cur_imt].values,
            fault_result.curves()[cur_imt].values,
            rtol=1e-9,
        )


def test_cluster_joint_probability(
    calculator: shc.HazardCalculator, site: shc.Site, golden_config: shc.CalcConfig
):
    mu, sigma, cluster_rate = np.log(0.15), 0.5, 0.002
    cluster = shc.ClusterSource(
        "cluster",
        cluster_rate,
        (fault_source("fault_a", 5.0), fault_source("fault_b", 15.0)),
    )
    model = shc.HazardModel(
        "cluster",
        [
            shc.SourceSet(
                "clusters",
                shc.SourceType.CLUSTER,
                1.0,
                (cluster,),
                shc.GmmSet({"constant": constant_gmm(mu, sigma)}),
            )
        ],
    )

    hazard_result = calculator.hazard_curve(model, golden_config, site)

    excd_prob = sp.stats.norm.sf((np.log([0.1, 0.2]) - mu) / sigma)
    joint_excd_prob = 1 - (1 - excd_prob) ** 2
    assert np.allclose(
        hazard_result.curves()[shc.Imt.PGA].values,
        1 - np.exp(-cluster_rate * joint_excd_prob),
    )


def test_gmm_weights(
    calculator: shc.HazardCalculator, site: shc.Site, golden_config: shc.CalcConfig
):
    source = fault_source("fault", 10.0)
    gmm_a, gmm_b = constant_gmm(np.log(0.1), 0.5), constant_gmm(np.log(0.3), 0.7)

    def single_gmm_curve(gmm):
        model = shc.HazardModel(
            "model", [fault_set("faults", (source,), shc.GmmSet({"gmm": gmm}))]
        )
        return calculator.hazard_curve(model, golden_config, site).curves()[shc.Imt.PGA]

    model = shc.HazardModel(
        "model",
        [
            fault_set(
                "faults",
                (source,),
                shc.GmmSet({"a": gmm_a, "b": gmm_b}, {"a": 0.3, "b": 0.7}),
            )
        ],
    )
    hazard_result = calculator.hazard_curve(model, golden_config, site)

    assert np.allclose(
        hazard_result.curves()[shc.Imt.PGA].values,
        0.3 * single_gmm_curve(gmm_a).values + 0.7 * single_gmm_curve(gmm_b).values,
    )
    gmm_curves = hazard_result.curve_sets[0].gmm_curves[shc.Imt.PGA]
    assert np.allclose(gmm_curves["a"].values, single_gmm_curve(gmm_a).values)


def test_zero_rate_source(
    calculator: shc.HazardCalculator,
    site: shc.Site,
    gmm_set: shc.GmmSet,
    config: shc.CalcConfig,
):
    model = shc.HazardModel(
        "model",
        [fault_set("faults", (fault_source("fault", 10.0, rates=(0.0,)),), gmm_set)],
    )

    hazard_result = calculator.hazard_curve(model, config, site)

    assert hazard_result.curve_sets[0].n_sources_used == 1
    for cur_imt in config.imts:
        assert np.all(hazard_result.curves()[cur_imt].values == 0.0)


@pytest.mark.parametrize("source_type", [None, "fault", "cluster"])
def test_no_contributing_sources(
    calculator: shc.HazardCalculator,
    site: shc.Site,
    gmm_set: shc.GmmSet,
    config: shc.CalcConfig,
    source_type: str | None,
):
    far_fault = fault_source("fault", 1000.0)
    match source_type:
        case "fault":
            source_sets = [fault_set("faults", (far_fault,), gmm_set)]
        case "cluster":
            source_sets = [
                shc.SourceSet(
                    "clusters",
                    shc.SourceType.CLUSTER,
                    1.0,
                    (
                        shc.ClusterSource(
                            "cluster", 0.01, (far_fault, fault_source("b", 800.0))
                        ),
                    ),
                    gmm_set,
                )
            ]
        case _:
            source_sets = []
    model = shc.HazardModel("model", source_sets)

    hazard_result = calculator.hazard_curve(model, config, site)

    assert len(hazard_result.curve_sets) == 0
    for cur_imt in config.imts:
        cur_curve = hazard_result.curves()[cur_imt]
        assert np.allclose(cur_curve.index.values, config.im_levels[cur_imt])
        assert np.all(cur_curve.values == 0.0)


def test_gmm_set_max_distance(
    calculator: shc.HazardCalculator, site: shc.Site, config: shc.CalcConfig
):
    gmm = constant_gmm(np.log(0.1), 0.5)
    source = fault_source("fault", 50.0)
    near_model = shc.HazardModel(
        "model",
        [fault_set("faults", (source,), shc.GmmSet({"gmm": gmm}, max_distance=20.0))],
    )

    hazard_result = calculator.hazard_curve(near_model, config, site)

    assert len(hazard_result.curve_sets) == 0


def test_gmm_failure(
    calculator: shc.HazardCalculator, site: shc.Site, config: shc.CalcConfig
):
    def failing_gmm(gmm_input: shc.GmmInput, imt: shc.Imt):
        raise ValueError("Unsupported tectonic type")

    model = shc.HazardModel(
        "model",
        [
            fault_set(
                "faults",
                (fault_source("fault", 10.0),),
                shc.GmmSet({"fail": failing_gmm}),
            )
        ],
    )

    with pytest.raises(shc.EvaluationError, match="fail"):
        calculator.hazard_curve(model, config, site)

    # The calculator remains usable
    assert calculator.running


@pytest.mark.parametrize(
    "mu, sigma",
    [(np.nan, 0.5), (0.0, -0.1), (0.0, np.inf), ("x", 0.5), (0.0, None)],
)
def test_invalid_gmm_result(
    calculator: shc.HazardCalculator,
    site: shc.Site,
    config: shc.CalcConfig,
    mu,
    sigma,
):
    model = shc.HazardModel(
        "model",
        [
            fault_set(
                "faults",
                (fault_source("fault", 10.0),),
                shc.GmmSet({"invalid": constant_gmm(mu, sigma)}),
            )
        ],
    )

    with pytest.raises(shc.EvaluationError, match="invalid"):
        calculator.hazard_curve(model, config, site)


def test_unexpected_failure(
    monkeypatch,
    calculator: shc.HazardCalculator,
    site: shc.Site,
    gmm_set: shc.GmmSet,
    config: shc.CalcConfig,
):
    def failing_task(source_set, site, config):
        raise RuntimeError("Worker died")

    monkeypatch.setattr(shc.calc, "compute_source_set_curves", failing_task)
    model = shc.HazardModel(
        "model", [fault_set("faults", (fault_source("fault", 10.0),), gmm_set)]
    )

    with pytest.raises(shc.CalculationError) as exc_info:
        calculator.hazard_curve(model, config, site)
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_process_pool(
    calculator: shc.HazardCalculator,
    site: shc.Site,
    gmm_set: shc.GmmSet,
    config: shc.CalcConfig,
):
    model = shc.HazardModel(
        "model",
        [
            fault_set("faults", (fault_source("fault", 10.0),), gmm_set),
            shc.SourceSet(
                "clusters",
                shc.SourceType.CLUSTER,
                1.0,
                (
                    shc.ClusterSource(
                        "cluster",
                        0.002,
                        (fault_source("a", 5.0), fault_source("b", 15.0)),
                    ),
                ),
                gmm_set,
            ),
        ],
    )

    with shc.HazardCalculator(2, processes=True) as process_calculator:
        process_result = process_calculator.hazard_curve(model, config, site)
    thread_result = calculator.hazard_curve(model, config, site)

    assert [cur_set.source_set.name for cur_set in process_result.curve_sets] == [
        "faults",
        "clusters",
    ]
    for cur_imt in config.imts:
        assert np.array_equal(
            process_result.curves()[cur_imt].values,
            thread_result.curves()[cur_imt].values,
        )


def test_process_pool_unpicklable_gmm(site: shc.Site, config: shc.CalcConfig):
    # Closures can only be used with the thread pool
    model = shc.HazardModel(
        "model",
        [
            fault_set(
                "faults",
                (fault_source("fault", 10.0),),
                shc.GmmSet({"constant": constant_gmm(np.log(0.1), 0.5)}),
            )
        ],
    )

    with shc.HazardCalculator(2, processes=True) as calculator:
        with pytest.raises(shc.CalculationError):
            calculator.hazard_curve(model, config, site)


def test_shutdown(site: shc.Site, gmm_set: shc.GmmSet, config: shc.CalcConfig):
    model = shc.HazardModel(
        "model", [fault_set("faults", (fault_source("fault", 10.0),), gmm_set)]
    )
    calculator = shc.HazardCalculator(2)
    calculator.hazard_curve(model, config, site)

    calculator.shutdown()
    calculator.shutdown()

    assert not calculator.running
    with pytest.raises(shc.CalculationError):
        calculator.hazard_curve(model, config, site)


def test_invalid_n_procs():
    with pytest.raises(shc.ConfigurationError):
        shc.HazardCalculator(0)


def test_hazard_result_output(
    calculator: shc.HazardCalculator,
    site: shc.Site,
    gmm_set: shc.GmmSet,
    config: shc.CalcConfig,
):
    model = shc.HazardModel(
        "model",
        [
            fault_set(
                "faults",
                (fault_source("fault_a", 5.0), fault_source("far_fault", 1000.0)),
                gmm_set,
            ),
            shc.SourceSet(
                "grid",
                shc.SourceType.GRID,
                0.5,
                (
                    shc.Source(
                        "cell",
                        (shc.Rupture(5.5, 0.05, 0.0, shc.PointSurface(10.0, 10.0, 8.0)),),
                    ),
                ),
                gmm_set,
            ),
        ],
    )

    hazard_result = calculator.hazard_curve(model, config, site)

    assert str(hazard_result) == "\n".join(
        [
            "HazardResult:",
            "FaultSourceSet:",
            "  FaultSourceSet[name=faults, weight=1.0, size=2] Used: 1",
            "GridSourceSet:",
            "  GridSourceSet[name=grid, weight=0.5, size=1] Used: 1",
        ]
    )

    summary_df = hazard_result.summary_df()
    assert summary_df["source_set"].tolist() == ["faults", "grid"]
    assert summary_df["n_sources_used"].tolist() == [1, 1]
    assert summary_df["n_sources"].tolist() == [2, 1]

    hazard_df = hazard_result.to_dataframe(shc.Imt.SA1P0)
    assert hazard_df.columns.tolist() == ["faults", "grid", "total"]
    assert hazard_df.index.name == "im_level"
    assert np.allclose(hazard_df["faults"] + hazard_df["grid"], hazard_df["total"])

    assert list(hazard_result.source_set_curves.keys()) == [
        shc.SourceType.FAULT,
        shc.SourceType.GRID,
    ]


def test_hazard_curves_multiple_sites(
    calculator: shc.HazardCalculator, gmm_set: shc.GmmSet, config: shc.CalcConfig
):
    model = shc.HazardModel(
        "model", [fault_set("faults", (fault_source("fault", 0.0),), gmm_set)]
    )
    sites = [shc.Site("near", 2.0, 10.0), shc.Site("far", 50.0, 10.0)]

    results = calculator.hazard_curves(model, config, sites)

    assert list(results.keys()) == ["near", "far"]
    near_curve = results["near"].curves()[shc.Imt.PGA]
    far_curve = results["far"].curves()[shc.Imt.PGA]
    assert isinstance(near_curve, pd.Series)
    assert np.all(near_curve.values >= far_curve.values)
    assert near_curve.values[0] > far_curve.values[0]

    with pytest.raises(shc.ConfigurationError):
        calculator.hazard_curves(model, config, [sites[0], sites[0]])
