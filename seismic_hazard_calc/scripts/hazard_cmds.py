import importlib
import logging
import multiprocessing as mp
from pathlib import Path

import numpy as np
import pandas as pd
import typer

import seismic_hazard_calc as shc

app = typer.Typer()


def load_model(model_factory: str) -> shc.HazardModel:
    """
    Loads the hazard model via a factory
    specified as `module:callable`
    """
    module_name, _, factory_name = model_factory.partition(":")
    if not module_name or not factory_name:
        raise ValueError(
            f"Invalid model factory {model_factory!r}, expected `module:callable`"
        )

    model = getattr(importlib.import_module(module_name), factory_name)()
    if not isinstance(model, shc.HazardModel):
        raise TypeError(f"{model_factory} did not return a HazardModel")
    return model


@app.command("compute-hazard")
def compute_hazard(
    model_factory: str = typer.Argument(
        ..., help="Hazard model factory, as `module:callable`"
    ),
    config_ffp: Path = typer.Argument(..., help="Calculation config yaml file"),
    output_dir: Path = typer.Argument(
        ..., help="Directory to save the hazard curves"
    ),
    site_x: float = typer.Option(..., help="Site x coordinate (km)"),
    site_y: float = typer.Option(..., help="Site y coordinate (km)"),
    vs30: float = typer.Option(760.0, help="Site vs30 (m/s)"),
    vs30measured: bool = typer.Option(True, help="Whether vs30 is measured"),
    z1p0: float = typer.Option(None, help="Depth to 1.0 km/s (km)"),
    z2p5: float = typer.Option(None, help="Depth to 2.5 km/s (km)"),
    backarc: bool = typer.Option(False, help="Whether the site is in the backarc"),
    site_name: str = typer.Option("site", help="Name of the site"),
    n_procs: int = typer.Option(mp.cpu_count(), help="Number of workers"),
    processes: bool = typer.Option(
        False, help="Use worker processes, requires picklable (module level) GMMs"
    ),
):
    """
    Compute the hazard curves for a single site,
    saves the total and per source set hazard curve for each IM
    """
    logging.basicConfig(level=logging.INFO)

    config = shc.CalcConfig.from_yaml(config_ffp)
    model = load_model(model_factory)
    site = shc.Site(
        site_name,
        site_x,
        site_y,
        vs30=vs30,
        vs30measured=vs30measured,
        z1p0=z1p0,
        z2p5=z2p5,
        backarc=backarc,
    )

    with shc.HazardCalculator(n_procs, processes=processes) as calculator:
        hazard_result = calculator.hazard_curve(model, config, site)

    output_dir.mkdir(parents=True, exist_ok=True)
    for cur_im in config.imts:
        hazard_result.to_dataframe(cur_im).to_csv(
            output_dir / f"{shc.utils.get_im_file_format(cur_im)}_hazard.csv"
        )
    hazard_result.summary_df().to_csv(output_dir / "source_sets.csv", index=False)
    print(hazard_result)


@app.command("compute-uhs")
def compute_uhs(
    hazard_dir: Path = typer.Argument(
        ..., help="Directory containing the hazard curves"
    ),
    output_ffp: Path = typer.Argument(
        ..., help="File path to save the computed UHS DataFrame"
    ),
    excd_probs: list[float] = typer.Option(
        None,
        help="List of exceedance probabilities to compute UHS for. "
        "One of `excd_probs` or `rps` must be provided.",
    ),
    rps: list[float] = typer.Option(
        None,
        help="List of return periods to compute UHS for. "
        "One of `excd_probs` or `rps` must be provided.",
    ),
):
    """Compute the Uniform Hazard Spectrum (UHS) from the total hazard curves."""
    if not (excd_probs or rps):
        raise ValueError("One of `excd_probs` or `rps` must be provided.")
    if excd_probs and rps:
        raise ValueError("Only one of `excd_probs` or `rps` can be provided.")

    # Ensure we have both RPs and exceedance probabilities
    excd_probs = (
        excd_probs if excd_probs else [shc.utils.rp_to_prob(cur_rp) for cur_rp in rps]
    )
    rps = (
        rps
        if rps
        else [int(np.round(shc.utils.prob_to_rp(cur_excd))) for cur_excd in excd_probs]
    )

    # Load the total hazard curves
    hcurves = {
        shc.Imt(
            shc.utils.reverse_im_file_format(ffp.name.rsplit("_", 1)[0])
        ): pd.read_csv(ffp, index_col=0)["total"]
        for ffp in hazard_dir.glob("*_hazard.csv")
    }

    uhs_df = shc.uhs.compute_uhs(hcurves, excd_probs, rps=rps)
    uhs_df.to_csv(output_ffp)


if __name__ == "__main__":
    app()
