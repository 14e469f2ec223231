"""Helpers for reading collector CSV files back for inspection.

The collector writes plain CSV that opens directly in a spreadsheet. These
utilities load it (compressed or not) into pandas, tag each run separated by
a collector reset, and plot a column over run time per agent.
"""

from __future__ import annotations

import io
from os import PathLike
from typing import Union

import numpy as np
import pandas as pd

from soar_collector.core.compression import open_source
from soar_collector.core.schema import HEADER, SCHEMA, SETTINGS_COLUMN

PathType = Union[str, "PathLike[str]"]

NUMERIC_COLUMNS = [column.name for column in SCHEMA if column.name != "agent"]


def load_samples(path: PathType, compression: str = "none") -> "pd.DataFrame":
    """Parse a collector output file into a DataFrame.

    Header lines repeated by appended sessions are dropped. A ``run`` column
    numbers the stretches between collector resets, detected per agent as
    the wall clock going backwards.
    """
    with open_source(path, compression) as f:
        raw = f.read()
    text = raw.decode("utf-8")
    if not text.strip():
        return pd.DataFrame(columns=list(HEADER) + ["run"])

    df = pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(HEADER),
        dtype=str,
        keep_default_na=False,
    )
    df = df[df["wall clock"] != HEADER[1]].reset_index(drop=True)
    for name in NUMERIC_COLUMNS:
        df[name] = pd.to_numeric(df[name])
    df[SETTINGS_COLUMN] = df[SETTINGS_COLUMN].replace("", np.nan)

    df["run"] = 0
    for _, index in df.groupby("agent", sort=False).groups.items():
        clock = df.loc[index, "wall clock"].to_numpy()
        restarts = np.concatenate(([0], (np.diff(clock) < 0).astype(int)))
        df.loc[index, "run"] = np.cumsum(restarts)
    return df


def settings_rows(samples: "pd.DataFrame") -> "pd.DataFrame":
    """Rows that carry the settings field, one per sink binding."""
    return samples[samples[SETTINGS_COLUMN].notna()]


def plot_metric(samples: "pd.DataFrame", metric: str = "avg time/dc", ax=None):
    """Plot a column against wall clock time, one line per agent and run."""
    if metric not in samples.columns:
        raise ValueError(f"Metric '{metric}' not present in samples.")

    import matplotlib.pyplot as plt

    if ax is None:
        _, ax = plt.subplots(figsize=(10, 4))

    for (agent, run), group in samples.groupby(["agent", "run"], sort=False):
        label = agent if run == 0 else f"{agent} (run {run})"
        ax.plot(group["wall clock"], group[metric], marker="o", linewidth=1.5, label=label)

    ax.set_xlabel("Wall Clock (s)")
    ax.set_ylabel(metric)
    ax.set_title(f"{metric} over time")
    ax.grid(True, linestyle="--", alpha=0.3)
    if len(samples):
        ax.legend()
    return ax
