"""Public analysis helpers exposed by soar_collector."""

from .samples import load_samples, plot_metric, settings_rows

__all__ = [
    "load_samples",
    "plot_metric",
    "settings_rows",
]
