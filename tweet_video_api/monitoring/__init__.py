from .metrics import PrometheusExporter
from .monitor import Monitor

__all__ = ["Monitor", "PrometheusExporter"]
