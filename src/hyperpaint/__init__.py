"""hyperpaint - 4D-to-3D projection engine and spatial store for painting in four dimensions."""

from hyperpaint.logging_config import configure_logging, get_logger

__version__ = "0.1.0"

__all__ = ["__version__", "configure_logging", "get_logger"]
