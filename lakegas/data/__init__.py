"""Calibration data and input schema helpers."""

from .registry import ErrorRegistry, ErrorSpec, load_registry
from .schema import PhysicalSample

__all__ = ["ErrorRegistry", "ErrorSpec", "PhysicalSample", "load_registry"]
