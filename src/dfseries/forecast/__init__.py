"""Forecasting routines that consume series through their public contract."""

from .ets import simple_exponential_smoothing

__all__ = ["simple_exponential_smoothing"]
