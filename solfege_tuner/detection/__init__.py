"""Fundamental frequency estimators."""

from .autocorrelation import AutoCorrelationEstimator

__all__ = ["AutoCorrelationEstimator"]
