"""Core primitives: the mergeable covariance accumulator.

A sliding-window container stores one accumulator per sample and merges
neighbouring accumulators to summarize any contiguous range in constant time
per merge.
"""

from .covariance import (
    CovarianceAccumulator,
    InsufficientSamplesError,
    accumulate,
    covariance,
    create,
    get_x,
    get_y,
    merge,
    value,
)

__all__ = [
    "CovarianceAccumulator",
    "InsufficientSamplesError",
    "accumulate",
    "covariance",
    "create",
    "get_x",
    "get_y",
    "merge",
    "value",
]
