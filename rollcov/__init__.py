"""Rolling covariance accumulator.

Paired samples become singleton accumulators, a window container merges them
pairwise, and the covariance of any merged range is read back without
rescanning the samples.
"""

__all__ = [
    "config",
    "core",
    "utils",
]
