from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np


logger = logging.getLogger(__name__)

POLICIES = ("ieee", "raise")


class InsufficientSamplesError(ValueError):
    """Covariance requested for fewer than two samples under the 'raise' policy."""

    def __init__(self, count: int) -> None:
        super().__init__(f"covariance needs at least 2 samples, got {count}")
        self.count = count


@dataclass(frozen=True)
class CovarianceAccumulator:
    """Sufficient statistics for the sample covariance of paired observations.

    Expanding sum((xi - mean_x) * (yi - mean_y)) and substituting
    mean_x = sum_x / n, mean_y = sum_y / n cancels every mean-dependent term
    except sum_x * sum_y / n, so

        cov = (cross_sum - sum_x * sum_y / n) / (n - 1)

    The four fields on the right are plain sums, which makes merging two
    disjoint ranges a field-wise addition. This is the naive formula and it
    suffers from catastrophic cancellation when the data sits far from zero.

    ``last_x``/``last_y`` hold the pair a singleton was built from. Merging keeps
    the left operand's pair, so after any merge they carry no meaning.
    """

    last_x: float
    last_y: float
    cross_sum: float
    sum_x: float
    sum_y: float
    count: int

    @classmethod
    def create(cls, x: float, y: float) -> "CovarianceAccumulator":
        x = float(x)
        y = float(y)
        return cls(last_x=x, last_y=y, cross_sum=x * y, sum_x=x, sum_y=y, count=1)

    def merge(self, other: "CovarianceAccumulator") -> "CovarianceAccumulator":
        return CovarianceAccumulator(
            last_x=self.last_x,
            last_y=self.last_y,
            cross_sum=self.cross_sum + other.cross_sum,
            sum_x=self.sum_x + other.sum_x,
            sum_y=self.sum_y + other.sum_y,
            count=self.count + other.count,
        )

    __add__ = merge

    def value(self, policy: str = "ieee") -> float:
        if policy not in POLICIES:
            raise ValueError(f"Unknown insufficient-samples policy: {policy!r}")
        if self.count < 2:
            logger.debug(
                "covariance undefined for fewer than two samples",
                extra={
                    "count": self.count,
                    "policy": policy,
                    "cross_sum": self.cross_sum,
                    "sum_x": self.sum_x,
                    "sum_y": self.sum_y,
                },
            )
            if policy == "raise":
                raise InsufficientSamplesError(self.count)

        n = np.float64(self.count)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            numerator = np.float64(self.cross_sum) - np.float64(self.sum_x) * np.float64(self.sum_y) / n
            return float(numerator / (n - 1.0))

    def __str__(self) -> str:
        return str(self.value())


def create(x: float, y: float) -> CovarianceAccumulator:
    return CovarianceAccumulator.create(x, y)


def merge(a: CovarianceAccumulator, b: CovarianceAccumulator) -> CovarianceAccumulator:
    """Combine accumulators over disjoint samples. The caller guarantees disjointness."""
    return a.merge(b)


def value(a: CovarianceAccumulator, policy: str = "ieee") -> float:
    """Sample covariance (n - 1 denominator) of the samples summarized by ``a``.

    A single sample gives a zero denominator. With the default 'ieee' policy
    that yields NaN (zero numerator) or a signed infinity, as float64 division
    does; with 'raise' an InsufficientSamplesError is raised instead.
    """
    return a.value(policy)


def get_x(a: CovarianceAccumulator) -> float:
    return a.last_x


def get_y(a: CovarianceAccumulator) -> float:
    return a.last_y


def accumulate(pairs: Iterable[Tuple[float, float]]) -> CovarianceAccumulator:
    """Fold ``create``/``merge`` left to right over (x, y) pairs."""
    acc = None
    for x, y in pairs:
        single = create(x, y)
        acc = single if acc is None else acc.merge(single)
    if acc is None:
        raise ValueError("cannot accumulate covariance over zero samples")
    return acc


def covariance(xs: Sequence[float], ys: Sequence[float], policy: str = "ieee") -> float:
    """Sample covariance of two series, truncated to the shorter one."""
    return accumulate(zip(xs, ys)).value(policy)
