"""Rank statistics shared by calibration and drift monitoring."""

from __future__ import annotations

from typing import Mapping, Sequence

from scipy import stats as sp_stats


def rank(values: Sequence[float]) -> list[float]:
    """1-based ascending ranks; tied values share their average rank."""

    return [float(value) for value in sp_stats.rankdata(values, method="average")]


def spearman(predicted: Sequence[float], actual: Sequence[float]) -> float:
    """Spearman rank correlation, ``1 - 6*sum(d^2) / (n*(n^2-1))``.

    Defined as 0.0 when fewer than two pairs are available.
    """

    if len(predicted) != len(actual):
        raise ValueError("predicted and actual must have the same length")
    n = len(predicted)
    if n < 2:
        return 0.0
    predicted_ranks = rank(predicted)
    actual_ranks = rank(actual)
    sum_d2 = sum((p - a) ** 2 for p, a in zip(predicted_ranks, actual_ranks))
    return 1.0 - (6.0 * sum_d2) / (n * (n * n - 1))


def mape(predicted: Sequence[float], actual: Sequence[float]) -> float:
    """Mean absolute percentage error; pairs with a zero actual add nothing."""

    if len(predicted) != len(actual):
        raise ValueError("predicted and actual must have the same length")
    if not predicted:
        return 0.0
    total = 0.0
    for p, a in zip(predicted, actual):
        if a == 0:
            continue
        total += abs((p - a) / a)
    return total / len(predicted)


def weighted_overall(per_group: Mapping[str, float], counts: Mapping[str, int]) -> float:
    """Average of per-group metrics weighted by group size."""

    total = sum(counts.get(key, 0) for key in per_group)
    if total == 0:
        return 0.0
    return sum(value * counts.get(key, 0) for key, value in per_group.items()) / total
