"""Small statistics helpers for reimbursement history."""

from collections import defaultdict
from datetime import date


def mean(values: list[float]) -> float:
    """Arithmetic mean, 0 for no values."""
    return sum(values) / len(values) if values else 0.0


def variance(values: list[float]) -> float:
    """Population variance, 0 for no values."""
    if not values:
        return 0.0
    avg = mean(values)
    return mean([(v - avg) ** 2 for v in values])


def half_split_trend(values: list[float]) -> float:
    """Relative change from the first half's mean to the second half's mean."""
    if len(values) < 2:
        return 0.0
    middle = len(values) // 2
    first_avg = mean(values[:middle])
    second_avg = mean(values[middle:])
    return (second_avg - first_avg) / first_avg if first_avg > 0 else 0.0


def seasonal_variation(observations: list[tuple[date, float]]) -> float:
    """Variance of per-calendar-month means over the mean of those means."""
    by_month: dict[int, list[float]] = defaultdict(list)
    for day, amount in observations:
        by_month[day.month].append(amount)

    monthly_means = [mean(amounts) for amounts in by_month.values()]
    if not monthly_means:
        return 0.0

    overall = mean(monthly_means)
    return variance(monthly_means) / overall if overall > 0 else 0.0
