"""
Trailing moving average over a luck history.
"""

from typing import List, Sequence, Tuple

from .errors import ValidationError, WindowLengthError


def moving_average(series: Sequence[Tuple[str, float]], window: int) -> List[Tuple[str, float]]:
    """
    Mean of each `window` consecutive points, labelled with the day of the
    window's last point.

    `series` must be sorted by day. Returns len(series) - window + 1 points.
    The window sum is carried forward: one value leaves, one enters.
    """
    length = len(series)
    if isinstance(window, bool) or not isinstance(window, int):
        raise ValidationError(f"Window length must be an integer, got {window!r}.")
    if window <= 0 or window > length:
        raise WindowLengthError(window, length)

    values = [value for _, value in series]
    total = sum(values[:window])
    averages = [(series[window - 1][0], total / window)]
    for i in range(window, length):
        total += values[i] - values[i - window]
        averages.append((series[i][0], total / window))
    return averages
