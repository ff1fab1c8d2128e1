"""
Text rendering for Jrrp command output
"""

import calendar
from typing import Dict, List, Optional, Sequence, Tuple

from .config import CALLER_MARK, EMPTY_DAY, OTHER_MARK
from .models import Leaderboard, LuckResult, RankLookup, RankStatus
from .ranking import compare_histories
from .utils import normalize_month

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def roll_message(name: str, result: LuckResult) -> str:
    if result.from_event:
        return f"{result.event_reason}! {name}'s luck today is {result.value}"
    if result.created:
        return f"{name}'s luck today is {result.value}"
    return (
        f"{name} already checked today, it's {result.value}. "
        "Asking again won't change it..."
    )


def average_message(name: str, average: float) -> str:
    return f"{name}'s average luck is {average:.2f}"


def rank_message(name: str, lookup: RankLookup, reverse: bool = False) -> str:
    if lookup.status is RankStatus.FOUND:
        direction = " from the bottom" if reverse else ""
        return f"{name} is ranked #{lookup.rank}{direction} today"
    if lookup.status is RankStatus.NOT_IN_TOP:
        return f"{name} didn't make the board today"
    return f"{name} hasn't checked their luck today"


def leaderboard_lines(board: Leaderboard, caller_uid: Optional[str] = None) -> str:
    """One line per entry, the caller marked with a full-width star."""
    lines = []
    for i, entry in enumerate(board.entries, 1):
        mark = CALLER_MARK if entry.uid == caller_uid else OTHER_MARK
        lines.append(f"{mark} {i}. {entry.name}: {entry.value}")
    return "\n".join(lines)


def _cell(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:.1f}"
    return str(value)


def history_table(
    own: Sequence[Tuple[str, int]],
    *,
    averages: Optional[Sequence[Tuple[str, float]]] = None,
    other: Optional[Sequence[Tuple[str, int]]] = None,
    own_label: str = "you",
    other_label: str = "them",
) -> str:
    """
    History as text.

    Without extras this is "day: value" per line. A moving average and/or a
    second user's series add aligned columns.
    """
    if averages is None and other is None:
        return "\n".join(f"{day}: {value}" for day, value in own)

    avg_map: Dict[str, float] = dict(averages or [])
    rows = compare_histories(own, other or [])

    header = ["day", own_label]
    if other is not None:
        header.append(other_label)
    if averages is not None:
        header.append("avg")

    table: List[List[str]] = [header]
    for day, own_value, other_value in rows:
        row = [day, _cell(own_value)]
        if other is not None:
            row.append(_cell(other_value))
        if averages is not None:
            row.append(_cell(avg_map.get(day)))
        table.append(row)

    widths = [max(len(row[col]) for row in table) for col in range(len(header))]
    return "\n".join(
        "  ".join(cell.rjust(width) if col else cell.ljust(width) for col, (cell, width) in enumerate(zip(row, widths)))
        for row in table
    )


def month_calendar(series: Sequence[Tuple[str, int]], year_month: str) -> str:
    """Monday-first month grid; days without a record show a dot."""
    year_month = normalize_month(year_month)
    year, month = (int(part) for part in year_month.split("-"))
    values = {int(day[8:10]): value for day, value in series if day.startswith(f"{year_month}-")}

    lines = [year_month.center(len(WEEKDAYS) * 4 - 1).rstrip(), " ".join(f"{d:>3}" for d in WEEKDAYS)]
    for week in calendar.Calendar(firstweekday=0).monthdayscalendar(year, month):
        cells = []
        for day in week:
            if day == 0:
                cells.append("   ")
            else:
                value = values.get(day)
                cells.append(f"{EMPTY_DAY if value is None else value:>3}")
        lines.append(" ".join(cells).rstrip())
    return "\n".join(lines)
