"""
Utility functions used by costbasis modules
"""
import itertools
from decimal import Decimal, ROUND_HALF_UP
import datetime
from typing import Any, Tuple, Iterable, Callable, Union


def partition(
    pred: Callable[[Any], bool], iterable: Iterable
) -> Tuple[Iterable, Iterable]:
    """Use a predicate to partition entries into false entries and true entries

    https://docs.python.org/3/library/itertools.html#itertools-recipes
    """
    # partition(is_odd, range(10)) --> 0 2 4 6 8   and  1 3 5 7 9
    t1, t2 = itertools.tee(iterable)
    return itertools.filterfalse(pred, t1), filter(pred, t2)


def round_decimal(number: Union[int, Decimal], power: int = -4) -> Decimal:
    """Convert to Decimal; round to units if possible, else round to desired exponent.
    """
    d = Decimal(number)
    return (
        d.quantize(Decimal(1))
        if d == d.to_integral_value()
        else d.quantize(Decimal("10") ** power, rounding=ROUND_HALF_UP)
    )


def percentage(part: Union[int, Decimal], total: Union[int, Decimal]) -> Decimal:
    """`part` as a percentage of `total` (15 means 15%); zero if `total` is zero."""
    if total == 0:
        return Decimal(0)
    return Decimal(part) / Decimal(total) * 100


def percentage_change(
    new: Union[int, Decimal], original: Union[int, Decimal]
) -> Decimal:
    """Percent change from `original` to `new`; zero if `original` is zero."""
    if original == 0:
        return Decimal(0)
    return (Decimal(new) - Decimal(original)) / Decimal(original) * 100


def as_date(dt: Union[datetime.date, datetime.datetime]) -> datetime.date:
    """Strip the time of day, leaving the calendar date."""
    #  datetime.datetime is a subclass of datetime.date; test it first.
    if isinstance(dt, datetime.datetime):
        return dt.date()
    return dt


def days_between(
    start: Union[datetime.date, datetime.datetime],
    end: Union[datetime.date, datetime.datetime],
) -> int:
    """Count calendar days from `start` to `end`.

    Times of day are ignored: a purchase at 23:59 and an as-of moment at 00:01 the
    next morning are 1 day apart.  Negative if `end` precedes `start`.

    Any combination of datetime.date and datetime.datetime works.
    """
    return (as_date(end) - as_date(start)).days
