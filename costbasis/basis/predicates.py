# coding: utf-8
"""
Holding-period classification, and filter predicates built on it to select Lots.

A Lot is long-term once it has been held [books] longterm_days calendar days
(365 unless configured otherwise), counting the boundary day: a Lot bought
exactly 365 days before the as-of date is long-term, one bought 364 days before
is short-term.  The setting is read each time a Lot is classified.

N.B. IRS Pub 550 grants long-term treatment only for property held *more than*
1 year, counted from the day after acquisition.  The inclusive 365-day boundary
used here is the product's stated rule and has not been reconciled with that;
set [books] longterm_days = 366 in the config file to require the extra day.

Classification is a total function of two dates.  A Lot dated after the as-of
date has a negative holding period and is short-term.
"""
from __future__ import annotations


__all__ = [
    "HoldingPeriod",
    "holding_period",
    "PredicateType",
    "longAsOf",
    "shortAsOf",
]


# stdlib imports
import datetime as _datetime
import enum
from typing import TYPE_CHECKING, Callable, Optional, Union


# local imports
from costbasis import utils, CONFIG

# Avoid recursive imports basis.types <-> basis.predicates
# We only need basis.types namespace for type annotations.
if TYPE_CHECKING:
    from .types import Lot


@enum.unique
class HoldingPeriod(enum.Enum):
    """Tax character of a Lot's holding period."""

    SHORTTERM = "short_term"
    LONGTERM = "long_term"

    @property
    def display_name(self) -> str:
        return {
            HoldingPeriod.SHORTTERM: "Short-Term",
            HoldingPeriod.LONGTERM: "Long-Term",
        }[self]

    @property
    def description(self) -> str:
        return {
            HoldingPeriod.SHORTTERM: "Held less than 1 year",
            HoldingPeriod.LONGTERM: "Held 1 year or more",
        }[self]

    @property
    def tax_implication(self) -> str:
        return {
            HoldingPeriod.SHORTTERM: "Taxed as ordinary income",
            HoldingPeriod.LONGTERM: "Preferential capital gains rates",
        }[self]


DateType = Union[_datetime.date, _datetime.datetime]


def holding_period(
    opendt: DateType, asof: DateType, days: Optional[int] = None
) -> HoldingPeriod:
    """Classify a holding begun at `opendt` as of `asof`.

    Args:
        opendt: acquisition date/time.
        asof: moment the classification applies to.
        days: holding days (inclusive) to qualify as long-term.
              By default, CONFIG.longterm_days.

    Returns:
        HoldingPeriod.LONGTERM if held at least `days` calendar days,
        else HoldingPeriod.SHORTTERM.
    """
    if days is None:
        days = CONFIG.longterm_days
    if utils.days_between(opendt, asof) >= days:
        return HoldingPeriod.LONGTERM
    return HoldingPeriod.SHORTTERM


PredicateType = Callable[["Lot"], bool]


def longAsOf(datetime: DateType) -> PredicateType:
    """Factory for functions that select Lots held long-term as of datetime.

    Args:
        datetime: a datetime.datetime instance.

    Returns:
        Filter function accepting a Lot instance and returning bool.
    """

    def isLong(lot: Lot) -> bool:
        return holding_period(lot.datetime, datetime) is HoldingPeriod.LONGTERM

    return isLong


def shortAsOf(datetime: DateType) -> PredicateType:
    """Factory for functions that select Lots held short-term as of datetime.

    Note:
        Includes Lots dated after `datetime`.

    Args:
        datetime: a datetime.datetime instance.

    Returns:
        Filter function accepting a Lot instance and returning bool.
    """

    def isShort(lot: Lot) -> bool:
        return holding_period(lot.datetime, datetime) is HoldingPeriod.SHORTTERM

    return isShort
