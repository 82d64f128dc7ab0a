# coding: utf-8
"""Base functions used by basis.api to aggregate Lots.
"""
from __future__ import annotations


__all__ = [
    "Totals",
    "lot_totals",
    "add_totals",
    "accumulate",
    "part_holding",
    "group_by_holding_period",
]


# stdlib imports
from decimal import Decimal
import datetime as _datetime
import functools
from typing import NamedTuple, Tuple, List, Dict, Iterable, Callable, Optional


# local imports
from costbasis import utils
from costbasis.money import Money, USD, GBP
from .types import Lot
from .predicates import HoldingPeriod, holding_period, longAsOf


class Totals(NamedTuple):
    """Running sums over a group of Lots.

    Attributes:
        shares: sum of Lot.shares.
        costusd: sum of Lot.totalusd.
        costgbp: sum of Lot.totalgbp.
        fxweight: sum of Lot.shares * Lot.fxrate (numerator of share-weighted FX).
    """

    shares: Decimal = Decimal(0)
    costusd: Money = Money.zero(USD)
    costgbp: Money = Money.zero(GBP)
    fxweight: Decimal = Decimal(0)


def lot_totals(lot: Lot) -> Totals:
    """Contribution of a single Lot to running Totals."""
    return Totals(
        shares=lot.shares,
        costusd=lot.totalusd,
        costgbp=lot.totalgbp,
        fxweight=lot.shares * lot.fxrate,
    )


def add_totals(totals0: Totals, totals1: Totals) -> Totals:
    return Totals(
        shares=totals0.shares + totals1.shares,
        costusd=totals0.costusd + totals1.costusd,
        costgbp=totals0.costgbp + totals1.costgbp,
        fxweight=totals0.fxweight + totals1.fxweight,
    )


def accumulate(
    lots: Iterable[Lot], asof: _datetime.datetime, days: Optional[int] = None
) -> Tuple[Totals, Totals, Totals]:
    """Sum Lots in a single pass, splitting them by holding period.

    No intermediate rounding; every sum is exact.

    Args:
        lots: sequence of Lots; doesn't need to be sorted.
        asof: moment used to classify each Lot.
        days: holding days to qualify as long-term.
              By default, CONFIG.longterm_days.

    Returns:
        3-tuple of:
            0) Totals over all Lots.
            1) Totals over short-term Lots.
            2) Totals over long-term Lots.
    """
    Accumulator = Tuple[Totals, Totals, Totals]

    def make_accum(
        asof: _datetime.datetime
    ) -> Callable[[Accumulator, Lot], Accumulator]:
        """Factory to produce accumulator function from as-of date"""

        def accum_lot(accum: Accumulator, lot: Lot) -> Accumulator:
            total, short, long = accum
            amounts = lot_totals(lot)

            total = add_totals(total, amounts)
            if holding_period(lot.datetime, asof, days) is HoldingPeriod.LONGTERM:
                long = add_totals(long, amounts)
            else:
                short = add_totals(short, amounts)

            return total, short, long

        return accum_lot

    initial: Accumulator = (Totals(), Totals(), Totals())
    return functools.reduce(make_accum(asof), lots, initial)


def part_holding(
    lots: Iterable[Lot], asof: _datetime.datetime
) -> Tuple[List[Lot], List[Lot]]:
    """Partition Lots into (short-term Lots, long-term Lots), keeping their order.
    """
    short, long = utils.partition(longAsOf(asof), lots)
    return list(short), list(long)


def group_by_holding_period(
    lots: Iterable[Lot], asof: _datetime.datetime
) -> Dict[HoldingPeriod, List[Lot]]:
    """Map each HoldingPeriod to its Lots.  Periods with no Lots are left out.
    """
    short, long = part_holding(lots, asof)
    groups = {HoldingPeriod.SHORTTERM: short, HoldingPeriod.LONGTERM: long}
    return {period: group for period, group in groups.items() if group}
