# coding: utf-8
"""
Data structures for cost-basis accounting of a single security.

Each Lot records one purchase - (date, shares, USD price, FX rate).  Lots are
immutable; the set of Lots for a security grows as purchases occur, but a Lot is
never edited once recorded.  Corrections arrive as new, compensating records.

FX rates are quoted as GBP per USD throughout, i.e. multiply a USD amount by the
rate to get the GBP amount:
    * Lot.totalgbp = Lot.totalusd * Lot.fxrate
    * PricedCostBasis.unrealizedpnlgbp = unrealizedpnlusd * MarketData.fxrate

A cost-basis summary comes in two shapes:
    * CostBasis - aggregates over the historical Lots only.  Knows nothing about
      the market, so it has no current value or P&L attributes at all.
    * PricedCostBasis - a CostBasis bound to MarketData (current price, current FX
      rate), adding current value and unrealized P&L.

CostBasisSummary is the union of the two.  A priced summary exposes every
attribute of its CostBasis, so code that only needs historical aggregates can
accept either one.

Nothing in this module changes a Lot or a summary, once created.
"""

__all__ = [
    "HoldingPeriod",
    "Lot",
    "MarketData",
    "CostBasis",
    "PricedCostBasis",
    "CostBasisSummary",
    "TaxSummary",
]


# stdlib imports
from decimal import Decimal
import datetime as _datetime
from typing import NamedTuple, Tuple, Optional, Union


# local imports
from costbasis import utils
from costbasis.money import Money, USD, GBP, safe_divide
from .predicates import HoldingPeriod, holding_period


class Lot(NamedTuple):
    """A single purchase of a security.

    Attributes:
        datetime: acquisition date/time; starts the holding period.
        shares: amount of security purchased (positive).
        priceusd: per-share purchase price in USD.
        fxrate: GBP per USD at acquisition.
        uniqueid: identifier of the upstream purchase record, if any.
    """

    datetime: _datetime.datetime
    shares: Decimal
    priceusd: Decimal
    fxrate: Decimal
    uniqueid: Optional[str] = None

    @property
    def totalusd(self) -> Money:
        return Money(self.shares * self.priceusd, USD)

    @property
    def totalgbp(self) -> Money:
        return self.totalusd.convert(self.fxrate, GBP)

    @property
    def pricegbp(self) -> Money:
        return Money(self.priceusd, USD).convert(self.fxrate, GBP)

    def holding_days(self, asof: Optional[_datetime.datetime] = None) -> int:
        """Calendar days held as of `asof` (default now); negative if not yet bought.
        """
        return utils.days_between(self.datetime, asof or _datetime.datetime.now())

    def holding_period(
        self, asof: Optional[_datetime.datetime] = None
    ) -> HoldingPeriod:
        return holding_period(self.datetime, asof or _datetime.datetime.now())

    def is_longterm(self, asof: Optional[_datetime.datetime] = None) -> bool:
        return self.holding_period(asof) is HoldingPeriod.LONGTERM


class MarketData(NamedTuple):
    """Live market inputs used to mark a position to market.

    Attributes:
        priceusd: current price per share (must be USD).
        fxrate: current GBP per USD.
    """

    priceusd: Money
    fxrate: Decimal


class CostBasis(NamedTuple):
    """Historical cost-basis aggregates for one security as of a moment.

    All totals are exact sums over `lots`; averages use zero-safe division, so a
    summary of no Lots is a valid all-zero result rather than an error.

    Attributes:
        symbol: security identifier.
        asof: moment used to classify Lots as short-term or long-term.
        lots: every contributing Lot, in the order the caller supplied them.
        totalshares: sum of Lot.shares.
        totalcostusd: sum of Lot.totalusd.
        totalcostgbp: sum of Lot.totalgbp.
        averagecostusd: totalcostusd / totalshares.
        averagecostgbp: totalcostgbp / totalshares.
        weightedfxrate: mean Lot.fxrate weighted by Lot.shares.
        shorttermshares: shares in short-term Lots.
        longtermshares: shares in long-term Lots.
        shorttermcostusd: USD cost of short-term Lots.
        longtermcostusd: USD cost of long-term Lots.
        shorttermcostgbp: GBP cost of short-term Lots.
        longtermcostgbp: GBP cost of long-term Lots.
    """

    symbol: str
    asof: _datetime.datetime
    lots: Tuple[Lot, ...]
    totalshares: Decimal
    totalcostusd: Money
    totalcostgbp: Money
    averagecostusd: Money
    averagecostgbp: Money
    weightedfxrate: Decimal
    shorttermshares: Decimal
    longtermshares: Decimal
    shorttermcostusd: Money
    longtermcostusd: Money
    shorttermcostgbp: Money
    longtermcostgbp: Money

    @property
    def lotcount(self) -> int:
        return len(self.lots)

    @property
    def longtermpercentage(self) -> Decimal:
        return utils.percentage(self.longtermshares, self.totalshares)

    @property
    def averagefxrate(self) -> Decimal:
        """Unweighted mean of Lot.fxrate (cf. weightedfxrate)."""
        return safe_divide(sum(lot.fxrate for lot in self.lots), len(self.lots))

    @property
    def shorttermlots(self) -> Tuple[Lot, ...]:
        return tuple(lot for lot in self.lots if not lot.is_longterm(self.asof))

    @property
    def longtermlots(self) -> Tuple[Lot, ...]:
        return tuple(lot for lot in self.lots if lot.is_longterm(self.asof))

    @property
    def firstpurchase(self) -> Optional[_datetime.datetime]:
        return min((lot.datetime for lot in self.lots), default=None)

    @property
    def lastpurchase(self) -> Optional[_datetime.datetime]:
        return max((lot.datetime for lot in self.lots), default=None)

    @property
    def holdingperioddays(self) -> Optional[int]:
        first = self.firstpurchase
        if first is None:
            return None
        return utils.days_between(first, self.asof)


class PricedCostBasis(NamedTuple):
    """CostBasis marked to market.

    Every CostBasis attribute (totalshares, lots, etc.) is also readable directly
    from a PricedCostBasis instance.

    Attributes:
        basis: the historical aggregates being priced.
        market: current price / FX rate used for pricing.
        currentvalueusd: market.priceusd * totalshares.
        currentvaluegbp: currentvalueusd at market.fxrate.
        unrealizedpnlusd: currentvalueusd - totalcostusd.
        unrealizedpnlgbp: unrealizedpnlusd at market.fxrate (not the historical
                          rates - this is P&L marked to today).
        unrealizedpnlpercentage: unrealizedpnlusd as percent of totalcostusd.
        shorttermpnlusd: unrealized P&L of short-term Lots only.
        longtermpnlusd: unrealized P&L of long-term Lots only.
    """

    basis: CostBasis
    market: MarketData
    currentvalueusd: Money
    currentvaluegbp: Money
    unrealizedpnlusd: Money
    unrealizedpnlgbp: Money
    unrealizedpnlpercentage: Decimal
    shorttermpnlusd: Money
    longtermpnlusd: Money

    def __getattr__(self, name):
        # Only reached for names not found on PricedCostBasis itself.
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self.basis, name)

    @property
    def currentpriceusd(self) -> Money:
        return self.market.priceusd

    @property
    def currentfxrate(self) -> Decimal:
        return self.market.fxrate

    @property
    def isprofitable(self) -> bool:
        return self.unrealizedpnlusd.is_positive


CostBasisSummary = Union[CostBasis, PricedCostBasis]
"""Type alias for either shape of cost-basis summary.

An unpriced CostBasis has no market-dependent attributes, so "market data not yet
known" can't be mistaken for "zero P&L".
"""


class TaxSummary(NamedTuple):
    """Tax-relevant split of a priced position by holding period.

    Attributes:
        shorttermshares: shares held short-term.
        longtermshares: shares held long-term.
        shorttermcostusd: USD cost basis of short-term shares.
        longtermcostusd: USD cost basis of long-term shares.
        shorttermgainusd: unrealized USD gain/loss on short-term shares.
        longtermgainusd: unrealized USD gain/loss on long-term shares.
    """

    shorttermshares: Decimal
    longtermshares: Decimal
    shorttermcostusd: Money
    longtermcostusd: Money
    shorttermgainusd: Money
    longtermgainusd: Money

    @property
    def totalunrealizedgainusd(self) -> Money:
        return self.shorttermgainusd + self.longtermgainusd

    @property
    def haslongterm(self) -> bool:
        return self.longtermshares > 0

    @property
    def hasshortterm(self) -> bool:
        return self.shorttermshares > 0
