# coding: utf-8
"""Functions to summarize the cost basis of a security from its purchase Lots.

To use this module, call summarize() with a symbol and its Lots.  Without market
data it returns a CostBasis (historical aggregates only); given the current price
and FX rate it returns a PricedCostBasis, which adds current value and unrealized
P&L in USD and GBP.

Market data is often fetched separately from purchase history.  Call
attach_market_data() to price an existing CostBasis; this reuses the stored
short-term/long-term totals and doesn't walk the Lots again.  Pricing in one step
or two gives identical results, since both go through the same code.

The functions in this module are pure.  They never mutate or reorder their input,
hold no state between calls, and read no clock except when `asof` is omitted
(it then defaults to now).  Pass `asof` explicitly for reproducible results.

Ratios (average cost, long-term percentage, P&L percentage) use zero-safe division:
summarizing no Lots yields zeros, which is a valid result for a symbol with no
recorded purchases, not an error.

To compute unrealized P&L by hand from a PricedCostBasis:
    * Value = market.priceusd * totalshares
    * Basis = totalcostusd (sum of Lot.shares * Lot.priceusd)
    * GBP P&L = (Value - Basis) * market.fxrate
"""

__all__ = [
    "BasisError",
    "IncompleteMarketData",
    "summarize",
    "attach_market_data",
    "tax_summary",
    "get_cost_basis",
]


# stdlib imports
from decimal import Decimal
import datetime as _datetime
import logging
from typing import Iterable, Optional, Union


# local imports
from costbasis import models, utils
from costbasis.money import (
    Money,
    CurrencyMismatch,
    USD,
    GBP,
    safe_divide,
    to_decimal,
)
from . import functions
from .types import (
    Lot,
    MarketData,
    CostBasis,
    PricedCostBasis,
    CostBasisSummary,
    TaxSummary,
)


class BasisError(Exception):
    """ Base class for Exceptions defined in this module """


class IncompleteMarketData(BasisError, ValueError):
    """Exception raised when only one of current price / current FX rate is given.

    Args:
        priceusd: current price as passed in.
        fxrate: current FX rate as passed in.
    """

    def __init__(self, priceusd, fxrate) -> None:
        self.priceusd = priceusd
        self.fxrate = fxrate
        super(IncompleteMarketData, self).__init__(
            "Current price and FX rate must be supplied together "
            f"(priceusd={priceusd}, fxrate={fxrate})"
        )


PriceType = Union[Money, Decimal, int, str]


def summarize(
    symbol: str,
    lots: Iterable[Lot],
    asof: Optional[_datetime.datetime] = None,
    priceusd: Optional[PriceType] = None,
    fxrate: Optional[Decimal] = None,
) -> CostBasisSummary:
    """Aggregate a security's Lots into a cost-basis summary.

    Args:
        symbol: security identifier.
        lots: every purchase of the security; doesn't need to be sorted.
        asof: moment used to classify Lots as short-term/long-term.
              By default, now.
        priceusd: current price per share, in USD.
        fxrate: current GBP per USD.

    Returns:
        PricedCostBasis if market data is given, else CostBasis.

    Raises:
        IncompleteMarketData: if only one of `priceusd`, `fxrate` is given.
        CurrencyMismatch: if `priceusd` is Money in some currency other than USD.
    """
    if (priceusd is None) != (fxrate is None):
        raise IncompleteMarketData(priceusd, fxrate)

    if asof is None:
        asof = _datetime.datetime.now()

    lots = tuple(lots)
    total, short, long = functions.accumulate(lots, asof)

    basis = CostBasis(
        symbol=symbol,
        asof=asof,
        lots=lots,
        totalshares=total.shares,
        totalcostusd=total.costusd,
        totalcostgbp=total.costgbp,
        averagecostusd=total.costusd / total.shares,
        averagecostgbp=total.costgbp / total.shares,
        weightedfxrate=safe_divide(total.fxweight, total.shares),
        shorttermshares=short.shares,
        longtermshares=long.shares,
        shorttermcostusd=short.costusd,
        longtermcostusd=long.costusd,
        shorttermcostgbp=short.costgbp,
        longtermcostgbp=long.costgbp,
    )
    logging.debug(
        f"Summarized {basis.lotcount} lots of {symbol} as of {asof}: "
        f"{basis.totalshares} shares, cost {basis.totalcostusd}"
    )

    if priceusd is None:
        return basis
    return attach_market_data(basis, priceusd, fxrate)  # type: ignore


def attach_market_data(
    summary: CostBasisSummary, priceusd: PriceType, fxrate: Decimal
) -> PricedCostBasis:
    """Mark a summary to market without re-aggregating its Lots.

    Args:
        summary: CostBasis to price.  A PricedCostBasis is re-priced from its
                 underlying CostBasis.
        priceusd: current price per share, in USD.
        fxrate: current GBP per USD.

    Raises:
        CurrencyMismatch: if `priceusd` is Money in some currency other than USD.
    """
    if isinstance(summary, PricedCostBasis):
        summary = summary.basis

    market = MarketData(priceusd=_as_usd(priceusd), fxrate=to_decimal(fxrate))
    price = market.priceusd

    currentvalueusd = price * summary.totalshares
    unrealizedpnlusd = currentvalueusd - summary.totalcostusd

    return PricedCostBasis(
        basis=summary,
        market=market,
        currentvalueusd=currentvalueusd,
        currentvaluegbp=currentvalueusd.convert(market.fxrate, GBP),
        unrealizedpnlusd=unrealizedpnlusd,
        unrealizedpnlgbp=unrealizedpnlusd.convert(market.fxrate, GBP),
        unrealizedpnlpercentage=utils.percentage(
            unrealizedpnlusd.amount, summary.totalcostusd.amount
        ),
        shorttermpnlusd=price * summary.shorttermshares - summary.shorttermcostusd,
        longtermpnlusd=price * summary.longtermshares - summary.longtermcostusd,
    )


def _as_usd(price: PriceType) -> Money:
    if isinstance(price, Money):
        if price.currency != USD:
            raise CurrencyMismatch(price.currency, USD)
        return price
    return Money(price, USD)


def tax_summary(summary: PricedCostBasis) -> TaxSummary:
    """Split a priced position's cost basis and unrealized gain by holding period.
    """
    return TaxSummary(
        shorttermshares=summary.shorttermshares,
        longtermshares=summary.longtermshares,
        shorttermcostusd=summary.shorttermcostusd,
        longtermcostusd=summary.longtermcostusd,
        shorttermgainusd=summary.shorttermpnlusd,
        longtermgainusd=summary.longtermpnlusd,
    )


def get_cost_basis(
    session,
    symbol: str,
    asof: Optional[_datetime.datetime] = None,
    priceusd: Optional[PriceType] = None,
    fxrate: Optional[Decimal] = None,
) -> CostBasisSummary:
    """Summarize the persisted purchases of a security.

    Purchases made after `asof` are excluded.  If `priceusd` is given without
    `fxrate`, the latest USD->GBP CurrencyRate on or before `asof` is used.

    Args:
        session: a sqlalchemy.Session instance bound to a database engine.
        symbol: security identifier.
        asof: moment the summary applies to.  By default, now.
        priceusd: current price per share, in USD.
        fxrate: current GBP per USD.

    Raises:
        ValueError: if an FX rate is needed and none is on file.
    """
    if asof is None:
        asof = _datetime.datetime.now()

    purchases = models.Purchase.for_symbol(session, symbol, dtend=asof)
    if priceusd is not None and fxrate is None:
        fxrate = models.CurrencyRate.get_rate(
            session, fromcurrency=USD, tocurrency=GBP, date=asof
        )
        logging.info(f"Using stored {USD}/{GBP} rate {fxrate} for {symbol}")

    return summarize(
        symbol,
        [purchase.to_lot() for purchase in purchases],
        asof=asof,
        priceusd=priceusd,
        fxrate=fxrate,
    )
