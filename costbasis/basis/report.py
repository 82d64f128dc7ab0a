# coding: utf-8
"""Data structures and functions to prepare Lots and cost-basis summaries for
serialization, and to recover purchase records from deserialized data.

Conversion for serialization is a two-step process.

First each Lot or summary is "flattened" into an un-nested intermediate sequence
(FlatLot or FlatSummary), with Money reduced to its amount (the currency is implied
by the column name) and holding period resolved against the summary's as-of date.

Next each FlatLot or FlatSummary is "exported", i.e. numbers are rounded for display.
This is the only place anything gets rounded.

The exported rows are packed into a tablib.Dataset, which handles the actual CSV /
JSON formatting.  Deserialization goes the other way: Dataset rows are "imported",
i.e. type-converted from strings into Lots or currency rate attributes.

This module doesn't perform the actual reading or writing; callers handle that by
working with tablib.Dataset instances passed into/out of these functions.
"""
__all__ = [
    "FlatLot",
    "FlatSummary",
    "PURCHASE_HEADERS",
    "RATE_HEADERS",
    "flatten_lots",
    "flatten_lot",
    "export_flatlot",
    "flatten_summaries",
    "flatten_summary",
    "export_flatsummary",
    "import_purchase",
    "import_rate",
]

# stdlib imports
from decimal import Decimal, InvalidOperation
import datetime as _datetime
from typing import Tuple, NamedTuple, Mapping, Iterable, Optional, Any

# 3rd part imports
import tablib

# local imports
from costbasis import utils, CONFIG
from costbasis.money import validate_currency
from .types import Lot, CostBasisSummary, PricedCostBasis
from .sortkeys import SortType, OLDEST


class FlatLot(NamedTuple):
    """Un-nested container for Lot data, suitable for serialization.

    Attributes:
        symbol: security identifier.
        uniqueid: identifier of the upstream purchase record.
        datetime: acquisition date/time.
        shares: amount of security purchased.
        priceusd: per-share purchase price in USD.
        fxrate: GBP per USD at acquisition.
        totalusd: USD cost of the Lot.
        totalgbp: GBP cost of the Lot.
        holdingdays: calendar days held as of the summary date.
        holdingperiod: HoldingPeriod value, e.g. "long_term".
    """

    symbol: str
    uniqueid: Optional[str]
    datetime: _datetime.datetime
    shares: Decimal
    priceusd: Decimal
    fxrate: Decimal
    totalusd: Decimal
    totalgbp: Decimal
    holdingdays: int
    holdingperiod: str


class FlatSummary(NamedTuple):
    """Un-nested container for cost-basis summary data, suitable for serialization.

    Order of attributes defines column order of serialized data.  Market-dependent
    attributes are None for a summary that hasn't been priced.
    """

    symbol: str
    asof: _datetime.datetime
    lotcount: int
    totalshares: Decimal
    totalcostusd: Decimal
    totalcostgbp: Decimal
    averagecostusd: Decimal
    averagecostgbp: Decimal
    weightedfxrate: Decimal
    shorttermshares: Decimal
    longtermshares: Decimal
    longtermpercentage: Decimal
    currentpriceusd: Optional[Decimal] = None
    currentfxrate: Optional[Decimal] = None
    currentvalueusd: Optional[Decimal] = None
    currentvaluegbp: Optional[Decimal] = None
    unrealizedpnlusd: Optional[Decimal] = None
    unrealizedpnlgbp: Optional[Decimal] = None
    unrealizedpnlpercentage: Optional[Decimal] = None
    shorttermpnlusd: Optional[Decimal] = None
    longtermpnlusd: Optional[Decimal] = None


#  Columns needed to recreate a Lot; any other columns (e.g. the rest of FlatLot)
#  are ignored on import.
PURCHASE_HEADERS = ("uniqueid", "symbol", "datetime", "shares", "priceusd", "fxrate")
RATE_HEADERS = ("date", "fromcurrency", "tocurrency", "rate")


def flatten_lots(
    summary: CostBasisSummary,
    sort: Optional[SortType] = None,
    places: Optional[int] = None,
) -> tablib.Dataset:
    """Convert a summary's Lots into tablib.Dataset prepared for serialization.

    Columns are the fields of FlatLot; rows represent Lot instances.

    Args:
        summary: CostBasis or PricedCostBasis whose Lots to report.
        sort: display order of Lots.  By default, oldest first.
        places: decimal places to round to.  By default, from config.
    """
    dataset = tablib.Dataset(headers=FlatLot._fields)
    for lot in sorted(summary.lots, **(sort or OLDEST)):
        flatlot = flatten_lot(summary.symbol, lot, summary.asof)
        dataset.append(export_flatlot(flatlot, places))
    return dataset


def flatten_lot(symbol: str, lot: Lot, asof: _datetime.datetime) -> FlatLot:
    """Convert a Lot instance into unnested intermediate FlatLot representation.

    Args:
        symbol: security of the Lot.
        lot: Lot instance being flattened.
        asof: moment used to classify the Lot.
    """
    return FlatLot(
        symbol=symbol,
        uniqueid=lot.uniqueid,
        datetime=lot.datetime,
        shares=lot.shares,
        priceusd=lot.priceusd,
        fxrate=lot.fxrate,
        totalusd=lot.totalusd.amount,
        totalgbp=lot.totalgbp.amount,
        holdingdays=lot.holding_days(asof),
        holdingperiod=lot.holding_period(asof).value,
    )


def export_flatlot(flatlot: FlatLot, places: Optional[int] = None) -> Tuple:
    """Convert FlatLot into a row (tuple) ready for serialization.

    Do the minimum work such that the values look right when tablib.Dataset
    type-converts them during serialization.

    Args:
        flatlot: fully-populated FlatLot instance.
        places: decimal places for money amounts.  By default, from config.
    """
    power = -(CONFIG.decimal_places if places is None else places)
    attrs = flatlot._asdict()
    attrs.update(
        {
            "datetime": flatlot.datetime.isoformat(),
            "totalusd": utils.round_decimal(flatlot.totalusd, power=power),
            "totalgbp": utils.round_decimal(flatlot.totalgbp, power=power),
        }
    )
    return tuple(attrs.values())


def flatten_summaries(
    summaries: Iterable[CostBasisSummary], places: Optional[int] = None
) -> tablib.Dataset:
    """Convert a sequence of summaries into tablib.Dataset prepared for serialization.

    Columns are the fields of FlatSummary; rows represent one security each.
    """
    dataset = tablib.Dataset(headers=FlatSummary._fields)
    for summary in summaries:
        dataset.append(export_flatsummary(flatten_summary(summary), places))
    return dataset


def flatten_summary(summary: CostBasisSummary) -> FlatSummary:
    """Construct an unnested intermediate FlatSummary from a summary instance.
    """
    attrs: dict = {
        "symbol": summary.symbol,
        "asof": summary.asof,
        "lotcount": summary.lotcount,
        "totalshares": summary.totalshares,
        "totalcostusd": summary.totalcostusd.amount,
        "totalcostgbp": summary.totalcostgbp.amount,
        "averagecostusd": summary.averagecostusd.amount,
        "averagecostgbp": summary.averagecostgbp.amount,
        "weightedfxrate": summary.weightedfxrate,
        "shorttermshares": summary.shorttermshares,
        "longtermshares": summary.longtermshares,
        "longtermpercentage": summary.longtermpercentage,
    }
    if isinstance(summary, PricedCostBasis):
        attrs.update(
            {
                "currentpriceusd": summary.currentpriceusd.amount,
                "currentfxrate": summary.currentfxrate,
                "currentvalueusd": summary.currentvalueusd.amount,
                "currentvaluegbp": summary.currentvaluegbp.amount,
                "unrealizedpnlusd": summary.unrealizedpnlusd.amount,
                "unrealizedpnlgbp": summary.unrealizedpnlgbp.amount,
                "unrealizedpnlpercentage": summary.unrealizedpnlpercentage,
                "shorttermpnlusd": summary.shorttermpnlusd.amount,
                "longtermpnlusd": summary.longtermpnlusd.amount,
            }
        )
    return FlatSummary(**attrs)


#  FX rates and share counts keep more precision than money amounts.
_PRECISE_FIELDS = (
    "totalshares",
    "shorttermshares",
    "longtermshares",
    "weightedfxrate",
    "currentfxrate",
)


def export_flatsummary(
    flatsummary: FlatSummary, places: Optional[int] = None
) -> Tuple:
    """Convert FlatSummary into a row (tuple) ready for serialization.

    Args:
        flatsummary: fully-populated FlatSummary instance.
        places: decimal places for money amounts and percentages.
                By default, from config.
    """
    power = -(CONFIG.decimal_places if places is None else places)

    def export(field: str, value: Any) -> Any:
        if not isinstance(value, Decimal):
            return value
        if field in _PRECISE_FIELDS:
            return utils.round_decimal(value)
        return utils.round_decimal(value, power=power)

    attrs = flatsummary._asdict()
    attrs = {field: export(field, value) for field, value in attrs.items()}
    attrs["asof"] = flatsummary.asof.isoformat()
    return tuple(attrs.values())


def import_purchase(row: Mapping[str, Any]) -> Tuple[str, Lot]:
    """Convert a freshly-deserialized tablib.Dataset row into a (symbol, Lot) pair.

    Args:
        row: mapping of column header to value, e.g. an item of Dataset.dict,
             having at least PURCHASE_HEADERS.

    Raises:
        ValueError: if uniqueid or symbol is blank, if a number isn't finite or
                    can't be converted, or if shares/fxrate aren't positive
                    or priceusd is negative.
    """
    missing = [header for header in PURCHASE_HEADERS if header not in row]
    if missing:
        raise ValueError(f"Purchase row {row} lacks columns {missing}")

    uniqueid = _import_text(row, "uniqueid")
    symbol = _import_text(row, "symbol")

    shares = _import_decimal(row, "shares")
    priceusd = _import_decimal(row, "priceusd")
    fxrate = _import_decimal(row, "fxrate")
    if shares <= 0:
        raise ValueError(f"Purchase {uniqueid}: shares must be positive")
    if priceusd < 0:
        raise ValueError(f"Purchase {uniqueid}: priceusd can't be negative")
    if fxrate <= 0:
        raise ValueError(f"Purchase {uniqueid}: fxrate must be positive")

    lot = Lot(
        datetime=_import_datetime(row["datetime"]),
        shares=shares,
        priceusd=priceusd,
        fxrate=fxrate,
        uniqueid=uniqueid,
    )
    return symbol, lot


def import_rate(row: Mapping[str, Any]) -> dict:
    """Convert a freshly-deserialized tablib.Dataset row into CurrencyRate attributes.

    Args:
        row: mapping of column header to value, having at least RATE_HEADERS.

    Raises:
        ValueError: if a value can't be converted, or rate isn't positive.
    """
    missing = [header for header in RATE_HEADERS if header not in row]
    if missing:
        raise ValueError(f"Rate row {row} lacks columns {missing}")

    rate = _import_decimal(row, "rate")
    if rate <= 0:
        raise ValueError(f"Rate row {row}: rate must be positive")

    date = row["date"]
    if not isinstance(date, _datetime.date):
        date = _datetime.date.fromisoformat(str(date))
    elif isinstance(date, _datetime.datetime):
        date = date.date()

    return {
        "date": date,
        "fromcurrency": validate_currency(str(row["fromcurrency"])),
        "tocurrency": validate_currency(str(row["tocurrency"])),
        "rate": rate,
    }


def _import_decimal(row: Mapping[str, Any], field: str) -> Decimal:
    value = row[field]
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Can't convert {field}={value!r} to Decimal")
    if not number.is_finite():
        raise ValueError(f"{field}={value!r} is not a finite number")
    return number


def _import_text(row: Mapping[str, Any], field: str) -> str:
    value = "" if row[field] is None else str(row[field]).strip()
    if not value:
        raise ValueError(f"Row {row} has no {field}")
    return value


def _import_datetime(value: Any) -> _datetime.datetime:
    if isinstance(value, _datetime.datetime):
        return value
    if isinstance(value, _datetime.date):
        return _datetime.datetime(value.year, value.month, value.day)
    return _datetime.datetime.fromisoformat(str(value).strip())
