# coding: utf-8
"""
Persisted purchase records and exchange rates.

Purchases are the source of Lots.  A purchase is never edited once recorded;
corrections are booked as new records.
"""
# stdlib imports
import datetime as _datetime
import logging


# 3rd party imports
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Numeric,
    Enum,
)
from sqlalchemy.sql.schema import UniqueConstraint, CheckConstraint
from ofxtools.models.i18n import CURRENCY_CODES


# Local imports
from costbasis.database import Base
from costbasis.basis.types import Lot


class ModelError(Exception):
    """ Base class for exceptions raised by this module.  """

    pass


CurrencyType = Enum(*CURRENCY_CODES, name="currency_type")


class Mergeable(object):
    """Mixin implementing merge() classmethod.
    """

    signature = NotImplemented

    @classmethod
    def merge(cls, session, **kwargs):
        """
        Query DB for unique persisted instance matching given values for
        signature attributes; if not found, insert a new instance with
        all attributes from kwargs.
        """
        if cls.signature is NotImplemented:
            raise NotImplementedError
        sig = {k: v for k, v in kwargs.items() if k in cls.signature}
        if len(sig) != len(cls.signature):
            missing = set(cls.signature) - set(sig)
            raise ModelError(f"{cls.__name__}.merge() missing {sorted(missing)}")
        instance = session.query(cls).filter_by(**sig).one_or_none()
        msg = "Existing {} loaded from DB".format(instance)
        if instance is None:
            instance = cls(**kwargs)
            msg = "Created {}".format(instance)
        logging.info(msg)
        session.add(instance)
        return instance


class Purchase(Base, Mergeable):
    """A purchase of a security, i.e. the record behind one Lot.
    """

    id = Column(Integer, primary_key=True)
    uniqueid = Column(
        String,
        CheckConstraint("uniqueid <> ''", name="uniqueid_not_blank"),
        nullable=False,
        unique=True,
        comment="Upstream purchase identifier",
    )
    symbol = Column(String, nullable=False, index=True, comment="Security symbol")
    datetime = Column(
        DateTime, nullable=False, comment="Acquisition date/time; opens holding period"
    )
    shares = Column(
        Numeric,
        CheckConstraint("shares > 0", name="shares_positive"),
        nullable=False,
        comment="Amount of security purchased",
    )
    priceusd = Column(
        Numeric,
        CheckConstraint("priceusd >= 0", name="priceusd_not_negative"),
        nullable=False,
        comment="Per-share purchase price in USD",
    )
    fxrate = Column(
        Numeric,
        CheckConstraint("fxrate > 0", name="fxrate_positive"),
        nullable=False,
        comment="GBP per USD at acquisition",
    )

    __table_args__ = ({"comment": "Security Purchases (Tax Lots)"},)

    signature = ("uniqueid",)

    def to_lot(self) -> Lot:
        return Lot(
            datetime=self.datetime,
            shares=self.shares,
            priceusd=self.priceusd,
            fxrate=self.fxrate,
            uniqueid=self.uniqueid,
        )

    @classmethod
    def for_symbol(cls, session, symbol, dtend=None):
        """
        Returns all purchases of `symbol` made on or before `dtend`
        (by default, all of them), oldest first.
        """
        query = session.query(cls).filter_by(symbol=symbol)
        if dtend is not None:
            query = query.filter(cls.datetime <= dtend)
        return query.order_by(cls.datetime, cls.uniqueid).all()

    @classmethod
    def symbols(cls, session):
        """Returns every symbol with recorded purchases, sorted."""
        rows = session.query(cls.symbol).distinct().order_by(cls.symbol).all()
        return [row[0] for row in rows]


class CurrencyRate(Base, Mergeable):
    """Exchange rate for currency pair.
    """

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    fromcurrency = Column(
        CurrencyType,
        nullable=False,
        comment="Currency of exchange rate denominator (ISO4217)",
    )
    tocurrency = Column(
        CurrencyType,
        nullable=False,
        comment="Currency of exchange rate numerator (ISO417)",
    )
    rate = Column(
        Numeric,
        CheckConstraint("rate > 0", name="rate_positive"),
        nullable=False,
        comment="Multiply this rate by fromcurrency amount to yield tocurrency amount",
    )

    __table_args__ = (
        UniqueConstraint("date", "fromcurrency", "tocurrency"),
        {"comment": "Exchange Rates for Currency Pairs"},
    )

    signature = ("date", "fromcurrency", "tocurrency")

    @classmethod
    def get_rate(cls, session, fromcurrency, tocurrency, date):
        """
        Returns `rate` (type decimal.Decimal) as `tocurrency` / `fromcurrency`
        i.e. `fromcurrency` * `rate` == `tocurrency`, using the most recent
        rate on or before `date`.

        If only the inverse pair is on file, its reciprocal is returned.
        """
        if fromcurrency is None or tocurrency is None or date is None:
            msg = (
                "CurrencyRate.get_rate(): missing argument in "
                "(fromcurrency='{}', tocurrency='{}', date={}"
            )
            raise ValueError(msg.format(fromcurrency, tocurrency, date))

        if isinstance(date, _datetime.datetime):
            date = date.date()

        def latest(fromcurrency, tocurrency):
            return (
                session.query(cls)
                .filter_by(fromcurrency=fromcurrency, tocurrency=tocurrency)
                .filter(cls.date <= date)
                .order_by(cls.date.desc())
                .first()
            )

        instance = latest(fromcurrency, tocurrency)
        if instance is not None:
            return instance.rate

        instance = latest(tocurrency, fromcurrency)
        if instance is None:
            msg = (
                "CurrencyRate.get_rate(): no DB record for "
                "(fromcurrency='{}', tocurrency='{}', date<={})"
            )
            raise ValueError(msg.format(fromcurrency, tocurrency, date))
        logging.debug(f"Inverting {instance} for {fromcurrency}/{tocurrency}")
        return 1 / instance.rate
