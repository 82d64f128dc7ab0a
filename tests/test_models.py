# coding: utf-8
"""
Unit tests for costbasis.models, and basis.api functions that read from the DB.
"""
# stdlib imports
import unittest
from decimal import Decimal
from datetime import datetime, date


# 3rd party imports
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError


# local imports
from costbasis import database
from costbasis.models import Purchase, CurrencyRate, ModelError
from costbasis.money import Money, USD, GBP
from costbasis.basis import CostBasis, PricedCostBasis, Lot, get_cost_basis, report
from common import DatabaseMixin, DB_URI, ASOF


class PurchaseTestCase(DatabaseMixin, unittest.TestCase):
    def merge_purchase(self, uniqueid, symbol, dt, shares, priceusd, fxrate="0.80"):
        return Purchase.merge(
            self.session,
            uniqueid=uniqueid,
            symbol=symbol,
            datetime=dt,
            shares=Decimal(shares),
            priceusd=Decimal(priceusd),
            fxrate=Decimal(fxrate),
        )

    def testMerge(self):
        p0 = self.merge_purchase("p0", "AAPL", datetime(2023, 1, 15), "10", "150.25")
        self.assertIsInstance(p0, Purchase)
        self.assertEqual(p0.symbol, "AAPL")
        self.session.commit()

        p1 = self.merge_purchase("p0", "AAPL", datetime(2023, 1, 15), "10", "150.25")
        self.assertIs(p1, p0)
        self.assertEqual(self.session.query(Purchase).count(), 1)

    def testMergeMissingSignature(self):
        with self.assertRaises(ModelError):
            Purchase.merge(self.session, symbol="AAPL")

    def testBlankUniqueid(self):
        """ The DB refuses purchases that can't be told apart """
        self.merge_purchase("", "AAPL", datetime(2023, 1, 15), "5", "150")
        with self.assertRaises(IntegrityError):
            self.session.commit()
        self.session.rollback()

    def testImportRows(self):
        """ Every imported row is a separate purchase """
        rows = [
            {
                "uniqueid": uniqueid,
                "symbol": "AAPL",
                "datetime": "2023-01-15",
                "shares": shares,
                "priceusd": "150",
                "fxrate": "0.80",
            }
            for uniqueid, shares in [("p0", "5"), ("p1", "7"), ("", "9")]
        ]
        for row in rows[:2]:
            symbol, lot = report.import_purchase(row)
            self.merge_purchase(
                lot.uniqueid, symbol, lot.datetime, lot.shares, lot.priceusd
            )
        with self.assertRaises(ValueError):
            report.import_purchase(rows[2])
        self.session.commit()

        summary = get_cost_basis(self.session, "AAPL", asof=ASOF)
        self.assertEqual(summary.lotcount, 2)
        self.assertEqual(summary.totalshares, Decimal("12"))

    def testToLot(self):
        p0 = self.merge_purchase("p0", "AAPL", datetime(2023, 1, 15), "10", "150.25")
        self.session.commit()
        self.assertEqual(
            p0.to_lot(),
            Lot(
                datetime=datetime(2023, 1, 15),
                shares=Decimal("10"),
                priceusd=Decimal("150.25"),
                fxrate=Decimal("0.80"),
                uniqueid="p0",
            ),
        )

    def testForSymbol(self):
        self.merge_purchase("c", "AAPL", datetime(2023, 3, 1), "1", "10")
        self.merge_purchase("b", "AAPL", datetime(2023, 1, 1), "1", "10")
        self.merge_purchase("a", "AAPL", datetime(2023, 1, 1), "1", "10")
        self.merge_purchase("d", "MSFT", datetime(2023, 2, 1), "1", "10")
        self.session.commit()

        purchases = Purchase.for_symbol(self.session, "AAPL")
        self.assertEqual([p.uniqueid for p in purchases], ["a", "b", "c"])

        purchases = Purchase.for_symbol(
            self.session, "AAPL", dtend=datetime(2023, 2, 28)
        )
        self.assertEqual([p.uniqueid for p in purchases], ["a", "b"])

        self.assertEqual(Purchase.for_symbol(self.session, "GOOG"), [])

    def testSymbols(self):
        self.merge_purchase("a", "MSFT", datetime(2023, 3, 1), "1", "10")
        self.merge_purchase("b", "AAPL", datetime(2023, 1, 1), "1", "10")
        self.merge_purchase("c", "MSFT", datetime(2023, 1, 1), "1", "10")
        self.session.commit()
        self.assertEqual(Purchase.symbols(self.session), ["AAPL", "MSFT"])


class InitDbTestCase(unittest.TestCase):
    def testInitDb(self):
        engine = database.init_db(DB_URI)
        try:
            self.assertEqual(
                set(inspect(engine).get_table_names()), {"purchase", "currencyrate"}
            )
            session = database.Session()
            self.assertIs(session.get_bind(), engine)
            session.close()
        finally:
            database.Session.configure(bind=None)
            engine.dispose()


class CurrencyRateTestCase(DatabaseMixin, unittest.TestCase):
    def setUp(self):
        super(CurrencyRateTestCase, self).setUp()
        for day, rate in [(1, "0.80"), (15, "0.79")]:
            CurrencyRate.merge(
                self.session,
                date=date(2024, 5, day),
                fromcurrency=USD,
                tocurrency=GBP,
                rate=Decimal(rate),
            )
        CurrencyRate.merge(
            self.session,
            date=date(2024, 5, 1),
            fromcurrency="EUR",
            tocurrency=USD,
            rate=Decimal("1.25"),
        )
        self.session.commit()

    def testGetRate(self):
        rate = CurrencyRate.get_rate(
            self.session, fromcurrency=USD, tocurrency=GBP, date=date(2024, 5, 15)
        )
        self.assertEqual(rate, Decimal("0.79"))

        # Most recent on or before the date
        rate = CurrencyRate.get_rate(
            self.session, fromcurrency=USD, tocurrency=GBP, date=date(2024, 5, 14)
        )
        self.assertEqual(rate, Decimal("0.80"))

        # datetime works too
        rate = CurrencyRate.get_rate(
            self.session, fromcurrency=USD, tocurrency=GBP, date=ASOF
        )
        self.assertEqual(rate, Decimal("0.79"))

    def testGetRateInverse(self):
        rate = CurrencyRate.get_rate(
            self.session, fromcurrency=USD, tocurrency="EUR", date=date(2024, 5, 2)
        )
        self.assertEqual(rate, Decimal("0.8"))

    def testGetRateMissing(self):
        with self.assertRaises(ValueError):
            CurrencyRate.get_rate(
                self.session, fromcurrency=USD, tocurrency=GBP, date=date(2024, 4, 30)
            )
        with self.assertRaises(ValueError):
            CurrencyRate.get_rate(
                self.session, fromcurrency=USD, tocurrency="JPY", date=ASOF
            )
        with self.assertRaises(ValueError):
            CurrencyRate.get_rate(
                self.session, fromcurrency=USD, tocurrency=GBP, date=None
            )

    def testMerge(self):
        rate = CurrencyRate.merge(
            self.session,
            date=date(2024, 5, 1),
            fromcurrency=USD,
            tocurrency=GBP,
            rate=Decimal("0.99"),
        )
        # Rates already on file are left alone
        self.assertEqual(rate.rate, Decimal("0.80"))


class GetCostBasisTestCase(DatabaseMixin, unittest.TestCase):
    def setUp(self):
        super(GetCostBasisTestCase, self).setUp()
        purchases = [
            ("p0", datetime(2022, 11, 1), "5", "100", "0.82"),
            ("p1", datetime(2024, 3, 1), "5", "120", "0.79"),
            ("p2", datetime(2024, 7, 1), "5", "130", "0.78"),
        ]
        for uniqueid, dt, shares, priceusd, fxrate in purchases:
            Purchase.merge(
                self.session,
                uniqueid=uniqueid,
                symbol="MSFT",
                datetime=dt,
                shares=Decimal(shares),
                priceusd=Decimal(priceusd),
                fxrate=Decimal(fxrate),
            )
        CurrencyRate.merge(
            self.session,
            date=date(2024, 5, 31),
            fromcurrency=USD,
            tocurrency=GBP,
            rate=Decimal("0.7862"),
        )
        self.session.commit()

    def testUnpriced(self):
        summary = get_cost_basis(self.session, "MSFT", asof=ASOF)
        self.assertIsInstance(summary, CostBasis)
        # Purchase after the as-of date is left out
        self.assertEqual([lot.uniqueid for lot in summary.lots], ["p0", "p1"])
        self.assertEqual(summary.totalshares, Decimal("10"))
        self.assertEqual(summary.totalcostusd, Money(Decimal("1100"), USD))
        self.assertEqual(summary.longtermshares, Decimal("5"))
        self.assertEqual(summary.shorttermshares, Decimal("5"))

    def testPriced(self):
        summary = get_cost_basis(
            self.session,
            "MSFT",
            asof=ASOF,
            priceusd=Decimal("110"),
            fxrate=Decimal("0.75"),
        )
        self.assertIsInstance(summary, PricedCostBasis)
        self.assertEqual(summary.currentfxrate, Decimal("0.75"))
        self.assertEqual(summary.unrealizedpnlusd, Money(Decimal("0"), USD))

    def testStoredRate(self):
        """ Current FX rate falls back to the latest rate on file """
        summary = get_cost_basis(
            self.session, "MSFT", asof=ASOF, priceusd=Decimal("120")
        )
        self.assertEqual(summary.currentfxrate, Decimal("0.7862"))
        self.assertEqual(summary.unrealizedpnlusd, Money(Decimal("100"), USD))
        self.assertEqual(summary.unrealizedpnlgbp, Money(Decimal("78.62"), GBP))

    def testStoredRateMissing(self):
        with self.assertRaises(ValueError):
            get_cost_basis(
                self.session,
                "MSFT",
                asof=datetime(2024, 5, 1),
                priceusd=Decimal("120"),
            )

    def testUnknownSymbol(self):
        summary = get_cost_basis(self.session, "GOOG", asof=ASOF)
        self.assertEqual(summary.lotcount, 0)
        self.assertEqual(summary.averagecostusd, Money.zero(USD))


if __name__ == "__main__":
    unittest.main()
