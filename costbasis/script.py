# coding: utf-8
"""CLI front end to import purchases and exchange rates, and report cost basis.


CONFIGURE
---------
We look for the config file in ~/.config/costbasis/costbasis.cfg.  It's in INI
format; a default is written on first run.  Edit the [db] section to point at your
database:

    [db]
    dialect = postgresql
    driver = psycopg2
    username = user
    password = pass
    host = localhost
    port = 5432
    database = costbasis

    [books]
    longterm_days = 365

    [report]
    decimal_places = 2

IMPORT
------
Purchases are CSV files with (at least) the columns
uniqueid, symbol, datetime, shares, priceusd, fxrate - where fxrate is GBP per USD:

    costbasis import /path/to/purchases/*.csv

Exchange rates are CSV files with columns date, fromcurrency, tocurrency, rate:

    costbasis rates /path/to/rates.csv

Re-importing a file is harmless; records already on file (by uniqueid, or by
date/currency pair for rates) are left alone.

REPORT
------
Summarize cost basis for one or more symbols (all symbols on file if none given):

    costbasis basis -a 2024-06-30 AAPL MSFT

Mark to market by passing the current price; the FX rate comes from -x, or else
from the latest stored USD/GBP rate:

    costbasis basis -a 2024-06-30 -p 187.50 -x 0.79 AAPL

Pass --lots/-l to report individual Lots instead of one summary line per symbol,
--format/-f json for JSON instead of CSV, and --output/-o to write to a file
instead of stdout.
"""
# stdlib imports
import argparse
from argparse import ArgumentParser, _SubParsersAction
from datetime import datetime
from decimal import Decimal
import logging
import sys
from typing import Tuple, Sequence, List

# 3rd party imports
import sqlalchemy
import tablib


# Local imports
from costbasis import models, CONFIG
from costbasis.basis import api, report
from costbasis.database import Base, init_db, sessionmanager


def create_engine():
    """Connect to the database named in the config file, creating any missing tables.

    Also binds database.Session to the new engine.
    """
    return init_db(CONFIG.db_uri)


def drop_all_tables(args):
    """Just what it says on the tin.  DROP all tables defined by models.

    Args:
        args: argparse.Namespace instance populated with parsed CLI arguments.
    """
    engine = sqlalchemy.create_engine(CONFIG.db_uri)
    print("Dropping all tables on {}...".format(CONFIG.db_uri), end=" ")
    Base.metadata.drop_all(bind=engine)
    print("finished.")


def load_dataset(path: str) -> tablib.Dataset:
    with open(path, "r") as csvfile:
        return tablib.Dataset().load(csvfile.read(), format="csv")


def import_purchases(args: argparse.Namespace) -> Sequence[models.Purchase]:
    """Import purchase records from CSV datafiles; persist to DB.

    Args:
        args: argparse.Namespace instance populated with parsed CLI arguments.
    """
    engine = create_engine()

    output: list = []
    with sessionmanager(bind=engine) as session:
        for path in args.file:
            print(path)
            for row in load_dataset(path).dict:
                symbol, lot = report.import_purchase(row)
                purchase = models.Purchase.merge(
                    session,
                    uniqueid=lot.uniqueid,
                    symbol=symbol,
                    datetime=lot.datetime,
                    shares=lot.shares,
                    priceusd=lot.priceusd,
                    fxrate=lot.fxrate,
                )
                output.append(purchase)
            session.commit()
    return output


def import_rates(args: argparse.Namespace) -> Sequence[models.CurrencyRate]:
    """Import currency exchange rates from CSV datafiles; persist to DB.

    Args:
        args: argparse.Namespace instance populated with parsed CLI arguments.
    """
    engine = create_engine()

    output: list = []
    with sessionmanager(bind=engine) as session:
        for path in args.file:
            print(path)
            for row in load_dataset(path).dict:
                rate = models.CurrencyRate.merge(session, **report.import_rate(row))
                output.append(rate)
            session.commit()
    return output


def dump_basis(args: argparse.Namespace) -> None:
    """Summarize cost basis of DB purchases matching CLI args; write the report.

    Args:
        args: argparse.Namespace instance populated with parsed CLI arguments.
    """
    engine = create_engine()

    with sessionmanager(bind=engine) as session:
        symbols = args.symbol or models.Purchase.symbols(session)
        summaries = [
            api.get_cost_basis(
                session,
                symbol,
                asof=args.asof,
                priceusd=args.price,
                fxrate=args.fxrate,
            )
            for symbol in symbols
        ]

    dataset = make_report(summaries, lots=args.lots)
    output = dataset.export(args.format)
    if args.output:
        with open(args.output, "w") as outfile:
            outfile.write(output)
    else:
        sys.stdout.write(output)


def make_report(summaries: List[api.CostBasisSummary], lots: bool) -> tablib.Dataset:
    """Flatten summaries into one Dataset: a row per Lot, or a row per summary.
    """
    if not lots:
        return report.flatten_summaries(summaries)

    dataset = tablib.Dataset(headers=report.FlatLot._fields)
    for summary in summaries:
        dataset.extend(report.flatten_lots(summary))
    return dataset


def make_argparser() -> Tuple[ArgumentParser, _SubParsersAction]:
    """Return subparsers along with the ArgumentParer, so the latter can be extended.
    """
    argparser = ArgumentParser(description="Cost basis utility")
    argparser.add_argument(
        "--verbose", "-v", action="count", default=0, help="-vv for DEBUG"
    )
    argparser.set_defaults(func=None)
    subparsers = argparser.add_subparsers()

    drop_parser = subparsers.add_parser(
        "drop", aliases=["erase"], help="Drop all database tables"
    )
    drop_parser.set_defaults(func=drop_all_tables)

    import_parser = subparsers.add_parser("import", help="Import purchase CSV data")
    import_parser.add_argument("file", nargs="+", help="Purchase CSV file(s)")
    import_parser.set_defaults(func=import_purchases)

    rates_parser = subparsers.add_parser("rates", help="Import exchange rate CSV data")
    rates_parser.add_argument("file", nargs="+", help="Exchange rate CSV file(s)")
    rates_parser.set_defaults(func=import_rates)

    basis_parser = subparsers.add_parser(
        "basis", aliases=["report"], help="Report cost basis"
    )
    basis_parser.add_argument(
        "symbol", nargs="*", help="Security symbol(s); by default, all on file"
    )
    basis_parser.add_argument(
        "-a",
        "--asof",
        default=None,
        help="Classify holding periods as of this date (default today)",
    )
    basis_parser.add_argument(
        "-p", "--price", default=None, help="Current price per share (USD)"
    )
    basis_parser.add_argument(
        "-x", "--fxrate", default=None, help="Current FX rate (GBP per USD)"
    )
    basis_parser.add_argument(
        "-l", "--lots", action="store_true", help="Report individual Lots"
    )
    basis_parser.add_argument(
        "-f", "--format", choices=["csv", "json"], default="csv"
    )
    basis_parser.add_argument("-o", "--output", default=None, help="Output file")
    basis_parser.set_defaults(func=dump_basis)

    return argparser, subparsers


def parse_args(argparser: ArgumentParser, argv=None) -> argparse.Namespace:
    """Parse args, converting dates and numbers to their working types.
    """
    args = argparser.parse_args(argv)

    # Parse datetime args
    if getattr(args, "asof", None):
        args.asof = datetime.strptime(args.asof, "%Y-%m-%d").replace(
            hour=23, minute=59, second=59
        )

    # Parse decimal args as strings; never via float
    for attr in ("price", "fxrate"):
        if getattr(args, attr, None):
            setattr(args, attr, Decimal(getattr(args, attr)))

    return args


def run(argparser: ArgumentParser) -> None:
    """Parse args and pass them to the indication function.

    Args:
        argparser: the ArgumentParser instance returned by make_argparser().
    """
    args = parse_args(argparser)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level)

    # Execute selected function
    if args.func:
        args.func(args)
    else:
        argparser.print_help()


def main() -> None:
    argparser, subparsers = make_argparser()
    run(argparser)


if __name__ == "__main__":
    main()
