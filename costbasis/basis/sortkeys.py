# coding: utf-8
"""
Functions used as keys to sort Lots for display.

Summaries keep Lots in the order they were supplied; ordering is up to the caller.
Pass one of the SortType mappings as keyword args, e.g. sorted(lots, **NEWEST).
"""

__all__ = [
    "SortType",
    "sort_oldest",
    "sort_cheapest",
    "OLDEST",
    "NEWEST",
    "CHEAPEST",
    "DEAREST",
]


# stdlib imports
from typing import Tuple, Mapping, Callable, Union


# local imports
from .types import Lot


SortType = Mapping[str, Union[bool, Callable[[Lot], Tuple]]]


def sort_oldest(lot: Lot) -> Tuple:
    """Sort by acquisition date/time, then by Lot.uniqueid.

    Args:
        lot: a Lot instance.

    Returns:
        (Lot.datetime, Lot.uniqueid)
    """
    return (lot.datetime, lot.uniqueid or "")


def sort_cheapest(lot: Lot) -> Tuple:
    """Sort by purchase price, then by acquisition date/time.

    Args:
        lot: a Lot instance.

    Returns:
        (Lot.priceusd, Lot.datetime)
    """
    return (lot.priceusd, lot.datetime)


OLDEST = {"key": sort_oldest, "reverse": False}
NEWEST = {"key": sort_oldest, "reverse": True}
CHEAPEST = {"key": sort_cheapest, "reverse": False}
DEAREST = {"key": sort_cheapest, "reverse": True}
