# coding: utf-8
from .predicates import (
    HoldingPeriod,
    holding_period,
    PredicateType,
    longAsOf,
    shortAsOf,
)
from .types import (
    Lot,
    MarketData,
    CostBasis,
    PricedCostBasis,
    CostBasisSummary,
    TaxSummary,
)
from .api import (
    BasisError,
    IncompleteMarketData,
    summarize,
    attach_market_data,
    tax_summary,
    get_cost_basis,
)
from .sortkeys import (
    SortType,
    sort_oldest,
    sort_cheapest,
    OLDEST,
    NEWEST,
    CHEAPEST,
    DEAREST,
)
from .functions import accumulate, part_holding, group_by_holding_period
