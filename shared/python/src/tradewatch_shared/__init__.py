"""
tradewatch_shared — shared configuration, constants, and models for tradewatch.

Usage:
    from tradewatch_shared.config import settings
    from tradewatch_shared.constants import SERIES_FLOOR_YEAR, SURGE_THRESHOLD
    from tradewatch_shared.models.trade import AnnualTradeRecord, TradeRecord
    from tradewatch_shared.time_utils import YearMonth
"""

__version__ = "0.1.0"
