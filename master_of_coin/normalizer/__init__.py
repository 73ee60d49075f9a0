"""Workbook normalization package."""

from master_of_coin.normalizer.lender import extract_lender
from master_of_coin.normalizer.parser import (
    SENTINEL_CHRONO_KEY,
    chrono_key_for,
    format_month,
    is_data_sheet,
    iter_normalized_sheets,
    normalize_row,
    normalize_sheet,
    normalize_workbook,
)
from master_of_coin.normalizer.protocol import PROTOCOL_MAP, lookup_protocol

__all__ = [
    "PROTOCOL_MAP",
    "SENTINEL_CHRONO_KEY",
    "chrono_key_for",
    "extract_lender",
    "format_month",
    "is_data_sheet",
    "iter_normalized_sheets",
    "lookup_protocol",
    "normalize_row",
    "normalize_sheet",
    "normalize_workbook",
]
