"""Utility functions for moneta."""

from moneta.utils.date_parser import parse_date
from moneta.utils.amount_parser import parse_amount
from moneta.utils.account_resolver import resolve_account

__all__ = ["parse_date", "parse_amount", "resolve_account"]
