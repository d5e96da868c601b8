"""Utility functions for timebill."""

from timebill.utils.date_parser import parse_date, get_date_range
from timebill.utils.number_parser import parse_hours, parse_rate

__all__ = ["parse_date", "get_date_range", "parse_hours", "parse_rate"]
