"""Utility functions"""
from .period import parse_month, parse_fiscal_year, fiscal_to_calendar
from .sanitize import sanitize_name, clean_names
