"""Worked case studies that read real spreadsheets end to end."""
from .fruit import extract_fruit_prices, read_fruit_sheet, cheapest, fruit_name
from .smart import read_ridership, tidy_ridership, yearly_totals

__all__ = [
    'extract_fruit_prices',
    'read_fruit_sheet',
    'cheapest',
    'fruit_name',
    'read_ridership',
    'tidy_ridership',
    'yearly_totals',
]
