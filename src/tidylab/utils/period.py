"""Period parsing utilities - months, fiscal years, calendar dates"""
import re
from datetime import date, datetime
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

# Month name mappings
MONTHS = {
    'january': '01', 'jan': '01',
    'february': '02', 'feb': '02',
    'march': '03', 'mar': '03',
    'april': '04', 'apr': '04',
    'may': '05',
    'june': '06', 'jun': '06',
    'july': '07', 'jul': '07',
    'august': '08', 'aug': '08',
    'september': '09', 'sep': '09', 'sept': '09',
    'october': '10', 'oct': '10',
    'november': '11', 'nov': '11',
    'december': '12', 'dec': '12',
}


def parse_month(label) -> Optional[int]:
    """
    Month number from a label: "Jul", "July", "7", "07", "July 2018".

    Returns None when no month can be read.
    """
    if label is None:
        return None
    if isinstance(label, (int, float)) and not isinstance(label, bool):
        return int(label) if label == label and 1 <= int(label) <= 12 else None

    text = str(label).strip().lower()
    if not text:
        return None
    if text in MONTHS:
        return int(MONTHS[text])
    if text.isdigit():
        month = int(text)
        return month if 1 <= month <= 12 else None

    word = re.match(r'[a-z]+', text)
    if word and word.group(0) in MONTHS:
        return int(MONTHS[word.group(0)])

    try:
        return date_parser.parse(text, default=datetime(2000, 1, 1)).month
    except (ValueError, OverflowError):
        return None


def parse_fiscal_year(label) -> Optional[int]:
    """'FY19' -> 2019, 'FY 2020' -> 2020, 'fy_21' -> 2021, 2019 -> 2019"""
    if label is None:
        return None
    if isinstance(label, int) and not isinstance(label, bool):
        return label
    match = re.fullmatch(r'\s*(?:fy)?[\s_-]?(\d{2}|\d{4})\s*', str(label).lower())
    if not match:
        return None
    year = int(match.group(1))
    return year + 2000 if year < 100 else year


def fiscal_to_calendar(fiscal_year: int, month: int, fy_start_month: int = 7) -> date:
    """
    First day of `month` within a fiscal year.

    A fiscal year is named for the calendar year it ends in, so with a July
    start FY2019 runs July 2018 - June 2019:
        fiscal_to_calendar(2019, 7)  -> 2018-07-01
        fiscal_to_calendar(2019, 6)  -> 2019-06-01
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    if not 1 <= fy_start_month <= 12:
        raise ValueError(f"Invalid fiscal year start month: {fy_start_month}")

    if fy_start_month == 1:
        return date(fiscal_year, month, 1)
    fy_start = date(fiscal_year, fy_start_month, 1) - relativedelta(years=1)
    offset = (month - fy_start_month) % 12
    return fy_start + relativedelta(months=offset)
