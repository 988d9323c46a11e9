"""Pytest configuration for the tidylab test suite."""

import openpyxl
import pandas as pd
import pytest

from tidylab import conditions
from tidylab.config import reset_settings
from tidylab.loader import clear_workbook_cache


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (may require network access)"
    )


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    """Fresh settings, handler stack and workbook cache for every test."""
    for name in ('WARN', 'DIGITS', 'LOG_LEVEL', 'BENCH_ITERATIONS', 'DATA_DIR'):
        monkeypatch.delenv(f'TIDYLAB_{name}', raising=False)
    reset_settings()
    yield
    conditions._handler_stack.clear()
    conditions._evaluations.clear()
    clear_workbook_cache()
    reset_settings()


@pytest.fixture
def cases_long():
    """Country/year/type/count table, complete in (id, name)."""
    return pd.DataFrame({
        'country': ['A', 'A', 'A', 'A', 'B', 'B', 'B', 'B'],
        'year': [1999, 1999, 2000, 2000, 1999, 1999, 2000, 2000],
        'type': ['cases', 'population'] * 4,
        'count': [745, 19987071, 2666, 20595360, 37737, 172006362, 80488, 174504898],
    })


@pytest.fixture
def fruit_workbook(tmp_path):
    """
    Three fruit sheets:
    - Apples: numeric prices
    - Bananas: price typed as "0.5685/pound" text
    - Kiwi: no Fresh row
    """
    header = [
        'Form', 'Average retail price', 'Unit', 'Preparation yield factor',
        'Size of a cup equivalent', 'Unit', 'Average price per cup equivalent',
    ]
    wb = openpyxl.Workbook()

    ws = wb.active
    ws.title = 'Apples'
    ws['A1'] = 'Apples—Average retail price per pound or pint and per cup equivalent, 2016'
    ws.append(header)
    ws.append(['Fresh', 1.5193, 'per pound', 0.9, 0.2425, 'pounds', 0.4094])
    ws.append(['Applesauce', 1.0660, 'per pound', 1.0, 0.5401, 'pounds', 0.5758])

    ws = wb.create_sheet('Bananas')
    ws['A1'] = 'Bananas—Average retail price per pound and per cup equivalent, 2016'
    ws.append(header)
    ws.append(['Fresh', '0.5685/pound', None, 0.64, 0.3307, 'pounds', 0.2938])

    ws = wb.create_sheet('Kiwi')
    ws['A1'] = 'Kiwi—Average retail price per pound and per cup equivalent, 2016'
    ws.append(header)
    ws.append(['Canned', 2.0, 'per pound', 1.0, 0.5, 'pounds', 1.0])

    path = tmp_path / 'fruit.xlsx'
    wb.save(path)
    return str(path)


@pytest.fixture
def smart_workbook(tmp_path):
    """Monthly SMART ridership, one column per fiscal year, with a Total row."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = 'Ridership'
    ws['A1'] = 'SMART Ridership Report'
    rows = [
        ['Month', 'FY18', 'FY19', 'FY20'],
        ['Jul', None, 52000, 64000],
        ['Aug', None, 54000, 65000],
        ['Sep', 25000, 50000, None],
        ['Total', 25000, 156000, 129000],
    ]
    # Table occupies A3:D7
    for r, row in enumerate(rows, 3):
        for c, value in enumerate(row, 1):
            ws.cell(row=r, column=c, value=value)

    path = tmp_path / 'smart.xlsx'
    wb.save(path)
    return str(path)
