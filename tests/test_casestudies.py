"""Test the fruit price and SMART ridership case studies end to end."""
from unittest import mock

import openpyxl
import pandas as pd
import pytest

from tidylab.casestudies import (
    cheapest,
    extract_fruit_prices,
    fruit_name,
    read_fruit_sheet,
    read_ridership,
    tidy_ridership,
    yearly_totals,
)
from tidylab.casestudies.fruit import FRUIT_COLUMNS
from tidylab.casestudies.smart import TIDY_COLUMNS
from tidylab.conditions import evaluate, with_calling_handlers


class TestFruitName:

    @pytest.mark.parametrize("title,expected", [
        ('Apples—Average retail price per pound, 2016', 'apples'),
        ('Kiwi – Average retail price', 'kiwi'),
        ('Pears, average retail price', 'pears'),
        ('Plums', 'plums'),
        (None, ''),
    ])
    def test_name_from_title(self, title, expected):
        assert fruit_name(title) == expected


class TestReadFruitSheet:

    def test_numeric_prices(self, fruit_workbook):
        df = read_fruit_sheet(fruit_workbook, 'Apples')
        assert df['form'].tolist() == ['Fresh', 'Applesauce']
        assert df['fruit'].unique().tolist() == ['apples']
        assert df['retail_price'].tolist() == [1.5193, 1.066]
        assert df['unit'].tolist() == ['pound', 'pound']

    def test_price_typed_as_text(self, fruit_workbook):
        df = read_fruit_sheet(fruit_workbook, 'Bananas')
        row = df.iloc[0]
        assert row['retail_price'] == pytest.approx(0.5685)
        assert row['unit'] == 'pound'
        assert row['price_per_cup'] == pytest.approx(0.2938)

    def test_wrong_region_width(self, fruit_workbook):
        with pytest.raises(ValueError, match="Expected 7 columns"):
            read_fruit_sheet(fruit_workbook, 'Apples', cell_range='A2:C12')


class TestExtractFruitPrices:

    def test_one_row_per_fruit_with_form(self, fruit_workbook):
        seen = []
        prices = with_calling_handlers(
            lambda: extract_fruit_prices(fruit_workbook),
            warning=seen.append,
        )
        assert list(prices.columns) == FRUIT_COLUMNS
        assert prices['fruit'].tolist() == ['apples', 'bananas']
        assert (prices['form'] == 'Fresh').all()
        assert len(seen) == 1
        assert "No 'Fresh' row in sheet 'Kiwi'" in seen[0].message

    def test_missing_form_warning_is_deferred(self, fruit_workbook):
        ev = evaluate(lambda: extract_fruit_prices([fruit_workbook]), display=lambda kind, text: None)
        assert ev.ok
        assert len(ev.value) == 2
        assert ev.output[-1][1].startswith('Warning message:\nIn extract_fruit_prices():')

    def test_other_form(self, fruit_workbook):
        ev = evaluate(lambda: extract_fruit_prices(fruit_workbook, form='canned'), display=lambda kind, text: None)
        assert ev.value['fruit'].tolist() == ['kiwi']
        assert len(ev.warnings) == 2

    def test_no_matches_gives_empty_table(self, fruit_workbook):
        ev = evaluate(lambda: extract_fruit_prices(fruit_workbook, form='Dried'), display=lambda kind, text: None)
        assert ev.value.empty
        assert list(ev.value.columns) == FRUIT_COLUMNS

    def test_unreadable_sheet_is_skipped_with_warning(self, fruit_workbook):
        wb = openpyxl.load_workbook(fruit_workbook)
        notes = wb.create_sheet('Notes', 0)
        notes['A1'] = 'Source: USDA Economic Research Service'
        wb.save(fruit_workbook)

        def read_sheet(path, sheet, cell_range):
            if sheet == 'Notes':
                raise ValueError(f"Expected 7 columns in {sheet}!{cell_range}, got 2")
            return read_fruit_sheet(path, sheet, cell_range)

        with mock.patch('tidylab.casestudies.fruit.read_fruit_sheet', side_effect=read_sheet):
            ev = evaluate(lambda: extract_fruit_prices(fruit_workbook), display=lambda kind, text: None)

        assert ev.ok
        assert ev.value['fruit'].tolist() == ['apples', 'bananas']
        assert "Skipping sheet 'Notes'" in ev.warnings[0].message
        assert 'Expected 7 columns' in ev.warnings[0].message

    def test_sheet_outside_range_prefix_is_skipped(self, fruit_workbook):
        ev = evaluate(
            lambda: extract_fruit_prices(fruit_workbook, cell_range='Apples!A2:G12'),
            display=lambda kind, text: None,
        )
        assert ev.ok
        assert ev.value['fruit'].tolist() == ['apples']
        assert [w.message for w in ev.warnings if 'Skipping' in w.message] == [
            "Skipping sheet 'Bananas' of fruit.xlsx: Sheet given twice: 'Bananas' and 'Apples'",
            "Skipping sheet 'Kiwi' of fruit.xlsx: Sheet given twice: 'Kiwi' and 'Apples'",
        ]

    def test_cheapest(self, fruit_workbook):
        prices = evaluate(lambda: extract_fruit_prices(fruit_workbook), display=lambda kind, text: None).value
        top = cheapest(prices, 1)
        assert top['fruit'].tolist() == ['bananas']


class TestSmartRidership:

    def test_tidy_one_row_per_month(self, smart_workbook):
        raw = read_ridership(smart_workbook, 'A3:D7')
        seen = []
        tidy = with_calling_handlers(lambda: tidy_ridership(raw), message=seen.append)

        assert list(tidy.columns) == TIDY_COLUMNS
        assert tidy['riders'].tolist() == [25000, 52000, 54000, 50000, 64000, 65000]
        assert tidy['fiscal_year'].tolist() == [2018, 2019, 2019, 2019, 2020, 2020]
        assert tidy['date'].tolist() == list(pd.to_datetime([
            '2017-09-01', '2018-07-01', '2018-08-01', '2018-09-01', '2019-07-01', '2019-08-01',
        ]))
        assert [m.message for m in seen] == ["Skipping 1 rows without a month: ['Total']"]

    def test_month_labels_kept(self, smart_workbook):
        raw = read_ridership(smart_workbook, 'Ridership!A3:D7')
        tidy = evaluate(lambda: tidy_ridership(raw), display=lambda kind, text: None).value
        assert tidy['month'].tolist() == ['Sep', 'Jul', 'Aug', 'Sep', 'Jul', 'Aug']

    def test_other_fiscal_start(self):
        raw = pd.DataFrame({'month': ['Jan', 'Oct'], 'fy20': [1, 2]})
        tidy = tidy_ridership(raw, fy_start_month=10)
        assert tidy['date'].tolist() == list(pd.to_datetime(['2019-10-01', '2020-01-01']))

    def test_text_counts_are_numbers(self):
        raw = pd.DataFrame({'month': ['Jul'], 'FY19': ['1,200']})
        tidy = tidy_ridership(raw)
        assert tidy['riders'].tolist() == [1200]

    @pytest.mark.parametrize("dtype", [object, 'string'])
    def test_comma_counts_in_any_text_dtype(self, dtype):
        raw = pd.DataFrame({
            'month': ['Jul', 'Aug'],
            'FY19': pd.Series(['1,200', ' 12,500 '], dtype=dtype),
        })
        tidy = tidy_ridership(raw)
        assert tidy['riders'].tolist() == [1200, 12500]

    def test_only_fiscal_year_periods_are_pivoted(self):
        raw = pd.DataFrame({
            'month': ['Jul'],
            'FY 2019': [10],
            'Q1 2019': [99],
            'note': ['est.'],
        })
        tidy = tidy_ridership(raw)
        assert tidy['fiscal_year'].tolist() == [2019]
        assert tidy['riders'].tolist() == [10]

    def test_missing_columns(self):
        with pytest.raises(ValueError, match="Month column"):
            tidy_ridership(pd.DataFrame({'when': ['Jul'], 'fy19': [1]}))
        with pytest.raises(ValueError, match="No fiscal-year columns"):
            tidy_ridership(pd.DataFrame({'month': ['Jul'], 'riders': [1]}))

    def test_yearly_totals_match_report(self, smart_workbook):
        raw = read_ridership(smart_workbook, 'A3:D7')
        tidy = evaluate(lambda: tidy_ridership(raw), display=lambda kind, text: None).value
        totals = yearly_totals(tidy)

        assert list(totals.columns) == ['fiscal_year', 'Jul', 'Aug', 'Sep', 'total', 'months_reported']
        assert totals['fiscal_year'].tolist() == [2018, 2019, 2020]
        assert totals['total'].tolist() == [25000, 156000, 129000]
        assert totals['months_reported'].tolist() == [1, 3, 2]
        # Totals agree with the report's own Total row
        report_total = raw[raw['month'] == 'Total'][['fy18', 'fy19', 'fy20']].iloc[0].tolist()
        assert totals['total'].tolist() == report_total
