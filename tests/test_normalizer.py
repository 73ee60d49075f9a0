"""
Tests for the workbook normalizer.

Rows are plain dicts, the way a decoded sheet hands them over.
"""

import math

import pytest

from master_of_coin.models import Pillar, Realm, TransactionKind
from master_of_coin.normalizer import (
    SENTINEL_CHRONO_KEY,
    chrono_key_for,
    extract_lender,
    format_month,
    is_data_sheet,
    iter_normalized_sheets,
    lookup_protocol,
    normalize_sheet,
    normalize_workbook,
)
from master_of_coin.normalizer.fields import first_text, resolve_row, to_number


MONTH = "01 2024"


def normalize(*rows, sheet=MONTH):
    return normalize_sheet(sheet, list(rows))


class TestSheetAdmission:
    """Tests for which sheets hold transactions."""

    @pytest.mark.parametrize("name", ["01 2024", "12 2023", "Month 3", "Last month"])
    def test_month_sheets_admitted(self, name):
        """Test MM YYYY sheets and sheets mentioning month."""
        assert is_data_sheet(name) is True

    @pytest.mark.parametrize("name", ["Map & Details", "1 2024", "Jan 2024", "Summary"])
    def test_other_sheets_skipped(self, name):
        """Test legend and scratch sheets are not data sheets."""
        assert is_data_sheet(name) is False

    def test_legend_sheet_contributes_nothing(self):
        """Test Map & Details yields no records whatever its rows hold."""
        rows = [
            {"Section": "Income", "Item Name": "Salary", "Earn_Amount": 50000},
            {"Section": "Essential !!", "Item Name": "Grocery", "Used_Amount": 900},
        ]
        assert normalize_sheet("Map & Details", rows) == []


class TestChronoKey:
    """Tests for sortable month keys."""

    def test_key_from_month_sheet(self):
        """Test "MM YYYY" becomes YYYY-MM."""
        assert chrono_key_for("01 2024") == "2024-01"
        assert chrono_key_for("12 2023") == "2023-12"

    def test_keys_sort_chronologically(self):
        """Test keys sort in calendar order across years."""
        names = ["02 2024", "12 2023", "01 2024", "11 2023"]
        ordered = sorted(names, key=chrono_key_for)
        assert ordered == ["11 2023", "12 2023", "01 2024", "02 2024"]

    @pytest.mark.parametrize("name", ["Month 3", "Map & Details", "2024", "01 02 2024"])
    def test_sentinel_for_other_names(self, name):
        """Test non-month names get the sentinel key."""
        assert chrono_key_for(name) == SENTINEL_CHRONO_KEY

    def test_sentinel_sorts_first(self):
        """Test the sentinel sorts before every real month."""
        assert sorted(["2023-01", SENTINEL_CHRONO_KEY])[0] == SENTINEL_CHRONO_KEY

    def test_format_month(self):
        """Test display names for month sheets."""
        assert format_month("01 2024") == "January 2024"
        assert format_month("Month 3") == "Month 3"
        assert format_month("13 2024") == "13 2024"


class TestLenderHeuristic:
    """Tests for lender extraction from notes and item labels."""

    def test_form_typo(self):
        """Test the " form " misspelling."""
        assert extract_lender("Loan taken form Maya", "Borrowed Fund") == "Maya"

    def test_from(self):
        """Test " from " is case-insensitive."""
        assert extract_lender("Borrowed From Ravi ", "Borrowed Fund") == "Ravi"

    def test_of(self):
        """Test " of " pattern."""
        assert extract_lender("Repayment of Marwadi", "Loan Repayment") == "Marwadi"

    def test_item_loan_pattern(self):
        """Test "<Name> Loan" item with empty notes."""
        assert extract_lender("", "Jagdish Loan") == "Jagdish"
        assert extract_lender("", "Suresh borrowing") == "Suresh"

    def test_unresolved(self):
        """Test no pattern and one-word item leaves the lender unresolved."""
        assert extract_lender("monthly installment", "EMI") is None

    def test_first_rule_wins(self):
        """Test " form " is checked before " of "."""
        assert extract_lender("Part of loan taken form Maya", "Borrowed Fund") == "Maya"


class TestFieldResolution:
    """Tests for cell coercion and column fallback chains."""

    def test_to_number(self):
        """Test spreadsheet-style coercion."""
        assert to_number("") == 0.0
        assert to_number(" 12.5 ") == 12.5
        assert to_number(7) == 7.0
        assert to_number(None) != to_number(None)  # NaN
        assert to_number("abc") != to_number("abc")

    @pytest.mark.parametrize("value", ["inf", "-inf", "Infinity", "1e400", "nan", float("inf"), 10 ** 400])
    def test_non_finite_is_unreadable(self, value):
        """Test infinite or overflowing cells read as NaN, never as amounts."""
        assert math.isnan(to_number(value))

    def test_legacy_columns(self):
        """Test older column names still resolve."""
        row = resolve_row({
            "Basic Format": "Need to Understand !!",
            "__EMPTY": "Grocery",
            "__EMPTY_1": 3000,
            "__EMPTY_2": 2800,
            "__EMPTY_4": "weekly",
        })
        assert row.label == "Need to Understand !!"
        assert row.item == "Grocery"
        assert row.budget_amount == 3000
        assert row.used_amount == 2800
        assert row.notes == "weekly"

    def test_zero_falls_through(self):
        """Test a zero in an earlier column does not stop the chain."""
        row = resolve_row({"Used_Amount": 0, "Paid Amount": 400})
        assert row.used_amount == 400

    def test_repayment_status_absent_vs_empty(self):
        """Test an absent status column is NaN but an empty cell is 0."""
        assert resolve_row({}).has_repayment_status is False
        row = resolve_row({"Repayment_Status": ""})
        assert row.has_repayment_status is True
        assert row.repayment_status == 0.0

    def test_first_text_formats_numbers(self):
        """Test integral floats read as whole numbers."""
        assert first_text({"Item Name": 2024.0}, ("Item Name",)) == "2024"


class TestRowAdmission:
    """Tests for discarded rows."""

    @pytest.mark.parametrize("row", [
        {"Section": "Total", "Item Name": "Grocery", "Used_Amount": 100},
        {"Section": "Essential !!", "Item Name": "Total", "Used_Amount": 100},
        {"Section": "Essential !!", "Item Name": "", "Used_Amount": 100},
        {"Section": "Section", "Item Name": "Item Name", "Used_Amount": 100},
    ])
    def test_rows_discarded(self, row):
        """Test subtotal, blank and header-repeat rows produce nothing."""
        assert normalize(row) == []

    def test_zero_amount_budget_row_discarded(self):
        """Test budget rows with nothing positive are dropped."""
        assert normalize({"Section": "Essential !!", "Item Name": "Grocery"}) == []


class TestClassification:
    """Tests for table lookup and label overrides."""

    def test_table_lookup(self):
        """Test known items map to their pillar."""
        entry = lookup_protocol("Grocery", "")
        assert entry.pillar == Pillar.O
        assert entry.realm == Realm.BUDGET

    def test_unknown_item_uncategorized(self):
        """Test unknown items default to U / Budget."""
        entry = lookup_protocol("Gift", "")
        assert entry.pillar == Pillar.U
        assert entry.realm == Realm.BUDGET

    def test_label_override_wins(self):
        """Test label phrases override the table."""
        entry = lookup_protocol("Grocery", "Things which I did !!")
        assert entry.pillar == Pillar.I
        assert entry.classification == "Operational"

    def test_override_in_records(self):
        """Test an uncategorized item under a pillar label."""
        [record] = normalize({"Section": "Remind Me !!", "Item Name": "Gift", "Used_Amount": 600})
        assert record.pillar == Pillar.B
        assert record.kind == TransactionKind.EXPENSE
        assert record.category == "Remind Me !!"


class TestIncomeBranch:
    """Tests for income rows."""

    def test_income_with_passive_saving(self):
        """Test earned above used produces a rounding-off saving."""
        records = normalize({
            "Section": "Income",
            "Item Name": "Salary",
            "Earn_Amount": 50000,
            "Used_Amount": 49500,
        })
        assert [r.kind for r in records] == [TransactionKind.INCOME, TransactionKind.SAVINGS]
        income, saving = records
        assert income.amount == 49500
        assert income.pillar == Pillar.NONE
        assert saving.item == "Passive_Saving"
        assert saving.pillar == Pillar.B
        assert saving.amount == 500

    def test_income_from_earn_only(self):
        """Test earn amount is used when nothing was spent."""
        [income] = normalize({"Section": "Income", "Item Name": "Bonus", "Earn_Amount": 7000})
        assert income.kind == TransactionKind.INCOME
        assert income.item == "Bonus"
        assert income.amount == 7000

    def test_income_without_positive_amount(self):
        """Test an income row with no positive value is dropped."""
        assert normalize({"Section": "Income", "Item Name": "Salary", "Used_Amount": -10}) == []

    def test_infinite_income_text_dropped(self):
        """Test "Infinity" is not read as an income amount."""
        assert normalize({"Section": "Income", "Item Name": "Salary", "Earn_Amount": "Infinity"}) == []


class TestLiabilityBranch:
    """Tests for borrowing, repayment and reconciliation rows."""

    def test_new_loan_with_item_lender(self):
        """Test a new loan takes its lender from the item label."""
        [loan] = normalize({"Section": "Liability", "Item Name": "Maya Loan", "Taken_Amount": 1000})
        assert loan.kind == TransactionKind.LIABILITY_IN
        assert loan.lender == "Maya"
        assert loan.pillar == Pillar.NONE
        assert loan.realm == Realm.LIABILITIES
        assert loan.is_mirror_entry is False

    def test_repayment_is_mirror_entry(self):
        """Test repayments are mirror entries in pillar D."""
        [repay] = normalize({
            "Section": "Essential !!",
            "Item Name": "Loan Repayment",
            "Used_Amount": 1000,
            "Notes": "Repayment of Marwadi",
        })
        assert repay.kind == TransactionKind.LIABILITY_REPAY
        assert repay.is_mirror_entry is True
        assert repay.pillar == Pillar.D
        assert repay.realm == Realm.BUDGET
        assert repay.lender == "Marwadi"

    def test_loan_and_repayment_in_one_row(self):
        """Test one row can record both a new loan and a repayment."""
        records = normalize({
            "Section": "Liability",
            "Item Name": "Borrowed Fund",
            "Giver_Name": "Jagdish",
            "Taken_Amount": 5000,
            "Paid Amount": 2000,
        })
        assert [r.kind for r in records] == [
            TransactionKind.LIABILITY_IN,
            TransactionKind.LIABILITY_REPAY,
        ]
        assert all(r.lender == "Jagdish" for r in records)

    def test_repayment_from_status(self):
        """Test Repayment_Status is used when no paid amount exists."""
        [repay] = normalize({
            "Section": "Liability",
            "Item Name": "Borrowed Fund",
            "Giver_Name": "Maya",
            "Repayment_Status": 300,
        })
        assert repay.kind == TransactionKind.LIABILITY_REPAY
        assert repay.amount == 300

    def test_explicit_na_lender_uses_heuristic(self):
        """Test Giver_Name N/A falls back to the notes."""
        [loan] = normalize({
            "Section": "Liability",
            "Item Name": "Borrowed Fund",
            "Giver_Name": "N/A",
            "Notes": "Loan taken form Maya",
            "Taken_Amount": 800,
        })
        assert loan.lender == "Maya"

    def test_unresolved_lender(self):
        """Test a loan with no resolvable lender keeps lender None."""
        [loan] = normalize({"Section": "Liability", "Item Name": "Borrowed Fund", "Taken_Amount": 800})
        assert loan.lender is None

    def test_repayment_item_never_new_loan(self):
        """Test Loan Repayment rows never record new borrowing."""
        records = normalize({"Item Name": "Loan Repayment", "Earn_Amount": 900, "Used_Amount": 900})
        assert [r.kind for r in records] == [TransactionKind.LIABILITY_REPAY]

    def test_reconciliation_prefers_status(self):
        """Test Balance_Sheet uses Repayment_Status over used amount."""
        [adjustment] = normalize({
            "Item Name": "Balance_Sheet",
            "Earn_Amount": 5000,
            "Used_Amount": 1000,
            "Repayment_Status": 3000,
        })
        assert adjustment.kind == TransactionKind.ADJUSTMENT
        assert adjustment.amount == 2000
        assert adjustment.subtype == "reconciliation"

    def test_reconciliation_falls_back_to_used(self):
        """Test Balance_Sheet uses the used amount when no status column exists."""
        [adjustment] = normalize({"Item Name": "Balance_Sheet", "Earn_Amount": 5000, "Used_Amount": 1000})
        assert adjustment.amount == 4000

    def test_reconciliation_empty_status_counts_as_zero(self):
        """Test an empty status cell is a status of 0, not a fallback."""
        [adjustment] = normalize({
            "Item Name": "Balance_Sheet",
            "Earn_Amount": 5000,
            "Used_Amount": 1000,
            "Repayment_Status": "",
        })
        assert adjustment.amount == 5000

    def test_infinite_reconciliation_text(self):
        """Test infinite owed and paid text degrades instead of raising."""
        [adjustment] = normalize({
            "Item Name": "Balance_Sheet",
            "Earn_Amount": "inf",
            "Repayment_Status": "inf",
        })
        assert adjustment.amount == 0

    def test_overpaid_reconciliation_skipped(self):
        """Test a negative reconciliation balance is not emitted."""
        assert normalize({"Item Name": "Balance_Sheet", "Earn_Amount": 100, "Repayment_Status": 300}) == []


class TestBudgetBranch:
    """Tests for expense and savings rows."""

    def test_expense(self):
        """Test a known item becomes an expense."""
        [record] = normalize({"Section": "Need to Understand !!", "Item Name": "Grocery", "Used_Amount": 2500})
        assert record.kind == TransactionKind.EXPENSE
        assert record.pillar == Pillar.O
        assert record.amount == 2500
        assert record.classification == "Operational"

    def test_savings_fund(self):
        """Test fund items are savings."""
        [record] = normalize({"Section": "Essential !!", "Item Name": "ESF", "Budget Amount": 1000})
        assert record.kind == TransactionKind.SAVINGS
        assert record.pillar == Pillar.D

    def test_first_positive_amount(self):
        """Test negative candidates are skipped, never emitted."""
        [record] = normalize({"Item Name": "Grocery", "Used_Amount": -50, "Budget Amount": 200})
        assert record.amount == 200

    def test_unreadable_amount(self):
        """Test text amounts fall through to the next column."""
        [record] = normalize({"Item Name": "Vegetable", "Used_Amount": "abc", "Budget Amount": 300})
        assert record.amount == 300

    def test_month_and_key(self):
        """Test records carry the sheet's month label and key."""
        [record] = normalize({"Item Name": "Grocery", "Used_Amount": 10}, sheet="03 2024")
        assert record.month == "03 2024"
        assert record.chrono_key == "2024-03"


class TestWorkbookNormalization:
    """Tests for the whole-workbook pass."""

    def test_sheets_in_workbook_order(self):
        """Test records follow sheet order and skip non-month sheets."""
        sheets = {
            "Map & Details": [{"Item Name": "Grocery", "Used_Amount": 1}],
            "02 2024": [{"Item Name": "Grocery", "Used_Amount": 20}],
            "01 2024": [{"Item Name": "Grocery", "Used_Amount": 10}],
        }
        records = normalize_workbook(sheets)
        assert [r.month for r in records] == ["02 2024", "01 2024"]

    def test_iter_normalized_sheets(self):
        """Test per-sheet results, with skipped sheets yielding no records."""
        sheets = {
            "Map & Details": [{"Item Name": "Grocery", "Used_Amount": 1}],
            "01 2024": [{"Item Name": "Grocery", "Used_Amount": 10}, {}],
        }
        results = list(iter_normalized_sheets(sheets))
        assert [(name, len(rows), len(records)) for name, rows, records in results] == [
            ("Map & Details", 1, 0),
            ("01 2024", 2, 1),
        ]

    def test_never_raises_on_junk(self):
        """Test malformed rows degrade instead of failing the sheet."""
        rows = [
            {},
            {"Item Name": None, "Used_Amount": "??"},
            {"Item Name": "Grocery", "Used_Amount": float("nan")},
            {"Item Name": "Grocery", "Used_Amount": 15},
        ]
        records = normalize(*rows)
        assert len(records) == 1
        assert records[0].amount == 15


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
