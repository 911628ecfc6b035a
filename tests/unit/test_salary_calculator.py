"""Unit tests for salary totals and currency formatting."""

from decimal import Decimal

import pytest

from app.services.salary_calculator import (
    SalaryBreakdown,
    SalaryComponent,
    build_salary_rows,
    compute_totals,
    format_currency,
    parse_components,
    to_decimal,
)


def components(*pairs):
    return [SalaryComponent(label, Decimal(annual)) for label, annual in pairs]


@pytest.mark.unit
class TestComputeTotals:
    """Tests for compute_totals."""

    def test_standard_package(self):
        """Gross, deductions, net and CTC for a typical offer."""
        totals = compute_totals(
            components(("Basic", "600000"), ("HRA", "240000")),
            components(("PF", "21600")),
            components(("Employer PF", "21600")),
        )

        assert totals.gross_earnings == Decimal("840000")
        assert totals.total_deductions == Decimal("21600")
        assert totals.net_salary == Decimal("818400")
        assert totals.employer_benefits_total == Decimal("21600")
        assert totals.annual_ctc == Decimal("861600")
        assert totals.monthly_ctc == Decimal("71800")

    def test_net_plus_deductions_equals_gross(self):
        """Holds exactly for amounts that do not divide evenly."""
        totals = compute_totals(
            components(("Basic", "100000.33"), ("Bonus", "7.01")),
            components(("Tax", "1234.57")),
            [],
        )

        assert totals.net_salary + totals.total_deductions == totals.gross_earnings

    def test_empty_components(self):
        totals = compute_totals([], [], [])

        assert totals.gross_earnings == 0
        assert totals.annual_ctc == 0
        assert totals.monthly_ctc == 0

    def test_repeated_calls_are_identical(self):
        earnings = components(("Basic", "123457"))
        assert compute_totals(earnings, [], []) == compute_totals(earnings, [], [])


@pytest.mark.unit
class TestSalaryComponent:
    """Tests for component parsing."""

    def test_monthly_only_derives_annual(self):
        component = SalaryComponent.from_dict({"label": "Conveyance", "monthly": "1600"})

        assert component.annual == Decimal("19200")

    def test_annual_wins_over_monthly(self):
        """Annual is the source of truth; a conflicting monthly is ignored."""
        component = SalaryComponent.from_dict({"label": "Basic", "annual": "120000", "monthly": "999"})

        assert component.annual == Decimal("120000")
        assert component.monthly == Decimal("10000")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError):
            SalaryComponent.from_dict({"label": "Basic", "annual": "-1"})

    def test_missing_label_rejected(self):
        with pytest.raises(ValueError):
            SalaryComponent.from_dict({"label": "  ", "annual": "100"})

    def test_grouped_amount_is_parsed(self):
        assert to_decimal("1,20,000") == Decimal("120000")

    def test_garbage_amount_rejected(self):
        with pytest.raises(ValueError):
            to_decimal("twelve")

    def test_zero_rows_are_kept(self):
        parsed = parse_components([{"label": "Bonus", "annual": "0"}, {"label": "Basic", "annual": "10"}])

        assert [c.label for c in parsed] == ["Bonus", "Basic"]


@pytest.mark.unit
class TestFormatCurrency:
    """Tests for format_currency."""

    @pytest.mark.parametrize("amount,expected", [
        ("0", "0"),
        ("999", "999"),
        ("100000", "1,00,000"),
        ("12345678", "1,23,45,678"),
        ("999.5", "1,000"),
        ("71799.49", "71,799"),
    ])
    def test_indian_grouping(self, amount, expected):
        assert format_currency(amount) == expected

    def test_international_grouping(self):
        assert format_currency("12345678", grouping="international") == "12,345,678"

    def test_negative_amount(self):
        assert format_currency("-150000") == "-1,50,000"


@pytest.mark.unit
class TestBuildSalaryRows:
    """Tests for the letter salary table."""

    def test_row_layout(self):
        breakdown = SalaryBreakdown.from_components(
            [{"label": "Basic", "annual": "600000"}, {"label": "Bonus", "annual": "0"}],
            [{"label": "PF", "annual": "21600"}],
            [{"label": "Employer PF", "annual": "21600"}],
        )

        rows = build_salary_rows(
            breakdown.earnings, breakdown.deductions, breakdown.employer_benefits, breakdown.totals,
            zero_display="-",
        )

        assert len(rows) == 2 + 1 + 1 + 7
        labels = [r.label for r in rows]
        assert labels[0] == "A - Monthly Benefits"
        assert labels.index("GROSS A") < labels.index("PF") < labels.index("Net Salary Payable (A-B)")
        assert labels[-1] == "TOTAL CTC (A+C)"

        basic = rows[1]
        assert (basic.monthly, basic.annual) == ("50,000", "6,00,000")
        bonus = rows[2]
        assert (bonus.monthly, bonus.annual) == ("-", "-")
        assert rows[-1].annual == "6,21,600"

    def test_breakdown_round_trips_through_stored_dict(self):
        """Stored totals are used as-is when loading a snapshot."""
        breakdown = SalaryBreakdown.from_components([{"label": "Basic", "annual": "1200"}], [], [])

        class Record:
            earnings = breakdown.to_dict()["earnings"]
            deductions = []
            employer_benefits = []
            totals = {**breakdown.totals.to_dict(), "annual_ctc": "5000"}

        loaded = SalaryBreakdown.from_record(Record)

        assert loaded.totals.annual_ctc == Decimal("5000")
        assert loaded.earnings == breakdown.earnings
