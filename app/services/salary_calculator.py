"""
Salary Calculator
Derives gross/net/CTC totals from salary components and formats amounts for letters.

Annual amounts are the single source of truth; monthly figures are always
annual / 12. All arithmetic is Decimal so repeated calls give identical output.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, Optional

logger = logging.getLogger(__name__)

MONTHS = Decimal(12)
ZERO = Decimal(0)


def to_decimal(value: Any) -> Decimal:
    """Parse an amount. None and blank strings are zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    text = str(value).replace(",", "").strip()
    if not text:
        return ZERO
    try:
        return Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Invalid salary amount: {value!r}")


@dataclass(frozen=True)
class SalaryComponent:
    """One earning, deduction or employer benefit line."""

    label: str
    annual: Decimal

    @property
    def monthly(self) -> Decimal:
        return self.annual / MONTHS

    @classmethod
    def from_dict(cls, data: dict) -> "SalaryComponent":
        """
        Build a component from stored or request data.

        Accepts ``annual`` (or ``yearly``). When only ``monthly`` is given the
        annual amount is derived from it once; a supplied monthly value is
        otherwise ignored.
        """
        label = str(data.get("label") or data.get("name") or "").strip()
        if not label:
            raise ValueError("Salary component label is required")

        annual_raw = data.get("annual", data.get("yearly"))
        if annual_raw is not None and str(annual_raw).strip() != "":
            annual = to_decimal(annual_raw)
        else:
            annual = to_decimal(data.get("monthly")) * MONTHS

        if annual < 0:
            raise ValueError(f"Salary component {label!r} cannot be negative")
        return cls(label=label, annual=annual)

    def to_dict(self) -> dict:
        return {"label": self.label, "annual": str(self.annual)}


@dataclass(frozen=True)
class SalaryTotals:
    """Totals block. All values are exact (unrounded) annual or monthly amounts."""

    gross_earnings: Decimal
    total_deductions: Decimal
    net_salary: Decimal
    employer_benefits_total: Decimal
    monthly_ctc: Decimal
    annual_ctc: Decimal

    @property
    def monthly_gross(self) -> Decimal:
        return self.gross_earnings / MONTHS

    @property
    def monthly_deductions(self) -> Decimal:
        return self.total_deductions / MONTHS

    @property
    def monthly_net(self) -> Decimal:
        return self.net_salary / MONTHS

    def to_dict(self) -> dict:
        return {
            "gross_earnings": str(self.gross_earnings),
            "total_deductions": str(self.total_deductions),
            "net_salary": str(self.net_salary),
            "employer_benefits_total": str(self.employer_benefits_total),
            "monthly_ctc": str(self.monthly_ctc),
            "annual_ctc": str(self.annual_ctc),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SalaryTotals":
        return cls(
            gross_earnings=to_decimal(data.get("gross_earnings")),
            total_deductions=to_decimal(data.get("total_deductions")),
            net_salary=to_decimal(data.get("net_salary")),
            employer_benefits_total=to_decimal(data.get("employer_benefits_total")),
            monthly_ctc=to_decimal(data.get("monthly_ctc")),
            annual_ctc=to_decimal(data.get("annual_ctc")),
        )


def parse_components(items: Optional[Iterable[dict]]) -> list[SalaryComponent]:
    """Parse a list of component dicts, keeping order and zero-valued rows."""
    return [SalaryComponent.from_dict(item) for item in (items or [])]


def _sum(components: Iterable[SalaryComponent]) -> Decimal:
    return sum((c.annual for c in components), ZERO)


def compute_totals(
    earnings: Iterable[SalaryComponent],
    deductions: Iterable[SalaryComponent],
    employer_benefits: Iterable[SalaryComponent],
) -> SalaryTotals:
    """
    Compute salary totals.

    Args:
        earnings: Earning components (annual amounts)
        deductions: Employee deduction components
        employer_benefits: Employer contribution components

    Returns:
        SalaryTotals where net_salary + total_deductions == gross_earnings exactly
    """
    gross = _sum(earnings)
    deductions_total = _sum(deductions)
    benefits_total = _sum(employer_benefits)

    annual_ctc = gross + benefits_total

    return SalaryTotals(
        gross_earnings=gross,
        total_deductions=deductions_total,
        net_salary=gross - deductions_total,
        employer_benefits_total=benefits_total,
        monthly_ctc=annual_ctc / MONTHS,
        annual_ctc=annual_ctc,
    )


@dataclass(frozen=True)
class SalaryBreakdown:
    """Parsed salary snapshot: component lists plus the totals stored with them."""

    earnings: list[SalaryComponent]
    deductions: list[SalaryComponent]
    employer_benefits: list[SalaryComponent]
    totals: SalaryTotals

    @classmethod
    def from_components(
        cls,
        earnings: Optional[Iterable[dict]],
        deductions: Optional[Iterable[dict]],
        employer_benefits: Optional[Iterable[dict]],
    ) -> "SalaryBreakdown":
        parsed_earnings = parse_components(earnings)
        parsed_deductions = parse_components(deductions)
        parsed_benefits = parse_components(employer_benefits)
        return cls(
            earnings=parsed_earnings,
            deductions=parsed_deductions,
            employer_benefits=parsed_benefits,
            totals=compute_totals(parsed_earnings, parsed_deductions, parsed_benefits),
        )

    @classmethod
    def from_record(cls, record: Any) -> "SalaryBreakdown":
        """Load a stored snapshot. Stored totals are used as-is when present."""
        breakdown = cls.from_components(record.earnings, record.deductions, record.employer_benefits)
        if record.totals:
            return cls(
                earnings=breakdown.earnings,
                deductions=breakdown.deductions,
                employer_benefits=breakdown.employer_benefits,
                totals=SalaryTotals.from_dict(record.totals),
            )
        return breakdown

    def to_dict(self) -> dict:
        return {
            "earnings": [c.to_dict() for c in self.earnings],
            "deductions": [c.to_dict() for c in self.deductions],
            "employer_benefits": [c.to_dict() for c in self.employer_benefits],
            "totals": self.totals.to_dict(),
        }


def _group_indian(digits: str) -> str:
    """12345678 -> 1,23,45,678"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def _group_international(digits: str) -> str:
    return f"{int(digits):,}"


def format_currency(amount: Any, grouping: str = "indian") -> str:
    """
    Round to the nearest whole unit (half up) and group digits.

    Args:
        amount: Exact amount (Decimal, int, float or numeric string)
        grouping: "indian" (lakh/crore) or "international" (thousands)

    Returns:
        Display string. Zero is rendered as "0".
    """
    value = to_decimal(amount).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    digits = str(abs(int(value)))
    grouped = _group_indian(digits) if grouping == "indian" else _group_international(digits)
    return f"{sign}{grouped}"


@dataclass(frozen=True)
class SalaryRow:
    """One row of the letter salary table. Blank strings mark header/separator cells."""

    label: str
    monthly: str
    annual: str

    def to_dict(self) -> dict:
        return {"label": self.label, "monthly": self.monthly, "annual": self.annual}


def _component_row(component: SalaryComponent, grouping: str, zero_display: str) -> SalaryRow:
    if component.annual == ZERO:
        return SalaryRow(component.label, zero_display, zero_display)
    return SalaryRow(
        component.label,
        format_currency(component.monthly, grouping),
        format_currency(component.annual, grouping),
    )


def _total_row(label: str, annual: Decimal, grouping: str) -> SalaryRow:
    return SalaryRow(label, format_currency(annual / MONTHS, grouping), format_currency(annual, grouping))


def build_salary_rows(
    earnings: list[SalaryComponent],
    deductions: list[SalaryComponent],
    employer_benefits: list[SalaryComponent],
    totals: SalaryTotals,
    grouping: str = "indian",
    zero_display: str = "0",
) -> list[SalaryRow]:
    """
    Build the salary table rendered into joining letters.

    Layout: header, earnings, GROSS A, separator, deductions, Total
    Deductions (B), Net Salary Payable (A-B), separator, employer benefits,
    TOTAL CTC (A+C). Every component produces a row even when zero, so the
    row count is always len(earnings) + len(deductions) + len(benefits) + 7.
    """
    separator = SalaryRow("", "", "")
    rows = [SalaryRow("A - Monthly Benefits", "", "")]
    rows.extend(_component_row(c, grouping, zero_display) for c in earnings)
    rows.append(_total_row("GROSS A", totals.gross_earnings, grouping))
    rows.append(separator)
    rows.extend(_component_row(c, grouping, zero_display) for c in deductions)
    rows.append(_total_row("Total Deductions (B)", totals.total_deductions, grouping))
    rows.append(_total_row("Net Salary Payable (A-B)", totals.net_salary, grouping))
    rows.append(separator)
    rows.extend(_component_row(c, grouping, zero_display) for c in employer_benefits)
    rows.append(_total_row("TOTAL CTC (A+C)", totals.annual_ctc, grouping))
    return rows
