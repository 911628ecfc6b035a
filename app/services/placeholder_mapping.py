"""
Placeholder Mapping
Builds the flat {token: text} dictionary substituted into letter templates.

Each text field resolves as: override if present, else the entity value if
present, else the field default. "Present" means not None and not blank
after string coercion, so a cleared override falls through to the entity
value. That rule lives in ``is_present`` only.

Money placeholders come from the snapshot's stored totals and are never
recomputed here.
"""
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Union

from app.services.salary_calculator import SalaryBreakdown, format_currency

logger = logging.getLogger(__name__)

PLACEHOLDER_SCHEMA_VERSION = 1

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def is_present(value: Any) -> bool:
    """Blank strings count as missing."""
    return value is not None and str(value).strip() != ""


def normalize_label(label: str) -> str:
    """'House Rent Allowance (HRA)' -> 'houserentallowancehra'"""
    return _NON_ALNUM.sub("", str(label or "").lower())


def format_long_date(value: date) -> str:
    """17 October 2026"""
    return f"{value.day} {value.strftime('%B %Y')}"


def format_short_date(value: date) -> str:
    """17/10/2026"""
    return f"{value.day:02d}/{value.month:02d}/{value.year}"


def to_text(value: Any) -> str:
    """Coerce an entity value to template text."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return format_short_date(value.date())
    if isinstance(value, date):
        return format_short_date(value)
    return str(value)


Default = Union[str, Callable[[date], str]]


@dataclass(frozen=True)
class PlaceholderField:
    """A template token, the entity keys it may be read from, and its default."""

    key: str
    sources: tuple[str, ...] = ()
    default: Default = ""

    def default_for(self, today: date) -> str:
        return self.default(today) if callable(self.default) else self.default


def _today_long(today: date) -> str:
    return format_long_date(today)


COMPANY_FIELDS: tuple[PlaceholderField, ...] = (
    PlaceholderField("company_name", ("company_name",)),
    PlaceholderField("company_address", ("company_address",)),
    PlaceholderField("company_email", ("company_email",)),
    PlaceholderField("signatory_name", ("signatory_name",)),
    PlaceholderField("signatory_designation", ("signatory_designation",)),
)

OFFER_LETTER_FIELDS: tuple[PlaceholderField, ...] = (
    PlaceholderField("employee_name", ("name",)),
    PlaceholderField("candidate_name", ("name",)),
    PlaceholderField("father_name", ("father_name",)),
    PlaceholderField("designation", ("designation", "job_title", "current_designation")),
    PlaceholderField("department", ("department",)),
    PlaceholderField("joining_date", ("joining_date",)),
    PlaceholderField("location", ("location",)),
    PlaceholderField("address", ("address",)),
    PlaceholderField("candidate_address", ("address",)),
    PlaceholderField("offer_ref_no", ("offer_ref_code",)),
    PlaceholderField("offer_ref_code", ("offer_ref_code",)),
    PlaceholderField("valid_until", ("valid_until",)),
    PlaceholderField("probation_months", ("probation_months",)),
    PlaceholderField("notice_period_days", ("notice_period_days",)),
    PlaceholderField("working_days", ("working_days",)),
    PlaceholderField("working_hours", ("working_hours",)),
    PlaceholderField("issued_date", (), _today_long),
    PlaceholderField("current_date", (), _today_long),
) + COMPANY_FIELDS

JOINING_LETTER_FIELDS: tuple[PlaceholderField, ...] = (
    PlaceholderField("offer_ref_code", ("offer_ref_code",)),
    PlaceholderField("employee_name", ("name",)),
    PlaceholderField("designation", ("designation", "job_title", "current_designation")),
    PlaceholderField("department", ("department",)),
    PlaceholderField("location", ("location",)),
    PlaceholderField("candidate_address", ("address",)),
    PlaceholderField("joining_date", ("joining_date",)),
    PlaceholderField("father_name", ("father_name",)),
    PlaceholderField("current_date", (), _today_long),
) + COMPANY_FIELDS

FIELDS_BY_LETTER_TYPE = {
    "offer": OFFER_LETTER_FIELDS,
    "joining": JOINING_LETTER_FIELDS,
}

SALARY_AGGREGATE_KEYS = (
    "annual_ctc", "monthly_ctc",
    "gross_monthly", "gross_annual",
    "total_deductions_monthly", "total_deductions_annual",
    "net_monthly", "net_annual",
    "employer_benefits_monthly", "employer_benefits_annual",
)


def resolve_value(
    field: PlaceholderField,
    overrides: Mapping[str, Any],
    entity: Mapping[str, Any],
    today: date,
) -> str:
    """Apply override -> entity -> default precedence for one field."""
    override = overrides.get(field.key)
    if is_present(override):
        return to_text(override)
    for source in field.sources:
        value = entity.get(source)
        if is_present(value):
            return to_text(value)
    return field.default_for(today)


def salary_placeholders(breakdown: SalaryBreakdown, grouping: str = "indian") -> dict[str, str]:
    """
    Per-component and aggregate salary tokens.

    Each component yields ``{label}_monthly`` and ``{label}_annual`` where the
    label is normalized with ``normalize_label``. Zero amounts render as "0".
    """
    values: dict[str, str] = {}
    categories = (
        ("earning", breakdown.earnings),
        ("deduction", breakdown.deductions),
        ("benefit", breakdown.employer_benefits),
    )
    for category, components in categories:
        for component in components:
            key = normalize_label(component.label)
            if not key:
                logger.warning(f"Skipping {category} placeholder with unusable label {component.label!r}")
                continue
            if f"{key}_annual" in values:
                logger.warning(f"Duplicate salary placeholder {key!r}; keeping the first {category} value")
                continue
            values[f"{key}_monthly"] = format_currency(component.monthly, grouping)
            values[f"{key}_annual"] = format_currency(component.annual, grouping)

    totals = breakdown.totals
    values.update({
        "annual_ctc": format_currency(totals.annual_ctc, grouping),
        "monthly_ctc": format_currency(totals.monthly_ctc, grouping),
        "gross_monthly": format_currency(totals.monthly_gross, grouping),
        "gross_annual": format_currency(totals.gross_earnings, grouping),
        "total_deductions_monthly": format_currency(totals.monthly_deductions, grouping),
        "total_deductions_annual": format_currency(totals.total_deductions, grouping),
        "net_monthly": format_currency(totals.monthly_net, grouping),
        "net_annual": format_currency(totals.net_salary, grouping),
        "employer_benefits_monthly": format_currency(totals.employer_benefits_total / 12, grouping),
        "employer_benefits_annual": format_currency(totals.employer_benefits_total, grouping),
    })
    return values


def map_to_placeholders(
    applicant: Mapping[str, Any],
    overrides: Optional[Mapping[str, Any]],
    snapshot: Optional[SalaryBreakdown],
    letter_type: str = "joining",
    today: Optional[date] = None,
    grouping: str = "indian",
) -> dict[str, str]:
    """
    Map applicant data, overrides and a salary snapshot to template tokens.

    Args:
        applicant: Flat entity values (name, designation, address, ...)
        overrides: Values typed in by the user for this render
        snapshot: Parsed salary snapshot, or None when no salary is attached
        letter_type: "offer" or "joining"; selects the fixed text key set
        today: Date used for current_date/issued_date (defaults to today)
        grouping: Digit grouping for money values

    Returns:
        Ordered dict of token -> text. Text fields come first in declaration
        order, then salary tokens.
    """
    if letter_type not in FIELDS_BY_LETTER_TYPE:
        raise ValueError(f"Unknown letter type: {letter_type}")

    overrides = overrides or {}
    today = today or date.today()

    values: dict[str, str] = {}
    for field in FIELDS_BY_LETTER_TYPE[letter_type]:
        values[field.key] = resolve_value(field, overrides, applicant, today)

    if snapshot is not None:
        values.update(salary_placeholders(snapshot, grouping))

    return values
