"""
PM Surya Ghar rooftop subsidy and cost estimate.
Pure and deterministic: no database or network access.
"""
from __future__ import annotations

from models.enums import PanelType, is_dcr_panel
from schemas.calculator import SubsidyResult

COST_PER_KW: dict[str, int] = {
    PanelType.DCR_HYBRID.value: 75_000,
    PanelType.DCR_ONGRID.value: 66_000,
    PanelType.DCR.value: 55_000,
    PanelType.NON_DCR.value: 55_000,
}

# Per-kW rate and cap, DCR panels only
STATE_SUBSIDY: dict[str, tuple[int, int]] = {
    "odisha": (20_000, 60_000),
    "uttar pradesh": (10_000, 30_000),
}

CENTRAL_RATE_FIRST_2KW = 30_000
CENTRAL_RATE_3RD_KW = 18_000
CENTRAL_SUBSIDY_CAP = 78_000

UNITS_PER_KW_PER_DAY = 4
DAYS_PER_MONTH = 30
TARIFF_PER_UNIT = 7

EMI_ANNUAL_RATE = 0.10
EMI_TENURE_MONTHS = 60

MAX_CAPACITY_KW = 100


def central_subsidy(capacity_kw: float, panel_type: str) -> float:
    if not is_dcr_panel(panel_type):
        return 0
    if capacity_kw <= 2:
        return capacity_kw * CENTRAL_RATE_FIRST_2KW
    if capacity_kw <= 3:
        return 2 * CENTRAL_RATE_FIRST_2KW + (capacity_kw - 2) * CENTRAL_RATE_3RD_KW
    return CENTRAL_SUBSIDY_CAP


def state_subsidy(capacity_kw: float, state: str, panel_type: str) -> float:
    if not is_dcr_panel(panel_type):
        return 0
    rule = STATE_SUBSIDY.get((state or "").strip().lower())
    if rule is None:
        return 0
    per_kw, cap = rule
    return min(capacity_kw * per_kw, cap)


def monthly_emi(principal: float, annual_rate: float = EMI_ANNUAL_RATE, months: int = EMI_TENURE_MONTHS) -> int:
    """Standard reducing-balance EMI, rounded to the rupee."""
    if principal <= 0:
        return 0
    r = annual_rate / 12
    growth = (1 + r) ** months
    return round(principal * r * growth / (growth - 1))


def calculate_subsidy(capacity_kw: float, state: str = "", panel_type: str = PanelType.DCR.value) -> SubsidyResult:
    """
    Estimate system cost, central and state subsidy, savings, payback and EMI.
    Raises ValueError when capacity is outside (0, 100] kW.
    """
    if capacity_kw is None or capacity_kw <= 0 or capacity_kw > MAX_CAPACITY_KW:
        raise ValueError(f"Capacity must be greater than 0 and at most {MAX_CAPACITY_KW} kW")

    panel = getattr(panel_type, "value", panel_type)
    if panel not in COST_PER_KW:
        panel = PanelType.DCR.value
    cost_per_kw = COST_PER_KW[panel]
    system_cost = capacity_kw * cost_per_kw

    central = central_subsidy(capacity_kw, panel)
    state_amount = state_subsidy(capacity_kw, state, panel)
    total = central + state_amount
    net_cost = max(0, system_cost - total)

    daily = capacity_kw * UNITS_PER_KW_PER_DAY
    monthly = daily * DAYS_PER_MONTH
    monthly_savings = monthly * TARIFF_PER_UNIT
    annual_savings = monthly_savings * 12
    payback = round(net_cost / annual_savings, 1) if net_cost > 0 else 0

    return SubsidyResult(
        capacity_kw=capacity_kw,
        panel_type=panel,
        state=state or "",
        cost_per_kw=cost_per_kw,
        system_cost=system_cost,
        central_subsidy=central,
        state_subsidy=state_amount,
        total_subsidy=total,
        net_cost=net_cost,
        daily_generation=daily,
        monthly_generation=monthly,
        monthly_savings=monthly_savings,
        annual_savings=annual_savings,
        payback_years=payback,
        emi=monthly_emi(net_cost),
        subsidy_eligible=is_dcr_panel(panel),
    )
