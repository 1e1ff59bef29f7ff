"""
Static commission rate tables and the pure lookup over them.
Amounts are in rupees.
"""
from __future__ import annotations

import math
from typing import Any, Optional

from models.enums import PanelType, PartnerType, is_dcr_panel
from schemas.calculator import CommissionPreview

DCR_FIXED_COMMISSION: dict[int, dict[str, int]] = {
    3: {"ddp": 20_000, "bdp": 10_000},
    5: {"ddp": 35_000, "bdp": 15_000},
}
DCR_PER_KW_RATES: dict[str, int] = {"ddp": 6_000, "bdp": 3_000}
NON_DCR_PER_KW_RATES: dict[str, int] = {"ddp": 4_000, "bdp": 2_000}
INVERTER_COMMISSION: dict[str, int] = {"ddp": 1_000, "bdp": 500}

CUSTOMER_REFERRAL_COMMISSION = 10_000
CUSTOMER_REFERRAL_MIN_KW = 3

DCR_PER_KW_MIN_EXCLUSIVE = 5
DCR_PER_KW_MAX = 10


def _value(v: Any) -> Any:
    return getattr(v, "value", v)


def round_capacity(capacity: Any) -> int:
    """Parse a kW value (number or numeric string) and round half-up to whole kW; 0 if unparseable."""
    if capacity is None or capacity == "":
        return 0
    try:
        kw = float(capacity)
    except (TypeError, ValueError):
        return 0
    if math.isnan(kw) or kw <= 0:
        return 0
    return int(math.floor(kw + 0.5))


def commission_for(capacity_kw: float, panel_type: Optional[str], partner_role: Optional[str]) -> float:
    """Commission earned by one partner for one installation. Missing table keys yield 0."""
    role = _value(partner_role)
    if not capacity_kw or capacity_kw <= 0:
        return 0

    if role == PartnerType.CUSTOMER_PARTNER.value:
        return CUSTOMER_REFERRAL_COMMISSION if capacity_kw >= CUSTOMER_REFERRAL_MIN_KW else 0

    if role not in (PartnerType.DDP.value, PartnerType.BDP.value):
        return 0

    panel = _value(panel_type)
    if is_dcr_panel(panel):
        fixed = DCR_FIXED_COMMISSION.get(capacity_kw) if float(capacity_kw).is_integer() else None
        if fixed is not None:
            return fixed[role]
        if DCR_PER_KW_MIN_EXCLUSIVE < capacity_kw <= DCR_PER_KW_MAX:
            return capacity_kw * DCR_PER_KW_RATES[role]
        return 0

    if panel == PanelType.NON_DCR.value:
        return capacity_kw * NON_DCR_PER_KW_RATES[role]
    return 0


def inverter_commission(partner_role: Optional[str], quantity: int = 1) -> int:
    return INVERTER_COMMISSION.get(_value(partner_role), 0) * max(quantity, 0)


def commission_preview(capacity_kw: float, panel_type: Optional[str]) -> CommissionPreview:
    """Per-role amounts for a prospective installation, on the same whole-kW rounding as booked commissions."""
    kw = round_capacity(capacity_kw)
    ddp = commission_for(kw, panel_type, PartnerType.DDP)
    bdp = commission_for(kw, panel_type, PartnerType.BDP)
    return CommissionPreview(
        ddp=ddp,
        bdp=bdp,
        total=ddp + bdp,
        customer_partner=commission_for(kw, panel_type, PartnerType.CUSTOMER_PARTNER),
    )
