"""
Status vocabulary shared by models, services and routers.
Values are the strings stored in the database and sent over the API.
"""
from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Optional


class Role(str, Enum):
    ADMIN = "admin"
    BDP = "bdp"
    DDP = "ddp"
    CUSTOMER_PARTNER = "customer_partner"


class PartnerStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CustomerStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    APPROVED = "approved"
    INSTALLATION_SCHEDULED = "installation_scheduled"
    COMPLETED = "completed"


# Forward-only lifecycle; a status may only advance to the next entry.
CUSTOMER_STATUS_FLOW: tuple[CustomerStatus, ...] = (
    CustomerStatus.PENDING,
    CustomerStatus.VERIFIED,
    CustomerStatus.APPROVED,
    CustomerStatus.INSTALLATION_SCHEDULED,
    CustomerStatus.COMPLETED,
)

CUSTOMER_STATUS_PREDECESSOR: dict[CustomerStatus, CustomerStatus] = {
    nxt: prev for prev, nxt in zip(CUSTOMER_STATUS_FLOW, CUSTOMER_STATUS_FLOW[1:])
}


def next_customer_status(status: str) -> Optional[CustomerStatus]:
    """Return the status that follows `status`, or None at the end of the flow."""
    current = CustomerStatus(status)
    idx = CUSTOMER_STATUS_FLOW.index(current)
    if idx + 1 < len(CUSTOMER_STATUS_FLOW):
        return CUSTOMER_STATUS_FLOW[idx + 1]
    return None


class CustomerSource(str, Enum):
    DDP_REGISTRATION = "ddp_registration"
    WEBSITE_DIRECT = "website_direct"
    CUSTOMER_REFERRAL = "customer_referral"


class PanelType(str, Enum):
    DCR = "dcr"
    DCR_HYBRID = "dcr_hybrid"
    DCR_ONGRID = "dcr_ongrid"
    NON_DCR = "non_dcr"

    @property
    def is_dcr(self) -> bool:
        return self is not PanelType.NON_DCR


def is_dcr_panel(panel_type: Optional[str]) -> bool:
    """DCR family check that tolerates unknown or missing values (treated as non-DCR)."""
    try:
        return PanelType(panel_type).is_dcr
    except ValueError:
        return False


class MilestoneStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class JourneyStage(str, Enum):
    PRE_INSTALLATION = "pre_installation"
    INSTALLATION = "installation"
    POST_INSTALLATION = "post_installation"


JOURNEY_STAGE_LABELS: dict[JourneyStage, str] = {
    JourneyStage.PRE_INSTALLATION: "Pre-Installation",
    JourneyStage.INSTALLATION: "Installation",
    JourneyStage.POST_INSTALLATION: "Post-Installation",
}


class MilestoneStep(NamedTuple):
    key: str
    label: str
    description: str
    stage: JourneyStage


FILE_SUBMISSION = "file_submission"
INSTALLATION_COMPLETE = "installation_complete"
APPLICATION_SUBMITTED = "application_submitted"

INSTALLATION_MILESTONES: tuple[MilestoneStep, ...] = (
    MilestoneStep(APPLICATION_SUBMITTED, "Application Submitted", "Customer registration completed", JourneyStage.PRE_INSTALLATION),
    MilestoneStep("documents_verified", "Documents Verified", "All required documents verified", JourneyStage.PRE_INSTALLATION),
    MilestoneStep("site_survey", "Site Survey", "Technical survey of installation site", JourneyStage.PRE_INSTALLATION),
    MilestoneStep(FILE_SUBMISSION, "File Submission", "Application file submitted to PM Surya Ghar portal", JourneyStage.PRE_INSTALLATION),
    MilestoneStep("discom_approval", "DISCOM Approval", "DISCOM feasibility approval received", JourneyStage.PRE_INSTALLATION),
    MilestoneStep("bank_loan_processing", "Bank Loan Processing", "Loan sanctioned and disbursed, if financed", JourneyStage.PRE_INSTALLATION),
    MilestoneStep("material_dispatched", "Material Dispatched", "Panels, inverter and structure delivered to site", JourneyStage.INSTALLATION),
    MilestoneStep("installation_scheduled", "Installation Scheduled", "Installation date confirmed", JourneyStage.INSTALLATION),
    MilestoneStep(INSTALLATION_COMPLETE, "Installation Complete", "Solar panels installed", JourneyStage.INSTALLATION),
    MilestoneStep("net_meter_installed", "Net Meter Installed", "DISCOM net meter fitted", JourneyStage.POST_INSTALLATION),
    MilestoneStep("grid_connected", "Grid Connected", "System connected to electricity grid", JourneyStage.POST_INSTALLATION),
    MilestoneStep("subsidy_applied", "Subsidy Applied", "Subsidy claim submitted on the portal", JourneyStage.POST_INSTALLATION),
    MilestoneStep("subsidy_received", "Subsidy Received", "Subsidy amount credited", JourneyStage.POST_INSTALLATION),
    MilestoneStep("final_payment", "Final Payment", "Remaining customer payment collected", JourneyStage.POST_INSTALLATION),
)

MILESTONE_BY_KEY: dict[str, MilestoneStep] = {m.key: m for m in INSTALLATION_MILESTONES}


class VendorType(str, Enum):
    LOGISTIC = "logistic"
    BANK_LOAN_LIAISON = "bank_loan_liaison"
    DISCOM_NET_METERING = "discom_net_metering"
    ELECTRICAL = "electrical"
    SOLAR_INSTALLATION = "solar_installation"
    SOLAR_PANEL_SUPPLIER = "solar_panel_supplier"
    INVERTER_SUPPLIER = "inverter_supplier"
    STRUCTURE_MATERIAL_SUPPLIER = "structure_material_supplier"
    ELECTRICAL_SUPPLIER = "electrical_supplier"
    CIVIL_MATERIAL_SUPPLIER = "civil_material_supplier"
    OTHER_ACCESSORY_SUPPLIER = "other_accessory_supplier"
    LITHIUM_ION_BATTERY_SUPPLIER = "lithium_ion_battery_supplier"
    TUBULAR_GEL_BATTERY_SUPPLIER = "tubular_gel_battery_supplier"


VENDOR_STATES = ("Bihar", "Jharkhand", "Uttar Pradesh", "Odisha")


class VendorStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AssignmentStatus(str, Enum):
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


ASSIGNMENT_STATUS_FLOW: tuple[AssignmentStatus, ...] = (
    AssignmentStatus.ASSIGNED,
    AssignmentStatus.IN_PROGRESS,
    AssignmentStatus.COMPLETED,
)


class PartnerType(str, Enum):
    DDP = "ddp"
    BDP = "bdp"
    CUSTOMER_PARTNER = "customer_partner"


class CommissionSource(str, Enum):
    INSTALLATION = "installation"
    INVERTER = "inverter"
    CUSTOMER_REFERRAL = "customer_referral"
    BONUS = "bonus"


class CommissionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"


COMMISSION_STATUS_FLOW: tuple[CommissionStatus, ...] = (
    CommissionStatus.PENDING,
    CommissionStatus.APPROVED,
    CommissionStatus.PAID,
)


class PayoutMode(str, Enum):
    IMPS = "IMPS"
    NEFT = "NEFT"
    RTGS = "RTGS"
    UPI = "UPI"


class PayoutStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class DocumentCategory(str, Enum):
    CUSTOMER_ID = "customer_id"
    ADDRESS_PROOF = "address_proof"
    ELECTRICITY_BILL = "electricity_bill"
    SITE_SURVEY = "site_survey"
    INSTALLATION_PHOTO = "installation_photo"
    COMPLETION_CERTIFICATE = "completion_certificate"
    SUBSIDY_DOCUMENT = "subsidy_document"
    INVOICE = "invoice"
    AGREEMENT = "agreement"
    BANK_DOCUMENT = "bank_document"
    OTHER = "other"


class FeedbackType(str, Enum):
    BUG = "bug"
    SUGGESTION = "suggestion"
    COMPLAINT = "complaint"
    OTHER = "other"


class FeedbackStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"


class ReferralType(str, Enum):
    CUSTOMER = "customer"
    PARTNER = "partner"


class ReferralStatus(str, Enum):
    PENDING = "pending"
    CONVERTED = "converted"
    EXPIRED = "expired"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    CAPTURED = "captured"
    FAILED = "failed"
    REFUNDED = "refunded"
