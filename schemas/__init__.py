from schemas.calculator import CommissionPreview, SubsidyRequest, SubsidyResult
from schemas.commission import CommissionStatusUpdate, CommissionSummary, PayoutCreate
from schemas.customer import CustomerCreate, CustomerStatusUpdate, PublicCustomerRegistration
from schemas.feedback import FeedbackCreate, FeedbackStatusUpdate
from schemas.lead_score import LeadScoreFactor, LeadScoreResult
from schemas.milestone import MilestoneComplete
from schemas.order import OrderCreate, OrderItemCreate, OrderStatusUpdate, PaymentCreate, PaymentStatusUpdate
from schemas.partner import CustomerPartnerEnrollment, PartnerCreate, PartnerStatusUpdate
from schemas.referral import ReferralCreate
from schemas.vendor import AssignmentCreate, AssignmentStatusUpdate, VendorRegistration, VendorStatusUpdate

__all__ = [
    "AssignmentCreate",
    "AssignmentStatusUpdate",
    "CommissionPreview",
    "CommissionStatusUpdate",
    "CommissionSummary",
    "CustomerCreate",
    "CustomerPartnerEnrollment",
    "CustomerStatusUpdate",
    "FeedbackCreate",
    "FeedbackStatusUpdate",
    "LeadScoreFactor",
    "LeadScoreResult",
    "MilestoneComplete",
    "OrderCreate",
    "OrderItemCreate",
    "OrderStatusUpdate",
    "PartnerCreate",
    "PartnerStatusUpdate",
    "PaymentCreate",
    "PaymentStatusUpdate",
    "PublicCustomerRegistration",
    "ReferralCreate",
    "SubsidyRequest",
    "SubsidyResult",
    "VendorRegistration",
    "VendorStatusUpdate",
]
