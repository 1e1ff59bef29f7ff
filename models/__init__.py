from models.commission import Commission, Payout
from models.customer import Customer, Milestone
from models.document import Document
from models.feedback import Feedback
from models.notification import Notification
from models.order import Order, OrderItem, Payment
from models.partner import Partner
from models.referral import Referral
from models.vendor import CustomerVendorAssignment, Vendor

__all__ = [
    "Commission",
    "Customer",
    "CustomerVendorAssignment",
    "Document",
    "Feedback",
    "Milestone",
    "Notification",
    "Order",
    "OrderItem",
    "Partner",
    "Payment",
    "Payout",
    "Referral",
    "Vendor",
]
