from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import relationship

from database import Base, utcnow


class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(String(64), primary_key=True, index=True)
    vendor_code = Column(String(32), unique=True, nullable=True)
    name = Column(String(256), nullable=False)
    vendor_type = Column(String(64), nullable=False, index=True)
    contact_person = Column(String(256), nullable=True)
    phone = Column(String(32), nullable=False)
    email = Column(String(256), nullable=True)
    address = Column(Text, nullable=True)
    state = Column(String(64), nullable=True)
    district = Column(String(128), nullable=True)
    gst_number = Column(String(32), nullable=True)
    status = Column(String(32), nullable=False, default="pending", index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


class CustomerVendorAssignment(Base):
    __tablename__ = "customer_vendor_assignments"

    id = Column(String(64), primary_key=True, index=True)
    customer_id = Column(String(64), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    vendor_id = Column(String(64), ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True)
    journey_stage = Column(String(32), nullable=False)
    job_role = Column(String(64), nullable=False)
    status = Column(String(32), nullable=False, default="assigned")
    notes = Column(Text, nullable=True)
    assigned_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    vendor = relationship("Vendor", lazy="joined")
