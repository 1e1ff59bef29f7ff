from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text, func
from sqlalchemy.orm import relationship

from database import Base, utcnow


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(256), nullable=False)
    email = Column(String(256), nullable=True)
    phone = Column(String(32), nullable=False)
    address = Column(Text, nullable=True)
    district = Column(String(128), nullable=True)
    state = Column(String(64), nullable=True)
    pincode = Column(String(16), nullable=True)
    electricity_board = Column(String(128), nullable=True)
    consumer_number = Column(String(64), nullable=True)
    sanctioned_load = Column(String(32), nullable=True)
    avg_monthly_bill = Column(String(32), nullable=True)
    roof_type = Column(String(64), nullable=True)
    roof_area = Column(String(32), nullable=True)
    panel_type = Column(String(32), nullable=False, default="dcr")
    # kW, kept as entered
    proposed_capacity = Column(String(16), nullable=True)
    status = Column(String(32), nullable=False, default="pending", index=True)
    ddp_id = Column(String(64), ForeignKey("partners.id", ondelete="SET NULL"), nullable=True, index=True)
    source = Column(String(32), nullable=False, default="ddp_registration")
    referrer_customer_id = Column(String(64), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)
    site_pictures = Column(JSON, nullable=True)
    lead_score = Column(Float, nullable=True)
    lead_score_details = Column(JSON, nullable=True)
    lead_score_updated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    milestones = relationship(
        "Milestone",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="Milestone.position",
    )


class Milestone(Base):
    __tablename__ = "milestones"

    id = Column(String(64), primary_key=True, index=True)
    customer_id = Column(String(64), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    milestone = Column(String(64), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    status = Column(String(32), nullable=False, default="pending")
    notes = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    customer = relationship("Customer", back_populates="milestones")
