from sqlalchemy import Column, DateTime, Float, ForeignKey, String, Text, func

from database import Base, utcnow


class Commission(Base):
    __tablename__ = "commissions"

    id = Column(String(64), primary_key=True, index=True)
    partner_id = Column(String(64), ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True)
    partner_type = Column(String(32), nullable=False)
    customer_id = Column(String(64), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    order_id = Column(String(64), ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)
    source = Column(String(32), nullable=False, default="installation")
    capacity_kw = Column(Float, nullable=True)
    panel_type = Column(String(32), nullable=True)
    commission_amount = Column(Float, nullable=False)
    status = Column(String(32), nullable=False, default="pending", index=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


class Payout(Base):
    __tablename__ = "payouts"

    id = Column(String(64), primary_key=True, index=True)
    partner_id = Column(String(64), ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True)
    commission_id = Column(String(64), ForeignKey("commissions.id", ondelete="SET NULL"), nullable=True, index=True)
    amount = Column(Float, nullable=False)
    mode = Column(String(8), nullable=False, default="IMPS")
    utr = Column(String(64), nullable=True)
    status = Column(String(32), nullable=False, default="pending")
    failure_reason = Column(Text, nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
