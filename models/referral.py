from sqlalchemy import Column, DateTime, Float, ForeignKey, String, func

from database import Base, utcnow


class Referral(Base):
    __tablename__ = "referrals"

    id = Column(String(64), primary_key=True, index=True)
    referrer_id = Column(String(64), ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True)
    referred_type = Column(String(32), nullable=False)
    referred_customer_id = Column(String(64), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)
    referred_partner_id = Column(String(64), ForeignKey("partners.id", ondelete="SET NULL"), nullable=True)
    referred_name = Column(String(256), nullable=True)
    referred_phone = Column(String(32), nullable=True)
    referral_code = Column(String(32), nullable=False, index=True)
    status = Column(String(32), nullable=False, default="pending")
    reward_amount = Column(Float, nullable=False, default=0)
    converted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
