from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func

from database import Base, utcnow


class Partner(Base):
    __tablename__ = "partners"

    id = Column(String(64), primary_key=True, index=True)
    username = Column(String(128), unique=True, nullable=False, index=True)
    name = Column(String(256), nullable=False)
    email = Column(String(256), nullable=True)
    phone = Column(String(32), nullable=True)
    role = Column(String(32), nullable=False, index=True)
    state = Column(String(64), nullable=True)
    district = Column(String(128), nullable=True)
    address = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="pending", index=True)
    # DDP -> owning BDP
    parent_id = Column(String(64), ForeignKey("partners.id", ondelete="SET NULL"), nullable=True, index=True)
    referral_code = Column(String(32), unique=True, nullable=True)
    # Customer partners are customers themselves
    linked_customer_id = Column(String(64), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
