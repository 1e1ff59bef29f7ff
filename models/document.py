from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func

from database import Base, utcnow


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(64), primary_key=True, index=True)
    customer_id = Column(String(64), ForeignKey("customers.id", ondelete="CASCADE"), nullable=True, index=True)
    partner_id = Column(String(64), ForeignKey("partners.id", ondelete="CASCADE"), nullable=True, index=True)
    category = Column(String(32), nullable=False)
    name = Column(String(256), nullable=False)
    original_name = Column(String(256), nullable=False)
    mime_type = Column(String(128), nullable=False)
    size = Column(Integer, nullable=False)
    storage_path = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    uploaded_by_id = Column(String(64), ForeignKey("partners.id", ondelete="SET NULL"), nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    verified_by_id = Column(String(64), ForeignKey("partners.id", ondelete="SET NULL"), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
