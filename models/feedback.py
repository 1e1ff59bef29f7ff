from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func

from database import Base, utcnow


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(String(64), primary_key=True, index=True)
    # Null for anonymous website feedback
    user_id = Column(String(64), ForeignKey("partners.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(256), nullable=True)
    email = Column(String(256), nullable=True)
    type = Column(String(32), nullable=False)
    subject = Column(String(256), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(32), nullable=False, default="pending", index=True)
    admin_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)
