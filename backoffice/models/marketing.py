"""
Marketing models (campaigns, promotions, email, social)

Owned by the marketing CRUD service; read-only here.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, Text, JSON
from datetime import datetime

from backoffice.models.base import Base


class Campaign(Base):
    """Marketing campaign"""
    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, index=True, default="DRAFT")  # DRAFT, ACTIVE, PAUSED, COMPLETED
    budget = Column(Float, nullable=True)
    channels = Column(JSON, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)


class Promotion(Base):
    """Discount code / promotion"""
    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    code = Column(String, index=True)
    type = Column(String)  # percentage, fixed
    value = Column(Float, default=0.0)
    status = Column(String, index=True, default="ACTIVE")
    usage_limit = Column(Integer, nullable=True)
    usage_count = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)


class EmailCampaign(Base):
    """Email blast with engagement counters"""
    __tablename__ = "email_campaigns"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    subject = Column(String)
    status = Column(String, index=True)  # SCHEDULED, SENT
    sent_count = Column(Integer, default=0)
    open_count = Column(Integer, default=0)
    click_count = Column(Integer, default=0)
    sent_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)


class SocialMediaPost(Base):
    """Social media post"""
    __tablename__ = "social_media_posts"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text)
    platforms = Column(JSON, nullable=True)
    status = Column(String, index=True)  # SCHEDULED, PUBLISHED
    published_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)
