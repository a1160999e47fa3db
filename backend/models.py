from sqlalchemy import Column, String, Integer, Float, Text, DateTime, JSON, CheckConstraint, Index
from datetime import datetime
from database import Base
from utils.uuid_helper import generate_object_id


class Product(Base):
    """
    A catalog product.

    Stored document-style: list attributes (tags, sizes, settings, images)
    live in JSON columns. `product_id` is the external identifier and is
    unique across all products; `id` is the generated storage id.
    """
    __tablename__ = 'products'

    id = Column(String(24), primary_key=True, default=generate_object_id)
    product_id = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    description = Column(Text, default='')
    tags = Column(JSON, default=list)
    inventory_count = Column(Integer, default=0)
    brand = Column(String, nullable=True)

    # Optional attributes used by specific product types
    material = Column(String, nullable=True)         # Sportswear
    available_sizes = Column(JSON, default=list)     # Sportswear
    color = Column(String, nullable=True)            # Footwear
    settings = Column(JSON, default=list)            # Breathing trainers
    weight_lb = Column(Float, nullable=True)         # Workout equipment

    image_url = Column(String, default='')
    images = Column(JSON, default=list)  # Image descriptors: {url, alt, isPrimary}

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("price >= 0", name='ck_products_price_non_negative'),
        CheckConstraint("inventory_count >= 0", name='ck_products_inventory_non_negative'),
        Index('idx_products_category', 'category'),
    )


class User(Base):
    __tablename__ = 'users'

    id = Column(String(24), primary_key=True, default=generate_object_id)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default='user')
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    name = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Activity(Base):
    """A client-reported activity event (page visit, click, login, ...)"""
    __tablename__ = 'activities'

    id = Column(String(24), primary_key=True, default=generate_object_id)
    user_id = Column(String, nullable=True)  # Optional, set for logged-in users
    event_type = Column(String, nullable=False)
    details = Column(JSON, default=dict)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("event_type != ''"),
        Index('idx_activities_event_type', 'event_type'),
        Index('idx_activities_timestamp', 'timestamp'),
    )
