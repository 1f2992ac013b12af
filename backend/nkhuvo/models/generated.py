from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, Text, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Services(Base):
    __tablename__ = 'services'

    provider_id = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    booking_type = Column(Text, nullable=False, server_default=text("'time_bound'"))
    id = Column(Integer, primary_key=True)
    hours_type = Column(Text)  # '24h' / 'custom' / NULL = marketplace default
    hours_start = Column(Text)  # "HH:MM"
    hours_end = Column(Text)  # "HH:MM"
    unavailable_dates = Column(Text, nullable=False, server_default=text("'[]'"))
    price = Column(Float)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    bookings = relationship('Bookings', back_populates='service')


class Bookings(Base):
    __tablename__ = 'bookings'

    service_id = Column(ForeignKey('services.id', ondelete='CASCADE'), nullable=False, index=True)
    date_start = Column(DateTime, nullable=False, index=True)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    created_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)
    event_id = Column(Text)
    date_end = Column(DateTime)  # NULL for delivery-bound bookings
    amount = Column(Float)
    location = Column(Text)

    service = relationship('Services', back_populates='bookings')
