from sqlalchemy import CheckConstraint, Column, Float, ForeignKey, Integer, Text, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Discounts(Base):
    __tablename__ = 'discounts'
    __table_args__ = (
        CheckConstraint(
            "discount_type IN ('percentage', 'fixed_amount', 'promo_code', 'seasonal', 'long_stay')"
        ),
        CheckConstraint("applies_to IN ('room_rates', 'addons', 'total_bill')"),
        CheckConstraint('value >= 0'),
    )

    name = Column(Text, nullable=False)
    discount_type = Column(Text, nullable=False)
    value = Column(Float, nullable=False, server_default=text('0'))
    applies_to = Column(Text, nullable=False, server_default=text("'room_rates'"))
    enabled = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    valid_from = Column(Text)  # ISO date, NULL = unbounded
    valid_to = Column(Text)
    applicable_room_types = Column(Text, nullable=False, server_default=text("'[]'"))  # JSON list
    promo_code = Column(Text, unique=True)  # stored uppercase
    minimum_nights = Column(Integer, nullable=False, server_default=text('0'))
    maximum_uses = Column(Integer)  # NULL = unlimited
    current_uses = Column(Integer, nullable=False, server_default=text('0'))
    priority = Column(Integer, nullable=False, server_default=text('0'))
    can_combine = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    applications = relationship('DiscountApplications', back_populates='discount')


class DiscountApplications(Base):
    __tablename__ = 'discount_applications'
    __table_args__ = (
        CheckConstraint(
            '(reservation_id IS NULL) != (bill_id IS NULL)',
            name='ck_discount_applications_single_target',
        ),
    )

    discount_id = Column(ForeignKey('discounts.id'), nullable=False)
    original_amount = Column(Float, nullable=False)
    discount_amount = Column(Float, nullable=False)
    final_amount = Column(Float, nullable=False)
    id = Column(Integer, primary_key=True)
    reservation_id = Column(Integer)
    bill_id = Column(Integer)
    applied_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    discount = relationship('Discounts', back_populates='applications')
