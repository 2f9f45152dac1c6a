from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Text, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from voyage.database import Base

# ================================
# Tenants, Branches & Users
# ================================
class Agency(Base):
    __tablename__ = "agencies"

    id = Column(Integer, primary_key=True, index=True)
    business_name = Column(String(255), nullable=False)
    address_line1 = Column(String(255), nullable=False)
    address_line2 = Column(String(255))
    state = Column(String(100))
    city = Column(String(100))
    pincode = Column(String(20))
    contact_person_name = Column(String(255), nullable=False)
    contact_person_email = Column(String(255), unique=True, nullable=False)
    contact_person_phone = Column(String(50), nullable=False)
    gstin = Column(String(15))

    # Attachments share one storage directory token
    logo = Column(String(255))
    letterhead = Column(String(255))
    upload_uuid = Column(String(36))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    branches = relationship("Branch", back_populates="agency", cascade="all, delete")
    users = relationship("User", back_populates="agency")
    clients = relationship("Client", cascade="all, delete")
    tours = relationship("Tour", cascade="all, delete")
    bookings = relationship("Booking", cascade="all, delete")
    group_bookings = relationship("GroupBooking", cascade="all, delete")
    document_sequences = relationship("DocumentSequence", cascade="all, delete")

class Branch(Base):
    __tablename__ = "branches"
    __table_args__ = (UniqueConstraint("agency_id", "branch_name", name="uq_branch_name"),)

    id = Column(Integer, primary_key=True, index=True)
    agency_id = Column(Integer, ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)
    branch_name = Column(String(255), nullable=False)
    address = Column(Text)
    contact_name = Column(String(255))
    contact_email = Column(String(255))
    contact_mobile = Column(String(50))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    agency = relationship("Agency", back_populates="branches")

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    mobile = Column(String(50))
    password = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default="user")
    active = Column(Boolean, default=True)
    agency_id = Column(Integer, ForeignKey("agencies.id", ondelete="SET NULL"), index=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="SET NULL"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    agency = relationship("Agency", back_populates="users")

# ================================
# Clients & Tours
# ================================
class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    agency_id = Column(Integer, ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)
    client_name = Column(String(255), nullable=False)
    email = Column(String(255))
    mobile = Column(String(50))
    mobile2 = Column(String(50))
    gender = Column(String(10))
    date_of_birth = Column(Date)
    address1 = Column(Text)
    address2 = Column(Text)
    pincode = Column(String(20))
    passport_no = Column(String(50))
    pan_no = Column(String(20))
    aadhar_no = Column(String(20))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

class Tour(Base):
    __tablename__ = "tours"

    id = Column(Integer, primary_key=True, index=True)
    agency_id = Column(Integer, ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)
    tour_title = Column(String(255), nullable=False)
    tour_type = Column(String(50))
    destination = Column(String(255))
    status = Column(String(20), default="active")
    number_of_nights = Column(Integer)
    notes = Column(Text)
    attachment = Column(String(255))
    upload_uuid = Column(String(36))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

# ================================
# Bookings & numbered documents
# ================================
class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (UniqueConstraint("agency_id", "booking_number", name="uq_booking_number"),)

    id = Column(Integer, primary_key=True, index=True)
    agency_id = Column(Integer, ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="SET NULL"))
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    tour_id = Column(Integer, ForeignKey("tours.id", ondelete="SET NULL"))
    booking_number = Column(String(20), nullable=False)
    booking_date = Column(Date)
    journey_date = Column(Date)
    number_of_adults = Column(Integer)
    number_of_children = Column(Integer)
    booking_detail = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    client = relationship("Client")
    receipts = relationship("BookingReceipt", back_populates="booking", cascade="all, delete-orphan")
    vehicle_bookings = relationship("VehicleBooking", back_populates="booking", cascade="all, delete-orphan")
    travel_documents = relationship("TravelDocument", back_populates="booking", cascade="all, delete-orphan")

class GroupBooking(Base):
    __tablename__ = "group_bookings"
    __table_args__ = (UniqueConstraint("agency_id", "group_booking_number", name="uq_group_booking_number"),)

    id = Column(Integer, primary_key=True, index=True)
    agency_id = Column(Integer, ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="SET NULL"))
    tour_id = Column(Integer, ForeignKey("tours.id", ondelete="SET NULL"))
    group_booking_number = Column(String(20), nullable=False)
    group_booking_date = Column(Date)
    journey_date = Column(Date)
    booking_detail = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

class BookingReceipt(Base):
    __tablename__ = "booking_receipts"
    __table_args__ = (
        UniqueConstraint("agency_id", "receipt_number", name="uq_receipt_number"),
        UniqueConstraint("agency_id", "invoice_number", name="uq_invoice_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    agency_id = Column(Integer, ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    receipt_number = Column(String(20), nullable=False)
    receipt_date = Column(Date, nullable=False)
    payment_mode = Column(String(50), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    cgst_amount = Column(Numeric(12, 2))
    sgst_amount = Column(Numeric(12, 2))
    igst_amount = Column(Numeric(12, 2))
    total_amount = Column(Numeric(12, 2), nullable=False)
    invoice_number = Column(String(20))
    invoiced_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    booking = relationship("Booking", back_populates="receipts")

class VehicleBooking(Base):
    __tablename__ = "vehicle_bookings"
    __table_args__ = (UniqueConstraint("agency_id", "vehicle_hrv_number", name="uq_vehicle_hrv_number"),)

    id = Column(Integer, primary_key=True, index=True)
    agency_id = Column(Integer, ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    vehicle_hrv_number = Column(String(20), nullable=False)
    vehicle_booking_date = Column(Date)
    from_date = Column(Date, nullable=False)
    to_date = Column(Date)
    number_of_vehicles = Column(Integer, default=1)
    pickup_place = Column(String(255))
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    booking = relationship("Booking", back_populates="vehicle_bookings")

class TravelDocument(Base):
    __tablename__ = "travel_documents"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    is_private = Column(Boolean, default=False)
    attachment = Column(String(255))
    upload_uuid = Column(String(36))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    booking = relationship("Booking", back_populates="travel_documents")

# ================================
# Document numbering
# ================================
class DocumentSequence(Base):
    """Last issued sequence per agency, document kind and fiscal year."""
    __tablename__ = "document_sequences"
    __table_args__ = (
        UniqueConstraint("agency_id", "document_kind", "fiscal_year", name="uq_document_sequence"),
    )

    id = Column(Integer, primary_key=True, index=True)
    agency_id = Column(Integer, ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False)
    document_kind = Column(String(30), nullable=False)
    fiscal_year = Column(String(7), nullable=False)
    last_issued = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
