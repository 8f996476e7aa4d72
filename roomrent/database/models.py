import enum
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from sqlalchemy import BigInteger, String, ForeignKey, Integer, Numeric, DateTime, Text, DATE, Boolean, Float, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from roomrent.database.core import Base

# Enums
class RoomStatus(str, enum.Enum):
    available = "available"
    occupied = "occupied"
    maintenance = "maintenance"

class ContractStatus(str, enum.Enum):
    active = "active"
    expired = "expired"
    terminated = "terminated"

class InvoiceStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


# Landlord
class Landlord(Base):
    __tablename__ = "landlords"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String)
    phone: Mapped[Optional[str]] = mapped_column(String, unique=True, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    rooms: Mapped[List["Room"]] = relationship(back_populates="landlord")
    contracts: Mapped[List["Contract"]] = relationship(back_populates="landlord")


# Tenant
class Tenant(Base):
    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String)
    phone: Mapped[Optional[str]] = mapped_column(String, unique=True, index=True, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String)
    address: Mapped[Optional[str]] = mapped_column(String)
    id_card: Mapped[Optional[str]] = mapped_column(String)
    tg_id: Mapped[Optional[int]] = mapped_column(BigInteger, unique=True, index=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    contracts: Mapped[List["Contract"]] = relationship(back_populates="tenant")
    invoices: Mapped[List["Invoice"]] = relationship(back_populates="tenant")


# Room
class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    landlord_id: Mapped[int] = mapped_column(ForeignKey("landlords.id", ondelete="CASCADE"), index=True)
    room_number: Mapped[str] = mapped_column(String)
    floor: Mapped[Optional[int]] = mapped_column(Integer)
    area: Mapped[Optional[float]] = mapped_column(Float)

    price: Mapped[Decimal] = mapped_column(Numeric(14, 2))  # Monthly rent baseline
    electric_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    water_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    status: Mapped[RoomStatus] = mapped_column(String, default=RoomStatus.available.value, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)

    ward: Mapped[Optional[str]] = mapped_column(String)
    district: Mapped[Optional[str]] = mapped_column(String)
    province: Mapped[Optional[str]] = mapped_column(String)
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)
    qr_code_url: Mapped[Optional[str]] = mapped_column(String)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    landlord: Mapped["Landlord"] = relationship(back_populates="rooms")
    contracts: Mapped[List["Contract"]] = relationship(back_populates="room")
    usages: Mapped[List["Usage"]] = relationship(back_populates="room")


# Contract
class Contract(Base):
    __tablename__ = "contracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(ForeignKey("tenants.id", ondelete="CASCADE"), index=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), index=True)
    # Denormalized owner for access checks
    landlord_id: Mapped[int] = mapped_column(ForeignKey("landlords.id", ondelete="CASCADE"), index=True)

    start_date: Mapped[date] = mapped_column(DATE)
    end_date: Mapped[Optional[date]] = mapped_column(DATE, nullable=True)

    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(14, 2))  # Captured at signing
    deposit: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    status: Mapped[ContractStatus] = mapped_column(String, default=ContractStatus.active.value)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('ix_contracts_room_status', 'room_id', 'status'),
    )

    tenant: Mapped["Tenant"] = relationship(back_populates="contracts")
    room: Mapped["Room"] = relationship(back_populates="contracts")
    landlord: Mapped["Landlord"] = relationship(back_populates="contracts")
    invoices: Mapped[List["Invoice"]] = relationship(back_populates="contract")


# Usage (one row per room and period)
class Usage(Base):
    __tablename__ = "usages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), index=True)
    month: Mapped[int] = mapped_column(Integer)  # 1-12
    year: Mapped[int] = mapped_column(Integer)

    electric_start: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    electric_end: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    water_start: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    water_end: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    electric_usage: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    water_usage: Mapped[Decimal] = mapped_column(Numeric(12, 2))

    is_auto: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('room_id', 'month', 'year', name='uq_usage_room_period'),
    )

    room: Mapped["Room"] = relationship(back_populates="usages")
    invoice: Mapped[Optional["Invoice"]] = relationship(back_populates="usage", uselist=False)


# Invoice
class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contract_id: Mapped[int] = mapped_column(ForeignKey("contracts.id", ondelete="CASCADE"), index=True)
    tenant_id: Mapped[int] = mapped_column(ForeignKey("tenants.id", ondelete="CASCADE"), index=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), index=True)
    usage_id: Mapped[Optional[int]] = mapped_column(ForeignKey("usages.id", ondelete="SET NULL"), unique=True, nullable=True)

    month: Mapped[int] = mapped_column(Integer)
    year: Mapped[int] = mapped_column(Integer)

    room_price: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    electric_usage: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    electric_price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    electric_total: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    water_usage: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    water_price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    water_total: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))

    status: Mapped[InvoiceStatus] = mapped_column(String, default=InvoiceStatus.PENDING.value, index=True)
    due_date: Mapped[date] = mapped_column(DATE)
    paid_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('contract_id', 'month', 'year', name='uq_invoice_contract_period'),
    )

    contract: Mapped["Contract"] = relationship(back_populates="invoices")
    tenant: Mapped["Tenant"] = relationship(back_populates="invoices")
    room: Mapped["Room"] = relationship()
    usage: Mapped[Optional["Usage"]] = relationship(back_populates="invoice")


# Raw sensor report (kept as received; the usage row is derived from it)
class SensorData(Base):
    __tablename__ = "sensor_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), index=True)
    electricity: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    water: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)

    room: Mapped["Room"] = relationship()
