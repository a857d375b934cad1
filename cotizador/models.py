from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base
import enum


# --- Enums ---
# Stored by value (not member name) so the database holds the labels users see.

class MaterialUnit(str, enum.Enum):
    PULGADAS = "Pulgadas"
    CENTIMETROS = "Centímetros"
    LITROS = "Litros"
    ESTANDAR = "Estándar"


class ProductType(str, enum.Enum):
    TIPO_A = "Tipo A"
    TIPO_B = "Tipo B"
    TIPO_C = "Tipo C"


class RoleName(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


def _by_value(enum_cls, name):
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        values_callable=lambda members: [m.value for m in members],
    )


# --- Identity ---

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    auth_tokens = relationship("AuthToken", back_populates="user", cascade="all, delete-orphan")
    role_assignment = relationship(
        "UserRole", back_populates="user", uselist=False, cascade="all, delete-orphan",
    )
    raw_materials = relationship("RawMaterial", back_populates="user")
    quotations = relationship("Quotation", back_populates="user")


class AuthToken(Base):
    """JWT refresh token storage — access tokens are stateless."""
    __tablename__ = "auth_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    token_hash = Column(String, nullable=False)
    token_type = Column(String, default="refresh")  # 'access' | 'refresh'
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="auth_tokens")


class UserRole(Base):
    """One role assignment per user. A user without a row is a plain 'user'."""
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    role = Column(_by_value(RoleName, "role_name"), nullable=False, default=RoleName.USER)

    user = relationship("User", back_populates="role_assignment")


# --- Materials and quotations ---

class RawMaterial(Base):
    __tablename__ = "raw_materials"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    unit = Column(_by_value(MaterialUnit, "material_unit"), nullable=False)
    cost = Column(Float, nullable=False, default=0.0)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="raw_materials")
    quotation_lines = relationship("QuotationMaterial", back_populates="raw_material")


class Quotation(Base):
    __tablename__ = "quotations"

    id = Column(Integer, primary_key=True, index=True)
    quote_number = Column(String, unique=True, nullable=False)
    product_name = Column(String, nullable=False)
    product_type = Column(_by_value(ProductType, "product_type"), nullable=False)
    validity_days = Column(Integer, nullable=False)
    # Derived by the pricing engine, never edited directly
    total_cost = Column(Float, nullable=False)
    sale_price = Column(Float, nullable=False)
    profit_margin = Column(Float, nullable=False)
    margin_percentage = Column(Float, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="quotations")
    lines = relationship(
        "QuotationMaterial",
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="QuotationMaterial.id",
    )


class QuotationMaterial(Base):
    """Allocation line. `cost` is the material's unit cost at creation time."""
    __tablename__ = "quotation_materials"

    id = Column(Integer, primary_key=True, index=True)
    quotation_id = Column(Integer, ForeignKey("quotations.id"), nullable=False, index=True)
    raw_material_id = Column(Integer, ForeignKey("raw_materials.id"), nullable=False)
    percentage = Column(Float, nullable=False)
    cost = Column(Float, nullable=False)

    quotation = relationship("Quotation", back_populates="lines")
    raw_material = relationship("RawMaterial", back_populates="quotation_lines")
