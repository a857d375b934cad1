from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from .models import MaterialUnit, ProductType, RoleName


def _not_blank(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("El nombre es requerido")
    return value


# --- Materials ---

class RawMaterialBase(BaseModel):
    name: str
    unit: MaterialUnit
    cost: float = Field(ge=0, allow_inf_nan=False)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        return _not_blank(v)


class RawMaterialCreate(RawMaterialBase):
    pass


class RawMaterialUpdate(BaseModel):
    name: Optional[str] = None
    unit: Optional[MaterialUnit] = None
    cost: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        return _not_blank(v) if v is not None else v


class RawMaterial(RawMaterialBase):
    id: int
    user_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True


# --- Quotations ---

class AllocationIn(BaseModel):
    material_id: Optional[int] = None
    percentage: float = Field(default=0.0, allow_inf_nan=False)


class QuotationCreate(BaseModel):
    product_name: str
    product_type: ProductType
    validity_days: int = Field(ge=1)
    # Bounds are enforced by the pricing engine so the error names the rule
    margin_percentage: float = Field(allow_inf_nan=False)
    materials: List[AllocationIn] = []

    @field_validator("product_name")
    @classmethod
    def product_name_not_blank(cls, v):
        return _not_blank(v)


class QuotationPreview(BaseModel):
    materials: List[AllocationIn] = []


# --- Users ---

class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=6)
    role: RoleName = RoleName.USER


class RoleUpdate(BaseModel):
    role: RoleName
