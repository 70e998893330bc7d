# app/schemas/factura.py
from typing import Optional
from datetime import date
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from ..models.enums import EstadoFacturaEnum
from .pagination import Pagination


class FacturaBase(BaseModel):
    client_id: UUID
    cliente_nombre: str = Field(..., min_length=1, max_length=255)
    nit: str = Field(..., min_length=1, max_length=50)
    descripcion: Optional[str] = Field(None, max_length=500)
    fecha: date
    fecha_vencimiento: date
    total: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    iva: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    total_sin_iva: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class FacturaCreate(FacturaBase):
    factura_id: Optional[UUID] = None # Se genera si no se envía
    abonado: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    saldo_pendiente: Optional[Decimal] = Field(None, max_digits=12, decimal_places=2) # Por defecto total - abonado
    estado: EstadoFacturaEnum = EstadoFacturaEnum.pendiente


class FacturaUpdate(BaseModel):
    # Solo se sobrescriben los campos enviados
    client_id: Optional[UUID] = None
    cliente_nombre: Optional[str] = Field(None, min_length=1, max_length=255)
    nit: Optional[str] = Field(None, min_length=1, max_length=50)
    descripcion: Optional[str] = Field(None, max_length=500)
    fecha: Optional[date] = None
    fecha_vencimiento: Optional[date] = None
    total: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    iva: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    total_sin_iva: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    abonado: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    saldo_pendiente: Optional[Decimal] = Field(None, max_digits=12, decimal_places=2)
    estado: Optional[EstadoFacturaEnum] = None


class Factura(FacturaBase):
    factura_id: UUID
    abonado: Decimal
    saldo_pendiente: Decimal
    estado: str

    model_config = ConfigDict(from_attributes=True)


FacturaPagination = Pagination[Factura]
