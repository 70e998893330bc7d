# app/schemas/pago.py
from typing import Optional
from datetime import date
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class PagoBase(BaseModel):
    factura_id: UUID
    fecha: date
    monto: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    monto_retenido: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    boleta_pago: str = Field(..., min_length=1, max_length=100)


class PagoCreate(PagoBase):
    pago_id: Optional[UUID] = None # Se genera si no se envía


class PagoUpdate(BaseModel):
    factura_id: Optional[UUID] = None
    fecha: Optional[date] = None
    monto: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    monto_retenido: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    boleta_pago: Optional[str] = Field(None, min_length=1, max_length=100)


class Pago(PagoBase):
    pago_id: UUID

    model_config = ConfigDict(from_attributes=True)
