# app/models/pago.py
import uuid

from sqlalchemy import Column, String, Date, Numeric, Uuid, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base

class Pago(Base):
    __tablename__ = "pagos"
    pago_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    factura_id = Column(Uuid, ForeignKey("facturas.factura_id"), nullable=False, index=True)
    fecha = Column(Date, nullable=False)
    monto = Column(Numeric(12, 2), nullable=False)
    monto_retenido = Column(Numeric(12, 2), nullable=True)
    boleta_pago = Column(String(100), nullable=False) # Número de depósito o transferencia

    factura = relationship("Factura", back_populates="pagos")

    def __repr__(self):
        return f"<Pago(pago_id={self.pago_id}, factura_id={self.factura_id}, monto={self.monto})>"
