# app/models/factura.py
import uuid

from sqlalchemy import Column, String, Date, Numeric, Uuid
from sqlalchemy.orm import relationship
from .base import Base
from .enums import EstadoFacturaEnum

class Factura(Base):
    __tablename__ = "facturas"
    factura_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id = Column(Uuid, nullable=False, index=True)
    cliente_nombre = Column(String(255), nullable=False)
    nit = Column(String(50), nullable=False, index=True)
    descripcion = Column(String(500), nullable=True)
    fecha = Column(Date, nullable=False)
    fecha_vencimiento = Column(Date, nullable=False)

    total = Column(Numeric(12, 2), nullable=False)
    iva = Column(Numeric(12, 2), nullable=False)
    total_sin_iva = Column(Numeric(12, 2), nullable=False)
    abonado = Column(Numeric(12, 2), nullable=False, default=0)
    saldo_pendiente = Column(Numeric(12, 2), nullable=False)
    estado = Column(String(20), default=EstadoFacturaEnum.pendiente.value, nullable=False)

    # Sin cascade: el borrado de pagos lo hace FacturaService dentro de su transacción
    pagos = relationship("Pago", back_populates="factura", passive_deletes=True)

    def __repr__(self):
        return f"<Factura(factura_id={self.factura_id}, nit='{self.nit}', total={self.total}, estado='{self.estado}')>"
