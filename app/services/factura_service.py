from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import or_, cast, String
from sqlalchemy.exc import SQLAlchemyError
from ..models.factura import Factura as DBFactura
from ..models.pago import Pago as DBPago
from ..models.enums import EstadoFacturaEnum
from ..schemas.factura import FacturaCreate, FacturaUpdate
from ..exceptions import FacturaNoEncontradaError, ValidacionError
from ..utils.errores import error_interno
from ..utils.paginacion import normalizar_paginacion, calcular_offset, calcular_total_paginas
import logging

logger = logging.getLogger(__name__)

# Columnas NOT NULL: en una actualización no se aceptan en null
CAMPOS_OBLIGATORIOS = {
    "client_id", "cliente_nombre", "nit", "fecha", "fecha_vencimiento",
    "total", "iva", "total_sin_iva", "abonado", "saldo_pendiente", "estado",
}


def _escapar_like(texto: str) -> str:
    """Escapa los comodines de LIKE para buscar el texto literal."""
    return texto.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class FacturaService:

    @staticmethod
    def obtener_factura(db: Session, factura_id: UUID) -> DBFactura:
        try:
            factura = db.query(DBFactura).filter(DBFactura.factura_id == factura_id).first()
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "obtener la factura", e) from e
        if factura is None:
            raise FacturaNoEncontradaError(factura_id)
        return factura

    @staticmethod
    def listar_facturas(db: Session, page=None, page_size=None, query: Optional[str] = None) -> dict:
        """
        Lista paginada de facturas, ordenada por fecha descendente.

        page y page_size inválidos (no numéricos, <= 0 o por encima del máximo)
        caen a 1 y 12.
        Si viene query, filtra las facturas cuyo cliente_nombre, estado, nit o
        fecha contengan el texto, sin distinguir mayúsculas.
        """
        page, page_size = normalizar_paginacion(page, page_size)

        consulta = db.query(DBFactura)
        if query:
            patron = f"%{_escapar_like(query)}%"
            consulta = consulta.filter(
                or_(
                    DBFactura.cliente_nombre.ilike(patron, escape="\\"),
                    DBFactura.estado.ilike(patron, escape="\\"),
                    DBFactura.nit.ilike(patron, escape="\\"),
                    cast(DBFactura.fecha, String).ilike(patron, escape="\\"),
                )
            )

        try:
            total = consulta.count()
            facturas = (
                consulta.order_by(DBFactura.fecha.desc(), DBFactura.factura_id)
                .offset(calcular_offset(page, page_size))
                .limit(page_size)
                .all()
            )
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "listar las facturas", e) from e

        return {
            "data": facturas,
            "total": total,
            "totalPages": calcular_total_paginas(total, page_size),
            "currentPage": page,
        }

    @staticmethod
    def ultimas_facturas(db: Session, limite: int = 10) -> List[DBFactura]:
        try:
            return (
                db.query(DBFactura)
                .order_by(DBFactura.fecha.desc(), DBFactura.factura_id)
                .limit(limite)
                .all()
            )
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "obtener las últimas facturas", e) from e

    @staticmethod
    def facturas_por_cliente(db: Session, client_id: UUID) -> List[DBFactura]:
        try:
            return (
                db.query(DBFactura)
                .filter(DBFactura.client_id == client_id)
                .order_by(DBFactura.fecha.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "obtener las facturas del cliente", e) from e

    @staticmethod
    def facturas_por_nit(db: Session, nit: str) -> List[DBFactura]:
        try:
            return (
                db.query(DBFactura)
                .filter(DBFactura.nit == nit)
                .order_by(DBFactura.fecha.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "obtener las facturas por NIT", e) from e

    @staticmethod
    def crear_factura(db: Session, factura_data: FacturaCreate) -> DBFactura:
        valores = factura_data.model_dump(exclude_none=True)
        valores["estado"] = factura_data.estado.value
        if factura_data.saldo_pendiente is None:
            valores["saldo_pendiente"] = factura_data.total - factura_data.abonado

        try:
            nueva_factura = DBFactura(**valores)
            db.add(nueva_factura)
            db.commit()
            db.refresh(nueva_factura)
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "crear la factura", e) from e

        logger.info(f"Factura {nueva_factura.factura_id} creada para NIT {nueva_factura.nit} por {nueva_factura.total}")
        return nueva_factura

    @staticmethod
    def actualizar_factura(db: Session, factura_id: UUID, factura_data: FacturaUpdate) -> DBFactura:
        """Sobrescribe solo los campos enviados; no recalcula saldos."""
        cambios = factura_data.model_dump(exclude_unset=True)
        if not cambios:
            raise ValidacionError("No se enviaron campos para actualizar.")

        campos_nulos = sorted(campo for campo, valor in cambios.items() if valor is None and campo in CAMPOS_OBLIGATORIOS)
        if campos_nulos:
            raise ValidacionError("Los siguientes campos no pueden ser nulos.", campos_nulos)

        db_factura = FacturaService.obtener_factura(db, factura_id)

        for campo, valor in cambios.items():
            if isinstance(valor, EstadoFacturaEnum):
                valor = valor.value
            setattr(db_factura, campo, valor)

        try:
            db.commit()
            db.refresh(db_factura)
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "actualizar la factura", e) from e

        logger.info(f"Factura {factura_id} actualizada: {', '.join(sorted(cambios))}")
        return db_factura

    @staticmethod
    def eliminar_factura(db: Session, factura_id: UUID) -> None:
        """
        Elimina la factura y sus pagos en una sola transacción.
        """
        db_factura = FacturaService.obtener_factura(db, factura_id)

        try:
            pagos_eliminados = (
                db.query(DBPago)
                .filter(DBPago.factura_id == factura_id)
                .delete(synchronize_session=False)
            )
            db.delete(db_factura)
            db.commit()
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "eliminar la factura", e) from e

        logger.info(f"Factura {factura_id} eliminada junto con {pagos_eliminados} pago(s)")

    @staticmethod
    def anular_factura(db: Session, factura_id: UUID) -> DBFactura:
        """
        Marca la factura como anulada. No modifica el saldo pendiente.
        Anular una factura ya anulada la devuelve sin cambios.
        """
        db_factura = FacturaService.obtener_factura(db, factura_id)

        if db_factura.estado == EstadoFacturaEnum.anulada.value:
            return db_factura

        try:
            db_factura.estado = EstadoFacturaEnum.anulada.value
            db.commit()
            db.refresh(db_factura)
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "anular la factura", e) from e

        logger.info(f"Factura {factura_id} anulada")
        return db_factura
