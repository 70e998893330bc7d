from decimal import Decimal
from typing import List
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import func, update, case
from sqlalchemy.exc import SQLAlchemyError
from ..models.factura import Factura as DBFactura
from ..models.pago import Pago as DBPago
from ..models.enums import EstadoFacturaEnum
from ..schemas.pago import PagoCreate, PagoUpdate
from ..exceptions import (
    FacturacionError,
    FacturaNoEncontradaError,
    PagoNoEncontradoError,
    EstadoFacturaInvalidoError,
    ValidacionError,
)
from ..utils.errores import error_interno
import logging

logger = logging.getLogger(__name__)

CENTAVOS = Decimal("0.01")

CAMPOS_OBLIGATORIOS = {"factura_id", "fecha", "monto", "boleta_pago"}


class PagoService:

    @staticmethod
    def _bloquear_factura(db: Session, factura_id: UUID) -> DBFactura:
        """
        Lee la factura con SELECT ... FOR UPDATE. Todas las operaciones que
        modifican el saldo de una factura pasan por aquí, así que quedan
        serializadas por factura; facturas distintas no se bloquean entre sí.
        """
        factura = (
            db.query(DBFactura)
            .filter(DBFactura.factura_id == factura_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if factura is None:
            logger.warning(f"Factura {factura_id} no encontrada al modificar su saldo")
            raise FacturaNoEncontradaError(factura_id)
        return factura

    @staticmethod
    def aplicar_pago(db: Session, factura_id: UUID, monto: Decimal) -> DBFactura:
        """
        Aplica un monto al saldo de la factura.

        El incremento de abonado, el nuevo saldo (total - abonado) y el paso a
        'pagada' cuando el saldo llega a cero o menos se calculan en la base de
        datos en un único UPDATE, con la fila bloqueada. No hace commit: el
        llamador decide la transacción (p. ej. junto con el INSERT del pago).

        Lanza FacturaNoEncontradaError o EstadoFacturaInvalidoError (factura anulada).
        """
        factura = PagoService._bloquear_factura(db, factura_id)

        if factura.estado == EstadoFacturaEnum.anulada.value:
            raise EstadoFacturaInvalidoError("No se pueden registrar pagos en una factura anulada.")

        # Redondeo a centavos en SQL: SQLite opera NUMERIC en coma flotante
        nuevo_abonado = func.round(DBFactura.abonado + monto, 2, type_=DBFactura.abonado.type)
        nuevo_saldo = func.round(DBFactura.total - (DBFactura.abonado + monto), 2, type_=DBFactura.total.type)
        db.execute(
            update(DBFactura)
            .where(DBFactura.factura_id == factura_id)
            .values(
                abonado=nuevo_abonado,
                saldo_pendiente=nuevo_saldo,
                estado=case(
                    (nuevo_saldo <= 0, EstadoFacturaEnum.pagada.value),
                    else_=DBFactura.estado,
                ),
            )
            .execution_options(synchronize_session=False)
        )
        db.refresh(factura)

        logger.info(
            f"Pago de {monto} aplicado a factura {factura_id}: "
            f"abonado={factura.abonado}, saldo={factura.saldo_pendiente}, estado={factura.estado}"
        )
        return factura

    @staticmethod
    def recalcular_saldo(db: Session, factura_id: UUID) -> DBFactura:
        """
        Recalcula abonado, saldo_pendiente y estado a partir de los pagos
        registrados. Una factura anulada conserva su estado.
        """
        factura = PagoService._bloquear_factura(db, factura_id)
        db.flush()

        suma = (
            db.query(func.coalesce(func.sum(DBPago.monto), 0))
            .filter(DBPago.factura_id == factura_id)
            .scalar()
        )
        abonado = Decimal(str(suma)).quantize(CENTAVOS)

        factura.abonado = abonado
        factura.saldo_pendiente = factura.total - abonado
        if factura.estado != EstadoFacturaEnum.anulada.value:
            if factura.saldo_pendiente <= 0:
                factura.estado = EstadoFacturaEnum.pagada.value
            else:
                factura.estado = EstadoFacturaEnum.pendiente.value
        db.flush()
        return factura

    @staticmethod
    def obtener_pago(db: Session, pago_id: UUID) -> DBPago:
        try:
            pago = db.query(DBPago).filter(DBPago.pago_id == pago_id).first()
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "obtener el pago", e) from e
        if pago is None:
            raise PagoNoEncontradoError(pago_id)
        return pago

    @staticmethod
    def listar_pagos(db: Session) -> List[DBPago]:
        try:
            return db.query(DBPago).order_by(DBPago.fecha.desc(), DBPago.pago_id).all()
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "listar los pagos", e) from e

    @staticmethod
    def pagos_por_factura(db: Session, factura_id: UUID) -> List[DBPago]:
        try:
            return (
                db.query(DBPago)
                .filter(DBPago.factura_id == factura_id)
                .order_by(DBPago.fecha, DBPago.pago_id)
                .all()
            )
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "obtener los pagos de la factura", e) from e

    @staticmethod
    def crear_pago(db: Session, pago_data: PagoCreate) -> DBPago:
        """
        Registra el pago y lo aplica al saldo de su factura en la misma transacción.
        """
        try:
            PagoService.aplicar_pago(db, pago_data.factura_id, pago_data.monto)
            nuevo_pago = DBPago(**pago_data.model_dump(exclude_none=True))
            db.add(nuevo_pago)
            db.commit()
            db.refresh(nuevo_pago)
        except FacturacionError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "crear el pago", e) from e

        logger.info(f"Pago {nuevo_pago.pago_id} registrado para factura {nuevo_pago.factura_id}")
        return nuevo_pago

    @staticmethod
    def actualizar_pago(db: Session, pago_id: UUID, pago_data: PagoUpdate) -> DBPago:
        """
        Sobrescribe los campos enviados y recalcula el saldo de la factura
        afectada (de ambas si el pago cambia de factura).
        """
        cambios = pago_data.model_dump(exclude_unset=True)
        if not cambios:
            raise ValidacionError("No se enviaron campos para actualizar.")

        campos_nulos = sorted(campo for campo, valor in cambios.items() if valor is None and campo in CAMPOS_OBLIGATORIOS)
        if campos_nulos:
            raise ValidacionError("Los siguientes campos no pueden ser nulos.", campos_nulos)

        db_pago = PagoService.obtener_pago(db, pago_id)
        factura_anterior = db_pago.factura_id
        factura_nueva = cambios.get("factura_id", factura_anterior)

        try:
            if factura_nueva != factura_anterior:
                # Orden fijo de bloqueo: dos traslados cruzados no se interbloquean
                bloqueadas = {
                    factura_id: PagoService._bloquear_factura(db, factura_id)
                    for factura_id in sorted([factura_anterior, factura_nueva], key=str)
                }
                if bloqueadas[factura_nueva].estado == EstadoFacturaEnum.anulada.value:
                    raise EstadoFacturaInvalidoError("No se pueden registrar pagos en una factura anulada.")

            for campo, valor in cambios.items():
                setattr(db_pago, campo, valor)

            PagoService.recalcular_saldo(db, factura_anterior)
            if factura_nueva != factura_anterior:
                PagoService.recalcular_saldo(db, factura_nueva)

            db.commit()
            db.refresh(db_pago)
        except FacturacionError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "actualizar el pago", e) from e

        logger.info(f"Pago {pago_id} actualizado: {', '.join(sorted(cambios))}")
        return db_pago

    @staticmethod
    def eliminar_pago(db: Session, pago_id: UUID) -> None:
        db_pago = PagoService.obtener_pago(db, pago_id)
        factura_id = db_pago.factura_id

        try:
            db.delete(db_pago)
            PagoService.recalcular_saldo(db, factura_id)
            db.commit()
        except FacturacionError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            raise error_interno(db, logger, "eliminar el pago", e) from e

        logger.info(f"Pago {pago_id} eliminado; saldo de factura {factura_id} recalculado")
