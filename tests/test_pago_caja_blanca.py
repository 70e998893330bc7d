"""
PRUEBAS DE CAJA BLANCA - Módulo Pagos
Objetivo: Testear la aplicación de pagos al saldo de la factura

Propiedades verificadas:
- abonado nuevo = abonado anterior + monto; saldo = total - abonado
- estado 'pagada' exactamente cuando el saldo llega a cero o menos
- el pago y el abono se confirman o revierten juntos
- editar o eliminar un pago recalcula el saldo de la factura
- pagos concurrentes sobre la misma factura no pierden actualizaciones
"""
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.exceptions import (
    FacturaNoEncontradaError,
    PagoNoEncontradoError,
    EstadoFacturaInvalidoError,
    ValidacionError,
    ErrorInterno,
)
from app.models.base import Base
from app.models.enums import EstadoFacturaEnum
from app.models.factura import Factura as DBFactura
from app.models.pago import Pago as DBPago
from app.schemas.pago import PagoCreate, PagoUpdate
from app.services.pago_service import PagoService


def _pago(factura_id, monto, boleta="BOL-100"):
    return PagoCreate(factura_id=factura_id, fecha=date(2025, 3, 1), monto=monto, boleta_pago=boleta)


class TestAplicarPagoCajaBlanca:
    """
    CAJA BLANCA: aplicar_pago

    Rutas de ejecución identificadas:
    1. Factura inexistente → FacturaNoEncontradaError
    2. Factura anulada → EstadoFacturaInvalidoError
    3. Saldo sigue positivo → estado sin cambios
    4. Saldo llega a cero o menos → estado 'pagada'
    """

    def test_rama_1_factura_inexistente(self, db_session):
        with pytest.raises(FacturaNoEncontradaError):
            PagoService.aplicar_pago(db_session, uuid.uuid4(), Decimal("10.00"))

    def test_rama_2_factura_anulada(self, db_session, create_test_factura):
        factura = create_test_factura(estado=EstadoFacturaEnum.anulada.value)

        with pytest.raises(EstadoFacturaInvalidoError):
            PagoService.aplicar_pago(db_session, factura.factura_id, Decimal("10.00"))

    def test_rama_3_pago_parcial(self, db_session, create_test_factura):
        factura = create_test_factura(total=Decimal("1000.00"), abonado=Decimal("100.00"))

        resultado = PagoService.aplicar_pago(db_session, factura.factura_id, Decimal("250.50"))
        db_session.commit()

        assert resultado.abonado == Decimal("350.50")
        assert resultado.saldo_pendiente == Decimal("649.50")
        assert resultado.estado == EstadoFacturaEnum.pendiente.value

    @pytest.mark.parametrize("monto", [Decimal("1000.00"), Decimal("1200.00")])
    def test_rama_4_saldo_cero_o_negativo_marca_pagada(self, db_session, create_test_factura, monto):
        factura = create_test_factura(total=Decimal("1000.00"))

        resultado = PagoService.aplicar_pago(db_session, factura.factura_id, monto)
        db_session.commit()

        assert resultado.abonado == monto
        assert resultado.saldo_pendiente == Decimal("1000.00") - monto
        assert resultado.estado == EstadoFacturaEnum.pagada.value

    def test_pagos_sucesivos_hasta_saldar(self, db_session, create_test_factura):
        factura = create_test_factura(total=Decimal("300.00"))

        for esperado in (Decimal("200.00"), Decimal("100.00")):
            resultado = PagoService.aplicar_pago(db_session, factura.factura_id, Decimal("100.00"))
            assert resultado.saldo_pendiente == esperado
            assert resultado.estado == EstadoFacturaEnum.pendiente.value

        resultado = PagoService.aplicar_pago(db_session, factura.factura_id, Decimal("100.00"))
        db_session.commit()

        assert resultado.saldo_pendiente == Decimal("0.00")
        assert resultado.estado == EstadoFacturaEnum.pagada.value

    @pytest.mark.parametrize("total, montos", [
        ("0.80", ["0.70", "0.10"]),
        ("0.30", ["0.10", "0.20"]),
        ("1.00", ["0.10"] * 10),
    ])
    def test_centavos_no_exactos_en_binario_saldan_la_factura(self, db_session, create_test_factura, total, montos):
        factura = create_test_factura(total=Decimal(total))

        for monto in montos:
            resultado = PagoService.aplicar_pago(db_session, factura.factura_id, Decimal(monto))
        db_session.commit()

        assert resultado.abonado == Decimal(total)
        assert resultado.saldo_pendiente == Decimal("0.00")
        assert resultado.estado == EstadoFacturaEnum.pagada.value


class TestCrearPagoCajaBlanca:

    def test_pago_registrado_y_aplicado(self, db_session, create_test_factura):
        factura = create_test_factura(total=Decimal("1000.00"))

        pago = PagoService.crear_pago(db_session, _pago(factura.factura_id, Decimal("1000.00")))

        assert pago.pago_id is not None
        assert pago.monto == Decimal("1000.00")
        db_session.refresh(factura)
        assert factura.saldo_pendiente == Decimal("0.00")
        assert factura.estado == EstadoFacturaEnum.pagada.value

    def test_factura_inexistente_no_registra_pago(self, db_session):
        with pytest.raises(FacturaNoEncontradaError):
            PagoService.crear_pago(db_session, _pago(uuid.uuid4(), Decimal("10.00")))

        assert db_session.query(DBPago).count() == 0

    def test_factura_anulada_no_registra_pago(self, db_session, create_test_factura):
        factura = create_test_factura(estado=EstadoFacturaEnum.anulada.value)

        with pytest.raises(EstadoFacturaInvalidoError):
            PagoService.crear_pago(db_session, _pago(factura.factura_id, Decimal("10.00")))

        assert db_session.query(DBPago).count() == 0

    def test_error_al_guardar_revierte_el_abono(self, db_session, create_test_factura, monkeypatch):
        factura = create_test_factura(total=Decimal("500.00"))
        factura_id = factura.factura_id

        def commit_fallido():
            raise SQLAlchemyError("Error simulado de BD")

        monkeypatch.setattr(db_session, "commit", commit_fallido)

        with pytest.raises(ErrorInterno):
            PagoService.crear_pago(db_session, _pago(factura_id, Decimal("100.00")))

        monkeypatch.undo()
        factura = db_session.query(DBFactura).filter(DBFactura.factura_id == factura_id).first()
        assert factura.abonado == Decimal("0.00")
        assert factura.saldo_pendiente == Decimal("500.00")
        assert db_session.query(DBPago).count() == 0


class TestActualizarYEliminarPagoCajaBlanca:

    def test_editar_monto_recalcula_saldo(self, db_session, create_test_factura):
        factura = create_test_factura(total=Decimal("1000.00"))
        pago = PagoService.crear_pago(db_session, _pago(factura.factura_id, Decimal("1000.00")))

        PagoService.actualizar_pago(db_session, pago.pago_id, PagoUpdate(monto=Decimal("400.00")))

        db_session.refresh(factura)
        assert factura.abonado == Decimal("400.00")
        assert factura.saldo_pendiente == Decimal("600.00")
        assert factura.estado == EstadoFacturaEnum.pendiente.value

    def test_mover_pago_recalcula_ambas_facturas(self, db_session, create_test_factura):
        origen = create_test_factura(total=Decimal("500.00"))
        destino = create_test_factura(total=Decimal("200.00"))
        pago = PagoService.crear_pago(db_session, _pago(origen.factura_id, Decimal("200.00")))

        PagoService.actualizar_pago(db_session, pago.pago_id, PagoUpdate(factura_id=destino.factura_id))

        db_session.refresh(origen)
        db_session.refresh(destino)
        assert origen.abonado == Decimal("0.00")
        assert origen.saldo_pendiente == Decimal("500.00")
        assert destino.abonado == Decimal("200.00")
        assert destino.estado == EstadoFacturaEnum.pagada.value

    @pytest.mark.parametrize("invertir", [False, True])
    def test_mover_pago_bloquea_facturas_en_orden_fijo(self, db_session, create_test_factura, create_test_pago, monkeypatch, invertir):
        una = create_test_factura()
        otra = create_test_factura()
        origen, destino = (otra, una) if invertir else (una, otra)
        pago = create_test_pago(origen.factura_id)

        bloqueos = []
        bloquear = PagoService._bloquear_factura

        def registrar_bloqueo(db, factura_id):
            bloqueos.append(factura_id)
            return bloquear(db, factura_id)

        monkeypatch.setattr(PagoService, "_bloquear_factura", staticmethod(registrar_bloqueo))

        PagoService.actualizar_pago(db_session, pago.pago_id, PagoUpdate(factura_id=destino.factura_id))

        assert bloqueos[:2] == sorted([una.factura_id, otra.factura_id], key=str)

    def test_mover_pago_a_factura_anulada(self, db_session, create_test_factura):
        origen = create_test_factura()
        anulada = create_test_factura(estado=EstadoFacturaEnum.anulada.value)
        pago = PagoService.crear_pago(db_session, _pago(origen.factura_id, Decimal("100.00")))

        with pytest.raises(EstadoFacturaInvalidoError):
            PagoService.actualizar_pago(db_session, pago.pago_id, PagoUpdate(factura_id=anulada.factura_id))

        db_session.refresh(pago)
        assert pago.factura_id == origen.factura_id

    def test_actualizar_sin_campos_o_con_nulos(self, db_session, create_test_factura, create_test_pago):
        factura = create_test_factura()
        pago = create_test_pago(factura.factura_id)

        with pytest.raises(ValidacionError):
            PagoService.actualizar_pago(db_session, pago.pago_id, PagoUpdate())

        with pytest.raises(ValidacionError) as exc_info:
            PagoService.actualizar_pago(db_session, pago.pago_id, PagoUpdate(monto=None, monto_retenido=None))
        assert exc_info.value.campos == ["monto"]

    def test_actualizar_pago_inexistente(self, db_session):
        with pytest.raises(PagoNoEncontradoError):
            PagoService.actualizar_pago(db_session, uuid.uuid4(), PagoUpdate(boleta_pago="X"))

    def test_eliminar_pago_recalcula_saldo(self, db_session, create_test_factura):
        factura = create_test_factura(total=Decimal("300.00"))
        primero = PagoService.crear_pago(db_session, _pago(factura.factura_id, Decimal("200.00"), "B-1"))
        PagoService.crear_pago(db_session, _pago(factura.factura_id, Decimal("100.00"), "B-2"))
        db_session.refresh(factura)
        assert factura.estado == EstadoFacturaEnum.pagada.value

        PagoService.eliminar_pago(db_session, primero.pago_id)

        db_session.refresh(factura)
        assert factura.abonado == Decimal("100.00")
        assert factura.saldo_pendiente == Decimal("200.00")
        assert factura.estado == EstadoFacturaEnum.pendiente.value

    def test_eliminar_pago_de_factura_anulada_conserva_estado(self, db_session, create_test_factura, create_test_pago):
        factura = create_test_factura(estado=EstadoFacturaEnum.anulada.value)
        pago = create_test_pago(factura.factura_id)

        PagoService.eliminar_pago(db_session, pago.pago_id)

        db_session.refresh(factura)
        assert factura.estado == EstadoFacturaEnum.anulada.value

    def test_eliminar_pago_inexistente(self, db_session):
        with pytest.raises(PagoNoEncontradoError):
            PagoService.eliminar_pago(db_session, uuid.uuid4())


class TestConsultasPagosCajaBlanca:

    def test_pagos_por_factura(self, db_session, create_test_factura, create_test_pago):
        factura = create_test_factura()
        otra = create_test_factura()
        create_test_pago(factura.factura_id, boleta_pago="B-1", fecha=date(2025, 2, 21))
        create_test_pago(factura.factura_id, boleta_pago="B-2", fecha=date(2025, 2, 20))
        create_test_pago(otra.factura_id, boleta_pago="B-3")

        pagos = PagoService.pagos_por_factura(db_session, factura.factura_id)

        assert [p.boleta_pago for p in pagos] == ["B-2", "B-1"]
        assert len(PagoService.listar_pagos(db_session)) == 3

    def test_obtener_pago_inexistente(self, db_session):
        with pytest.raises(PagoNoEncontradoError):
            PagoService.obtener_pago(db_session, uuid.uuid4())


def test_pagos_concurrentes_no_pierden_actualizaciones(tmp_path):
    """
    N hilos registran un pago de `a` sobre una factura de total T:
    el saldo final debe ser exactamente T - N*a.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrencia.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    SesionPrueba = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    total = Decimal("1000.00")
    monto = Decimal("25.00")
    hilos = 10

    with SesionPrueba() as db:
        factura = DBFactura(
            client_id=uuid.uuid4(),
            cliente_nombre="Cliente Concurrente",
            nit="777",
            fecha=date(2025, 3, 1),
            fecha_vencimiento=date(2025, 4, 1),
            total=total,
            iva=Decimal("160.00"),
            total_sin_iva=Decimal("840.00"),
            abonado=Decimal("0.00"),
            saldo_pendiente=total,
        )
        db.add(factura)
        db.commit()
        factura_id = factura.factura_id

    def registrar(i):
        with SesionPrueba() as db:
            PagoService.crear_pago(db, _pago(factura_id, monto, f"B-{i}"))

    with ThreadPoolExecutor(max_workers=hilos) as executor:
        list(executor.map(registrar, range(hilos)))

    with SesionPrueba() as db:
        factura = db.query(DBFactura).filter(DBFactura.factura_id == factura_id).first()
        assert factura.abonado == monto * hilos
        assert factura.saldo_pendiente == total - monto * hilos
        assert db.query(DBPago).count() == hilos

    engine.dispose()
