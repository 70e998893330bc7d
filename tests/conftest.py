"""
Configuración global para todas las pruebas pytest
"""
import os

# Antes de importar la app: base de datos en memoria y clave fija para los tokens
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas")

import uuid
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth import create_access_token
from app.database import get_db
from app.main import app
from app.models.base import Base
from app.models.enums import EstadoFacturaEnum
from app.models.factura import Factura as DBFactura
from app.models.pago import Pago as DBPago


@pytest.fixture
def db_session():
    """
    Sesión sobre una base SQLite en memoria creada para cada prueba.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    """
    Cliente HTTP de pruebas con la base de datos de la prueba.
    """
    def get_test_db():
        yield db_session

    app.dependency_overrides[get_db] = get_test_db

    with TestClient(app) as client:
        yield client

    # Limpiar overrides después del test
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token = create_access_token({"sub": "usuario-admin", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def create_test_factura(db_session):
    """
    Factory function para crear facturas de prueba en la BD.
    """
    def _create_factura(
        cliente_nombre="Cliente Prueba",
        nit="1234567",
        total=Decimal("1000.00"),
        abonado=Decimal("0.00"),
        estado=EstadoFacturaEnum.pendiente.value,
        fecha=date(2025, 2, 18),
        client_id=None,
    ):
        factura = DBFactura(
            client_id=client_id or uuid.uuid4(),
            cliente_nombre=cliente_nombre,
            nit=nit,
            descripcion="Factura de prueba",
            fecha=fecha,
            fecha_vencimiento=date(2025, 3, 18),
            total=total,
            iva=(total * Decimal("0.16")).quantize(Decimal("0.01")),
            total_sin_iva=total - (total * Decimal("0.16")).quantize(Decimal("0.01")),
            abonado=abonado,
            saldo_pendiente=total - abonado,
            estado=estado,
        )
        db_session.add(factura)
        db_session.commit()
        db_session.refresh(factura)
        return factura

    return _create_factura


@pytest.fixture
def create_test_pago(db_session):
    """
    Factory para insertar pagos directamente, sin aplicarlos al saldo.
    """
    def _create_pago(factura_id, monto=Decimal("100.00"), boleta_pago="BOL-001", fecha=date(2025, 2, 20)):
        pago = DBPago(
            factura_id=factura_id,
            fecha=fecha,
            monto=monto,
            boleta_pago=boleta_pago,
        )
        db_session.add(pago)
        db_session.commit()
        db_session.refresh(pago)
        return pago

    return _create_pago
