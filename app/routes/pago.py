# app/routes/pago.py

from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, status, Response
from sqlalchemy.orm import Session

from .. import auth as auth_utils
from ..database import get_db
from ..exceptions import FacturacionError
from ..services.pago_service import PagoService
from ..utils.errores import a_http_exception
from ..schemas.pago import Pago, PagoCreate, PagoUpdate

router = APIRouter(
    prefix="/pagos",
    tags=["pagos"]
)

require_admin = auth_utils.require_roles(auth_utils.ADMIN_ROLES)


@router.get("/", response_model=List[Pago])
def read_pagos(
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    try:
        return PagoService.listar_pagos(db)
    except FacturacionError as e:
        raise a_http_exception(e)


@router.get("/factura/{factura_id}", response_model=List[Pago])
def read_pagos_by_factura(
    factura_id: UUID,
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    try:
        return PagoService.pagos_por_factura(db, factura_id)
    except FacturacionError as e:
        raise a_http_exception(e)


@router.get("/{pago_id}", response_model=Pago)
def read_pago(
    pago_id: UUID,
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    try:
        return PagoService.obtener_pago(db, pago_id)
    except FacturacionError as e:
        raise a_http_exception(e)


# --- Endpoint para Registrar un Pago ---
@router.post("/", response_model=Pago, status_code=status.HTTP_201_CREATED)
def create_pago(
    pago_data: PagoCreate,
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    """
    Registra un pago y lo abona a su factura en la misma transacción.
    La factura pasa a 'pagada' cuando el saldo pendiente llega a cero.
    """
    try:
        return PagoService.crear_pago(db, pago_data)
    except FacturacionError as e:
        raise a_http_exception(e)


@router.put("/{pago_id}", response_model=Pago)
def update_pago(
    pago_id: UUID,
    pago_data: PagoUpdate,
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    """
    Actualiza un pago y recalcula el saldo de la factura.
    """
    try:
        return PagoService.actualizar_pago(db, pago_id, pago_data)
    except FacturacionError as e:
        raise a_http_exception(e)


@router.delete("/{pago_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_pago(
    pago_id: UUID,
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    try:
        PagoService.eliminar_pago(db, pago_id)
    except FacturacionError as e:
        raise a_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
