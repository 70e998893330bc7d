# app/routes/factura.py

from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, status, Query, Response
from sqlalchemy.orm import Session

from .. import auth as auth_utils
from ..database import get_db
from ..exceptions import FacturacionError
from ..services.factura_service import FacturaService
from ..utils.errores import a_http_exception
from ..schemas.factura import Factura, FacturaCreate, FacturaUpdate, FacturaPagination

router = APIRouter(
    prefix="/facturas",
    tags=["facturas"]
)

# Solo administradores gestionan facturas
require_admin = auth_utils.require_roles(auth_utils.ADMIN_ROLES)


# --- Endpoint para Listar Facturas (paginado) ---
@router.get("/", response_model=FacturaPagination)
def read_facturas(
    page: Optional[str] = Query(None, description="Página (1 en adelante); valores inválidos usan 1"),
    page_size: Optional[str] = Query(None, alias="pageSize", description="Tamaño de página; valores inválidos usan 12"),
    query: Optional[str] = Query(None, description="Buscar por nombre de cliente, estado, NIT o fecha"),
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    """
    Obtiene una lista paginada de facturas con búsqueda opcional.
    """
    try:
        return FacturaService.listar_facturas(db, page, page_size, query)
    except FacturacionError as e:
        raise a_http_exception(e)


@router.get("/latest", response_model=List[Factura])
def read_latest_facturas(
    limit: int = Query(10, ge=1, le=100, description="Número de facturas a retornar"),
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    """
    Obtiene las facturas más recientes por fecha de emisión.
    """
    try:
        return FacturaService.ultimas_facturas(db, limit)
    except FacturacionError as e:
        raise a_http_exception(e)


@router.get("/cliente/{client_id}", response_model=List[Factura])
def read_facturas_by_cliente(
    client_id: UUID,
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    try:
        return FacturaService.facturas_por_cliente(db, client_id)
    except FacturacionError as e:
        raise a_http_exception(e)


@router.get("/nit/{nit}", response_model=List[Factura])
def read_facturas_by_nit(
    nit: str,
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    try:
        return FacturaService.facturas_por_nit(db, nit)
    except FacturacionError as e:
        raise a_http_exception(e)


# --- Endpoint para Obtener una Factura por ID ---
@router.get("/{factura_id}", response_model=Factura)
def read_factura(
    factura_id: UUID,
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    try:
        return FacturaService.obtener_factura(db, factura_id)
    except FacturacionError as e:
        raise a_http_exception(e)


# --- Endpoint para Crear una Factura ---
@router.post("/", response_model=Factura, status_code=status.HTTP_201_CREATED)
def create_factura(
    factura_data: FacturaCreate,
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    """
    Crea una factura con los datos enviados. Si no se envía saldo_pendiente se usa total - abonado.
    """
    try:
        return FacturaService.crear_factura(db, factura_data)
    except FacturacionError as e:
        raise a_http_exception(e)


@router.put("/{factura_id}", response_model=Factura)
def update_factura(
    factura_id: UUID,
    factura_data: FacturaUpdate,
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    """
    Actualiza los campos enviados de una factura existente.
    """
    try:
        return FacturaService.actualizar_factura(db, factura_id, factura_data)
    except FacturacionError as e:
        raise a_http_exception(e)


@router.delete("/{factura_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_factura(
    factura_id: UUID,
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    """
    Elimina una factura y todos sus pagos.
    """
    try:
        FacturaService.eliminar_factura(db, factura_id)
    except FacturacionError as e:
        raise a_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{factura_id}/anular", response_model=Factura)
def anular_factura(
    factura_id: UUID,
    db: Session = Depends(get_db),
    current_user: auth_utils.UsuarioActual = Depends(require_admin)
):
    """
    Anula una factura. Es un cambio de estado terminal y no modifica el saldo pendiente.
    """
    try:
        return FacturaService.anular_factura(db, factura_id)
    except FacturacionError as e:
        raise a_http_exception(e)
