# app/utils/errores.py
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..exceptions import (
    ErrorInterno,
    FacturacionError,
    NoEncontradoError,
    EstadoFacturaInvalidoError,
    ValidacionError,
)


def error_interno(db: Session, logger: logging.Logger, accion: str, e: Exception):
    """Revierte la transacción, registra el detalle y devuelve un ErrorInterno con mensaje opaco."""
    db.rollback()
    logger.error(f"Error al {accion}: {e}", exc_info=True)
    return ErrorInterno(f"Ocurrió un error al {accion}.")


def a_http_exception(error: FacturacionError) -> HTTPException:
    if isinstance(error, NoEncontradoError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.mensaje)
    if isinstance(error, EstadoFacturaInvalidoError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error.mensaje)
    if isinstance(error, ValidacionError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"mensaje": error.mensaje, "campos": error.campos},
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.mensaje)
