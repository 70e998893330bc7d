# app/exceptions.py
"""
Errores de dominio del servicio de facturación.

Los servicios los lanzan; las rutas los traducen a HTTPException.
"""
from typing import List, Optional


class FacturacionError(Exception):
    """Base de todos los errores de dominio."""

    def __init__(self, mensaje: str):
        super().__init__(mensaje)
        self.mensaje = mensaje


class NoEncontradoError(FacturacionError):
    pass


class FacturaNoEncontradaError(NoEncontradoError):
    def __init__(self, factura_id):
        super().__init__("Factura no encontrada.")
        self.factura_id = factura_id


class PagoNoEncontradoError(NoEncontradoError):
    def __init__(self, pago_id):
        super().__init__("Pago no encontrado.")
        self.pago_id = pago_id


class EstadoFacturaInvalidoError(FacturacionError):
    """La factura está en un estado que no admite la operación (p. ej. anulada)."""


class ValidacionError(FacturacionError):
    def __init__(self, mensaje: str, campos: Optional[List[str]] = None):
        super().__init__(mensaje)
        self.campos = campos or []


class ErrorInterno(FacturacionError):
    """Fallo del almacenamiento u otro error inesperado. El detalle solo va al log."""
