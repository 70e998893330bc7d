# app/utils/paginacion.py
import math
from typing import Optional, Tuple

PAGINA_POR_DEFECTO = 1
TAMANO_PAGINA_POR_DEFECTO = 12

# Fuera de estos límites se usa el valor por defecto
PAGINA_MAXIMA = 1000000
TAMANO_PAGINA_MAXIMO = 100


def _entero_positivo(valor, por_defecto: int, maximo: int) -> int:
    """Convierte a entero entre 1 y maximo; cualquier otro valor cae al valor por defecto."""
    if valor is None:
        return por_defecto
    try:
        numero = int(str(valor).strip())
    except (TypeError, ValueError):
        return por_defecto
    return numero if 0 < numero <= maximo else por_defecto


def normalizar_paginacion(page: Optional[str], page_size: Optional[str]) -> Tuple[int, int]:
    return (
        _entero_positivo(page, PAGINA_POR_DEFECTO, PAGINA_MAXIMA),
        _entero_positivo(page_size, TAMANO_PAGINA_POR_DEFECTO, TAMANO_PAGINA_MAXIMO),
    )


def calcular_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def calcular_total_paginas(total: int, page_size: int) -> int:
    return math.ceil(total / page_size)
