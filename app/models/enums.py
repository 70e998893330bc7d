from enum import Enum

class EstadoFacturaEnum(str, Enum):
    pendiente = "pendiente"
    pagada = "pagada"
    anulada = "anulada"
