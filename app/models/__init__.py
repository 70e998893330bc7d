# Importa los modelos para que Base.metadata conozca todas las tablas
from .base import Base
from .enums import EstadoFacturaEnum
from .factura import Factura
from .pago import Pago
