from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import logging
import os

from app.models.base import Base
from app.database import engine
from app.routes import factura, pago

# --- Carga de Variables de Entorno ---
load_dotenv()

# --- Configuración de Logging ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# --- Creación de la Aplicación FastAPI ---
app = FastAPI(
    title="Servicio de Facturación",
    description="API para la gestión de facturas y pagos.",
    version="1.0.0"
)

# --- Middlewares ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=[os.getenv("FRONTEND_URL", "*")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Creación de Tablas en la Base de Datos (para desarrollo) ---
# En producción el esquema lo gestiona Alembic
Base.metadata.create_all(bind=engine)


@app.get("/", tags=["Health Check"])
def read_root():
    return {"status": "ok", "message": "Servicio de facturación activo"}


# --- Inclusión de Routers de la API ---
app.include_router(factura.router)
app.include_router(pago.router)
