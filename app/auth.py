import os
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, List

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from dotenv import load_dotenv

from .schemas.token import TokenData, UsuarioActual

load_dotenv()

logger = logging.getLogger(__name__)

# Configuración de seguridad
# Los tokens los emite el servicio de usuarios; aquí solo se verifican
SECRET_KEY = os.getenv("SECRET_KEY", "cambiar-en-produccion")
ALGORITHM = os.getenv("ALGORITHM", "HS256") # Default a HS256 si no está en .env
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 30))

# OAuth2 Bearer token (para proteger rutas)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=os.getenv("AUTH_TOKEN_URL", "auth/login"))


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """Crea un token de acceso JWT. Se usa en pruebas y herramientas internas."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


# --- DEPENDENCIAS DE USUARIO Y ROL ---

async def get_current_user(token: str = Depends(oauth2_scheme)) -> UsuarioActual:
    """Obtiene la identidad y el rol del llamador a partir del token JWT."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudieron validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        token_data = TokenData(sub=payload.get("sub"), role=payload.get("role"))
    except JWTError as e:
        logger.warning(f"Token rechazado: {e}")
        raise credentials_exception

    if token_data.sub is None or token_data.role is None:
        raise credentials_exception

    return UsuarioActual(usuario_id=token_data.sub, rol=token_data.role)


def require_roles(required_roles: List[str]):
    """
    Dependencia que verifica que el llamador tenga AL MENOS uno de los roles requeridos.
    """
    def _require_roles_inner(current_user: UsuarioActual = Depends(get_current_user)) -> UsuarioActual:
        if current_user.rol not in required_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="No tienes permisos suficientes para acceder a este recurso."
            )
        return current_user
    return _require_roles_inner


ADMIN_ROLES = ["admin"] # Único rol autorizado para facturas y pagos
