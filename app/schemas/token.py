# app/schemas/token.py
from pydantic import BaseModel, ConfigDict

class TokenData(BaseModel):
    sub: str | None = None
    role: str | None = None


class UsuarioActual(BaseModel):
    """Identidad del llamador tal como viene en el token; los roles se gestionan en otro servicio."""
    usuario_id: str
    rol: str

    model_config = ConfigDict(from_attributes=True)
