# belleza_pos/api/v1/endpoints/roles.py
# type: ignore

from fastapi import APIRouter, Depends
from belleza_pos.schemas.auth import RoleList, RoleInDB
from belleza_pos.models.auth import User
from belleza_pos.models.enums import UserRole
from belleza_pos.api.v1.endpoints.auth import get_current_user

router = APIRouter()


# ***************************************************************
# 1. Endpoint para listar todos los Roles (ACCESO AUTENTICADO)
# ***************************************************************

@router.get("/", response_model=RoleList)
def get_all_roles(_: User = Depends(get_current_user)):
    """
    Lista todos los roles disponibles.
    Los roles son un conjunto cerrado (enum), no se almacenan en la DB.
    """
    return {"roles": [RoleInDB(name=role, description=role.description) for role in UserRole]}
