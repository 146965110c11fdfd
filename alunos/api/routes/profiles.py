from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from alunos.db import get_db
from alunos.deps import get_current_user
from alunos.models.user import Profile, User
from alunos.schemas.auth import ProfileOut

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/{user_id}", response_model=ProfileOut)
def get_profile(
    user_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    # cada usuário só consulta o próprio perfil
    if user_id != current_user.id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Sem permissão")
    profile = db.get(Profile, user_id)
    if not profile:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Perfil não encontrado")
    return ProfileOut(id=profile.id, role=profile.role)
