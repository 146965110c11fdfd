# alunos/api/routes/students.py
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from alunos.audit.helpers import record_audit
from alunos.core.logging import get_logger
from alunos.db import get_db
from alunos.deps import get_current_user, require_roles
from alunos.models.student import Student
from alunos.models.user import Role, User
from alunos.schemas.students import StudentIn, StudentOut

router = APIRouter(prefix="/students", tags=["students"])

AdminUser = Annotated[User, Depends(require_roles(Role.ADMIN))]


@router.get("", response_model=list[StudentOut])
def list_students(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    # mais recentes primeiro
    rows = (
        db.query(Student)
        .order_by(Student.created_at.desc(), Student.id.desc())
        .all()
    )
    return [StudentOut.model_validate(s) for s in rows]


@router.get("/{student_id}", response_model=StudentOut)
def get_student(
    student_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    st = db.get(Student, student_id)
    if not st:
        raise HTTPException(404, "Aluno não encontrado")
    return StudentOut.model_validate(st)


@router.post("", response_model=StudentOut, status_code=201)
def create_student(
    payload: StudentIn,
    request: Request,
    current_user: AdminUser,
    db: Session = Depends(get_db),
):
    st = Student(**payload.model_dump())
    db.add(st)
    db.flush()

    record_audit(
        db,
        request=request,
        user_id=current_user.id,
        action="CREATE",
        entity="student",
        entity_id=st.id,
    )

    db.commit()
    db.refresh(st)
    get_logger().info("student.created", student_id=st.id)
    return StudentOut.model_validate(st)


@router.put("/{student_id}", response_model=StudentOut)
def update_student(
    student_id: str,
    payload: StudentIn,
    request: Request,
    current_user: AdminUser,
    db: Session = Depends(get_db),
):
    st = db.get(Student, student_id)
    if not st:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Aluno não encontrado")

    # last-write-wins: sem controle de versão
    for field, value in payload.model_dump().items():
        setattr(st, field, value)

    record_audit(
        db,
        request=request,
        user_id=current_user.id,
        action="UPDATE",
        entity="student",
        entity_id=st.id,
    )
    db.commit()
    db.refresh(st)
    get_logger().info("student.updated", student_id=st.id)
    return StudentOut.model_validate(st)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(
    student_id: str,
    request: Request,
    current_user: AdminUser,
    db: Session = Depends(get_db),
):
    st = db.get(Student, student_id)
    if not st:
        # já excluído: sucesso sem efeito
        return

    db.delete(st)
    record_audit(
        db,
        request=request,
        user_id=current_user.id,
        action="DELETE",
        entity="student",
        entity_id=student_id,
    )
    db.commit()
    get_logger().info("student.deleted", student_id=student_id)
    return
