# scripts/seed.py
from __future__ import annotations

import datetime as dt
import os

from sqlalchemy import select
from sqlalchemy.orm import Session

# get_db é um generator do FastAPI; aqui usamos next(get_db()) pra obter uma Session
from alunos.core.security import hash_password
from alunos.db import get_db
from alunos.models.student import Student, StudentStatus
from alunos.models.user import Profile, Role, User

# ---------------- Configuráveis por ENV ----------------
SEED_PASSWORD = os.getenv("SEED_PASSWORD", "Secret123!")

# ---------------- Dados de Exemplo ----------------
USERS_DATA = [
    {"name": "Administração", "email": "admin@example.com", "role": Role.ADMIN},
    {"name": "Secretaria", "email": "secretaria@example.com", "role": Role.USER},
]

STUDENTS_DATA = [
    ("Alice Lima", "2004-03-12", "Engenharia Civil", "2024001", StudentStatus.ACTIVE),
    ("Bruno Alves", "2003-07-30", "Direito", "2024002", StudentStatus.ACTIVE),
    ("Clara Dias", "2005-01-05", "Medicina", "2024003", StudentStatus.ACTIVE),
    ("Diego Nogueira", "2002-11-21", "Administração", "2023104", StudentStatus.INACTIVE),
    ("Eduarda Pires", "2004-09-17", "Engenharia de Software", "2024005", StudentStatus.ACTIVE),
]


def get_session() -> Session:
    gen = get_db()
    session: Session = next(gen)
    return session


# ---------------- Funções de Seed ----------------
def ensure_user(
    db: Session, *, name: str, email: str, role: Role, password: str
) -> User:
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(user)
        db.flush()
        print(f"[Seed] User criado: {user.name} ({user.email})")

    profile = db.get(Profile, user.id)
    if profile is None:
        db.add(Profile(id=user.id, role=role.value))
        print(f"[Seed] Perfil criado: {user.email} - Role: {role.value}")
    elif profile.role != role.value:
        profile.role = role.value
        print(f"[Seed] Perfil atualizado: {user.email} - Role: {role.value}")
    db.commit()
    db.refresh(user)
    return user


def ensure_students(db: Session) -> list[Student]:
    students = []
    for i, (name, birth, course, registration, status) in enumerate(STUDENTS_DATA):
        st = db.execute(
            select(Student).where(Student.registration_number == registration)
        ).scalar_one_or_none()
        if st is None:
            st = Student(
                full_name=name,
                birth_date=dt.date.fromisoformat(birth),
                email=f"{name.split()[0].lower()}@example.com",
                phone=f"119{i:08d}",
                course=course,
                registration_number=registration,
                status=status,
            )
            db.add(st)
            db.commit()
            db.refresh(st)
            print(f"[Seed] Aluno criado: {st.full_name} ({st.registration_number})")
        students.append(st)
    return students


def main() -> None:
    db = get_session()
    try:
        for data in USERS_DATA:
            ensure_user(db, password=SEED_PASSWORD, **data)
        students = ensure_students(db)
        print(f"[Seed] OK: {len(USERS_DATA)} usuários, {len(students)} alunos.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
