from __future__ import annotations

import datetime as dt
import enum
import uuid

from sqlalchemy import Date, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from alunos.db.base_class import Base


class StudentStatus(str, enum.Enum):
    ACTIVE = "Ativo"
    INACTIVE = "Inativo"


class Student(Base):
    __tablename__ = "students"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    birth_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    course: Mapped[str] = mapped_column(String(100), nullable=False)
    # unicidade fica a cargo do banco, se for exigida
    registration_number: Mapped[str] = mapped_column(
        String(50), index=True, nullable=False
    )
    status: Mapped[StudentStatus] = mapped_column(
        Enum(
            StudentStatus,
            name="student_status_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        default=StudentStatus.ACTIVE,
        nullable=False,
    )

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: dt.datetime.now(tz=dt.UTC),
        index=True,
        nullable=False,
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: dt.datetime.now(tz=dt.UTC),
        onupdate=lambda: dt.datetime.now(tz=dt.UTC),
        nullable=False,
    )
