"""API router setup."""
from fastapi import APIRouter

from alunos.api.routes import auth, profiles, students

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(profiles.router)
api_router.include_router(students.router)
