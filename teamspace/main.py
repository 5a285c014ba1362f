# teamspace/main.py
# Teamspace backend: multi-tenant workspaces, projects and tasks
# Run: uvicorn teamspace.main:app --reload (from repo root)
#
# - FastAPI + SQLAlchemy (SQLite in dev, PostgreSQL when DATABASE_URL is set)
# - Bearer JWT auth; every workspace-scoped route checks the caller's role
#   in that workspace before doing anything

from __future__ import annotations

from typing import Dict

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from teamspace.config import CORS_ORIGINS, IS_PROD
from teamspace.errors import AppError, app_error_handler, unhandled_error_handler, validation_error_handler
from teamspace.routes_auth import router as auth_router
from teamspace.routes_member import router as member_router
from teamspace.routes_project import router as project_router
from teamspace.routes_task import router as task_router
from teamspace.routes_user import router as user_router
from teamspace.routes_workspace import router as workspace_router
from teamspace.seed import run as seed_database

app = FastAPI(title="Teamspace Backend", version="0.1")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if IS_PROD else ["*"],  # Restrict origins in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(workspace_router)
app.include_router(member_router)
app.include_router(project_router)
app.include_router(task_router)


@app.on_event("startup")
def on_startup() -> None:
    # Tables and reference roles must exist before the first request
    seed_database()


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}
