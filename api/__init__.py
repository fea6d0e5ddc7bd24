from __future__ import annotations

from fastapi import FastAPI

from .listsAPI import router as lists_router

__all__ = ["lists_router", "register"]


def register(app: FastAPI) -> None:
    app.include_router(lists_router)
