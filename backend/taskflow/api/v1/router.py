from fastapi import APIRouter

from taskflow.api.v1.endpoints import auth, health, tasks, users, websocket

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
api_router.include_router(websocket.router, tags=["Push"])
