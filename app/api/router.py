from fastapi import APIRouter

from app.api import auth, content, html_blocks, system

api_router = APIRouter()
api_router.include_router(system.router)
api_router.include_router(auth.router)
api_router.include_router(html_blocks.router)
api_router.include_router(html_blocks.api_router)
api_router.include_router(content.router)
