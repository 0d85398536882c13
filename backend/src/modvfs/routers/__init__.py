from fastapi import APIRouter

from modvfs.constants import API_PREFIX
from modvfs.routers.discovery import router as discovery_router
from modvfs.routers.load_order import router as load_order_router
from modvfs.routers.mods import router as mods_router
from modvfs.routers.vfs import router as vfs_router

api_router = APIRouter(prefix=API_PREFIX)
api_router.include_router(mods_router)
api_router.include_router(load_order_router)
api_router.include_router(vfs_router)
api_router.include_router(discovery_router)
