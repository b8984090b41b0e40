from fastapi import APIRouter
from markup_backend import __version__

info_router = APIRouter()

@info_router.get("", response_model=dict)
async def get_server_info():
    return {
        "name": "markup-backend",
        "version": __version__,
    }
