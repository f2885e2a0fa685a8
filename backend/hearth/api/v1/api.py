from fastapi import APIRouter

from hearth.api.v1.endpoints import access, activity, canvas_locks, grants, interventions, principals, safe_mode, tracks

api_router = APIRouter()
api_router.include_router(principals.router, prefix="/principals", tags=["principals"])
api_router.include_router(access.router, prefix="/access", tags=["access"])
api_router.include_router(grants.router, prefix="/grants", tags=["grants"])
api_router.include_router(activity.router, prefix="/activity", tags=["activity"])
api_router.include_router(tracks.router, prefix="/tracks", tags=["tracks"])
api_router.include_router(safe_mode.router, prefix="/safe-mode", tags=["safe-mode"])
api_router.include_router(interventions.router, prefix="/interventions", tags=["interventions"])
api_router.include_router(canvas_locks.router, prefix="/mindmesh", tags=["mindmesh"])
