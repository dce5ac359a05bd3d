from fastapi import APIRouter

from nora_api.api.routes.chat import router as chat_router
from nora_api.api.routes.safety import router as safety_router
from nora_api.api.routes.usage import router as usage_router
from nora_api.api.routes.vision import router as vision_router
from nora_api.api.routes.voice import router as voice_router

api_router = APIRouter()

# ─────────────────────────────────────────────
# Assistant
# ─────────────────────────────────────────────

api_router.include_router(chat_router, tags=["Chat"])
api_router.include_router(voice_router, tags=["Voice"])

# ─────────────────────────────────────────────
# Premium image features
# ─────────────────────────────────────────────

api_router.include_router(vision_router, tags=["Vision"])

# ─────────────────────────────────────────────
# Safety & usage
# ─────────────────────────────────────────────

api_router.include_router(safety_router, tags=["Safety"])
api_router.include_router(usage_router, tags=["Usage"])
