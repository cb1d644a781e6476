from datetime import datetime, timezone
from fastapi import APIRouter

VERSION = "1.0.0"

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health():
	return {
		"status": "OK",
		"timestamp": datetime.now(timezone.utc).isoformat(),
		"version": VERSION,
	}
