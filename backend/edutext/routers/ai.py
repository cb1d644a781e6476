from __future__ import annotations
from typing import Any, Optional
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field
from ..catalog import catalog_summary
from ..domain import GenerationRequest
from ..orchestrator import ContentOrchestrator

router = APIRouter(prefix="/api/ai", tags=["ai"])


class GenerateRequest(BaseModel):
	# Untyped fields; GenerationRequest.from_payload validates and applies enum defaults
	model_config = ConfigDict(populate_by_name=True)

	provider: Optional[Any] = "gemini"
	content_type: Optional[Any] = Field(default=None, alias="contentType")
	difficulty: Optional[Any] = None
	target_age: Optional[Any] = Field(default=None, alias="targetAge")
	content_length: Optional[Any] = Field(default=None, alias="contentLength")
	prompt: Optional[Any] = None
	user_id: Optional[Any] = Field(default=None, alias="userId")


def get_orchestrator(request: Request) -> ContentOrchestrator:
	return request.app.state.orchestrator


@router.post("/generate")
async def generate(req: GenerateRequest, orchestrator: ContentOrchestrator = Depends(get_orchestrator)):
	request = GenerationRequest.from_payload(req.model_dump(by_alias=True))
	result = await orchestrator.generate(request)
	return result.to_dict()


@router.get("/status")
async def status(orchestrator: ContentOrchestrator = Depends(get_orchestrator)):
	return {"success": True, "status": orchestrator.check_provider_status()}


@router.get("/catalog")
async def catalog():
	return {"success": True, "catalog": catalog_summary()}
