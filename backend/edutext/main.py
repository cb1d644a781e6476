from __future__ import annotations
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from . import db as database
from .cleanup import purge_usage_older_than
from .errors import EduTextError
from .orchestrator import ContentOrchestrator
from .providers import ProviderAdapter, build_provider_clients
from .routers import ai, health
from .settings import Settings, settings as default_settings
from .usage import SqlUsageSink, UsageLogger

logger = logging.getLogger(__name__)


def _build_orchestrator(config: Settings) -> ContentOrchestrator:
	engine = database.make_engine(config.database_url) if config.database_url else database.engine
	database.Base.metadata.create_all(bind=engine)
	session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
	# Best-effort retention pass; never blocks startup
	try:
		db = session_factory()
		try:
			removed = purge_usage_older_than(db, config.usage_retention_days)
		finally:
			db.close()
		if removed:
			logger.info("Purged %d expired usage rows", removed)
	except Exception:
		logger.exception("Usage retention pass failed")
	adapter = ProviderAdapter(build_provider_clients(config))
	return ContentOrchestrator(adapter, UsageLogger(SqlUsageSink(session_factory)))


def create_app(config: Optional[Settings] = None, orchestrator: Optional[ContentOrchestrator] = None) -> FastAPI:
	config = config or default_settings
	logging.basicConfig(level=config.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

	app = FastAPI(title="EduText Generation API")
	app.add_middleware(
		CORSMiddleware,
		allow_origins=config.cors_origins,
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	app.include_router(health.router)
	app.include_router(ai.router)
	app.state.orchestrator = orchestrator

	@app.exception_handler(EduTextError)
	async def edutext_error_handler(request: Request, exc: EduTextError):
		return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

	@app.exception_handler(RequestValidationError)
	async def request_validation_handler(request: Request, exc: RequestValidationError):
		errors = exc.errors()
		message = "; ".join(
			f"{'.'.join(str(p) for p in e.get('loc', ())[1:])}: {e.get('msg')}" for e in errors
		) or "invalid request body"
		return JSONResponse(status_code=400, content={"success": False, "error": "ValidationError", "message": message})

	@app.exception_handler(Exception)
	async def unhandled_error_handler(request: Request, exc: Exception):
		logger.exception("Unhandled error on %s %s", request.method, request.url.path)
		return JSONResponse(status_code=500, content={"success": False, "error": "InternalError", "message": "Something went wrong"})

	@app.on_event("startup")
	async def startup_event():
		if app.state.orchestrator is None:
			app.state.orchestrator = _build_orchestrator(config)
		status = app.state.orchestrator.check_provider_status()
		logger.info("Providers: %s", {k: v["available"] for k, v in status.items()})

	@app.on_event("shutdown")
	async def shutdown_event():
		if app.state.orchestrator is not None:
			await app.state.orchestrator.aclose()

	return app


app = create_app()
