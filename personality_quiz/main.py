from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse
from fastapi.middleware.cors import CORSMiddleware
import logging
from time import perf_counter
from datetime import datetime, timezone
from .models import HandlerRequest
from .errors import UnknownActionError
from .webhook import handle_turn
from .config import settings

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger("personality_quiz")

app = FastAPI(default_response_class=ORJSONResponse)

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

@app.on_event("startup")
def on_startup() -> None:
	logger.info({
		"event": "api_startup",
		"utc_time": datetime.now(timezone.utc).isoformat(),
		"content_source": settings.content_base_url or settings.content_dir,
		"default_locale": settings.default_locale,
		"immersive_url": settings.immersive_url,
	})

@app.middleware("http")
async def timing_middleware(request: Request, call_next):
	start = perf_counter()
	response = await call_next(request)
	duration_ms = int((perf_counter() - start) * 1000)
	logger.debug({
		"event": "request_timing",
		"method": request.method,
		"path": request.url.path,
		"status_code": response.status_code,
		"duration_ms": duration_ms,
	})
	return response

@app.get("/healthz")
def healthz():
	return {"status": "ok"}

@app.post("/fulfillment")
async def fulfillment(payload: HandlerRequest):
	try:
		response = await handle_turn(payload)
	except UnknownActionError as e:
		logger.warning({"event": "unknown_action", "action": e.name})
		raise HTTPException(status_code=400, detail="unknown_action")
	if settings.enable_debug:
		logger.debug({"event": "fulfillment_response", "action": payload.handler.name, "response": response})
	return response
