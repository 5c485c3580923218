from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging

from catmouse.api.routes import router
from catmouse.config import load_env_file, settings_from_env
from catmouse.runtime import close_runtime, init_runtime_for_app

load_env_file()

app = FastAPI(title="catmouse", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=settings_from_env().log_level)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    # Fresh store per start: game state lives only as long as the process.
    init_runtime_for_app(app, settings_from_env())


@app.on_event("shutdown")
async def _shutdown() -> None:
    runtime = getattr(app.state, "runtime", None)
    if runtime is not None:
        close_runtime(runtime)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Body/path validation failures are client errors (400), not 422.
    messages = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        messages.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": "; ".join(messages)})


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal server error"})


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "catmouse", "version": "0.1.0"}
