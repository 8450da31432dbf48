# main.py
"""
FastAPI entry point for the nutrition coaching backend.

Startup/readiness checks against Supabase, request-id middleware with
request logging, and graceful shutdown of the Supabase client (if it
supports close/shutdown).
"""
import asyncio
import logging
import os
import uuid
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.dishes import router as dishes_router
from app.api.menus import router as menus_router
from app.config.supabase import supabase_client

logger = logging.getLogger("uvicorn.error")

# config
HEALTH_CHECK_TIMEOUT = float(os.getenv("HEALTH_CHECK_TIMEOUT", "5.0"))
FAIL_ON_DB_STARTUP = os.getenv("FAIL_ON_DB_STARTUP", "false").lower() in ("1", "true", "yes")


async def _run_sync_in_executor(fn, *args, timeout: float = HEALTH_CHECK_TIMEOUT):
    """
    Run a blocking function in the default threadpool with a timeout.
    Returns the function's result or raises TimeoutError.
    """
    loop = asyncio.get_running_loop()
    return await asyncio.wait_for(loop.run_in_executor(None, fn, *args), timeout=timeout)


async def _supabase_healthy(timeout: float = HEALTH_CHECK_TIMEOUT) -> bool:
    try:
        return bool(await _run_sync_in_executor(supabase_client.health_check, timeout=timeout))
    except asyncio.TimeoutError:
        logger.warning("Supabase health_check timed out after %.1fs", timeout)
    except Exception as exc:
        logger.exception("Unexpected error calling supabase_client.health_check: %s", exc)
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting nutrition coaching backend...")

    app.state.supabase_healthy = await _supabase_healthy()
    logger.info("Supabase health: %s", app.state.supabase_healthy)

    if not app.state.supabase_healthy and FAIL_ON_DB_STARTUP:
        logger.error("FAIL_ON_DB_STARTUP enabled and Supabase unhealthy. Aborting startup.")
        raise RuntimeError("Supabase unhealthy on startup")

    try:
        yield
    finally:
        logger.info("Shutting down nutrition coaching backend...")
        try:
            close_fn = getattr(supabase_client, "close", None) or getattr(supabase_client, "shutdown", None)
            if callable(close_fn):
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(None, close_fn)
                logger.info("Supabase client closed gracefully")
        except Exception:
            logger.exception("Error while closing supabase client during shutdown")


app = FastAPI(
    title="Nutrition Coaching Backend",
    description="Menus, dish lookup and food rules for nutritionists and their clients",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    request.state.request_id = request_id
    logger.info("→ Incoming request %s %s id=%s from=%s", request.method, request.url.path, request_id, request.client)
    try:
        response: Response = await call_next(request)
    except Exception as exc:
        logger.exception("Handler error for request id=%s: %s", request_id, exc)
        return JSONResponse(
            {"ok": False, "status": 500, "message": "Internal server error", "diagnostics": {"error": str(exc)}},
            status_code=500,
            headers={"X-Request-Id": request_id},
        )
    logger.info("← Completed request id=%s status=%s", request_id, getattr(response, "status_code", None))
    response.headers["X-Request-Id"] = request_id
    return response


app.include_router(menus_router, tags=["menus"])
app.include_router(dishes_router, tags=["dishes"])


@app.get("/")
async def root() -> Dict[str, str]:
    return {"message": "Nutrition coaching backend is running!", "status": "healthy"}


@app.head("/api")
async def api_head():
    return Response(status_code=200)


@app.get("/health")
async def health_check():
    """
    Liveness: is the process up? Reports degraded (503) when Supabase is unreachable.
    """
    db_ok = await _supabase_healthy()
    return JSONResponse(
        {
            "status": "healthy" if db_ok else "degraded",
            "service": "nutrition-backend",
            "database": "connected" if db_ok else "disconnected",
        },
        status_code=200 if db_ok else 503,
    )


@app.get("/ready")
async def readiness_check():
    """
    Readiness: uses the state cached at startup; falls back to a bounded one-shot check.
    """
    supabase_state: Optional[bool] = getattr(app.state, "supabase_healthy", None)
    if supabase_state is None:
        supabase_state = await _supabase_healthy(timeout=2.0)

    if supabase_state:
        return JSONResponse({"ready": True, "database": "connected"}, status_code=200)
    return JSONResponse({"ready": False, "database": "disconnected"}, status_code=503)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", 5000)), reload=True)
