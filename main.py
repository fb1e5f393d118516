# =====================================================================
# SECTION START: IMPORTS
# =====================================================================

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config import LOG_LEVEL, PORT
from errors import register_error_handlers
from routers.amybd import router as amybd_router
from routers.health import router as health_router
from services.session_executor import get_executor, warm_up_session

# =====================================================================
# SECTION END: IMPORTS
# =====================================================================


# =====================================================================
# SECTION START: LOGGING
# =====================================================================

if not logging.getLogger().handlers:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

logger = logging.getLogger("amybd_proxy")

# =====================================================================
# SECTION END: LOGGING
# =====================================================================


# =====================================================================
# SECTION START: FastAPI APP AND CORS
# =====================================================================

app = FastAPI(title="AmyBD Proxy")


@app.on_event("startup")
def on_startup():
    if warm_up_session(get_executor()):
        logger.info(f"[startup] Server ready on port {PORT}")
    else:
        logger.warning(f"[startup] Server ready on port {PORT} (login required manually)")


@app.on_event("shutdown")
def on_shutdown():
    logger.info("[shutdown] Server shutting down...")


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f} ms")
    return response


register_error_handlers(app)

app.include_router(health_router)
app.include_router(amybd_router)

# =====================================================================
# SECTION END: FastAPI APP AND CORS
# =====================================================================


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=PORT)
