import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from confidential_ledger import __version__
from confidential_ledger.api.routes import router
from confidential_ledger.crypto.params import ProtocolParams

logger = logging.getLogger("confidential_ledger.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Load configuration
    log_level = os.getenv("VCL_LOG_LEVEL")
    if log_level:
        logging.getLogger("confidential_ledger").setLevel(log_level.upper())

    params = ProtocolParams.from_env()
    logger.info(f"Serving protocol version {params.version} ({params.bit_length}-bit range proofs)")

    # Attach to app state
    app.state.params = params

    yield


app = FastAPI(
    title="Confidential Ledger API",
    description="REST API wrapping the confidential credit commitment / proof / verify engine",
    version=__version__,
    lifespan=lifespan,
)

# Allow CORS for easy frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routes
app.include_router(router)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    # Covers MalformedEncoding, MalformedProof, InconsistentSecret,
    # UnbalancedInput and ValueOutOfDomain.
    logger.info(f"Rejected {request.url.path}: {type(exc).__name__}")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok"}
