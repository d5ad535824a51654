# main.py
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ovs.config import API_PREFIX, CORS_ORIGINS, LOG_LEVEL
from ovs.database import connection
from ovs.exceptions import VotingError
from ovs.routes.auth_routes import auth_router
from ovs.routes.election_routes import router as election_router
from ovs.routes.user_routes import user_router
from ovs.routes.vote_routes import vote_router

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    connection.ensure_indexes()
    yield
    connection.close()


app = FastAPI(title="OVS - Online Voting System API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(election_router)
app.include_router(vote_router)
app.include_router(user_router)


# --- Error translation ---

@app.exception_handler(VotingError)
async def voting_error_handler(request: Request, exc: VotingError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        # Drop the "body"/"query"/"path" prefix when there is a field after it
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc)
        errors[field or "body"] = err.get("msg", "Invalid value")
    return JSONResponse(
        status_code=400,
        content={"message": "Validation failed", "code": "validation_failed", "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"message": "Something went wrong on the server!"})


# --- General Endpoints ---

@app.get(API_PREFIX, tags=["Root"])
def read_root():
    return {"message": "API is running..."}


@app.get("/health", tags=["Root"])
def health_check():
    database_ok = connection.ping()
    return {"status": "healthy" if database_ok else "degraded", "database": "MongoDB", "connected": database_ok}


def run():
    import uvicorn

    uvicorn.run(
        "ovs.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )
