import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.encoders import jsonable_encoder

from . import config, database
from .api import auth, dashboard, listings, market
from .errors import AgriLoopError

logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # tracebacks of failed requests also go to a file when configured
    if config.ERROR_LOG:
        handler = logging.FileHandler(config.ERROR_LOG, encoding="utf-8")
        handler.setLevel(logging.ERROR)
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s\n%(message)s"))
        logging.getLogger("agriloop").addHandler(handler)


configure_logging()

app = FastAPI(title="AgriLoop")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AgriLoopError)
def agriloop_error_handler(request: Request, exc: AgriLoopError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc.__cause__ or exc)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    fields = [".".join(str(p) for p in e.get("loc", ()) if p != "body") for e in errors]
    message = "Invalid or missing fields: " + ", ".join(f for f in fields if f) if any(fields) else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message, "details": errors})


@app.on_event("startup")
def on_startup():
    database.init_db()


@app.get("/", response_class=PlainTextResponse)
def health():
    return "AgriLoop Backend is running"


app.include_router(auth.router)
app.include_router(market.router)
app.include_router(listings.router)
app.include_router(dashboard.router)
