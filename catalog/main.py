# catalog/main.py
import logging
import re
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import configure_logging, get_settings
from .errors import PersistenceError
from .store import ProductManager

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("Catalog server running on port %s (data file: %s)", settings.port, settings.data_path)
    yield


app = FastAPI(title="catalog (file-backed product API)", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


def get_manager() -> ProductManager:
    # fresh manager per request; the file is the only shared state
    return ProductManager(get_settings().data_path)


def parse_leading_int(raw: Optional[str]) -> Optional[int]:
    """Read the integer at the start of `raw` ("12abc" -> 12); None when there is none."""
    if raw is None:
        return None
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else None


def _parse_limit(raw: Optional[str]) -> Optional[int]:
    n = parse_leading_int(raw)
    return None if n is None else max(n, 0)


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ---------------------------
# Product endpoints
# ---------------------------
@app.get("/products")
async def list_products(limit: Optional[str] = None):
    products = await get_manager().get_products()
    n = _parse_limit(limit)
    if n is None:
        return products
    return products[:n]


@app.get("/products/{pid}")
async def get_product(pid: str):
    product_id = parse_leading_int(pid)
    product = None
    if product_id is not None:
        product = await get_manager().get_product_by_id(product_id)
    if product is None:
        shown = pid if product_id is None else product_id
        return JSONResponse(status_code=404, content={"error": f"Product with id {shown} does not exist."})
    return product


def run() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
