# catalog/main.py

import json

from fastapi import FastAPI, APIRouter, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.datastructures import Headers
from contextlib import asynccontextmanager

from typing import List
from catalog.config import Settings, get_settings
from catalog.models import ProductFields, Product, Stats, Message, ErrorResponse
from catalog.storage import BaseStore, get_store
from catalog import product_service, stats_service
import catalog.exceptions as ex

from catalog.logger import configure_logging, get_logger
configure_logging()

log = get_logger(__name__)
log.info("Catalog API is starting...")


class BodySizeLimitMiddleware:
  """
  Reject request bodies above the configured ceiling before routing.
  Declared sizes are checked up front; chunked bodies are counted while they
  are buffered, then replayed to the application.
  """

  def __init__(self, app, *, max_body_bytes: int) -> None:
    self.app = app
    self._max_body_bytes = max_body_bytes

  async def _reject(self, scope, receive, send, size):
    log.warning(f"[API] Rejected {scope['method']} {scope['path']}: body of {size} bytes exceeds {self._max_body_bytes}")
    response = JSONResponse(status_code=413, content={"error": "Request body too large"})
    await response(scope, receive, send)

  async def __call__(self, scope, receive, send):
    if scope["type"] != "http":
      await self.app(scope, receive, send)
      return

    content_length = Headers(scope=scope).get("content-length")
    if content_length is not None:
      try:
        size = int(content_length)
      except ValueError:
        response = JSONResponse(status_code=400, content={"error": "Invalid Content-Length header"})
        await response(scope, receive, send)
        return
      if size > self._max_body_bytes:
        await self._reject(scope, receive, send, size)
        return

    messages = []
    size = 0
    while True:
      message = await receive()
      messages.append(message)
      if message["type"] != "http.request":
        break
      size += len(message.get("body", b""))
      if size > self._max_body_bytes:
        await self._reject(scope, receive, send, size)
        return
      if not message.get("more_body", False):
        break

    async def replay():
      if messages:
        return messages.pop(0)
      return await receive()

    await self.app(scope, replay, send)


router = APIRouter(prefix="/api")

NOT_FOUND = {404: {"model": ErrorResponse}}
BAD_REQUEST = {400: {"model": ErrorResponse}}


async def product_body(request: Request) -> dict:
  """Product fields from a JSON object or an urlencoded form. An empty body reads as {}."""
  content_type = request.headers.get("content-type", "").lower()
  if content_type.startswith("application/x-www-form-urlencoded"):
    form = await request.form()
    data = {key: form.get(key) for key in form.keys()}
  else:
    raw = await request.body()
    if not raw.strip():
      return {}
    try:
      data = json.loads(raw)
    except ValueError as e:
      raise RequestValidationError([{"type": "json_invalid", "loc": ("body",), "msg": f"JSON decode error: {e}", "input": {}}])
  if not isinstance(data, dict):
    raise RequestValidationError([{"type": "dict_type", "loc": ("body",), "msg": "Input should be a JSON object", "input": data}])
  return ProductFields.model_validate(data).model_dump()


@router.get("/products", responses={200: {"model": List[Product]}})
def list_products(store: BaseStore = Depends(get_store)):
  """Return every stored product, unfiltered."""
  return product_service.list_products(store)


@router.get("/products/{product_id}", responses={200: {"model": Product}, **NOT_FOUND})
def get_product(product_id: str, store: BaseStore = Depends(get_store)):
  return product_service.get_product(store, product_id)


@router.post("/products", status_code=201, responses={201: {"model": Product}, **BAD_REQUEST})
def create_product(fields: dict = Depends(product_body), store: BaseStore = Depends(get_store)):
  """
  Create a product. name, description, image and alt are required;
  the id is always assigned by the server.
  """
  log.info("POST /api/products called")
  return product_service.create_product(store, fields)


@router.put("/products/{product_id}", responses={200: {"model": Product}, **BAD_REQUEST, **NOT_FOUND})
def update_product(product_id: str, fields: dict = Depends(product_body), store: BaseStore = Depends(get_store)):
  log.info(f"PUT /api/products/{product_id} called")
  return product_service.update_product(store, product_id, fields)


@router.delete("/products/{product_id}", response_model=Message, responses=NOT_FOUND)
def delete_product(product_id: str, store: BaseStore = Depends(get_store)):
  log.info(f"DELETE /api/products/{product_id} called")
  return product_service.delete_product(store, product_id)


@router.post("/stats/visit", response_model=Stats)
def record_visit(store: BaseStore = Depends(get_store)):
  return stats_service.record_visit(store)


@router.get("/stats", responses={200: {"model": Stats}})
def get_stats(store: BaseStore = Depends(get_store)):
  return stats_service.get_stats(store)


async def validation_error_handler(request: Request, exc: ex.ValidationError):
  log.info(f"[API] 400 on {request.method} {request.url.path}: missing {exc.missing}")
  return JSONResponse(status_code=400, content={"error": exc.message})


async def not_found_handler(request: Request, exc: ex.NotFoundError):
  log.info(f"[API] 404 on {request.method} {request.url.path}: product id={exc.product_id}")
  return JSONResponse(status_code=404, content={"error": exc.message})


async def global_exception_handler(request: Request, exc: Exception):
  log.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
  return JSONResponse(
    status_code=500,
    content={"error": "Internal Server Error"},
  )


def create_app(settings: Settings = None) -> FastAPI:
  """Build the API; uvicorn uses the module-level ``app``."""
  settings = settings or get_settings()

  @asynccontextmanager
  async def lifespan(app: FastAPI):
    log.info(f"Catalog API ready (env={settings.app_env}, data_dir='{settings.data_dir}')")
    yield

  application = FastAPI(title="Sound System Catalog API",
                        lifespan=lifespan,
                        description="Product catalog and visitor counter backed by JSON files.",
                        version="1.0.0")

  application.include_router(router)

  @application.get("/")
  def root():
    return {"messages": "Sound System Catalog API - endpoints: /api/products, /api/products/{id}, /api/stats, /api/stats/visit"}

  @application.get("/health")
  def healthcheck():
    return {"status": "ok"}

  application.add_exception_handler(ex.ValidationError, validation_error_handler)
  application.add_exception_handler(ex.NotFoundError, not_found_handler)
  application.add_exception_handler(Exception, global_exception_handler)

  # CORS outermost so 413 responses carry CORS headers too
  application.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
  application.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
  )
  return application


app = create_app()
