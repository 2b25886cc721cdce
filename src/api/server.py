"""
HTTP facade over the record store.

Every route maps onto one crud call. Error bodies are plain text so the
client can show them verbatim. Admin routes trust the ``x-admin`` request
header as-is; nothing ties it to a logged-in user.
"""

import dataclasses
from typing import List

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import db.crud as crud
from api.schemas import (
    LoginIn,
    OrderCreated,
    OrderIn,
    OrderOut,
    ProductIn,
    ProductOut,
    RegisterIn,
    UserOut,
)
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

ADMIN_HEADER = "x-admin"

app = FastAPI(title="Best Shop API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["Content-Type", ADMIN_HEADER],
)


@app.exception_handler(StarletteHTTPException)
async def plain_http_error(_request: Request, exc: StarletteHTTPException):
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def plain_validation_error(_request: Request, exc: RequestValidationError):
    _logger.debug(f"Rejected request body: {exc.errors()}")
    return PlainTextResponse("Invalid request body", status_code=400)


def is_admin_request(request: Request) -> bool:
    """True when any x-admin header value is the literal string "true"."""
    return "true" in request.headers.getlist(ADMIN_HEADER)


def require_admin(request: Request) -> None:
    if not is_admin_request(request):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin required")


# ---------------------------
# Users
# ---------------------------


@app.post("/users/login", response_model=UserOut)
async def login(payload: LoginIn):
    user = await crud.login(payload.email, payload.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return user.public()


@app.post("/users/register", response_model=UserOut)
async def register(payload: RegisterIn):
    if not payload.name or not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="name, email and password required")
    try:
        user = await crud.register_user(payload.name, payload.email, payload.password)
    except crud.EmailTakenError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Email already registered"
        )
    return user.public()


@app.post("/users/logout", response_class=PlainTextResponse)
async def logout():
    return "Logout successful"


# ---------------------------
# Products
# ---------------------------


@app.get("/products", response_model=List[ProductOut])
async def list_products():
    return [dataclasses.asdict(p) for p in await crud.list_products()]


@app.post("/products", dependencies=[Depends(require_admin)])
async def create_product(payload: ProductIn):
    if not payload.name or not payload.price:
        raise HTTPException(status_code=400, detail="name and price required")
    pid = await crud.create_product(payload.name, payload.price, payload.img, payload.tag)
    return {"id": pid}


@app.put(
    "/products/{pid}",
    response_class=PlainTextResponse,
    dependencies=[Depends(require_admin)],
)
async def update_product(pid: int, payload: ProductIn):
    await crud.update_product(pid, payload.name, payload.price, payload.img, payload.tag)
    return "Updated"


@app.delete(
    "/products/{pid}",
    response_class=PlainTextResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_product(pid: int):
    await crud.delete_product(pid)
    return "Deleted"


# ---------------------------
# Orders
# ---------------------------


@app.post("/orders", response_model=OrderCreated)
async def create_order(payload: OrderIn):
    if not payload.email or not isinstance(payload.items, list):
        raise HTTPException(status_code=400, detail="email and items required")
    try:
        ono, created_at = await crud.create_order(str(payload.email), payload.items, payload.total)
    except Exception:
        _logger.exception("Failed to save order")
        raise HTTPException(status_code=500, detail="Failed to save order")
    return {"id": ono, "created_at": created_at}


@app.get(
    "/orders",
    response_model=List[OrderOut],
    dependencies=[Depends(require_admin)],
)
async def list_orders():
    try:
        orders = await crud.list_orders()
    except Exception:
        _logger.exception("Failed to load orders")
        raise HTTPException(status_code=500, detail="Failed to load orders")
    return [dataclasses.asdict(o) for o in orders]


def run() -> None:
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
