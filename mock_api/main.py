from fastapi import FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime, timedelta
import itertools
import os
import uvicorn

app = FastAPI(
    title="Mock Mirakl Shop API",
    description="API de tienda Mirakl simulada para desarrollo de la sincronización con Odoo",
    version="1.0.0"
)

# Cada N peticiones se responde 429 (0 desactiva la simulación)
RATE_LIMIT_EVERY = int(os.getenv("MOCK_RATE_LIMIT_EVERY", "7"))
RETRY_AFTER_SECONDS = int(os.getenv("MOCK_RETRY_AFTER", "1"))
API_KEY = os.getenv("MOCK_API_KEY", "")
# Sin ofertas los pedidos se generan sin líneas
OFFERS_COUNT = max(0, int(os.getenv("MOCK_OFFERS_COUNT", "250")))
MAX_PAGE_SIZE = 100

_request_counter = itertools.count(1)


class Offer(BaseModel):
    offer_id: int
    shop_sku: str = Field(..., description="SKU de la oferta en la tienda")
    product_sku: str
    product_title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: float = Field(..., gt=0)
    origin_price: Optional[float] = None
    quantity: int = Field(0, ge=0)
    state_code: str = "11"
    active: bool = True
    update_date: str


CATEGORIES = ["Electronics", "Accessories", "Audio", "Storage"]
BASE_DATE = datetime(2026, 1, 1, 10, 0, 0)

OFFERS_DB = [
    {
        "offer_id": 2000 + i,
        "shop_sku": f"SHOP-SKU-{i:04d}",
        "product_sku": f"PRD-{i:04d}",
        "product_title": f"{CATEGORIES[i % len(CATEGORIES)]} item {i}",
        "description": f"Oferta de prueba número {i}",
        "price": round(9.99 + i * 1.5, 2),
        "origin_price": round(6.5 + i, 2),
        "quantity": (i * 7) % 40,
        "state_code": "11" if i % 10 else "1",
        "active": i % 25 != 0,
        "update_date": (BASE_DATE + timedelta(hours=i)).strftime("%Y-%m-%dT%H:%M:%SZ"),
    }
    for i in range(1, OFFERS_COUNT + 1)
]

ORDER_STATES = ["WAITING_ACCEPTANCE", "SHIPPING", "SHIPPED", "RECEIVED"]

ORDERS_DB = [
    {
        "order_id": f"ORDER-{i:05d}-A",
        "order_state": ORDER_STATES[i % len(ORDER_STATES)],
        "created_date": (BASE_DATE + timedelta(days=i)).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "total_price": round(20 + i * 3.25, 2),
        "order_lines": [
            {"offer_id": OFFERS_DB[i % len(OFFERS_DB)]["offer_id"], "quantity": 1 + i % 3},
        ] if OFFERS_DB else [],
    }
    for i in range(1, 61)
]

PRODUCTS_DB = [
    {
        "product_sku": offer["product_sku"],
        "product_title": offer["product_title"],
        "product_references": [{"reference_type": "EAN", "reference": f"750123{offer['offer_id']:07d}"}],
    }
    for offer in OFFERS_DB
]


@app.middleware("http")
async def simulate_rate_limit(request: Request, call_next):
    """Responde 429 con Retry-After cada RATE_LIMIT_EVERY peticiones"""
    if request.url.path.startswith("/api/"):
        count = next(_request_counter)
        if RATE_LIMIT_EVERY and count % RATE_LIMIT_EVERY == 0:
            return JSONResponse(
                status_code=429,
                content={"status": 429, "message": "Too many requests"},
                headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
            )
    return await call_next(request)


def _check_auth(authorization: Optional[str]):
    if not authorization or (API_KEY and authorization != API_KEY):
        raise HTTPException(status_code=401, detail="Unauthorized")


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%dT%H:%M:%SZ")
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}")


@app.get("/")
async def root():
    """Endpoint raíz con información de la API"""
    return {
        "message": "Mock Mirakl Shop API - Odoo Integration",
        "version": "1.0.0",
        "endpoints": {
            "account": "/api/account",
            "offers": "/api/offers",
            "offer_detail": "/api/offers/{offer_id}",
            "orders": "/api/orders",
            "products": "/api/products",
            "docs": "/docs"
        }
    }


@app.get("/api/account")
async def account(shop_id: Optional[str] = None, authorization: Optional[str] = Header(None)):
    """A01 - Información de la tienda"""
    _check_auth(authorization)
    return {
        "shop_id": int(shop_id) if shop_id and shop_id.isdigit() else 2001,
        "shop_name": "Mock Shop",
        "shop_state": "OPEN",
        "offers_count": len(OFFERS_DB),
    }


@app.get("/api/offers")
async def list_offers(
    max: int = Query(10, ge=1, le=MAX_PAGE_SIZE, description="Tamaño de página"),
    offset: int = Query(0, ge=0, description="Número de registros a saltar"),
    sku: Optional[str] = Query(None, description="Filtrar por SKU"),
    offer_state_codes: Optional[str] = Query(None, description="Filtrar por estado"),
    updated_since: Optional[str] = Query(None, description="Modificadas desde (ISO-8601)"),
    shop_id: Optional[str] = None,
    authorization: Optional[str] = Header(None),
):
    """
    OF21 - Listado de ofertas con paginación max/offset

    Responde con el sobre {"offers": [...], "total_count": N}
    """
    _check_auth(authorization)
    offers = OFFERS_DB

    if sku:
        offers = [o for o in offers if sku in (o["shop_sku"], o["product_sku"])]

    if offer_state_codes:
        states = set(offer_state_codes.split(","))
        offers = [o for o in offers if o["state_code"] in states]

    since = _parse_date(updated_since)
    if since:
        offers = [o for o in offers if _parse_date(o["update_date"]) >= since]

    total = len(offers)
    return {"offers": offers[offset:offset + max], "total_count": total}


@app.get("/api/offers/{offer_id}", response_model=Offer)
async def get_offer(offer_id: int, authorization: Optional[str] = Header(None)):
    """OF22 - Una oferta; 404 si no existe"""
    _check_auth(authorization)
    offer = next((o for o in OFFERS_DB if o["offer_id"] == offer_id), None)

    if not offer:
        raise HTTPException(status_code=404, detail=f"Offer {offer_id} not found")

    return offer


@app.get("/api/orders")
async def list_orders(
    max: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    order_state_codes: Optional[str] = None,
    shop_id: Optional[str] = None,
    authorization: Optional[str] = Header(None),
):
    """OR11 - Listado de pedidos con paginación max/offset"""
    _check_auth(authorization)
    orders = ORDERS_DB

    start = _parse_date(start_date)
    end = _parse_date(end_date)
    if start:
        orders = [o for o in orders if _parse_date(o["created_date"]) >= start]
    if end:
        orders = [o for o in orders if _parse_date(o["created_date"]) <= end]

    if order_state_codes:
        states = set(order_state_codes.split(","))
        orders = [o for o in orders if o["order_state"] in states]

    return {"orders": orders[offset:offset + max], "total_count": len(orders)}


@app.get("/api/products")
async def list_products(
    product_references: str = Query(..., description="Lista TIPO|VALOR separada por comas"),
    shop_id: Optional[str] = None,
    authorization: Optional[str] = Header(None),
):
    """P31 - Productos por referencia (sin paginación)"""
    _check_auth(authorization)
    wanted = set()
    for ref in product_references.split(","):
        ref_type, _, value = ref.partition("|")
        if not value:
            raise HTTPException(status_code=400, detail=f"Invalid product reference: {ref}")
        wanted.add((ref_type, value))

    products: List[dict] = [
        p for p in PRODUCTS_DB
        if any((r["reference_type"], r["reference"]) in wanted for r in p["product_references"])
    ]
    return {"products": products, "total_count": len(products)}


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
