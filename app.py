"""
Restaurant Ordering - REST API
FastAPI backend over SQLite: orders with payment proof, menu and promotions
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, Body, Depends, FastAPI, File, Form, HTTPException, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import func, select
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, get_settings
from database import Database
from errors import OrderingError
from menu import MenuService
from models import OrderModel
from orders import OrderService
from promotions import PromotionService
from schemas import StatusUpdate, VerifyUpdate
from uploads import UploadStore

__version__ = "1.0.0"

logger = structlog.get_logger()


def configure_logging(level: str) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
    )


# Dependencies

def request_origin(request: Request) -> str:
    """scheme://host of the inbound request, used to build absolute upload URLs"""
    return str(request.base_url).rstrip("/")


def get_order_service(request: Request) -> OrderService:
    return request.app.state.orders


def get_menu_service(request: Request) -> MenuService:
    return request.app.state.menu


def get_promotion_service(request: Request) -> PromotionService:
    return request.app.state.promotions


# API Routes

router = APIRouter(prefix="/api")


@router.get("/orders")
async def list_orders(
    origin: str = Depends(request_origin),
    orders: OrderService = Depends(get_order_service)
):
    return await orders.list_orders(origin)


@router.post("/orders", status_code=status.HTTP_201_CREATED)
async def create_order(
    customer_name: Optional[str] = Form(None, alias="customerName"),
    phone_number: Optional[str] = Form(None, alias="phoneNumber"),
    number_of_people: Optional[str] = Form(None, alias="numberOfPeople"),
    items: Optional[str] = Form(None),
    reservation_time: Optional[str] = Form(None, alias="reservationTime"),
    payment_proof: Optional[UploadFile] = File(None, alias="paymentProof"),
    origin: str = Depends(request_origin),
    orders: OrderService = Depends(get_order_service)
):
    """
    Submit an order. Multipart form; items is a JSON array of
    {name, price, quantity} and paymentProof is the uploaded receipt.
    """
    return await orders.create_order(
        origin,
        customer_name=customer_name,
        phone_number=phone_number,
        items=items,
        payment_proof=payment_proof,
        number_of_people=number_of_people,
        reservation_time=reservation_time,
    )


@router.put("/orders/{order_id}/status")
async def update_order_status(
    order_id: int,
    payload: StatusUpdate = Body(...),
    orders: OrderService = Depends(get_order_service)
):
    return await orders.update_status(order_id, payload.status)


@router.put("/orders/{order_id}/verify")
async def verify_order_payment(
    order_id: int,
    payload: VerifyUpdate = Body(...),
    orders: OrderService = Depends(get_order_service)
):
    return await orders.verify_payment(order_id, payload.verified)


@router.delete("/orders/completed")
async def purge_completed_orders(orders: OrderService = Depends(get_order_service)):
    deleted = await orders.purge_completed()
    return {
        "success": True,
        "deleted": deleted,
        "message": f"{deleted} completed orders deleted"
    }


@router.get("/menu")
async def list_menu(
    origin: str = Depends(request_origin),
    menu: MenuService = Depends(get_menu_service)
):
    return await menu.list_items(origin)


@router.post("/menu", status_code=status.HTTP_201_CREATED)
async def create_menu_item(
    name: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    origin: str = Depends(request_origin),
    menu: MenuService = Depends(get_menu_service)
):
    return await menu.create_item(origin, name=name, type=type, price=price, image=image)


@router.delete("/menu/{item_id}")
async def delete_menu_item(item_id: int, menu: MenuService = Depends(get_menu_service)):
    return await menu.delete_item(item_id)


@router.get("/promotions")
async def list_promotions(
    origin: str = Depends(request_origin),
    promotions: PromotionService = Depends(get_promotion_service)
):
    return await promotions.list_promotions(origin)


@router.post("/promotions", status_code=status.HTTP_201_CREATED)
async def create_promotion(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    origin: str = Depends(request_origin),
    promotions: PromotionService = Depends(get_promotion_service)
):
    return await promotions.create_promotion(
        origin, title=title, description=description, date=date, image=image
    )


@router.delete("/promotions/{promotion_id}")
async def delete_promotion(
    promotion_id: int,
    promotions: PromotionService = Depends(get_promotion_service)
):
    return await promotions.delete_promotion(promotion_id)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    database = Database(settings.database_url)
    uploads = UploadStore(settings.upload_dir)
    # Must exist before /uploads is mounted
    uploads.ensure_directory()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        await database.connect()
        logger.info("application_startup", version=__version__)
        yield
        await database.dispose()
        logger.info("application_shutdown")

    app = FastAPI(
        title="Restaurant Ordering API",
        description="Orders, menu and promotions for the restaurant website",
        version=__version__,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.database = database
    app.state.uploads = uploads
    app.state.orders = OrderService(database, uploads)
    app.state.menu = MenuService(database, uploads)
    app.state.promotions = PromotionService(database, uploads)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    # Security middleware
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring"""
        try:
            async with database.session() as session:
                result = await session.execute(select(func.count()).select_from(OrderModel))
                order_count = result.scalar()
        except OrderingError as e:
            logger.error("health_check_failed", error=e.message)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service unhealthy"
            )

        return {
            "status": "healthy",
            "database": "connected",
            "orders_count": order_count,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    app.include_router(router)
    app.mount("/uploads", StaticFiles(directory=str(uploads.directory)), name="uploads")

    # Error handlers
    @app.exception_handler(OrderingError)
    async def ordering_error_handler(request: Request, exc: OrderingError):
        if exc.status_code >= 500:
            logger.error("request_failed", error=exc.message, path=request.url.path)
        else:
            logger.info("request_rejected", error=exc.message, status=exc.status_code, path=request.url.path)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("request_rejected", error="malformed request", path=request.url.path)
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error. Please try again later."}
        )

    return app


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        workers=1,
        reload=False,
        log_level="info"
    )
