import logging
import secrets
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

import errors
import payments
import schemas
import storage
from config import settings
from database import Base, engine
from offers import OFFERS
from schemas import BookingCreate, BookingOut, ConfirmPaymentRequest, ConfirmPaymentResponse, PaymentIntentRequest

logger = logging.getLogger(__name__)

Base.metadata.create_all(engine)

# ================== APP ==================
app = FastAPI(title="Pilates Booking API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

security = HTTPBasic()


@app.exception_handler(errors.BookingError)
async def booking_error_handler(request: Request, exc: errors.BookingError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = [
        {"field": ".".join(str(part) for part in err["loc"] if part != "body"), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"message": "Invalid request", "errors": fields})


def require_admin(credentials: HTTPBasicCredentials = Depends(security)):
    if not (settings.ADMIN_USER and settings.ADMIN_PASSWORD):
        raise HTTPException(503, "Admin access is not configured")
    user_ok = secrets.compare_digest(credentials.username.encode(), settings.ADMIN_USER.encode())
    pass_ok = secrets.compare_digest(credentials.password.encode(), settings.ADMIN_PASSWORD.encode())
    if not (user_ok and pass_ok):
        raise HTTPException(401, "Invalid credentials", headers={"WWW-Authenticate": "Basic"})


# ================== API ==================
@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api/offers")
def get_offers():
    return {"currency": settings.CURRENCY, "offers": OFFERS}


@app.post("/api/booking", response_model=BookingOut)
def create_booking(data: dict):
    booking_data = schemas.validate(BookingCreate, data)
    return storage.create_booking(booking_data)


@app.get("/api/booking/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: int):
    return storage.get_booking(booking_id)


@app.post("/api/create-payment-intent")
def create_payment_intent(body: PaymentIntentRequest):
    if body.booking_id is None:
        raise errors.ValidationError("Booking ID is required")
    return payments.create_intent(body.booking_id)


@app.post("/api/confirm-payment", response_model=ConfirmPaymentResponse)
async def confirm_payment(body: ConfirmPaymentRequest):
    if body.booking_id is None or not body.payment_intent_id:
        raise errors.ValidationError("Booking ID and Payment Intent ID are required")
    booking = await payments.confirm_payment(body.booking_id, body.payment_intent_id)
    return {"success": True, "booking": BookingOut.model_validate(booking)}


@app.post("/api/validate/{step}")
def validate_step(step: str, data: dict):
    try:
        validated = schemas.validate_step(step, data)
    except errors.ValidationError as e:
        return JSONResponse(status_code=400, content={"valid": False, "errors": e.errors})
    return {"valid": True, "data": validated.model_dump(by_alias=True, mode="json")}


# ================== ADMIN ==================
@app.get("/api/admin/bookings", response_model=List[BookingOut], dependencies=[Depends(require_admin)])
def admin_bookings():
    return storage.list_bookings()
