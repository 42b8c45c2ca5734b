from fastapi import APIRouter

from easyticket.api.routes import health, users, tickets, bookings, payments, vendor, admin

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])  # GET /
api_router.include_router(users.router, prefix="/users", tags=["users"])  # POST /, GET /role
api_router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])  # public listing + vendor CRUD
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])  # POST /, GET /my, PATCH accept/reject
api_router.include_router(payments.router, tags=["payments"])  # checkout, settlement, webhook, transactions
api_router.include_router(vendor.router, prefix="/vendor", tags=["vendor"])  # vendor dashboard
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])  # admin endpoints
