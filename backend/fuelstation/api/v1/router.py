from fastapi import APIRouter

from fuelstation.api.v1 import (
    client_routes,
    health,
    price_routes,
    purchase_routes,
    reading_routes,
    receipt_routes,
    report_routes,
    sale_routes,
    station_routes,
    tank_routes,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(station_routes.router, tags=["Fuel Types & Pumps"])
api_router.include_router(tank_routes.router, prefix="/tanks", tags=["Tanks"])
api_router.include_router(reading_routes.router, prefix="/readings", tags=["Readings"])
api_router.include_router(sale_routes.router, prefix="/sales", tags=["Sales"])
api_router.include_router(purchase_routes.router, tags=["Purchases"])
api_router.include_router(client_routes.router, tags=["Clients & Credits"])
api_router.include_router(receipt_routes.router, tags=["Receipts"])
api_router.include_router(price_routes.router, prefix="/prices", tags=["Prices"])
api_router.include_router(report_routes.router, tags=["Reports"])
