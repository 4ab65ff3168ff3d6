"""API router registry used by the app factory."""

from __future__ import annotations

from fastapi import APIRouter

from . import craftsmen, health, orders, products

API_PREFIX = "/api"

API_ROUTERS: tuple[APIRouter, ...] = (
    health.router,
    products.router,
    orders.router,
    craftsmen.router,
)

__all__ = ["API_PREFIX", "API_ROUTERS"]
