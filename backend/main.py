"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import contracts, exchange_rates, index_points, instruments, realized_gains, regeneration, transactions
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Finance Tracker Engine",
    description="Positions, fixed-income cashflows and indexed rental schedules",
    version="0.1.0",
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(instruments.router)
app.include_router(transactions.router)
app.include_router(realized_gains.router)
app.include_router(contracts.router)
app.include_router(index_points.router)
app.include_router(exchange_rates.router)
app.include_router(regeneration.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
