"""
Sales Tracker - API Backend
Leads, daily KPIs, sales logs, YTD stats and AI coaching for the
roofing sales team.

Démarre avec:
    uvicorn server:app --host 0.0.0.0 --port 3001 --reload
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from config import CLIENT_BASE_URL

# Configuration logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("sales_tracker")

# Créer l'app
app = FastAPI(
    title="Sales Tracker",
    description="KPI and sales pipeline tracking for the roofing sales team",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[CLIENT_BASE_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ==================== IMPORT DES ROUTES ====================

from routes import auth, leads, sales_logs, kpi, ytd, ai

# Routes avec préfixe /api
app.include_router(auth.router, prefix="/api")
app.include_router(leads.router, prefix="/api")
app.include_router(sales_logs.router, prefix="/api")
app.include_router(kpi.router, prefix="/api")
app.include_router(ytd.router, prefix="/api")
app.include_router(ai.router, prefix="/api")

# ==================== ROUTE RACINE ====================

@app.get("/")
async def root():
    return {
        "name": "Sales Tracker API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs"
    }


# ==================== STARTUP ====================

@app.on_event("startup")
async def startup():
    logger.info("Sales Tracker API started")

    from config import db

    await db.sessions.create_index("token", unique=True)
    await db.sessions.create_index("expiresAt")
    await db.leads.create_index("id", unique=True)
    await db.leads.create_index("assignedUserId")
    await db.leads.create_index("createdAt")
    await db.sales_logs.create_index("id", unique=True)
    await db.sales_logs.create_index("createdAt")
    await db.sales_logs.create_index("assignedUserId")
    await db.sales_logs.create_index("nextFollowUpDate")
    await db.sales_logs.create_index("leadNumber")
    await db.kpi_entries.create_index([("userId", 1), ("entryDate", 1)])
    await db.activity_logs.create_index("createdAt")

    logger.info("MongoDB indexes created")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3001)
