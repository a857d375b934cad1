import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import Base, SessionLocal, engine
from .migrations import upgrade_database
from .provisioning import check_admin_on_startup
from .routers import auth, materials, pdf, quotations, users

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="[%(asctime)s] %(levelname)s in %(name)s: %(message)s",
)

# New tables only; column changes go through Alembic
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Cotizador",
    description="Raw-material costing and product quotations",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (auth, users, materials, quotations, pdf):
    app.include_router(module.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "cotizador"}


@app.on_event("startup")
def on_startup():
    upgrade_database(engine)

    db = SessionLocal()
    try:
        check_admin_on_startup(db)
    finally:
        db.close()
