from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import CORS_ORIGINS, LOG_LEVEL
from app.core.logging_config import configure_logging
from app.database.db import Base, engine
from app.models import events, registrations, users  # noqa: F401  (register tables)
from app.routes import events as event_routes
from app.routes import users as user_routes

configure_logging(LOG_LEVEL)

app = FastAPI(title="Event Registration API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create all tables (in production, use migrations such as Alembic)
Base.metadata.create_all(bind=engine)

# Include the routers
app.include_router(event_routes.router)
app.include_router(user_routes.router)
