from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from signup.core.config import CORS_ORIGINS
from signup.core.logging_config import configure_logging
from signup.database.db import Base, engine
import signup.models.registrations  # noqa: F401
from signup.routes import events as event_routes
from signup.routes import registrations as registration_routes
from signup.routes import students as student_routes
from signup.routes.errors import register_exception_handlers

configure_logging()

app = FastAPI(title="Event Signup")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create all tables (in production, use migrations such as Alembic)
Base.metadata.create_all(bind=engine)

register_exception_handlers(app)

# Include the routers
app.include_router(registration_routes.router)
app.include_router(event_routes.router)
app.include_router(student_routes.router)
