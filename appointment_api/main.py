import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from appointment_api.core import config
from appointment_api.core.errors import register_exception_handlers
from appointment_api.core.logging_config import configure_logging
from appointment_api.database import SessionLocal, init_db
from appointment_api.routes import appointment_routes, user_routes
from appointment_api.seed import seed_database

configure_logging()

app = FastAPI(title='Appointment Booking API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

register_exception_handlers(app)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        init_db()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
        return

    if config.SEED_DATABASE:
        db = SessionLocal()
        try:
            seed_database(db)
        finally:
            db.close()


@app.get('/')
def root():
    return {'status': 'Appointment Booking API Running'}


app.include_router(appointment_routes.router, prefix='/api/appointments')
app.include_router(user_routes.router, prefix='/api/users')
