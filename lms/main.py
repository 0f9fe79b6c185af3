# main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.concurrency import run_in_threadpool
import logging
import sys
from lms.config import settings
from lms.deps import create_mongo_client, create_redis_client, create_media_host, create_payment_gateway
from lms.logging_config import setup_logging
from lms.middleware.error_handler import ErrorHandlerMiddleware
from lms.repos.users import ensure_indexes as ensure_user_indexes
from lms.repos.courses import ensure_indexes as ensure_course_indexes
from lms.repos.orders import ensure_indexes as ensure_order_indexes
from lms.repos.progress import ensure_indexes as ensure_progress_indexes
from lms.routers.health import router as health_router
from lms.routers.user_auth import auth
from lms.routers.instructor_route import courses as instructor_courses
from lms.routers.media_route import media
from lms.routers.student_route import courses as student_courses
from lms.routers.student_route import orders
from lms.routers.student_progress import progress_route
from lms.tasks.scheduler import create_scheduler, schedule_jobs


# Setup logging
log_level = "DEBUG" if settings.DEBUG else "INFO"
log_file = "logs/app.log" if settings.ENVIRONMENT == "production" else None
setup_logging(log_level=log_level, log_file=log_file)

logger = logging.getLogger(__name__)


app = FastAPI(
    title="LMS API",
    description="Learning management backend: courses, media, orders and progress",
    version="1.0.0"
)


@app.on_event("startup")
async def startup():
    logger.info("Starting application...")

    # Database connections
    try:
        app.state.mongo_client = create_mongo_client(settings.MONGO_URI)
        app.state.db = app.state.mongo_client.get_default_database(settings.MONGO_DB_NAME)
        logger.info("MongoDB connection established")
    except Exception as e:
        logger.critical(f"Failed to connect to MongoDB: {str(e)}")
        sys.exit(1)

    try:
        app.state.redis = create_redis_client(settings.REDIS_URL)
        await app.state.redis.ping()
        logger.info("Redis connection established")
    except Exception as e:
        logger.critical(f"Failed to connect to Redis: {str(e)}")
        sys.exit(1)

    # Upstream providers
    app.state.media_host = create_media_host(settings)
    app.state.payment_gateway = create_payment_gateway(settings)
    if not settings.CLOUDINARY_CLOUD_NAME:
        logger.warning("CLOUDINARY_CLOUD_NAME is not set; media uploads will fail")
    if not settings.STRIPE_SECRET_KEY:
        logger.warning("STRIPE_SECRET_KEY is not set; payments will fail")

    # Database indexes
    try:
        for ensure in (ensure_user_indexes, ensure_course_indexes, ensure_order_indexes, ensure_progress_indexes):
            await run_in_threadpool(ensure, app.state.db)
        logger.info("Database indexes ensured")
    except Exception as e:
        logger.error(f"Failed to ensure database indexes: {str(e)}")
        # Continue startup as this is not critical

    # Scheduler
    try:
        app.state.scheduler = create_scheduler()
        schedule_jobs(app.state.scheduler, app.state.db, settings.RECONCILE_INTERVAL_MINUTES)
        app.state.scheduler.start()
        logger.info("Scheduler started")
    except Exception as e:
        logger.error(f"Failed to start scheduler: {str(e)}")
        # Enrollment still happens on confirmation; only reconciliation is lost

    logger.info("Application startup completed successfully")

@app.on_event("shutdown")
async def shutdown():
    logger.info("Starting application shutdown...")

    try:
        if hasattr(app.state, 'scheduler'):
            app.state.scheduler.shutdown(wait=False)
            logger.info("Scheduler shutdown completed")
    except Exception as e:
        logger.error(f"Error shutting down scheduler: {str(e)}")

    try:
        if hasattr(app.state, 'redis'):
            await app.state.redis.aclose()
            logger.info("Redis connection closed")
    except Exception as e:
        logger.error(f"Error closing Redis connection: {str(e)}")

    try:
        if hasattr(app.state, 'mongo_client'):
            app.state.mongo_client.close()
            logger.info("MongoDB connection closed")
    except Exception as e:
        logger.error(f"Error closing MongoDB connection: {str(e)}")

    logger.info("Application shutdown completed")

# Error handling middleware (should be first)
app.add_middleware(ErrorHandlerMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

# Routers
app.include_router(health_router)
app.include_router(auth.router)
app.include_router(instructor_courses.router)
app.include_router(media.router)
app.include_router(student_courses.router)
app.include_router(orders.router)
app.include_router(progress_route.router)


def run():
    import uvicorn
    uvicorn.run("lms.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
