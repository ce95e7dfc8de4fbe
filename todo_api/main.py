import logging
import fastapi
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from todo_api import config
from todo_api.database import SessionLocal, engine
from todo_api.logging_setup import setup_logging
from todo_api.migrations import run_migrations
from todo_api.models.user import User
from todo_api.routers import auth, backup, reminders, subtasks, tasks
from todo_api.utils.auth import hash_password

setup_logging(config.LOG_LEVEL, config.LOG_FILE)
logger = logging.getLogger(__name__)

run_migrations(engine)

# Seed a demo account for local development only
def _ensure_dev_user():
	if config.APP_ENV != "development":
		return
	db = SessionLocal()
	try:
		if not db.query(User).filter(User.email == config.DEV_USER_EMAIL).first():
			db.add(User(email=config.DEV_USER_EMAIL, password=hash_password(config.DEV_USER_PASS)))
			db.commit()
			logger.info("Seeded dev user: %s", config.DEV_USER_EMAIL)
	finally:
		db.close()

_ensure_dev_user()

app = FastAPI(title="Todo API")

app.add_middleware(
	CORSMiddleware,
	allow_origins=config.CORS_ORIGINS,
	allow_credentials=True,
	allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
	allow_headers=["Content-Type", "Authorization"],
)

# API routers
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(subtasks.router)
app.include_router(backup.router)
app.include_router(reminders.router)


@app.get("/api/health", tags=["health"])
def health():
	return {"ok": True}


# Generic error handler to return JSON errors for unexpected exceptions
@app.exception_handler(Exception)
async def generic_exception_handler(request, exc):
	logger.exception("Unhandled error on %s %s", request.method, request.url.path)
	return fastapi.responses.JSONResponse(status_code=500, content={"detail": "Internal server error"})
