from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from dotenv import load_dotenv
from pathlib import Path
import logging
import os

from database import engine, Base
from routers.accounts import router as accounts_router
from routers.announcements import router as announcements_router
from routers.applications import router as applications_router
from routers.auth_account import router as auth_router
from routers.categories import router as categories_router
from routers.contact import router as contact_router
from routers.events import router as events_router
from routers.games import router as games_router
from routers.judge_panel import router as judge_panel_router
from routers.judges import router as judges_router
from routers.news import router as news_router
from routers.players import router as players_router

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# Configure logging
logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Co-Curricular Activities API", version="1.0.0")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = {"success": False, "message": exc.detail}
    error = getattr(exc, "error", None)
    if error is not None:
        content["error"] = error
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(content),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        location = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        errors.append({"field": ".".join(location) or None, "message": err.get("msg")})
    message = errors[0]["message"] if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"success": False, "message": message, "error": errors}),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


@app.get("/")
def root():
    return {"success": True, "message": "Co-Curricular Activities API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


# Include routers and add middleware
app.include_router(auth_router)
app.include_router(accounts_router)
app.include_router(applications_router)
app.include_router(categories_router)
app.include_router(games_router)
app.include_router(players_router)
app.include_router(events_router)
app.include_router(announcements_router)
app.include_router(news_router)
app.include_router(judges_router)
app.include_router(judge_panel_router)
app.include_router(contact_router)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=os.environ.get('CORS_ORIGINS', '*').split(','),
    allow_methods=["*"],
    allow_headers=["*"],
)
