import logging
import sys

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

load_dotenv()

from routes.auth_routes import router as auth_router
from routes.goal_routes import router as goal_router
from routes.quiz_routes import router as quiz_router
from routes.recommendation_routes import router as recommendation_router
from routes.session_routes import router as session_router
from routes.upload_routes import router as upload_router
from utils.exceptions import DuplicateError, StudyTrackerError
from utils.settings import get_settings

settings = get_settings()

# Configure logging
logger = logging.getLogger(__name__)
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(settings.log_file)
    ]
)

# FastAPI App
app = FastAPI(title="Study Tracker API")


@app.exception_handler(StudyTrackerError)
async def study_tracker_exception_handler(request: Request, exc: StudyTrackerError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error_code} {exc.message}")
    content = {"error": exc.error_code, "message": exc.message, "context": exc.context}
    if isinstance(exc, DuplicateError) and exc.context.get("quiz_id"):
        content["quizId"] = exc.context["quiz_id"]
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(content))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    try:
        detail = jsonable_encoder(exc.errors())
    except UnicodeDecodeError:
        # multipart bodies can carry undecodable bytes
        detail = [
            {
                "loc": ["binary_content"],
                "msg": "Binary data cannot be properly decoded as UTF-8",
                "type": "binary_data_error",
            }
        ]

    return JSONResponse(
        status_code=422,
        content={"detail": detail},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    max_age=settings.session_max_age,
    same_site="lax",
)

app.include_router(auth_router)
app.include_router(upload_router)
app.include_router(quiz_router)
app.include_router(session_router)
app.include_router(goal_router)
app.include_router(recommendation_router)


@app.get("/")
async def root():
    return {"greeting": "Hello!", "message": "Welcome to the Study Tracker API!", "status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
