from fastapi import FastAPI, Request, HTTPException, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from mangum import Mangum
from models import *
import time
from utils import logging
import practice_service
import language_info_service
import assistant_service

# FASTAPI app and AWS Lambda handler
app = FastAPI(title="LinguaVault API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    max_age=86400,
)
handler = Mangum(app)

# Dependency to extract user info from the request
def get_current_user(request: Request):
    claims = request.scope.get("aws.event", {}).get("requestContext", {}).get("authorizer", {}).get("claims", {})
    if not claims:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return {
        "user_id": claims.get("sub"),
        "email": claims.get("email"),
        "username": claims.get("cognito:username"),
    }

@app.middleware("http")
async def log_requests(request: Request, call_next):
    # Generate a request ID for tracking
    logging.set_request_id()

    # Log the incoming request
    start_time = time.time()
    logging.info(f"Incoming request: {request.method} {request.url}")

    try:
        # Process the request
        response = await call_next(request)

        # Log the completed request
        process_time = time.time() - start_time
        logging.info(f"Completed request: {request.method} {request.url} with {response.status_code} in {process_time:.2f} seconds")

        return response
    finally:
        # Clear the request ID after the request is complete
        logging.clear_request_id()

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    # Log the exception with full details
    logging.exception(f"Unhandled exception at {request.method} {request.url.path} - {str(exc)}")

    # Runs outside CORSMiddleware, so the header is added here
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error"},
        headers={"Access-Control-Allow-Origin": "*"},
    )

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logging.warning(f"Invalid request at {request.method} {request.url.path} - {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body"},
    )

@app.post("/language-practice", response_model=PracticeResponse, responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
async def language_practice(req: PracticeRequest):
    return practice_service.get_practice(req.languageName, req.languageCode)

@app.post("/language-info", response_model=LanguageInfoResponse, responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def language_info(req: LanguageInfoRequest):
    return language_info_service.get_language_info(req.languageName, req.languageCode)

@app.post("/ai-assistant", response_model=AssistantResponse, responses={401: {"model": ErrorResponse}, 502: {"model": ErrorResponse}})
async def ai_assistant(req: AssistantRequest, current_user: dict = Depends(get_current_user)):
    user_id = current_user["user_id"]
    return assistant_service.ask(user_id, req)
