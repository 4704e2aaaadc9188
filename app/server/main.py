import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.server.routers.admin_routes import admin_router
from app.server.routers.download_routes import download_router
from app.server.routers.payment_routes import payment_router
from config import ALLOWED_ORIGINS

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="AKA Law Documents")

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,  # Allows requests from these origins
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods (GET, POST, etc.)
    allow_headers=["*"],  # Allows all headers
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"status": False, "message": "Invalid request body"},
    )


@app.get("/", tags=["root"])
def root():
    return {"message": "success"}


# Include the routers in the main app with a prefix
app.include_router(payment_router, prefix="/payment", tags=["payment"])
app.include_router(download_router, prefix="/download", tags=["download"])
app.include_router(admin_router, prefix="/admin", tags=["admin"])

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)
