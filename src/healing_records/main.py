import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from healing_records.api.healing_endpoints import router as healing_router, get_healing_service
from healing_records.core.config import settings
from healing_records.core.logging_config import setup_healing_logging

# --- Logging Configuration ---
setup_healing_logging(settings.LOG_LEVEL, settings.LOG_DIR)

# --- FastAPI App ---
app = FastAPI(title="Healing Record Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Router ---
app.include_router(healing_router)

@app.on_event("startup")
async def startup_event():
    get_healing_service()
    logging.info("Application startup complete.")

@app.on_event("shutdown")
async def shutdown_event():
    get_healing_service().dispatcher.shutdown()
    logging.info("Application shutdown complete.")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.APP_PORT)
