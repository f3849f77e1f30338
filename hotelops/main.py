import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hotelops.api.v1.api import api_router
from hotelops.core.config import settings
from hotelops.core.database import async_engine
from hotelops.core.exception_handlers import EXCEPTION_HANDLERS
from hotelops.models import Base
from hotelops.schemas.responses import HealthCheckResponse

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title="Hotel Operations API",
    description="Room reservations, billing and checkout for hotels",
    version="1.0.0",
)

# Register exception handlers
for exception_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exception_class, handler)


@app.on_event("startup")
async def startup():
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/", response_model=HealthCheckResponse)
def read_root():
    return HealthCheckResponse(status="healthy", version="1.0.0")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
