from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from app.api import appointments, auth, doctors, settings
from app.core import config
from app.core.errors import register_exception_handlers
from app.core.logger import logger

load_dotenv()


app = FastAPI(title="Clinic Doctor Dashboard", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(appointments.router)
app.include_router(settings.router)
app.include_router(doctors.router)


@app.get("/")
async def root():
    return {"message": "Clinic Doctor Dashboard API"}


logger.info("Clinic Doctor Dashboard API initialised")
