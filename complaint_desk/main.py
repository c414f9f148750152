import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv(Path(__file__).resolve().parents[1] / ".env")

import complaint_desk.config.config as configs
from complaint_desk.api.v1.route import api_router as MainRouter
from complaint_desk.db.session import Base, engine
from complaint_desk.db import models  # noqa: F401

logging.basicConfig(level=configs.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="complaint_desk", version="0.1.0")
app.include_router(router=MainRouter, prefix="/api/v1")


@app.on_event("startup")
def create_tables() -> None:
    Base.metadata.create_all(bind=engine)
