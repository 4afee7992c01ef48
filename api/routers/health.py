# api/routers/health.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.logging import logger
from deps import get_db

router = APIRouter()

@router.get("/")
async def root():
    return PlainTextResponse("OK")

@router.get("/health")
async def health():
    return {"status": "ok", "service": "delight-dashboard"}

@router.get("/health/db")
def health_db(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("HEALTH_DB_FAIL err=%s", e)
        return JSONResponse({"status": "error", "database": "unreachable"}, status_code=503)
    return {"status": "ok", "database": "ok"}
