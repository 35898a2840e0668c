#--------------------------------------------------------------
# API read-only che serve gli archivi pre-costruiti dalla pipeline di avvio.
## /api/v1/data/daily?date=YYYY-MM-DD -> <zip_base>/<date>.zip
## /api/v1/data/<entity>              -> <zip_base>/<entity>.zip
#--------------------------------------------------------------

import datetime as dt
import logging
import os
import stat
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import FileResponse

from etl.tasks.packaging import WHOLE_ENTITIES

logger = logging.getLogger(__name__)

DEFAULT_ZIP_BASE_DIR = "data/partitioned-zip"
FILENAME_PREFIX = "brazilian-ecommerce-"


def _zip_response(zip_path: Path, suffix: str) -> FileResponse:
    try:
        stat_result = os.stat(zip_path)
    except FileNotFoundError:
        stat_result = None
    except OSError:
        logger.exception("Errore leggendo %s", zip_path)
        raise HTTPException(status_code=500, detail="Error reading archive")

    if stat_result is None or not stat.S_ISREG(stat_result.st_mode):
        logger.warning("Nessun dato per: %s", suffix)
        raise HTTPException(status_code=404, detail=f"No data found for {suffix}")

    logger.info("Servo %s (%d bytes)", zip_path.name, stat_result.st_size)
    # stat_result -> Content-Length impostato da FileResponse
    return FileResponse(
        zip_path,
        media_type="application/zip",
        headers={"Content-Disposition": f"attachment; filename={FILENAME_PREFIX}{suffix}.zip"},
        stat_result=stat_result,
    )


def create_app(zip_base_dir=DEFAULT_ZIP_BASE_DIR) -> FastAPI:
    zip_base = Path(zip_base_dir)
    app = FastAPI(title="Olist Data Provider API")

    @app.get("/api/v1/data/daily")
    def get_daily_data(date: dt.date = Query(..., description="Data d'acquisto, formato YYYY-MM-DD")):
        date_str = date.isoformat()
        logger.info("Richiesta dati giornalieri: %s", date_str)
        return _zip_response(zip_base / f"{date_str}.zip", date_str)

    @app.get("/api/v1/data/{entity}")
    def get_entity_data(entity: str):
        # solo le entity servite intere: niente percorsi arbitrari sotto zip_base
        if entity not in WHOLE_ENTITIES:
            raise HTTPException(status_code=404, detail=f"Unknown entity: {entity}")
        logger.info("Richiesta dati: %s", entity)
        return _zip_response(zip_base / f"{entity}.zip", entity)

    return app
