"""FastAPI application exposing statement imports and portfolio reports.

Run with ``uvicorn --factory brokerage_import.app:create_app``.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, File, Request, UploadFile, status
from fastapi.responses import JSONResponse

from .annual import (
    get_proventos_year_details,
    get_trade_year_details,
    summarize_proventos_by_year,
    summarize_proventos_overall,
    summarize_trades_by_year,
)
from .config import Settings
from .db import SqlOperationRepository, create_db_engine, ensure_schema
from .logging_utils import configure_logging
from .pipeline import run_import
from .positions import calculate_positions
from .repository import OperationRepository
from .spreadsheet import MissingColumnsError, SpreadsheetError

LOGGER = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    repository: OperationRepository | None = None,
) -> FastAPI:
    """Build the API around ``repository`` (database backed by default).

    Route handlers are plain functions, so FastAPI runs the workbook decoding
    and repository calls in its threadpool.
    """

    configure_logging()
    if settings is None:
        settings = Settings.load()
    if repository is None:
        engine = create_db_engine(settings.database_url)
        ensure_schema(engine)
        repository = SqlOperationRepository(engine)

    app = FastAPI(title="Brokerage Import")

    @app.exception_handler(MissingColumnsError)
    async def missing_columns_handler(request: Request, exc: MissingColumnsError) -> JSONResponse:
        LOGGER.warning("Rejected import on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "missing": exc.missing},
        )

    @app.exception_handler(SpreadsheetError)
    async def spreadsheet_handler(request: Request, exc: SpreadsheetError) -> JSONResponse:
        LOGGER.warning("Unreadable spreadsheet on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.post("/users/{user_id}/imports", status_code=status.HTTP_201_CREATED)
    def import_statement(user_id: str, file: UploadFile = File(...)) -> dict[str, Any]:
        payload = file.file.read()
        LOGGER.info("Importing %s (%d bytes) for %s", file.filename, len(payload), user_id)
        summary = run_import(payload, repository, user_id, batch_size=settings.batch_size)
        return summary.to_dict()

    @app.get("/users/{user_id}/operations")
    def list_operations(user_id: str) -> list[dict[str, Any]]:
        return [operation.to_dict() for operation in repository.list_operations(user_id)]

    @app.delete("/users/{user_id}/operations")
    def delete_operations(user_id: str) -> dict[str, int]:
        return {"total_deleted": repository.delete_all(user_id, batch_size=settings.batch_size)}

    @app.get("/users/{user_id}/positions")
    def positions(user_id: str) -> list[dict[str, Any]]:
        operations = repository.list_operations(user_id)
        return [position.to_dict() for position in calculate_positions(operations)]

    @app.get("/users/{user_id}/trades")
    def trades_by_year(user_id: str) -> list[dict[str, Any]]:
        operations = repository.list_operations(user_id)
        return [header.to_dict() for header in summarize_trades_by_year(operations)]

    @app.get("/users/{user_id}/trades/{year}")
    def trades_for_year(user_id: str, year: int) -> list[dict[str, Any]]:
        operations = repository.list_operations(user_id)
        return [item.to_dict() for item in get_trade_year_details(operations, year)]

    @app.get("/users/{user_id}/proventos")
    def proventos_by_year(user_id: str) -> list[dict[str, Any]]:
        operations = repository.list_operations(user_id)
        return [header.to_dict() for header in summarize_proventos_by_year(operations)]

    @app.get("/users/{user_id}/proventos/{year}")
    def proventos_for_year(user_id: str, year: int) -> list[dict[str, Any]]:
        operations = repository.list_operations(user_id)
        return [item.to_dict() for item in get_proventos_year_details(operations, year)]

    @app.get("/users/{user_id}/proventos-overall")
    def proventos_overall(user_id: str, top: int | None = None) -> dict[str, Any]:
        operations = repository.list_operations(user_id)
        top_n = top if top is not None else settings.top_payers
        return summarize_proventos_overall(operations, top_n).to_dict()

    return app


__all__ = ["create_app"]
