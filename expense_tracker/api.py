"""
HTTP API for Expense Tracker

Routes:
    GET    /api/entries          ledger overview
    POST   /api/entries          add an expense
    DELETE /api/entries/{id}     remove an expense
    POST   /api/entries/reset    clear salary and entries
    POST   /api/salary           set the salary
    GET    /api/health           liveness check

Every response carrying totals includes salary, totalExpenses,
remaining and total (a copy of totalExpenses kept for older clients).
Errors are reported as {"error": "<message>"}.

When the configured static directory exists it is served at "/",
with index.html as the landing page.
"""

import json
from pathlib import Path
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from expense_tracker import __version__
from expense_tracker.audit import configure_logging, create_correlation_id
from expense_tracker.config import get_settings
from expense_tracker.models.ledger import AddEntryRequest, SalaryRequest
from expense_tracker.orchestrator import (
    AmountValidationError,
    EntryNotFoundError,
    LedgerFlow,
    create_app_components,
)
from expense_tracker.services.storage import StorageError

logger = structlog.get_logger(__name__)


async def _read_body(request: Request) -> dict:
    """Parse the JSON body; anything missing or malformed reads as {}."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _failure(
    ledger: LedgerFlow,
    message: str,
    operation: str,
    exc: Exception,
) -> JSONResponse:
    """Log an unexpected failure and answer 500."""
    logger.error("request_failed", operation=operation, error=str(exc), exc_info=exc)
    # Storage errors are already audited by the flow
    if ledger.audit_logger and not isinstance(exc, StorageError):
        await ledger.audit_logger.log_error(
            error_type=type(exc).__name__,
            error_message=str(exc),
            details={"operation": operation},
        )
    return _error(500, message)


def create_app(
    flow: Optional[LedgerFlow] = None,
    static_dir: Optional[Path] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        flow: Ledger flow to serve. Defaults to the configured JSON ledger.
        static_dir: Frontend directory. Defaults to EXPENSE_TRACKER_STATIC_DIR.
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    ledger = flow or create_app_components()
    server_settings = settings.server
    static_root = Path(static_dir) if static_dir is not None else server_settings.static_dir

    app = FastAPI(
        title="Expense Tracker API",
        version=__version__,
        debug=settings.app.debug_mode,
    )
    app.state.ledger = ledger

    app.add_middleware(
        CORSMiddleware,
        allow_origins=server_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/api/entries")
    async def list_entries():
        try:
            state, totals = await ledger.get_overview(create_correlation_id())
        except Exception as e:
            return await _failure(ledger, "Failed to read entries.", "list_entries", e)

        return {
            "entries": [entry.to_document() for entry in state.entries],
            **totals.to_payload(),
        }

    @app.post("/api/entries/reset")
    async def reset_entries():
        try:
            totals = await ledger.reset(create_correlation_id())
        except Exception as e:
            return await _failure(ledger, "Failed to clear entries.", "reset_entries", e)

        return {"message": "All entries cleared.", **totals.to_payload()}

    @app.post("/api/entries", status_code=201)
    async def add_entry(request: Request):
        body = AddEntryRequest.model_validate(await _read_body(request))
        try:
            entry, totals = await ledger.add_expense(
                amount=body.amount,
                raw_value=body.raw_value,
                label=body.label,
                entry_id=body.id,
                correlation_id=create_correlation_id(),
            )
        except AmountValidationError:
            return _error(400, "Invalid amount value.")
        except Exception as e:
            return await _failure(ledger, "Failed to save entry.", "add_entry", e)

        return JSONResponse(
            status_code=201,
            content={"entry": entry.to_document(), **totals.to_payload()},
        )

    @app.delete("/api/entries/{entry_id}")
    async def remove_entry(entry_id: str):
        try:
            totals = await ledger.remove_expense(entry_id, create_correlation_id())
        except EntryNotFoundError:
            return _error(404, "Entry not found.")
        except Exception as e:
            return await _failure(ledger, "Failed to remove entry.", "remove_entry", e)

        return totals.to_payload()

    @app.post("/api/salary")
    async def update_salary(request: Request):
        body = SalaryRequest.model_validate(await _read_body(request))
        try:
            totals = await ledger.set_salary(body.amount, create_correlation_id())
        except AmountValidationError:
            return _error(400, "Invalid salary amount.")
        except Exception as e:
            return await _failure(ledger, "Failed to update salary.", "update_salary", e)

        return totals.to_payload()

    # Mounted last so the API routes above take precedence
    if static_root.is_dir():
        app.mount("/", StaticFiles(directory=str(static_root), html=True), name="static")
    else:
        logger.info("static_dir_missing", path=str(static_root))

    return app
