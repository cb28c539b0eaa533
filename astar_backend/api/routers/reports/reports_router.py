"""
Reporting endpoints over the expense ledger.

Routes:
- GET /reports/summary - Totals and closing balance
- GET /reports/by-category, /by-month, /by-tag, /by-case - Breakdowns
- GET /reports/export.csv - Ledger CSV export

All endpoints accept optional start_date/end_date (inclusive).

Dependencies: astar_backend.application.services.report_service
System role: Reporting HTTP API
"""

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from astar_backend.api.deps.dependencies import get_current_user, get_report_service
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.report_service import ReportService
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.models.report import (
    CaseBreakdown,
    CategoryBreakdown,
    MonthBreakdown,
    SummaryResponse,
    TagBreakdown,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/summary", response_model=SummaryResponse)
@handle_domain_errors
async def get_summary(
    start_date: date | None = None,
    end_date: date | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    report_service: ReportService = Depends(get_report_service),
) -> SummaryResponse:
    return SummaryResponse(**await report_service.summary(user.tenant_id, start_date, end_date))


@router.get("/by-category", response_model=list[CategoryBreakdown])
@handle_domain_errors
async def get_by_category(
    start_date: date | None = None,
    end_date: date | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    report_service: ReportService = Depends(get_report_service),
) -> list[CategoryBreakdown]:
    rows = await report_service.by_category(user.tenant_id, start_date, end_date)
    return [CategoryBreakdown(**r) for r in rows]


@router.get("/by-month", response_model=list[MonthBreakdown])
@handle_domain_errors
async def get_by_month(
    start_date: date | None = None,
    end_date: date | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    report_service: ReportService = Depends(get_report_service),
) -> list[MonthBreakdown]:
    rows = await report_service.by_month(user.tenant_id, start_date, end_date)
    return [MonthBreakdown(**r) for r in rows]


@router.get("/by-tag", response_model=list[TagBreakdown])
@handle_domain_errors
async def get_by_tag(
    start_date: date | None = None,
    end_date: date | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    report_service: ReportService = Depends(get_report_service),
) -> list[TagBreakdown]:
    """Per-tag totals; an entry with several tags counts toward each of them."""
    rows = await report_service.by_tag(user.tenant_id, start_date, end_date)
    return [TagBreakdown(**r) for r in rows]


@router.get("/by-case", response_model=list[CaseBreakdown])
@handle_domain_errors
async def get_by_case(
    start_date: date | None = None,
    end_date: date | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    report_service: ReportService = Depends(get_report_service),
) -> list[CaseBreakdown]:
    rows = await report_service.by_case(user.tenant_id, start_date, end_date)
    return [CaseBreakdown(**r) for r in rows]


@router.get("/export.csv")
@handle_domain_errors
async def export_csv(
    start_date: date | None = None,
    end_date: date | None = None,
    category: str | None = None,
    case_id: UUID | None = None,
    tag_ids: list[UUID] | None = Query(None),
    user: AuthenticatedUser = Depends(get_current_user),
    report_service: ReportService = Depends(get_report_service),
) -> Response:
    content = await report_service.export_csv(
        user.tenant_id,
        start_date=start_date,
        end_date=end_date,
        category=category,
        case_id=case_id,
        tag_ids=tag_ids,
    )
    logger.info("Ledger exported", extra={"tenant_id": str(user.tenant_id)})
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="expenses.csv"'},
    )
