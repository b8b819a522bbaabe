"""
Report service: filing reports and the moderation status lifecycle.
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from rentals.models.activity import ActivityType
from rentals.models.report import Report, ReportType, ReportStatus
from rentals.models.user import User, UserRole
from rentals.repositories.listing import ListingRepository
from rentals.repositories.report import ReportRepository
from rentals.repositories.user import UserRepository
from rentals.schemas.report import ReportCreate
from rentals.services.activity import ActivityService
from rentals.services.notification import NotificationService
from rentals.utils.exceptions import ValidationError, NotFoundError
from rentals.utils.permissions import enforce
import uuid
import logging

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (ReportStatus.RESOLVED, ReportStatus.REJECTED)


def parse_report_type(value: Optional[str]) -> ReportType:
    try:
        return ReportType((value or "").strip().upper())
    except ValueError:
        raise ValidationError("Invalid report type. Must be LISTING or USER")


def parse_report_status(value: Optional[str]) -> ReportStatus:
    try:
        return ReportStatus((value or "").strip().upper())
    except ValueError:
        raise ValidationError("Invalid status. Must be PENDING, RESOLVED or REJECTED")


def _parse_uuid(value: str, resource: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise NotFoundError(resource, value)


class ReportService:
    """
    Any authenticated user may file a report; only admins read, transition or delete them.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.report_repo = ReportRepository(db_session)
        self.listing_repo = ListingRepository(db_session)
        self.user_repo = UserRepository(db_session)
        self.notifications = NotificationService(db_session)
        self.activity = ActivityService(db_session)

    async def create_report(self, report_data: ReportCreate, current_user: Optional[User]) -> Report:
        """
        File a report against a listing or a user.

        Validation happens before anything is written.

        Raises:
            AuthenticationError: If there is no authenticated user
            ValidationError: If a required field is missing or the type is invalid
            NotFoundError: If the reported target does not exist
        """
        enforce(current_user, action="file reports")

        target_id = (report_data.target_id or "").strip()
        reason = (report_data.reason or "").strip()
        if not report_data.type or not target_id or not reason:
            raise ValidationError("Missing required fields: type, target_id and reason are required")

        report_type = parse_report_type(report_data.type)

        listing = None
        if report_type == ReportType.LISTING:
            listing = await self.listing_repo.get_by_id(_parse_uuid(target_id, "Listing"))
            if listing is None:
                raise NotFoundError("Listing", target_id)
            target_id = str(listing.id)
        else:
            target_user = await self.user_repo.get_by_id(_parse_uuid(target_id, "User"))
            if target_user is None:
                raise NotFoundError("User", target_id)
            target_id = str(target_user.id)

        report = await self.report_repo.create({
            "type": report_type,
            "target_id": target_id,
            "reason": reason,
            "description": report_data.description,
            "status": ReportStatus.PENDING,
            "reporter_id": current_user.id,
            "listing_id": listing.id if listing else None,
        })
        logger.info(f"Report {report.id} ({report_type.value}) filed by user {current_user.id}")

        if listing is not None and listing.user_id != current_user.id:
            await self.notifications.notify(
                listing.user_id,
                "Your listing was reported",
                f"A report was filed against your listing '{listing.title}' and will be reviewed.",
            )

        await self.activity.log(
            ActivityType.REPORT_CREATED,
            f"{report_type.value.title()} report filed: {reason}",
            {"report_id": str(report.id), "target_id": target_id},
        )
        return report

    async def list_reports(
        self,
        current_user: Optional[User],
        report_type: Optional[str] = None,
        status: Optional[str] = None
    ) -> List[Report]:
        """Admin view of reports, optionally filtered by type and status."""
        enforce(current_user, required_role=UserRole.ADMIN, action="view reports")

        type_filter = parse_report_type(report_type) if report_type else None
        status_filter = parse_report_status(status) if status else None

        return await self.report_repo.list_reports(report_type=type_filter, status=status_filter)

    async def get_report(self, report_id: uuid.UUID, current_user: Optional[User]) -> Report:
        enforce(current_user, required_role=UserRole.ADMIN, action="view reports")

        report = await self.report_repo.get_by_id(report_id)
        if report is None:
            raise NotFoundError("Report", str(report_id))
        return report

    async def update_status(
        self,
        report_id: uuid.UUID,
        status: Optional[str],
        current_user: Optional[User]
    ) -> Report:
        """
        Move a report through PENDING -> RESOLVED | REJECTED.

        Re-setting the current status succeeds. A resolved or rejected
        report cannot go back to PENDING.

        Raises:
            ValidationError: If the status is invalid or would reopen the report
            NotFoundError: If the report does not exist
        """
        enforce(current_user, required_role=UserRole.ADMIN, action="moderate reports")

        new_status = parse_report_status(status)
        report = await self.get_report(report_id, current_user)

        if report.status == new_status:
            return report

        if report.status in TERMINAL_STATUSES and new_status == ReportStatus.PENDING:
            raise ValidationError(f"A {report.status.value} report cannot be reopened")

        report = await self.report_repo.update(report, {"status": new_status})
        logger.info(f"Report {report_id} set to {new_status.value} by admin {current_user.id}")

        if new_status in TERMINAL_STATUSES:
            await self.notifications.notify(
                report.reporter_id,
                f"Your report was {new_status.value.lower()}",
                f"Your report '{report.reason}' has been reviewed and {new_status.value.lower()}.",
            )
            await self.activity.log(
                ActivityType.REPORT_RESOLVED,
                f"Report {new_status.value.lower()}: {report.reason}",
                {"report_id": str(report.id), "status": new_status.value, "admin_id": str(current_user.id)},
            )

        return report

    async def delete_report(self, report_id: uuid.UUID, current_user: Optional[User]) -> None:
        report = await self.get_report(report_id, current_user)
        await self.report_repo.delete(report)
        logger.info(f"Report {report_id} deleted by admin {current_user.id}")
