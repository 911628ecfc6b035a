"""
Salary Service
Salary structure templates and immutable salary snapshots.
"""
import logging
from typing import Optional, List

from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError

from app import db
from app.exceptions import NotFoundError, PreconditionNotMet
from app.models.application import Application, ApplicationStatus
from app.models.offer import Offer, OfferStatus
from app.models.salary import SalaryStructure, SalarySnapshot
from app.services.salary_calculator import SalaryBreakdown

logger = logging.getLogger(__name__)


class SalaryService:
    """Tenant-scoped salary structures and snapshots."""

    def __init__(self, tenant_id: int):
        """
        Args:
            tenant_id: Tenant ID for multi-tenant isolation
        """
        self.tenant_id = tenant_id

    # ==================== Structures ====================

    def create_structure(
        self,
        name: str,
        earnings: list[dict],
        deductions: Optional[list[dict]] = None,
        employer_benefits: Optional[list[dict]] = None,
        description: Optional[str] = None,
    ) -> SalaryStructure:
        """
        Create a salary structure template.

        Components are parsed up front so an invalid amount fails here and
        not when the structure is copied into a snapshot.

        Raises:
            ValueError: Invalid component
            PreconditionNotMet: Name already used in this tenant
        """
        breakdown = SalaryBreakdown.from_components(earnings, deductions, employer_benefits)
        structure = SalaryStructure(
            tenant_id=self.tenant_id,
            name=name,
            description=description,
            earnings=[c.to_dict() for c in breakdown.earnings],
            deductions=[c.to_dict() for c in breakdown.deductions],
            employer_benefits=[c.to_dict() for c in breakdown.employer_benefits],
        )
        db.session.add(structure)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise PreconditionNotMet(
                f"Salary structure '{name}' already exists",
                code="DUPLICATE_SALARY_STRUCTURE",
            )
        logger.info(f"Created salary structure {structure.id} '{name}' for tenant {self.tenant_id}")
        return structure

    def get_structure(self, structure_id: int) -> SalaryStructure:
        structure = db.session.scalar(
            select(SalaryStructure).where(and_(
                SalaryStructure.id == structure_id,
                SalaryStructure.tenant_id == self.tenant_id,
            ))
        )
        if not structure:
            raise NotFoundError(f"Salary structure {structure_id} not found")
        return structure

    def list_structures(self, active_only: bool = True) -> List[SalaryStructure]:
        query = select(SalaryStructure).where(SalaryStructure.tenant_id == self.tenant_id)
        if active_only:
            query = query.where(SalaryStructure.is_active.is_(True))
        return list(db.session.scalars(query.order_by(SalaryStructure.name)))

    def build_breakdown(
        self,
        structure_id: Optional[int] = None,
        earnings: Optional[list[dict]] = None,
        deductions: Optional[list[dict]] = None,
        employer_benefits: Optional[list[dict]] = None,
    ) -> SalaryBreakdown:
        """Breakdown from a stored structure or from inline components."""
        if structure_id is not None:
            structure = self.get_structure(structure_id)
            return SalaryBreakdown.from_components(
                structure.earnings, structure.deductions, structure.employer_benefits
            )
        if not earnings:
            raise ValueError("Either salary_structure_id or earnings must be provided")
        return SalaryBreakdown.from_components(earnings, deductions, employer_benefits)

    # ==================== Snapshots ====================

    def create_snapshot(
        self,
        application: Application,
        breakdown: SalaryBreakdown,
        structure_id: Optional[int] = None,
        created_by: Optional[str] = None,
    ) -> SalarySnapshot:
        """Add a snapshot to the session (flushed, not committed)."""
        data = breakdown.to_dict()
        snapshot = SalarySnapshot(
            tenant_id=self.tenant_id,
            application_id=application.id,
            structure_id=structure_id,
            earnings=data["earnings"],
            deductions=data["deductions"],
            employer_benefits=data["employer_benefits"],
            totals=data["totals"],
            created_by=created_by,
        )
        db.session.add(snapshot)
        db.session.flush()
        return snapshot

    def assign_salary(
        self,
        application_id: int,
        structure_id: Optional[int] = None,
        earnings: Optional[list[dict]] = None,
        deductions: Optional[list[dict]] = None,
        employer_benefits: Optional[list[dict]] = None,
        created_by: Optional[str] = None,
    ) -> SalarySnapshot:
        """
        Attach a new salary snapshot to an application.

        Raises:
            NotFoundError: Application not found
            PreconditionNotMet: Application closed, or its offer already left DRAFT
        """
        application = db.session.scalar(
            select(Application).where(and_(
                Application.id == application_id,
                Application.tenant_id == self.tenant_id,
            ))
        )
        if not application:
            raise NotFoundError(f"Application {application_id} not found")

        if application.status in (ApplicationStatus.REJECTED, ApplicationStatus.WITHDRAWN):
            raise PreconditionNotMet(
                f"Cannot assign salary to a {application.status} application",
                code="APPLICATION_CLOSED",
                details={"current_status": application.status},
            )

        if application.offer_id is not None:
            offer = db.session.get(Offer, application.offer_id)
            if offer and offer.status != OfferStatus.DRAFT:
                raise PreconditionNotMet(
                    f"Salary is locked once the offer is {offer.status}",
                    code="SALARY_LOCKED",
                    details={"offer_status": offer.status},
                )

        breakdown = self.build_breakdown(structure_id, earnings, deductions, employer_benefits)
        snapshot = self.create_snapshot(application, breakdown, structure_id, created_by)

        if application.offer_id is not None:
            offer = db.session.get(Offer, application.offer_id)
            offer.salary_snapshot_id = snapshot.id

        db.session.commit()
        logger.info(f"Assigned salary snapshot {snapshot.id} to application {application_id}")
        return snapshot

    def latest_snapshot(self, application_id: int) -> Optional[SalarySnapshot]:
        return db.session.scalar(
            select(SalarySnapshot)
            .where(and_(
                SalarySnapshot.tenant_id == self.tenant_id,
                SalarySnapshot.application_id == application_id,
            ))
            .order_by(SalarySnapshot.created_at.desc(), SalarySnapshot.id.desc())
            .limit(1)
        )

    def snapshot_for_letters(self, application: Application) -> Optional[SalarySnapshot]:
        """The offer's snapshot when an offer exists, else the latest assignment."""
        if application.offer_id is not None:
            offer = db.session.get(Offer, application.offer_id)
            if offer and offer.salary_snapshot is not None:
                return offer.salary_snapshot
        return self.latest_snapshot(application.id)
