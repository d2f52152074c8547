"""
Guild Entities
--------------

ORM models for the seven guild-scoped record kinds.

Models:
    - Staff: Firm employee, keyed externally by ``user_id``
    - Case: Client case with lead and assigned lawyers
    - Job: Job posting
    - Application: Application to a job posting
    - Retainer: Retainer agreement between a client and a lawyer
    - Feedback: Client feedback about a staff member or the firm
    - Reminder: Scheduled reminder, optionally tied to a case

Cross-reference columns (plain values, no ForeignKey constraints):
    Case.lead_attorney_id        -> Staff.user_id
    Case.assigned_lawyer_ids[]   -> Staff.user_id
    Application.job_id           -> Job.id
    Application.reviewed_by      -> Staff.user_id
    Job.posted_by                -> Staff.user_id
    Retainer.lawyer_id           -> Staff.user_id
    Feedback.target_staff_id     -> Staff.user_id
    Reminder.case_id             -> Case.id
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime
from typing import Any, Dict, List, Optional

# --- Third party ---
from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

# --- Local imports ---
from .base import Base, GuildEntityMixin, utc_now
from .enums import ApplicationStatus, CaseStatus, EntityType, RetainerStatus, StaffStatus


class Staff(GuildEntityMixin, Base):
    """
    Firm staff member.

    Attributes:
        user_id: External (chat platform) user id; other records refer to
            staff through this value
        username: Display/game username
        role: Firm role (see StaffRole)
        status: Employment status (see StaffStatus); stored as free text
        hired_at: When the staff member was hired
        hired_by: user_id of whoever hired them
        promotion_history: List of dicts with keys from_role, to_role,
            promoted_by, promoted_at, action_type
    """

    __tablename__ = "staff"
    entity_type = EntityType.STAFF

    user_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=StaffStatus.ACTIVE.value
    )
    hired_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    hired_by: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    promotion_history: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )

    @property
    def is_active(self) -> bool:
        """Whether the staff member can take assignments."""
        return self.status == StaffStatus.ACTIVE.value


class Case(GuildEntityMixin, Base):
    """
    Client case.

    Attributes:
        case_number: Human-facing case number
        client_id: External user id of the client (not checked)
        title: Short case title
        status: Case status (see CaseStatus)
        lead_attorney_id: user_id of the lead attorney
        assigned_lawyer_ids: user_ids of all assigned lawyers
        closed_at: When the case was closed
    """

    __tablename__ = "cases"
    entity_type = EntityType.CASE

    case_number: Mapped[str] = mapped_column(String(64), nullable=False)
    client_id: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=CaseStatus.PENDING.value
    )
    lead_attorney_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    assigned_lawyer_ids: Mapped[List[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    closed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Job(GuildEntityMixin, Base):
    """
    Job posting.

    Attributes:
        title: Posting title
        staff_role: Role being hired for
        is_open: Whether applications are accepted
        posted_by: user_id of the staff member who posted it
        closed_at: When the posting was closed
    """

    __tablename__ = "jobs"
    entity_type = EntityType.JOB

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    staff_role: Mapped[str] = mapped_column(String(32), nullable=False)
    is_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    posted_by: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    closed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Application(GuildEntityMixin, Base):
    """
    Application to a job posting.

    Attributes:
        job_id: Id of the Job applied to
        applicant_id: External user id of the applicant
        status: Application status (see ApplicationStatus)
        reviewed_by: user_id of the reviewing staff member
        reviewed_at: When it was reviewed
        review_reason: Free-text reason recorded with the decision
    """

    __tablename__ = "applications"
    entity_type = EntityType.APPLICATION

    job_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    applicant_id: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ApplicationStatus.PENDING.value
    )
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    review_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Retainer(GuildEntityMixin, Base):
    """
    Retainer agreement.

    Attributes:
        client_id: External user id of the client (not checked)
        lawyer_id: user_id of the retained lawyer
        status: Agreement status (see RetainerStatus)
    """

    __tablename__ = "retainers"
    entity_type = EntityType.RETAINER

    client_id: Mapped[str] = mapped_column(String(32), nullable=False)
    lawyer_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=RetainerStatus.PENDING.value
    )


class Feedback(GuildEntityMixin, Base):
    """
    Client feedback.

    Attributes:
        submitter_id: External user id of the submitter
        target_staff_id: user_id of the staff member reviewed, if any
        target_staff_username: Display name of the target at submission
        rating: 1-5
        comment: Free text
        is_for_firm: Feedback about the firm as a whole
    """

    __tablename__ = "feedback"
    entity_type = EntityType.FEEDBACK

    submitter_id: Mapped[str] = mapped_column(String(32), nullable=False)
    target_staff_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    target_staff_username: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_for_firm: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Reminder(GuildEntityMixin, Base):
    """
    Scheduled reminder.

    Attributes:
        user_id: External user id of whoever set it
        message: Reminder text
        scheduled_for: When it should fire
        case_id: Id of the Case it was set from, if any
        is_active: Whether it is still pending delivery
    """

    __tablename__ = "reminders"
    entity_type = EntityType.REMINDER

    user_id: Mapped[str] = mapped_column(String(32), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    scheduled_for: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    case_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
