#!/usr/bin/env python3
"""
builtin_rules.py
----------------

Declarative built-in validation rules.

Each rule is a plain function of (entity, context) plus a ValidationRule
entry in BUILTIN_RULES giving its name, entity type and priority. Thresholds
and defaults come from context.config, so the same rule list serves every
configuration.

Severity and repairability are firm policy, set per rule:
    - critical: the record is wrong and must not be trusted as is
    - warning: the record is suspicious or stale
    - info: advisory only
"""
from datetime import datetime, timezone
from typing import Any, List, Optional

from caseledger.database.models.enums import (
    ApplicationStatus,
    CaseStatus,
    EntityType,
    StaffStatus,
)
from .accessors import ValidationContext
from .issues import IntegrityIssue, RepairAction, Severity
from .rules import ValidationRule


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (as SQLite returns them) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _is_before(earlier: Optional[datetime], later: Optional[datetime]) -> bool:
    """True when both are set and earlier < later."""
    if earlier is None or later is None:
        return False
    return _as_utc(earlier) < _as_utc(later)


def _issue(
    entity: Any,
    entity_type: EntityType,
    severity: Severity,
    message: str,
    field: Optional[str] = None,
    repair: Optional[RepairAction] = None,
) -> IntegrityIssue:
    return IntegrityIssue(
        severity=severity,
        entity_type=entity_type,
        entity_id=entity.id,
        message=message,
        field=field,
        can_auto_repair=repair is not None,
        repair_action=repair,
        guild_id=getattr(entity, "guild_id", None),
    )


def _is_active(staff: Any) -> bool:
    return staff.status == StaffStatus.ACTIVE.value


# ========================================
# Staff Rules
# ========================================

def check_staff_status(staff: Any, context: ValidationContext) -> List[IntegrityIssue]:
    """Status must be one of the configured valid statuses."""
    if staff.status in context.config.valid_staff_statuses:
        return []
    default = context.config.default_staff_status
    return [
        _issue(
            staff, EntityType.STAFF, Severity.CRITICAL,
            f"Invalid staff status: {staff.status}",
            field="status",
            repair=RepairAction.set_fields(EntityType.STAFF, staff.id, status=default),
        )
    ]


def check_promotion_history(staff: Any, context: ValidationContext) -> List[IntegrityIssue]:
    """No self-promotions, and no promoter credited twice."""
    issues: List[IntegrityIssue] = []
    seen_promoters = set()
    for promotion in staff.promotion_history or []:
        promoted_by = promotion.get("promoted_by") if isinstance(promotion, dict) else None
        if promoted_by is None:
            continue
        promoted_by = str(promoted_by)
        if promoted_by == staff.user_id:
            issues.append(
                _issue(
                    staff, EntityType.STAFF, Severity.CRITICAL,
                    "Circular reference detected in promotion history",
                    field="promotion_history",
                )
            )
            break
        if promoted_by in seen_promoters:
            issues.append(
                _issue(
                    staff, EntityType.STAFF, Severity.WARNING,
                    f"Duplicate promoter {promoted_by} detected in promotion history",
                    field="promotion_history",
                )
            )
        seen_promoters.add(promoted_by)
    return issues


def check_self_hire(staff: Any, context: ValidationContext) -> List[IntegrityIssue]:
    if staff.hired_by is not None and str(staff.hired_by) == staff.user_id:
        return [
            _issue(
                staff, EntityType.STAFF, Severity.WARNING,
                "Staff member hired by themselves",
                field="hired_by",
            )
        ]
    return []


def check_role_consistency(staff: Any, context: ValidationContext) -> List[IntegrityIssue]:
    """Junior roles may not lead cases."""
    if context.config.may_lead_cases(staff.role):
        return []
    led_cases = context.accessors.cases.find_by_lead_attorney(context.guild_id, staff.user_id)
    if not led_cases:
        return []
    return [
        _issue(
            staff, EntityType.STAFF, Severity.CRITICAL,
            f"Staff member with role {staff.role} cannot be lead attorney "
            f"on {len(led_cases)} case(s)",
            field="role",
        )
    ]


def check_workload_balance(staff: Any, context: ValidationContext) -> List[IntegrityIssue]:
    """Active staff should not carry more in-progress cases than their role allows."""
    if not _is_active(staff):
        return []
    assigned = context.accessors.cases.find_assigned_to_lawyer(context.guild_id, staff.user_id)
    in_progress = sum(1 for case in assigned if case.status == CaseStatus.IN_PROGRESS.value)
    limit = context.config.workload_limit_for(staff.role)
    if in_progress <= limit:
        return []
    return [
        _issue(
            staff, EntityType.STAFF, Severity.WARNING,
            f"Staff member has {in_progress} active cases (recommended maximum: {limit})",
            field="case_load",
        )
    ]


# ========================================
# Case Rules
# ========================================

def check_case_temporal_consistency(case: Any, context: ValidationContext) -> List[IntegrityIssue]:
    """Assigned lawyers must have been hired before the case; closing follows opening."""
    issues: List[IntegrityIssue] = []
    for lawyer_id in dict.fromkeys(case.assigned_lawyer_ids or []):
        lawyer = context.find_staff(lawyer_id)
        if lawyer is not None and _is_before(case.created_at, lawyer.hired_at):
            issues.append(
                _issue(
                    case, EntityType.CASE, Severity.CRITICAL,
                    f"Lawyer {lawyer_id} was hired after case was created",
                    field="assigned_lawyer_ids",
                    repair=RepairAction.remove_from_list(
                        EntityType.CASE, case.id, "assigned_lawyer_ids", lawyer_id
                    ),
                )
            )

    if _is_before(case.closed_at, case.created_at):
        issues.append(
            _issue(
                case, EntityType.CASE, Severity.CRITICAL,
                "Case closed date is before creation date",
                field="closed_at",
                repair=RepairAction.set_fields(EntityType.CASE, case.id, closed_at=None),
            )
        )
    return issues


def check_case_staff_assignments(case: Any, context: ValidationContext) -> List[IntegrityIssue]:
    """Lead attorney and assigned lawyers must be existing, active staff."""
    issues: List[IntegrityIssue] = []

    if case.lead_attorney_id is not None:
        lead = context.find_staff(case.lead_attorney_id)
        if lead is None:
            issues.append(
                _issue(
                    case, EntityType.CASE, Severity.CRITICAL,
                    f"Lead attorney {case.lead_attorney_id} not found in staff records",
                    field="lead_attorney_id",
                    repair=RepairAction.set_fields(
                        EntityType.CASE, case.id, lead_attorney_id=None
                    ),
                )
            )
        elif not _is_active(lead):
            issues.append(
                _issue(
                    case, EntityType.CASE, Severity.WARNING,
                    f"Lead attorney {case.lead_attorney_id} is not active (status: {lead.status})",
                    field="lead_attorney_id",
                )
            )

    for lawyer_id in dict.fromkeys(case.assigned_lawyer_ids or []):
        lawyer = context.find_staff(lawyer_id)
        if lawyer is None:
            issues.append(
                _issue(
                    case, EntityType.CASE, Severity.CRITICAL,
                    f"Assigned lawyer {lawyer_id} not found in staff records",
                    field="assigned_lawyer_ids",
                    repair=RepairAction.remove_from_list(
                        EntityType.CASE, case.id, "assigned_lawyer_ids", lawyer_id
                    ),
                )
            )
        elif not _is_active(lawyer):
            issues.append(
                _issue(
                    case, EntityType.CASE, Severity.WARNING,
                    f"Assigned lawyer {lawyer_id} is not active (status: {lawyer.status})",
                    field="assigned_lawyer_ids",
                )
            )
    return issues


# ========================================
# Application Rules
# ========================================

def check_application_integrity(application: Any, context: ValidationContext) -> List[IntegrityIssue]:
    issues: List[IntegrityIssue] = []
    if _is_before(application.reviewed_at, application.created_at):
        issues.append(
            _issue(
                application, EntityType.APPLICATION, Severity.CRITICAL,
                "Application reviewed before it was created",
                field="reviewed_at",
                repair=RepairAction.set_fields(
                    EntityType.APPLICATION, application.id, reviewed_at=None
                ),
            )
        )
    if application.status == ApplicationStatus.ACCEPTED.value and not application.reviewed_by:
        issues.append(
            _issue(
                application, EntityType.APPLICATION, Severity.WARNING,
                "Accepted application has no reviewer",
                field="reviewed_by",
            )
        )
    return issues


def check_application_job_reference(application: Any, context: ValidationContext) -> List[IntegrityIssue]:
    """The job must exist; pending applications on closed jobs are stale."""
    job = context.find_job(application.job_id)
    if job is None:
        return [
            _issue(
                application, EntityType.APPLICATION, Severity.CRITICAL,
                f"Referenced job {application.job_id} not found",
                field="job_id",
            )
        ]
    if not job.is_open and application.status == ApplicationStatus.PENDING.value:
        return [
            _issue(
                application, EntityType.APPLICATION, Severity.WARNING,
                f"Application is pending for closed job {job.id}",
                field="status",
                repair=RepairAction.set_fields(
                    EntityType.APPLICATION, application.id,
                    status=context.config.closed_job_application_status,
                    review_reason="Job closed before review",
                ),
            )
        ]
    return []


def check_application_reviewer(application: Any, context: ValidationContext) -> List[IntegrityIssue]:
    if application.reviewed_by and context.find_staff(application.reviewed_by) is None:
        return [
            _issue(
                application, EntityType.APPLICATION, Severity.WARNING,
                f"Reviewer {application.reviewed_by} not found in staff records",
                field="reviewed_by",
            )
        ]
    return []


# ========================================
# Job, Retainer, Feedback, Reminder Rules
# ========================================

def check_job_poster(job: Any, context: ValidationContext) -> List[IntegrityIssue]:
    if job.posted_by and context.find_staff(job.posted_by) is None:
        return [
            _issue(
                job, EntityType.JOB, Severity.INFO,
                f"Job poster {job.posted_by} not found in staff records",
                field="posted_by",
            )
        ]
    return []


def check_retainer_lawyer(retainer: Any, context: ValidationContext) -> List[IntegrityIssue]:
    """A retainer's lawyer must be an existing, active staff member."""
    if retainer.lawyer_id is None:
        return [
            _issue(
                retainer, EntityType.RETAINER, Severity.INFO,
                "Retainer has no lawyer assigned",
                field="lawyer_id",
            )
        ]
    lawyer = context.find_staff(retainer.lawyer_id)
    if lawyer is None:
        return [
            _issue(
                retainer, EntityType.RETAINER, Severity.CRITICAL,
                f"Lawyer {retainer.lawyer_id} not found in staff records",
                field="lawyer_id",
                repair=RepairAction.set_fields(EntityType.RETAINER, retainer.id, lawyer_id=None),
            )
        ]
    if not _is_active(lawyer):
        return [
            _issue(
                retainer, EntityType.RETAINER, Severity.WARNING,
                f"Lawyer {retainer.lawyer_id} is not active (status: {lawyer.status})",
                field="lawyer_id",
            )
        ]
    return []


def check_feedback_target(feedback: Any, context: ValidationContext) -> List[IntegrityIssue]:
    """Feedback about a departed staff member becomes firm-wide feedback."""
    if not feedback.target_staff_id or feedback.is_for_firm:
        return []
    if context.find_staff(feedback.target_staff_id) is not None:
        return []
    return [
        _issue(
            feedback, EntityType.FEEDBACK, Severity.WARNING,
            f"Target staff member {feedback.target_staff_id} not found",
            field="target_staff_id",
            repair=RepairAction.set_fields(
                EntityType.FEEDBACK, feedback.id,
                target_staff_id=None,
                target_staff_username=None,
                is_for_firm=True,
            ),
        )
    ]


def check_reminder_case(reminder: Any, context: ValidationContext) -> List[IntegrityIssue]:
    if reminder.case_id is None or context.find_case(reminder.case_id) is not None:
        return []
    return [
        _issue(
            reminder, EntityType.REMINDER, Severity.WARNING,
            f"Referenced case {reminder.case_id} not found",
            field="case_id",
            repair=RepairAction.set_fields(EntityType.REMINDER, reminder.id, case_id=None),
        )
    ]


# ========================================
# Deep Checks (guild-wide, not registered)
# ========================================

def check_lead_in_assigned(case: Any, context: ValidationContext) -> List[IntegrityIssue]:
    """An existing lead attorney should also be among the assigned lawyers."""
    lead_id = case.lead_attorney_id
    if lead_id is None or lead_id in (case.assigned_lawyer_ids or []):
        return []
    if context.find_staff(lead_id) is None:
        return []
    return [
        _issue(
            case, EntityType.CASE, Severity.WARNING,
            f"Lead attorney {lead_id} is not in assigned lawyers list",
            field="lead_attorney_id",
            repair=RepairAction.append_to_list(
                EntityType.CASE, case.id, "assigned_lawyer_ids", lead_id
            ),
        )
    ]


# ========================================
# Registry
# ========================================

def builtin_rules() -> List[ValidationRule]:
    """Fresh instances of every built-in rule."""
    return [
        ValidationRule(
            "staff-status-check",
            "Staff status must be a valid status",
            EntityType.STAFF, 100, check_staff_status,
        ),
        ValidationRule(
            "staff-promotion-history",
            "Promotion history has no self-promotions or repeated promoters",
            EntityType.STAFF, 100, check_promotion_history,
        ),
        ValidationRule(
            "staff-self-hire",
            "Staff members are not hired by themselves",
            EntityType.STAFF, 96, check_self_hire,
        ),
        ValidationRule(
            "staff-role-consistency",
            "Junior roles do not lead cases",
            EntityType.STAFF, 95, check_role_consistency,
            dependencies=("staff-status-check",),
        ),
        ValidationRule(
            "staff-workload-balance",
            "Active staff stay within their role's case load",
            EntityType.STAFF, 85, check_workload_balance,
            dependencies=("staff-status-check",),
            strict_only=True,
        ),
        ValidationRule(
            "case-temporal-consistency",
            "Case dates agree with staff hire dates",
            EntityType.CASE, 92, check_case_temporal_consistency,
        ),
        ValidationRule(
            "case-staff-assignments",
            "Lead and assigned lawyers reference active staff",
            EntityType.CASE, 90, check_case_staff_assignments,
            dependencies=("staff-status-check",),
        ),
        ValidationRule(
            "application-integrity",
            "Application review data is consistent",
            EntityType.APPLICATION, 88, check_application_integrity,
        ),
        ValidationRule(
            "application-job-reference",
            "Applications reference an existing job",
            EntityType.APPLICATION, 80, check_application_job_reference,
        ),
        ValidationRule(
            "application-reviewer-reference",
            "Application reviewers are staff",
            EntityType.APPLICATION, 75, check_application_reviewer,
        ),
        ValidationRule(
            "job-poster-reference",
            "Job postings were made by staff",
            EntityType.JOB, 70, check_job_poster,
            strict_only=True,
        ),
        ValidationRule(
            "retainer-lawyer-reference",
            "Retainers reference an active lawyer",
            EntityType.RETAINER, 70, check_retainer_lawyer,
            dependencies=("staff-status-check",),
        ),
        ValidationRule(
            "feedback-staff-reference",
            "Staff-targeted feedback references existing staff",
            EntityType.FEEDBACK, 65, check_feedback_target,
        ),
        ValidationRule(
            "reminder-case-reference",
            "Reminders reference an existing case",
            EntityType.REMINDER, 60, check_reminder_case,
        ),
    ]
