"""Funding commitments: create, revise, withdraw, and admin review."""

from typing import Any, Optional

from client.envelopes import normalize_list, normalize_record
from client.errors import FundingClientError, raise_for_result
from client.endpoints import run_mutation
from client.models import Commitment, Project
from client.session import ApiClient
from utils.funding import is_commitment_window_open
from utils.notify import Notice, NotificationChannel
from utils.strings import optional_float
from utils.validation import validate_commitment

WINDOW_CLOSED_MESSAGE = (
    "Commitments can be submitted, modified, or withdrawn only while the "
    "commitment window is open for this project."
)


class CommitmentWindowClosed(FundingClientError):
    """The project's fundraising window does not allow commitment changes."""


class CommitmentNotEditable(FundingClientError):
    """Only commitments still under review can be updated."""


def _require_open_window(project: Any) -> None:
    if not is_commitment_window_open(project):
        raise CommitmentWindowClosed(WINDOW_CLOSED_MESSAGE)


def _commitment(payload: Any) -> Optional[Commitment]:
    record = normalize_record(payload)
    return Commitment.model_validate(record) if record else None


def create_commitment(api: ApiClient, project: Project, *, amount: Any, interest_rate: Any,
                      tenure_months: Any, funding_mode: str, committed_by: str,
                      organization_id: str, organization_type: str = "lender",
                      terms: str = "",
                      notifications: Optional[NotificationChannel] = None) -> Optional[Commitment]:
    """Validate and POST a new commitment against *project*.

    Raises:
        FormValidationError: Amount, rate, tenure or mode is invalid
        CommitmentWindowClosed: The fundraising window is not open
        ApiRequestError: The server rejected the commitment
    """
    raise_for_result(validate_commitment(
        amount, interest_rate, tenure_months, funding_mode,
        minimum_amount=project.minimum_commitment_amount,
    ))
    _require_open_window(project)

    payload = {
        "project_reference_id": project.project_reference_id,
        "organization_type": organization_type,
        "organization_id": str(organization_id),
        "committed_by": committed_by,
        "amount": optional_float(amount),
        "currency": "INR",
        "funding_mode": funding_mode.lower(),
        "interest_rate": optional_float(interest_rate),
        "tenure_months": int(optional_float(tenure_months)),
        "terms_conditions_text": (terms or "").strip(),
        "created_by": committed_by,
    }
    return _commitment(run_mutation(
        lambda: api.post("/commitments", payload),
        notifications,
        Notice.success("Commitment Submitted", "Your funding commitment has been submitted for review."),
        "Failed to submit commitment",
    ))


def update_commitment(api: ApiClient, project: Project, commitment: Commitment, *,
                      amount: Any, interest_rate: Any, tenure_months: Any,
                      updated_by: str, terms: str = "",
                      notifications: Optional[NotificationChannel] = None) -> Optional[Commitment]:
    """PUT revised terms on a commitment that is still under review.

    The funding mode cannot change on update; the existing one is validated.
    """
    if not commitment.is_under_review:
        raise CommitmentNotEditable("You can update your commitment only while it is UNDER_REVIEW.")
    raise_for_result(validate_commitment(
        amount, interest_rate, tenure_months, commitment.funding_mode or "loan",
        minimum_amount=project.minimum_commitment_amount,
    ))
    _require_open_window(project)

    payload = {
        "amount": optional_float(amount),
        "interest_rate": optional_float(interest_rate),
        "tenure_months": int(optional_float(tenure_months)),
        "terms_conditions_text": (terms or "").strip(),
        "updated_by": updated_by,
    }
    return _commitment(run_mutation(
        lambda: api.put(f"/commitments/{commitment.id}", payload),
        notifications,
        Notice.success("Commitment Updated", "Your commitment has been updated."),
        "Failed to update commitment",
    ))


def withdraw_commitment(api: ApiClient, project: Project, commitment_id: int, updated_by: str,
                        notifications: Optional[NotificationChannel] = None) -> Any:
    _require_open_window(project)
    return run_mutation(
        lambda: api.post(f"/commitments/{commitment_id}/withdraw", {"updated_by": updated_by}),
        notifications,
        Notice.success("Commitment Withdrawn", "Your commitment has been withdrawn."),
        "Failed to withdraw commitment",
    )


def approve_commitment(api: ApiClient, commitment_id: int, approved_by: str,
                       notes: Optional[str] = None,
                       notifications: Optional[NotificationChannel] = None) -> Any:
    payload = {"approved_by": approved_by}
    if notes:
        payload["approval_notes"] = notes
    return run_mutation(
        lambda: api.post(f"/commitments/{commitment_id}/approve", payload),
        notifications,
        Notice.success("Commitment Approved", "The commitment has been approved successfully."),
        "Failed to approve commitment.",
    )


def reject_commitment(api: ApiClient, commitment_id: int, approved_by: str, reason: str,
                      notifications: Optional[NotificationChannel] = None) -> Any:
    """POST a rejection; a reason is mandatory."""
    if not (reason or "").strip():
        raise ValueError("A reason is required to reject a commitment")
    payload = {
        "approved_by": approved_by,
        "rejection_reason": reason.strip(),
        "rejection_notes": reason.strip(),
    }
    return run_mutation(
        lambda: api.post(f"/commitments/{commitment_id}/reject", payload),
        notifications,
        Notice.success("Commitment Rejected", "The commitment has been rejected."),
        "Failed to reject commitment.",
    )


def list_commitment_summaries(api: ApiClient, skip: int = 0, limit: int = 100) -> list[dict]:
    """Per-project commitment totals for the admin overview."""
    return normalize_list(api.get("/commitments/summary/projects-summary",
                                  {"skip": skip, "limit": limit}))


def list_commitments_by_project(api: ApiClient, project_reference_id: str,
                                include_documents: bool = True,
                                skip: int = 0) -> list[Commitment]:
    params = {
        "project_reference_id": project_reference_id,
        "include_documents": "true" if include_documents else "false",
        "skip": skip,
    }
    payload = api.get("/commitments/commitment-details/by-project", params, use_cache=False)
    return [Commitment.model_validate(item) for item in normalize_list(payload)]
