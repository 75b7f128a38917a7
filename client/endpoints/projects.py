"""Project listing, lookup and lifecycle calls."""

import logging
from typing import Any, Optional

from client.envelopes import normalize_list, normalize_record
from client.errors import ApiRequestError, AuthenticationError, raise_for_result
from client.endpoints import run_mutation, to_options
from client.models import AdvancedFilterState, FilterState, Project, ProjectForm, ValueRanges
from client.session import ApiClient
from utils.config import KnownValues
from utils.notify import Notice, NotificationChannel
from utils.query import (
    build_advanced_query_params,
    build_project_query_params,
    is_reference_id,
    parse_value_ranges,
)
from utils.validation import validate_project_form, validate_rejection

logger = logging.getLogger(__name__)


def _projects(payload: Any) -> list[Project]:
    return [Project.model_validate(item) for item in normalize_list(payload)]


def list_projects(api: ApiClient, filters: FilterState | AdvancedFilterState,
                  value_ranges: Optional[ValueRanges] = None, *,
                  user_id: Optional[str] = None, skip: int = 0,
                  limit: Optional[int] = None) -> list[Project]:
    """GET /projects with params built from either filter state.

    A FilterState uses the live-listing builder (page size 10 by default);
    an AdvancedFilterState uses the value-range builder (page size 100).
    """
    if isinstance(filters, AdvancedFilterState):
        params = build_advanced_query_params(
            filters, value_ranges, skip=skip,
            limit=limit if limit is not None else KnownValues.MAX_PAGE_SIZE,
        )
    else:
        params = build_project_query_params(
            filters, user_id=user_id, skip=skip,
            limit=limit if limit is not None else 10,
        )
    return _projects(api.get("/projects", params))


def get_by_reference(api: ApiClient, reference_id: str,
                     committed_by: Optional[str] = None) -> Optional[Project]:
    """GET /projects/reference/{id}; *committed_by* adds the user's commitment."""
    params = {"committed_by": committed_by} if committed_by else None
    record = normalize_record(api.get(f"/projects/reference/{reference_id}", params))
    return Project.model_validate(record) if record else None


def search_projects(api: ApiClient, text: str, *, user_id: Optional[str] = None,
                    filters: Optional[FilterState] = None,
                    limit: Optional[int] = None) -> list[Project]:
    """Search by free text, taking the exact-reference shortcut when possible.

    Text shaped like ``PROJ-2025-00037`` is looked up directly; if that
    lookup fails for any reason other than authentication, the search falls
    back to the listing endpoint.
    """
    text = (text or "").strip()
    if is_reference_id(text):
        try:
            project = get_by_reference(api, text)
            return [project] if project else []
        except AuthenticationError:
            raise
        except ApiRequestError as e:
            logger.info("Reference lookup for %s failed (%s); falling back to search", text, e)

    base = filters or FilterState()
    return list_projects(api, base.model_copy(update={"search": text}),
                         user_id=user_id, limit=limit)


def get_value_ranges(api: ApiClient) -> ValueRanges:
    """Observed slider bounds, in crores; defaults if the call fails."""
    try:
        return parse_value_ranges(api.get("/projects/value-ranges"))
    except AuthenticationError:
        raise
    except ApiRequestError as e:
        logger.warning("Value ranges unavailable (%s); using defaults", e)
        return ValueRanges()


def get_project(api: ApiClient, project_id: int | str,
                include_documents: bool = False) -> Optional[Project]:
    params = {"include_documents": "true"} if include_documents else None
    record = normalize_record(api.get(f"/projects/{project_id}", params))
    return Project.model_validate(record) if record else None


def list_fully_funded(api: ApiClient, skip: int = 0, limit: int = 100) -> list[Project]:
    return _projects(api.get("/projects/fully-funded", {"skip": skip, "limit": limit}))


def list_funded_by_user(api: ApiClient, user_id: str, skip: int = 0,
                        limit: int = 100) -> list[Project]:
    """Projects the user has committed funds to."""
    params = {"committed_by": user_id, "skip": skip, "limit": limit}
    return _projects(api.get("/projects/funded-by-user", params))


def list_states(api: ApiClient) -> list[dict[str, str]]:
    return to_options(api.get("/projects/states"), ("state", "name"))


def list_credit_ratings(api: ApiClient) -> list[dict[str, str]]:
    return to_options(
        api.get("/projects/municipality-credit-ratings"),
        ("rating", "credit_rating", "name"),
    )


def create_project(api: ApiClient, form: ProjectForm,
                   notifications: Optional[NotificationChannel] = None) -> Optional[Project]:
    """Validate *form* and POST /projects/.

    Raises:
        FormValidationError: If the form is invalid; nothing is sent
        ApiRequestError: If the server rejects the project
    """
    raise_for_result(validate_project_form(form))
    payload = run_mutation(
        lambda: api.post("/projects/", form.to_payload()),
        notifications,
        Notice.success("Project Created", "Your project has been submitted for validation."),
        "Failed to create project",
    )
    record = normalize_record(payload)
    return Project.model_validate(record) if record else None


def resubmit_project(api: ApiClient, project_id: int | str, form: ProjectForm,
                     notifications: Optional[NotificationChannel] = None) -> Any:
    """Validate *form* and POST /projects/{id}/resubmit."""
    if not project_id:
        raise ValueError("Project ID is required for resubmission")
    raise_for_result(validate_project_form(form))
    return run_mutation(
        lambda: api.post(f"/projects/{project_id}/resubmit", form.to_payload()),
        notifications,
        Notice.success("Project Resubmitted", "Your project has been resubmitted for validation."),
        "Failed to resubmit project",
    )


def approve_project(api: ApiClient, project_id: int | str, approved_by: str,
                    admin_notes: str = "",
                    notifications: Optional[NotificationChannel] = None) -> Any:
    """POST /projects/{id}/approve on behalf of the reviewing admin."""
    if not project_id:
        raise ValueError("Project ID is required for approval")
    body = {"approved_by": approved_by, "admin_notes": (admin_notes or "").strip()}
    return run_mutation(
        lambda: api.post(f"/projects/{project_id}/approve", body),
        notifications,
        Notice.success("Project Approved", "The project has been approved successfully."),
        "Failed to approve project.",
    )


def reject_project(api: ApiClient, project_id: int | str, approved_by: str,
                   reject_note: str,
                   notifications: Optional[NotificationChannel] = None) -> Any:
    """POST /projects/{id}/reject, sending the project back to the municipality.

    Raises:
        FormValidationError: If *reject_note* is blank; nothing is sent
    """
    if not project_id:
        raise ValueError("Project ID is required for rejection")
    raise_for_result(validate_rejection(reject_note))
    body = {"reject_note": reject_note.strip(), "approved_by": approved_by}
    return run_mutation(
        lambda: api.post(f"/projects/{project_id}/reject", body),
        notifications,
        Notice.success("Project Rejected",
                       "The project has been rejected and sent back to the municipality."),
        "Failed to reject project.",
    )
