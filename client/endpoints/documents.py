"""Document and meeting requests between lenders and municipalities."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from client.envelopes import normalize_list
from client.errors import raise_for_result
from client.endpoints import run_mutation
from client.models import DocumentRequest
from client.session import ApiClient
from utils.filtering import DOCUMENT_REQUEST_SEARCH_FIELDS, filter_by_status, filter_results
from utils.notify import Notice, NotificationChannel
from utils.validation import validate_document_request

# Status tabs on the requests screens
OPEN_STATUSES = ("pending", "active")
CLOSED_STATUSES = ("completed",)


def request_documents(api: ApiClient, project_reference_id: str, description: str,
                      requested_by: str, now: Optional[datetime] = None,
                      notifications: Optional[NotificationChannel] = None) -> Any:
    """POST /document-requests after checking the description.

    Raises:
        FormValidationError: Reference missing or description under ten characters
    """
    raise_for_result(validate_document_request(description, project_reference_id,
                                               require_reference=True))
    requested_at = (now or datetime.now(timezone.utc)).isoformat()
    payload = {
        "project_reference_id": project_reference_id,
        "requested_by": requested_by,
        "description": description.strip(),
        "requested_at": requested_at,
    }
    return run_mutation(
        lambda: api.post("/document-requests", payload),
        notifications,
        Notice.success("Request Sent", "Your document request has been sent to the municipality."),
        "Failed to send document request",
    )


def list_document_requests(api: ApiClient, *, requested_by: Optional[str] = None,
                           project_reference_id: Optional[str] = None,
                           statuses: Optional[Iterable[str]] = None, search: str = "",
                           skip: int = 0, limit: int = 100) -> list[DocumentRequest]:
    """GET /document-requests, then narrow by status tab and search text."""
    params: dict[str, Any] = {"skip": skip, "limit": limit}
    if requested_by:
        params["requested_by"] = requested_by
    if project_reference_id:
        params["project_reference_id"] = project_reference_id
    payload = api.get("/document-requests", params, use_cache=False)
    requests_ = [DocumentRequest.model_validate(item) for item in normalize_list(payload)]
    requests_ = filter_by_status(requests_, statuses)
    return filter_results(requests_, search, DOCUMENT_REQUEST_SEARCH_FIELDS)


def download_file(api: ApiClient, file_id: int | str, dest: Path) -> Path:
    """Save GET /files/{id}/download to *dest*."""
    return api.download(f"/files/{file_id}/download", Path(dest))
