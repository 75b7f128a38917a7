"""Project drafts: saved, partially filled project forms."""

from functools import partial
from typing import Any, Optional

from client.envelopes import normalize_list, normalize_record
from client.errors import raise_for_result
from client.endpoints import run_mutation
from client.models import ProjectForm
from client.session import ApiClient
from utils.notify import Notice, NotificationChannel
from utils.validation import validate_project_form


def list_drafts(api: ApiClient) -> list[dict]:
    return normalize_list(api.get("/project-drafts/", use_cache=False))


def get_draft(api: ApiClient, draft_id: int | str) -> Optional[ProjectForm]:
    """Load a draft as a ProjectForm ready for editing."""
    record = normalize_record(api.get(f"/project-drafts/{draft_id}", use_cache=False))
    return ProjectForm.from_record(record) if record else None


def save_draft(api: ApiClient, form: ProjectForm, draft_id: Optional[int | str] = None,
               notifications: Optional[NotificationChannel] = None) -> Optional[str]:
    """Create (POST) or update (PUT) a draft and return its id.

    Drafts are not validated; incomplete forms are the point of a draft.
    """
    payload = form.to_payload()
    if draft_id:
        call = partial(api.put, f"/project-drafts/{draft_id}", payload)
    else:
        call = partial(api.post, "/project-drafts/", payload)
    response = run_mutation(
        call,
        notifications,
        Notice.success("Draft Saved", "Your project draft has been saved successfully."),
        "Failed to save draft. Please try again.",
    )
    record = normalize_record(response) or {}
    saved_id = record.get("id") or draft_id
    return str(saved_id) if saved_id else None


def submit_draft(api: ApiClient, draft_id: int | str, form: Optional[ProjectForm] = None,
                 notifications: Optional[NotificationChannel] = None) -> Any:
    """POST /project-drafts/{id}/submit, turning the draft into a project.

    When *form* is given it is validated first and nothing is sent if it
    fails.
    """
    if form is not None:
        raise_for_result(validate_project_form(form))
    return run_mutation(
        lambda: api.post(f"/project-drafts/{draft_id}/submit"),
        notifications,
        Notice.success("Project Submitted",
                       "Your project has been submitted for validation. It will be reviewed by an admin."),
        "Failed to submit project. Please try again.",
    )


def delete_draft(api: ApiClient, draft_id: int | str,
                 notifications: Optional[NotificationChannel] = None) -> Any:
    return run_mutation(
        lambda: api.delete(f"/project-drafts/{draft_id}"),
        notifications,
        Notice.success("Draft Deleted", "The draft has been deleted."),
        "Failed to delete draft",
    )
