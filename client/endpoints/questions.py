"""Project Q&A threads."""

from typing import Any, Optional

from client.envelopes import normalize_list
from client.errors import raise_for_result
from client.endpoints import run_mutation
from client.models import Question
from client.session import ApiClient
from utils.notify import Notice, NotificationChannel
from utils.validation import validate_answer, validate_question


def list_questions(api: ApiClient, organization_id: str, skip: int = 0,
                   limit: int = 50) -> list[Question]:
    payload = api.get("/questions", {"organization_id": organization_id,
                                     "skip": skip, "limit": limit})
    return [Question.model_validate(item) for item in normalize_list(payload)]


def ask_question(api: ApiClient, project_reference_id: str, question_text: str,
                 asked_by: str, category: str = "General",
                 notifications: Optional[NotificationChannel] = None) -> Any:
    raise_for_result(validate_question(question_text))
    payload = {
        "project_reference_id": project_reference_id,
        "question_text": question_text.strip(),
        "asked_by": asked_by,
        "category": category or "General",
    }
    return run_mutation(
        lambda: api.post("/questions", payload),
        notifications,
        Notice.success("Question Submitted", "Your question has been sent to the municipality."),
        "Failed to submit question",
    )


def _answer_endpoint(question: Question) -> str:
    return f"/questions/{question.id}/answer"


def _answer_params(question: Question, user_id: str) -> dict[str, Any]:
    return {"project_id": question.project_id or "", "replied_by_user_id": user_id}


def _answer_payload(reply_text: str, document_links: str) -> dict[str, Any]:
    payload: dict[str, Any] = {"reply_text": reply_text.strip(), "attachments": []}
    if document_links and document_links.strip():
        payload["document_links"] = document_links.strip()
    return payload


def answer_question(api: ApiClient, question: Question, reply_text: str, user_id: str,
                    document_links: str = "",
                    notifications: Optional[NotificationChannel] = None) -> Any:
    """POST the first answer to *question*."""
    raise_for_result(validate_answer(reply_text))
    return run_mutation(
        lambda: api.post(_answer_endpoint(question), _answer_payload(reply_text, document_links),
                         params=_answer_params(question, user_id)),
        notifications,
        Notice.success("Answer Saved", "The answer has been saved successfully."),
        "Failed to save answer. Please try again.",
    )


def update_answer(api: ApiClient, question: Question, reply_text: str, user_id: str,
                  document_links: str = "",
                  notifications: Optional[NotificationChannel] = None) -> Any:
    """PUT a revised answer to *question*."""
    raise_for_result(validate_answer(reply_text))
    return run_mutation(
        lambda: api.put(_answer_endpoint(question), _answer_payload(reply_text, document_links),
                        params=_answer_params(question, user_id)),
        notifications,
        Notice.success("Answer Updated", "The answer has been updated successfully."),
        "Failed to update answer. Please try again.",
    )


def delete_answer(api: ApiClient, question: Question, user_id: str,
                  notifications: Optional[NotificationChannel] = None) -> Any:
    """DELETE the answer; the question goes back to open."""
    return run_mutation(
        lambda: api.delete(_answer_endpoint(question), _answer_params(question, user_id)),
        notifications,
        Notice.success("Answer Deleted", "The answer has been deleted. Question is now open."),
        "Failed to delete answer",
    )
