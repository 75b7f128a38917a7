"""Local form validation for the funding client.

Validation runs before any request is built. A form with error-level
issues is never sent; endpoint helpers raise FormValidationError carrying
the ValidationResult instead.

Each check records issues against the API field name it concerns, so
callers can show errors next to the field that caused them.
"""

from typing import List, Dict, Any, Optional

from utils.formatting import as_aware, format_currency, parse_datetime
from utils.config import KnownValues
from utils.patterns import EMAIL, PHONE_DIGITS
from utils.strings import digits_only, optional_float

MIN_DOCUMENT_REQUEST_LENGTH = 10


class ValidationIssue:
    """A single problem with one form field."""

    def __init__(self, field: str, severity: str, detail: str,
                 sample: Optional[Any] = None):
        """Initialize a validation issue.

        Args:
            field: API field name the issue concerns
            severity: 'error' blocks submission; 'warning' does not
            detail: Human-readable message
            sample: The offending value
        """
        self.field = field
        self.severity = severity
        self.detail = detail
        self.sample = sample

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "severity": self.severity,
            "detail": self.detail,
            "sample": str(self.sample) if self.sample is not None else None,
        }

    def __repr__(self) -> str:
        return (f"ValidationIssue(field={self.field}, severity={self.severity}, "
                f"detail={self.detail!r})")


class ValidationResult:
    """Collects the issues found while validating one form."""

    def __init__(self):
        self.issues: List[ValidationIssue] = []

    def add_issue(self, field: str, detail: str, severity: str = "error",
                  sample: Optional[Any] = None) -> None:
        self.issues.append(ValidationIssue(field, severity, detail, sample))

    def get_issues_by_severity(self, severity: str) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == severity]

    def error_count(self) -> int:
        return len(self.get_issues_by_severity("error"))

    def warning_count(self) -> int:
        return len(self.get_issues_by_severity("warning"))

    def is_valid(self) -> bool:
        """True if no error-level issues were found."""
        return self.error_count() == 0

    def field_errors(self) -> Dict[str, str]:
        """Map each field to its message; a later issue on a field wins."""
        errors: Dict[str, str] = {}
        for issue in self.get_issues_by_severity("error"):
            errors[issue.field] = issue.detail
        return errors

    def first_error(self) -> Optional[str]:
        errors = self.get_issues_by_severity("error")
        return errors[0].detail if errors else None

    def summary_text(self) -> str:
        """Generate human-readable validation summary."""
        lines = [f"Validation: {self.error_count()} error(s), {self.warning_count()} warning(s)"]
        for issue in self.issues:
            lines.append(f"  - [{issue.severity}] {issue.field}: {issue.detail}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.is_valid(),
            "errors": self.field_errors(),
            "issues": [i.to_dict() for i in self.issues],
        }


def _blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def _require(result: ValidationResult, data: Dict[str, Any], field: str, message: str) -> bool:
    if _blank(data.get(field)):
        result.add_issue(field, message)
        return False
    return True


def _check_date_order(result: ValidationResult, start: Any, end: Any,
                      field: str, message: str) -> None:
    begin = parse_datetime(start)
    finish = parse_datetime(end)
    if begin is None or finish is None:
        return
    if as_aware(begin) >= as_aware(finish):
        result.add_issue(field, message, sample=end)


def validate_project_form(form: Any) -> ValidationResult:
    """Validate a project create/resubmit form.

    Args:
        form: ProjectForm or dict keyed by API field names.

    Returns:
        ValidationResult; amounts are compared as parsed numbers.
    """
    data = form.model_dump() if hasattr(form, "model_dump") else dict(form)
    result = ValidationResult()

    _require(result, data, "title", "Project title is required")
    _require(result, data, "organization_id", "Municipality is required")
    _require(result, data, "contact_person", "Contact person name is required")
    _require(result, data, "contact_person_designation",
             "Contact person designation is required")

    if _require(result, data, "contact_person_email", "Contact person email is required"):
        if not EMAIL.match(str(data["contact_person_email"]).strip()):
            result.add_issue("contact_person_email", "Please enter a valid email address",
                             sample=data["contact_person_email"])

    if _require(result, data, "contact_person_phone", "Contact person phone is required"):
        if not PHONE_DIGITS.match(digits_only(str(data["contact_person_phone"]))):
            result.add_issue("contact_person_phone", "Please enter a valid 10-digit phone number",
                             sample=data["contact_person_phone"])

    # Overview
    _require(result, data, "category", "Project category is required")
    _require(result, data, "project_stage", "Project stage is required")
    _require(result, data, "description", "Project description is required")
    _require(result, data, "start_date", "Start date is required")
    _require(result, data, "end_date", "End date is required")
    _check_date_order(result, data.get("start_date"), data.get("end_date"),
                      "end_date", "End date must be after start date")

    # Financials
    cost = optional_float(data.get("total_project_cost"))
    if cost is None or cost <= 0:
        result.add_issue("total_project_cost", "Total project cost must be greater than 0",
                         sample=data.get("total_project_cost"))
    requirement = optional_float(data.get("funding_requirement"))
    if requirement is None or requirement <= 0:
        result.add_issue("funding_requirement", "Funding requirement must be greater than 0",
                         sample=data.get("funding_requirement"))
    if requirement is not None and cost is not None and requirement > cost:
        result.add_issue("funding_requirement",
                         "Funding requirement cannot exceed total project cost",
                         sample=requirement)
    secured = optional_float(data.get("already_secured_funds") or "0")
    if secured is not None and requirement is not None and secured > requirement:
        result.add_issue("already_secured_funds",
                         "Secured funds cannot exceed funding requirement", sample=secured)

    # Fundraising window
    _require(result, data, "fundraising_start_date", "Fundraising start date is required")
    _require(result, data, "fundraising_end_date", "Fundraising end date is required")
    _check_date_order(result, data.get("fundraising_start_date"),
                      data.get("fundraising_end_date"), "fundraising_end_date",
                      "Fundraising end date must be after start date")

    # Location
    _require(result, data, "state", "State is required")
    _require(result, data, "city", "City is required")
    _require(result, data, "ward", "Ward is required")

    return result


def validate_commitment(amount: Any, interest_rate: Any, tenure_months: Any,
                        funding_mode: Optional[str],
                        minimum_amount: Any = None) -> ValidationResult:
    """Validate a funding commitment before create or update.

    Rules: amount > 0 and at least *minimum_amount* when one is set;
    0 < interest_rate <= 100; tenure a positive whole number of months;
    funding_mode one of loan, grant, csr.
    """
    result = ValidationResult()

    if _blank(amount) or _blank(interest_rate) or _blank(tenure_months) or _blank(funding_mode):
        result.add_issue("form", "Please fill in all required fields")

    value = optional_float(amount)
    if not _blank(amount):
        if value is None or value <= 0:
            result.add_issue("amount", "Please enter a valid commitment amount", sample=amount)
        else:
            minimum = optional_float(minimum_amount)
            if minimum and value < minimum:
                result.add_issue("amount",
                                 f"Commitment amount must be at least {format_currency(minimum)}",
                                 sample=amount)

    if not _blank(interest_rate):
        rate = optional_float(interest_rate)
        if rate is None or rate <= 0 or rate > 100:
            result.add_issue("interest_rate",
                             "Please enter a valid interest rate between 0 and 100",
                             sample=interest_rate)

    if not _blank(tenure_months):
        tenure = optional_float(tenure_months)
        if tenure is None or int(tenure) <= 0:
            result.add_issue("tenure_months", "Please enter a valid tenure (in months)",
                             sample=tenure_months)

    if not _blank(funding_mode) and not KnownValues.is_valid_funding_mode(funding_mode):
        result.add_issue("funding_mode", "Funding mode must be one of: "
                         + ", ".join(sorted(KnownValues.FUNDING_MODES)), sample=funding_mode)

    return result


def validate_document_request(description: Optional[str],
                              project_reference_id: Optional[str] = None,
                              require_reference: bool = False) -> ValidationResult:
    """Check a document request: a description of at least ten characters.

    With ``require_reference`` the project reference must be present too.
    """
    result = ValidationResult()
    if require_reference and _blank(project_reference_id):
        result.add_issue("project_reference_id", "Project reference ID is required")
    text = (description or "").strip()
    if not text:
        result.add_issue("description", "Description is required")
    elif len(text) < MIN_DOCUMENT_REQUEST_LENGTH:
        result.add_issue("description",
                         f"Description must be at least {MIN_DOCUMENT_REQUEST_LENGTH} characters",
                         sample=text)
    return result


def validate_note(title: Optional[str], content: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    if _blank(title):
        result.add_issue("title", "Note title is required")
    if _blank(content):
        result.add_issue("content", "Note content is required")
    return result


def validate_answer(reply_text: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    if _blank(reply_text):
        result.add_issue("reply_text", "Answer text is required")
    return result


def validate_question(question_text: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    if _blank(question_text):
        result.add_issue("question_text", "Question text is required")
    return result


def validate_rejection(reject_note: Optional[str]) -> ValidationResult:
    """Rejecting a project needs remarks for the municipality; approval does not."""
    result = ValidationResult()
    if _blank(reject_note):
        result.add_issue("reject_note", "Remarks are required when rejecting a project.")
    return result
