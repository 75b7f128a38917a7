"""
Tests for client/endpoints — request shapes, local guards and notices.

Every call goes through the mocked session in conftest.py, so each test
can assert the exact method, URL, params and JSON body that would be sent.
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from client.endpoints import (
    commitments, documents, drafts, favorites, master, notes, projects, questions,
)
from client.errors import ApiRequestError, AuthenticationError, FormValidationError
from client.models import (
    AdvancedFilterState,
    Commitment,
    FilterState,
    ProjectForm,
    Question,
    ValueRanges,
)
from utils.notify import NotificationChannel

BASE_URL = "http://api.test/api/v1"
REF = "PROJ-2025-00037"


@pytest.fixture
def channel():
    return NotificationChannel()


@pytest.fixture
def draft_form():
    return ProjectForm(
        title="Ring Road Phase I",
        organization_id="MUN-NGP",
        contact_person="R. Deshmukh",
        contact_person_designation="City Engineer",
        contact_person_email="rd@nagpur.gov.in",
        contact_person_phone="9123456780",
        category="Transport",
        project_stage="Detailed Design",
        description="Four-lane ring road with service lanes.",
        start_date="2025-06-01",
        end_date="2028-05-31",
        total_project_cost="2000000000",
        funding_requirement="1500000000",
        already_secured_funds="500000000",
        fundraising_start_date="2025-01-15",
        fundraising_end_date="2025-09-30",
        state="Maharashtra",
        city="Nagpur",
        ward="Ward 4",
    )


# ── Projects ──────────────────────────────────────────────────────────────────

class TestListProjects:
    def test_live_listing_params(self, api, respond, sent):
        respond(200, {"data": [{"project_reference_id": REF, "title": "Smart Water Grid"}]})
        result = projects.list_projects(
            api, FilterState(categories=["Water"], funding_range=(10, 1000)), user_id="u1",
        )
        method, url, kwargs = sent()
        assert (method, url) == ("GET", f"{BASE_URL}/projects")
        assert kwargs["params"] == {
            "skip": 0, "limit": 10, "user_id": "u1", "categories": "Water",
            "status": "active", "min_funding": 100_000_000, "max_funding": 10_000_000_000,
        }
        assert result[0].project_reference_id == REF

    def test_advanced_listing_uses_page_of_100(self, api, respond, sent):
        respond(200, [])
        projects.list_projects(api, AdvancedFilterState(location="Kerala"), ValueRanges())
        assert sent()[2]["params"] == {"skip": 0, "limit": 100, "states": "Kerala"}


class TestSearchProjects:
    def test_reference_fast_path(self, api, respond, sent):
        respond(200, {"data": {"project_reference_id": REF, "title": "Smart Water Grid"}})
        result = projects.search_projects(api, f"  {REF} ")
        assert sent()[1] == f"{BASE_URL}/projects/reference/{REF}"
        assert [p.project_reference_id for p in result] == [REF]

    def test_reference_miss_falls_back_to_search(self, api, session, response_factory,
                                                 respond_seq, sent):
        respond_seq(
            response_factory(404, {"detail": "Not found"}),
            response_factory(200, [{"project_reference_id": REF}]),
        )
        result = projects.search_projects(api, REF, user_id="u1")
        assert session.request.call_count == 2
        method, url, kwargs = sent()
        assert url == f"{BASE_URL}/projects"
        assert kwargs["params"]["search"] == REF
        assert len(result) == 1

    def test_auth_failure_not_swallowed(self, api, respond):
        respond(401, {"detail": "Token expired"})
        with pytest.raises(AuthenticationError):
            projects.search_projects(api, REF)

    def test_free_text_goes_to_listing(self, api, respond, sent):
        respond(200, [])
        projects.search_projects(api, "water")
        assert sent()[1] == f"{BASE_URL}/projects"
        assert sent()[2]["params"]["search"] == "water"


class TestProjectLookups:
    def test_value_ranges_parsed(self, api, respond):
        respond(200, {"data": {"min_funding_requirement": 0, "max_funding_requirement": 5_000_000_000}})
        ranges = projects.get_value_ranges(api)
        assert ranges.fund_requirement.max == 500

    def test_value_ranges_default_on_failure(self, api, respond):
        respond(500)
        assert projects.get_value_ranges(api) == ValueRanges()

    def test_value_ranges_auth_failure_raises(self, api, respond):
        respond(401)
        with pytest.raises(AuthenticationError):
            projects.get_value_ranges(api)

    def test_get_project_with_documents(self, api, respond, sent):
        respond(200, {"id": 37, "title": "Smart Water Grid"})
        project = projects.get_project(api, 37, include_documents=True)
        assert sent()[1] == f"{BASE_URL}/projects/37"
        assert sent()[2]["params"] == {"include_documents": "true"}
        assert project.id == 37

    def test_get_by_reference_with_commitment(self, api, respond, sent):
        respond(200, {"project_reference_id": REF})
        projects.get_by_reference(api, REF, committed_by="u1")
        assert sent()[2]["params"] == {"committed_by": "u1"}

    def test_funded_by_user(self, api, respond, sent):
        respond(200, [])
        projects.list_funded_by_user(api, "u1")
        assert sent()[1] == f"{BASE_URL}/projects/funded-by-user"
        assert sent()[2]["params"]["committed_by"] == "u1"

    def test_fully_funded(self, api, respond, sent):
        respond(200, [])
        projects.list_fully_funded(api)
        assert sent()[1] == f"{BASE_URL}/projects/fully-funded"

    def test_states_options(self, api, respond):
        respond(200, ["Kerala", {"state": "Goa"}, {"value": "MH", "label": "Maharashtra"}, ""])
        assert projects.list_states(api) == [
            {"value": "Kerala", "label": "Kerala"},
            {"value": "Goa", "label": "Goa"},
            {"value": "MH", "label": "Maharashtra"},
        ]

    def test_credit_rating_options(self, api, respond, sent):
        respond(200, {"data": [{"credit_rating": "AA+"}]})
        assert projects.list_credit_ratings(api) == [{"value": "AA+", "label": "AA+"}]
        assert sent()[1] == f"{BASE_URL}/projects/municipality-credit-ratings"


class TestCreateProject:
    def test_invalid_form_sends_nothing(self, api, session, channel):
        with pytest.raises(FormValidationError) as exc:
            projects.create_project(api, ProjectForm(title="Only a title"), channel)
        assert "organization_id" in exc.value.result.field_errors()
        session.request.assert_not_called()
        assert channel.drain() == []

    def test_payload_and_notice(self, api, respond, sent, channel, draft_form):
        respond(201, {"data": {"id": 90, "project_reference_id": "PROJ-2025-00090"}})
        project = projects.create_project(api, draft_form, channel)
        method, url, kwargs = sent()
        assert (method, url) == ("POST", f"{BASE_URL}/projects/")
        body = kwargs["json"]
        assert body["project_stage"] == "detailed_design"
        assert body["commitment_gap"] == 1_000_000_000
        assert body["fundraising_start_date"] == "2025-01-15T00:00:00Z"
        assert body["fundraising_end_date"] == "2025-09-30T23:59:59Z"
        assert project.project_reference_id == "PROJ-2025-00090"
        notices = channel.drain()
        assert [n.severity for n in notices] == ["success"]

    def test_resubmit_needs_id(self, api, draft_form):
        with pytest.raises(ValueError):
            projects.resubmit_project(api, "", draft_form)

    def test_resubmit(self, api, respond, sent, draft_form):
        respond(200, {"status": "pending_validation"})
        projects.resubmit_project(api, 90, draft_form)
        assert sent()[1] == f"{BASE_URL}/projects/90/resubmit"


class TestProjectReview:
    def test_approve(self, api, respond, sent, channel):
        respond(200, {"status": "approved"})
        projects.approve_project(api, 90, "admin7", "  Looks complete ", channel)
        method, url, kwargs = sent()
        assert (method, url) == ("POST", f"{BASE_URL}/projects/90/approve")
        assert kwargs["json"] == {"approved_by": "admin7", "admin_notes": "Looks complete"}
        assert [n.title for n in channel.drain()] == ["Project Approved"]

    def test_approve_without_notes(self, api, respond, sent):
        respond(200, {"status": "approved"})
        projects.approve_project(api, 90, "admin7")
        assert sent()[2]["json"]["admin_notes"] == ""

    def test_approve_needs_id(self, api):
        with pytest.raises(ValueError):
            projects.approve_project(api, None, "admin7")

    def test_reject(self, api, respond, sent, channel):
        respond(200, {"status": "rejected"})
        projects.reject_project(api, 90, "admin7", " Ward boundaries missing ", channel)
        method, url, kwargs = sent()
        assert (method, url) == ("POST", f"{BASE_URL}/projects/90/reject")
        assert kwargs["json"] == {"reject_note": "Ward boundaries missing",
                                  "approved_by": "admin7"}
        assert [n.title for n in channel.drain()] == ["Project Rejected"]

    @pytest.mark.parametrize("note", ["", "   ", None])
    def test_reject_needs_remarks(self, api, session, note):
        with pytest.raises(FormValidationError) as exc:
            projects.reject_project(api, 90, "admin7", note)
        assert exc.value.result.field_errors() == {
            "reject_note": "Remarks are required when rejecting a project.",
        }
        session.request.assert_not_called()

    def test_reject_server_error(self, api, respond, channel):
        respond(409, {"detail": "Project is not pending validation"})
        with pytest.raises(ApiRequestError):
            projects.reject_project(api, 90, "admin7", "Incomplete DPR", channel)
        notice = channel.drain()[0]
        assert notice.severity == "error"
        assert notice.body == "Project is not pending validation"


class TestMasterLookups:
    @pytest.mark.parametrize("call,path", [
        (master.list_project_categories, "/master/project-categories"),
        (master.list_project_stages, "/master/project-stages"),
        (master.list_funding_types, "/master/funding-types"),
        (master.list_implementation_modes, "/master/mode-of-implementations"),
        (master.list_ownerships, "/master/ownerships"),
    ])
    def test_paths(self, api, respond, sent, call, path):
        respond(200, {"data": [{"id": 3, "name": "Water Supply"}]})
        assert call(api) == [{"value": "3", "label": "Water Supply"}]
        assert sent()[1] == f"{BASE_URL}{path}"

    def test_option_shapes(self, api, respond):
        respond(200, [
            {"id": 0, "name": "Municipal"},
            {"name": "PPP"},
            {"value": "hybrid", "label": "Hybrid Annuity", "id": 9},
            "Grant",
            {"description": "no name or id"},
        ])
        assert master.list_ownerships(api) == [
            {"value": "0", "label": "Municipal"},
            {"value": "PPP", "label": "PPP"},
            {"value": "hybrid", "label": "Hybrid Annuity"},
            {"value": "Grant", "label": "Grant"},
        ]


# ── Commitments ───────────────────────────────────────────────────────────────

class TestCreateCommitment:
    def test_payload(self, api, respond, sent, live_project, channel):
        respond(201, {"data": {"id": 12, "status": "under_review", "amount": "5000000.00"}})
        commitment = commitments.create_commitment(
            api, live_project, amount="5000000", interest_rate="8.5", tenure_months="60",
            funding_mode="Loan", committed_by="u1", organization_id=7,
            terms="  Quarterly repayment ", notifications=channel,
        )
        method, url, kwargs = sent()
        assert (method, url) == ("POST", f"{BASE_URL}/commitments")
        assert kwargs["json"] == {
            "project_reference_id": REF,
            "organization_type": "lender",
            "organization_id": "7",
            "committed_by": "u1",
            "amount": 5_000_000.0,
            "currency": "INR",
            "funding_mode": "loan",
            "interest_rate": 8.5,
            "tenure_months": 60,
            "terms_conditions_text": "Quarterly repayment",
            "created_by": "u1",
        }
        assert commitment.id == 12
        assert commitment.is_under_review
        assert channel.drain()[0].title == "Commitment Submitted"

    def test_below_minimum_blocked(self, api, session, live_project):
        with pytest.raises(FormValidationError, match="at least"):
            commitments.create_commitment(
                api, live_project, amount="500000", interest_rate="8", tenure_months="12",
                funding_mode="loan", committed_by="u1", organization_id="7",
            )
        session.request.assert_not_called()

    def test_closed_window_blocked(self, api, session, closed_project):
        with pytest.raises(commitments.CommitmentWindowClosed):
            commitments.create_commitment(
                api, closed_project, amount="5000000", interest_rate="8", tenure_months="12",
                funding_mode="loan", committed_by="u1", organization_id="7",
            )
        session.request.assert_not_called()

    def test_server_error_published_and_raised(self, api, respond, live_project, channel):
        respond(400, {"message": "Duplicate commitment"})
        with pytest.raises(ApiRequestError):
            commitments.create_commitment(
                api, live_project, amount="5000000", interest_rate="8", tenure_months="12",
                funding_mode="grant", committed_by="u1", organization_id="7",
                notifications=channel,
            )
        notice = channel.drain()[0]
        assert notice.severity == "error"
        assert notice.body == "Duplicate commitment"

    def test_fallback_error_body(self, api, respond, live_project, channel):
        respond(502)
        with pytest.raises(ApiRequestError):
            commitments.create_commitment(
                api, live_project, amount="5000000", interest_rate="8", tenure_months="12",
                funding_mode="csr", committed_by="u1", organization_id="7",
                notifications=channel,
            )
        assert channel.drain()[0].body == "Failed to submit commitment"


class TestCommitmentLifecycle:
    def test_update_requires_under_review(self, api, session, live_project):
        approved = Commitment(id=12, status="approved", funding_mode="loan")
        with pytest.raises(commitments.CommitmentNotEditable):
            commitments.update_commitment(
                api, live_project, approved, amount="5000000", interest_rate="8",
                tenure_months="12", updated_by="u1",
            )
        session.request.assert_not_called()

    def test_update(self, api, respond, sent, live_project):
        respond(200, {"id": 12, "status": "under_review"})
        pending = Commitment(id=12, status="UNDER_REVIEW", funding_mode="loan")
        commitments.update_commitment(
            api, live_project, pending, amount="6000000", interest_rate="9",
            tenure_months="36", updated_by="u1",
        )
        method, url, kwargs = sent()
        assert (method, url) == ("PUT", f"{BASE_URL}/commitments/12")
        assert kwargs["json"]["amount"] == 6_000_000.0
        assert kwargs["json"]["updated_by"] == "u1"

    def test_withdraw(self, api, respond, sent, live_project):
        respond(200, {"status": "withdrawn"})
        commitments.withdraw_commitment(api, live_project, 12, "u1")
        assert sent()[1] == f"{BASE_URL}/commitments/12/withdraw"
        assert sent()[2]["json"] == {"updated_by": "u1"}

    def test_withdraw_closed_window(self, api, session, closed_project):
        with pytest.raises(commitments.CommitmentWindowClosed):
            commitments.withdraw_commitment(api, closed_project, 12, "u1")
        session.request.assert_not_called()

    def test_approve_with_notes(self, api, respond, sent):
        respond(200, {})
        commitments.approve_commitment(api, 12, "admin1", notes="Looks fine")
        assert sent()[1] == f"{BASE_URL}/commitments/12/approve"
        assert sent()[2]["json"] == {"approved_by": "admin1", "approval_notes": "Looks fine"}

    def test_reject_requires_reason(self, api, session):
        with pytest.raises(ValueError):
            commitments.reject_commitment(api, 12, "admin1", "   ")
        session.request.assert_not_called()

    def test_reject(self, api, respond, sent):
        respond(200, {})
        commitments.reject_commitment(api, 12, "admin1", " Rate too high ")
        assert sent()[2]["json"]["rejection_reason"] == "Rate too high"

    def test_by_project_never_cached(self, api, session, respond, sent):
        respond(200, {"data": [{"id": 1, "amount": "100"}]})
        commitments.list_commitments_by_project(api, REF)
        result = commitments.list_commitments_by_project(api, REF)
        assert session.request.call_count == 2
        assert sent()[2]["params"]["include_documents"] == "true"
        assert result[0].amount == 100.0

    def test_summaries(self, api, respond, sent):
        respond(200, [{"project_reference_id": REF}])
        assert commitments.list_commitment_summaries(api) == [{"project_reference_id": REF}]
        assert sent()[1] == f"{BASE_URL}/commitments/summary/projects-summary"


# ── Favorites ─────────────────────────────────────────────────────────────────

class TestFavorites:
    def test_toggle_adds(self, api, respond, sent):
        respond(201, {"id": 1})
        assert favorites.toggle_favorite(api, {"project_reference_id": REF, "is_favorite": False},
                                         "u1", 7) is True
        method, url, kwargs = sent()
        assert (method, url) == ("POST", f"{BASE_URL}/project-favorites/")
        assert kwargs["json"] == {
            "project_reference_id": REF, "organization_id": "7",
            "user_id": "u1", "created_by": "u1",
        }

    def test_toggle_removes(self, api, respond, sent, live_project):
        respond(204)
        favorite = live_project.model_copy(update={"is_favorite": True})
        assert favorites.toggle_favorite(api, favorite, "u1", 7) is False
        method, url, kwargs = sent()
        assert method == "DELETE"
        assert kwargs["params"] == {"project_reference_id": REF, "user_id": "u1"}

    def test_list_filters_locally(self, api, respond, sent):
        respond(200, {"data": [
            {"project_reference_id": REF, "project_title": "Smart Water Grid", "location": "Pune"},
            {"project_reference_id": "PROJ-2025-00040", "title": "Bus Depot", "location": "Nashik"},
        ]})
        result = favorites.list_favorite_projects(api, "u1", search="nashik")
        assert sent()[1] == f"{BASE_URL}/project-favorites/project-details"
        assert [f.display_title for f in result] == ["Bus Depot"]


# ── Q&A and notes ─────────────────────────────────────────────────────────────

class TestQuestions:
    @pytest.fixture
    def question(self):
        return Question(id=3, project_id=REF, question_text="What is the DSCR?")

    def test_answer(self, api, respond, sent, question):
        respond(200, {"id": 3})
        questions.answer_question(api, question, " Around 1.4 ", "u9", document_links="https://x")
        method, url, kwargs = sent()
        assert (method, url) == ("POST", f"{BASE_URL}/questions/3/answer")
        assert kwargs["params"] == {"project_id": REF, "replied_by_user_id": "u9"}
        assert kwargs["json"] == {"reply_text": "Around 1.4", "attachments": [],
                                  "document_links": "https://x"}

    def test_update_and_delete(self, api, respond, sent, question):
        respond(200, {})
        questions.update_answer(api, question, "Revised", "u9")
        assert sent()[0] == "PUT"
        assert "document_links" not in sent()[2]["json"]
        questions.delete_answer(api, question, "u9")
        assert sent()[0] == "DELETE"

    def test_blank_answer_blocked(self, api, session, question):
        with pytest.raises(FormValidationError):
            questions.answer_question(api, question, "  ", "u9")
        session.request.assert_not_called()

    def test_list_and_status(self, api, respond):
        respond(200, [{"id": 1, "answer": {"reply_text": "Yes"}}, {"id": 2, "category": None}])
        result = questions.list_questions(api, "MUN-PUNE")
        assert [q.status for q in result] == ["answered", "open"]
        assert result[1].category == "General"

    def test_ask(self, api, respond, sent):
        respond(201, {"id": 4})
        questions.ask_question(api, REF, " Is land acquired? ", "u1", category="")
        assert sent()[2]["json"]["question_text"] == "Is land acquired?"
        assert sent()[2]["json"]["category"] == "General"


class TestNotes:
    def test_create(self, api, respond, sent, channel):
        respond(201, {"id": 5, "title": "Site visit", "content": "Met commissioner"})
        note = notes.create_note(api, REF, 7, " Site visit ", "Met commissioner", "u1",
                                 tags=["visit"], notifications=channel)
        assert sent()[1] == f"{BASE_URL}/project-notes/"
        assert sent()[2]["json"]["title"] == "Site visit"
        assert sent()[2]["json"]["tags"] == ["visit"]
        assert note.id == 5
        assert channel.drain()[0].severity == "success"

    def test_invalid_note(self, api, session):
        with pytest.raises(FormValidationError):
            notes.create_note(api, REF, 7, "", "", "u1")
        session.request.assert_not_called()


# ── Drafts ────────────────────────────────────────────────────────────────────

class TestDrafts:
    def test_list_never_cached(self, api, session, respond):
        respond(200, {"results": [{"id": 44, "title": "WIP"}]})
        drafts.list_drafts(api)
        assert drafts.list_drafts(api) == [{"id": 44, "title": "WIP"}]
        assert session.request.call_count == 2

    def test_save_new(self, api, respond, sent, draft_form):
        respond(201, {"data": {"id": 44}})
        assert drafts.save_draft(api, draft_form) == "44"
        assert sent()[:2] == ("POST", f"{BASE_URL}/project-drafts/")

    def test_save_existing(self, api, respond, sent):
        respond(200)
        assert drafts.save_draft(api, ProjectForm(title="WIP"), draft_id=44) == "44"
        assert sent()[:2] == ("PUT", f"{BASE_URL}/project-drafts/44")

    def test_get_draft_cuts_timestamps(self, api, respond):
        respond(200, {"data": {"id": 44, "title": "WIP",
                               "fundraising_start_date": "2025-01-15T00:00:00Z",
                               "total_project_cost": 2000000000}})
        form = drafts.get_draft(api, 44)
        assert form.fundraising_start_date == "2025-01-15"
        assert form.total_project_cost == "2000000000"

    def test_submit_validates_form(self, api, session):
        with pytest.raises(FormValidationError):
            drafts.submit_draft(api, 44, ProjectForm(title="WIP"))
        session.request.assert_not_called()

    def test_submit_and_delete(self, api, respond, sent, draft_form):
        respond(200, {})
        drafts.submit_draft(api, 44, draft_form)
        assert sent()[1] == f"{BASE_URL}/project-drafts/44/submit"
        drafts.delete_draft(api, 44)
        assert sent()[0] == "DELETE"


# ── Document requests ─────────────────────────────────────────────────────────

class TestDocuments:
    def test_request(self, api, respond, sent):
        respond(201, {"id": 8})
        now = datetime(2025, 3, 12, 12, 0, tzinfo=timezone.utc)
        documents.request_documents(api, REF, " Audited accounts FY24 ", "u1", now=now)
        assert sent()[2]["json"] == {
            "project_reference_id": REF,
            "requested_by": "u1",
            "description": "Audited accounts FY24",
            "requested_at": "2025-03-12T12:00:00+00:00",
        }

    def test_short_description_blocked(self, api, session):
        with pytest.raises(FormValidationError, match="at least 10"):
            documents.request_documents(api, REF, "DPR", "u1")
        session.request.assert_not_called()

    def test_list_by_tab_and_search(self, api, respond, sent):
        respond(200, {"data": [
            {"id": 1, "project_reference_id": REF, "status": "pending", "description": "DPR copy"},
            {"id": 2, "project_reference_id": REF, "status": "completed", "description": "Audit",
             "documents": None},
            {"id": 3, "project_reference_id": "PROJ-2025-00040", "status": "active",
             "description": "Site photos"},
        ]})
        result = documents.list_document_requests(
            api, requested_by="u1", statuses=documents.OPEN_STATUSES, search="photos",
        )
        assert sent()[2]["params"] == {"skip": 0, "limit": 100, "requested_by": "u1"}
        assert [r.id for r in result] == [3]

    def test_download(self, api, respond, sent, tmp_path):
        respond(200, chunks=[b"%PDF"])
        path = documents.download_file(api, 17, tmp_path / "dpr.pdf")
        assert sent()[1] == f"{BASE_URL}/files/17/download"
        assert path.read_bytes() == b"%PDF"
