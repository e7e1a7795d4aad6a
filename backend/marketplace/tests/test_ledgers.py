import pytest

from conftest import create_identity
from marketplace.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from marketplace.core.roles import Role
from marketplace.models.job import Job, JobStatus
from marketplace.models.proposal import Proposal
from marketplace.services.jobs import create_job, list_jobs
from marketplace.services.proposals import list_proposals_for_job, submit_proposal


@pytest.fixture
def alice(db_session):
    return create_identity(db_session, "alice", Role.CLIENT)


@pytest.fixture
def bob(db_session):
    return create_identity(db_session, "bob", Role.FREELANCER)


def test_client_creates_open_job(db_session, alice):
    job = create_job(db_session, alice, "Build site", "Landing page", 500)

    assert job.id is not None
    assert job.status == JobStatus.OPEN.value
    assert job.client_id == alice.id
    assert job.budget == 500


def test_freelancer_cannot_create_job(db_session, bob):
    with pytest.raises(ForbiddenError):
        create_job(db_session, bob, "Build site", "Landing page", 500)

    assert db_session.query(Job).count() == 0


@pytest.mark.parametrize(
    "title,description,budget",
    [
        ("", "desc", 10),
        ("t", "  ", 10),
        ("t", "d", 0),
        ("t", "d", -5),
        ("t", "d", float("inf")),
        ("t", "d", float("nan")),
        ("t", "d", 0.001),
        ("t", "d", 10_000_000_000),
        ("t", "d", None),
    ],
)
def test_create_job_validates_input(db_session, alice, title, description, budget):
    with pytest.raises(ValidationError):
        create_job(db_session, alice, title, description, budget)


def test_list_jobs_joins_client_username(db_session, alice):
    create_job(db_session, alice, "First", "one", 100)
    create_job(db_session, alice, "Second", "two", 200)

    jobs = list_jobs(db_session)

    assert [job.title for job in jobs] == ["Second", "First"]
    assert all(job.client_username == "alice" for job in jobs)


def test_freelancer_submits_pending_proposal(db_session, alice, bob):
    job = create_job(db_session, alice, "Build site", "Landing page", 500)

    proposal = submit_proposal(db_session, bob, job.id, 400, "I can do it")

    assert proposal.status == "pending"
    assert proposal.job_id == job.id
    assert proposal.freelancer_id == bob.id
    assert proposal.message == "I can do it"


def test_client_cannot_submit_proposal(db_session, alice):
    job = create_job(db_session, alice, "Build site", "Landing page", 500)

    with pytest.raises(ForbiddenError):
        submit_proposal(db_session, alice, job.id, 400)

    assert db_session.query(Proposal).count() == 0


def test_proposal_for_missing_job_is_not_found(db_session, bob):
    with pytest.raises(NotFoundError):
        submit_proposal(db_session, bob, 999, 400)


def test_proposal_for_assigned_job_is_a_conflict(db_session, alice, bob):
    job = create_job(db_session, alice, "Build site", "Landing page", 500)
    job.status = JobStatus.ASSIGNED.value
    db_session.commit()

    with pytest.raises(ConflictError):
        submit_proposal(db_session, bob, job.id, 400)


def test_proposal_amount_must_be_positive(db_session, alice, bob):
    job = create_job(db_session, alice, "Build site", "Landing page", 500)

    with pytest.raises(ValidationError):
        submit_proposal(db_session, bob, job.id, 0)
    with pytest.raises(ValidationError):
        submit_proposal(db_session, bob, job.id, float("inf"))
    with pytest.raises(ValidationError):
        submit_proposal(db_session, bob, job.id, 12.345)

    assert db_session.query(Proposal).count() == 0


def test_list_proposals_joins_freelancer_username(db_session, alice, bob):
    carol = create_identity(db_session, "carol", Role.FREELANCER)
    job = create_job(db_session, alice, "Build site", "Landing page", 500)
    submit_proposal(db_session, bob, job.id, 400)
    submit_proposal(db_session, carol, job.id, 450)

    proposals = list_proposals_for_job(db_session, job.id)

    assert [(p.freelancer_username, p.amount) for p in proposals] == [("bob", 400), ("carol", 450)]


def test_list_proposals_for_missing_job_is_not_found(db_session):
    with pytest.raises(NotFoundError):
        list_proposals_for_job(db_session, 999)
