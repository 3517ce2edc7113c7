import datetime

import pytest

from conftest import FakeIntegration, ScriptedHost, pick
from startwork import cli
from startwork.access import START_WORK, AccessChecker, ensure_access_step
from startwork.dates import from_now
from startwork.engine import run_steps
from startwork.errors import GitError, IntegrationError
from startwork.issues import Issue, parse_timestamp, split_full_name
from startwork.start_work import FlowContext
from startwork.steps import StepResultBreak, StepState
from startwork.telemetry import Telemetry, instance_counter
from startwork.views import integration_statuses


NOW = datetime.datetime(2024, 5, 10, 12, 0, tzinfo=datetime.timezone.utc)


# ── Telemetry ────────────────────────────────────────────────────────────

def test_disabled_telemetry_sends_nothing():
    telemetry = Telemetry(enabled=False)
    seen = []
    telemetry.subscribe(lambda name, data: seen.append(name))
    telemetry.send_event("startWork/open", {"instance": 1})
    assert seen == []


def test_subscribe_and_unsubscribe():
    telemetry = Telemetry(enabled=True)
    seen = []
    unsubscribe = telemetry.subscribe(lambda name, data: seen.append((name, data)))
    telemetry.send_event("startWork/open", {"instance": 1}, {"source": "cli"})
    unsubscribe()
    telemetry.send_event("startWork/opened")
    assert seen == [("startWork/open", {"instance": 1, "source": "cli"})]


def test_instance_counter_is_scoped():
    a, b = instance_counter(), instance_counter()
    assert [a.next(), a.next(), b.next()] == [1, 2, 1]


# ── Dates ────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("delta, text", [
    (datetime.timedelta(seconds=10), "just now"),
    (datetime.timedelta(minutes=1), "1 minute ago"),
    (datetime.timedelta(hours=5), "5 hours ago"),
    (datetime.timedelta(days=9), "1 week ago"),
    (datetime.timedelta(days=400), "1 year ago"),
    (-datetime.timedelta(days=2), "in 2 days"),
])
def test_from_now(delta, text):
    assert from_now(NOW - delta, now=NOW) == text


def test_from_now_naive_and_missing():
    assert from_now(NOW.replace(tzinfo=None) - datetime.timedelta(days=3), now=NOW) == "3 days ago"
    assert from_now(None) == ""


def test_parse_timestamp():
    assert parse_timestamp("2024-05-10T12:00:00Z") == NOW
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp(None) is None


def test_split_full_name():
    repo = split_full_name("acme/app")
    assert (repo.owner, repo.repo) == ("acme", "app")


def test_issue_ref_without_repository():
    assert Issue(3, "t").ref() == "/#3"


def test_git_error_keeps_command():
    exc = GitError(("switch", "-c", "x"), "fatal")
    assert exc.command == ["git", "switch", "-c", "x"]
    assert str(exc) == "git switch -c x: fatal"


# ── Access ───────────────────────────────────────────────────────────────

def test_access_checker_missing_executable():
    access = AccessChecker(which=lambda exe: None).check(START_WORK)
    assert not access.allowed
    assert access.missing == ["git"]


def test_access_checker_disabled_feature():
    access = AccessChecker([START_WORK], which=lambda exe: "/usr/bin/git").check(START_WORK)
    assert not access.allowed and access.disabled


@pytest.mark.asyncio
async def test_disabled_feature_offers_only_cancel(make_container):
    container = make_container(disabled_features=[START_WORK])
    state = StepState()
    host = ScriptedHost(pick("Cancel"))

    result = await run_steps(
        ensure_access_step(container, state, FlowContext("Start Work", {}), START_WORK), host,
    )

    assert result is StepResultBreak
    assert [i.label for i in host.shown[0].items] == ["Cancel"]


# ── CLI ──────────────────────────────────────────────────────────────────

def test_issue_ref_must_look_like_owner_repo_number():
    with pytest.raises(ValueError, match="OWNER/REPO#NUMBER"):
        cli._fetch_issue_ref("acme/app 42")


def test_issue_ref_fetches_detail(mocker):
    issue = Issue(42, "Fix crash")
    fetch = mocker.patch("startwork.cli.gh.fetch_issue_detail", return_value=issue)
    item = cli._fetch_issue_ref(" acme/app#42 ")
    fetch.assert_called_once_with("acme/app", 42)
    assert item.issue is issue


def test_main_reports_unknown_integration(mocker, capsys):
    mocker.patch("startwork.cli.setup_logging")
    assert cli.main(["connect", "jira"]) == 1
    assert "Unknown integration" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_integration_statuses(make_container):
    gh_ = FakeIntegration(connected=True)
    gl = FakeIntegration(probe_error=IntegrationError("gitlab", "down"), integration_id="gitlab")
    container = make_container(gh_, gl, supported_integrations=["github"])

    assert await integration_statuses(container) == [
        ("github", "GitHub", True, True),
        ("gitlab", "GitLab", False, False),
    ]
