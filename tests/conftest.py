import datetime

import pytest

from startwork.access import AccessChecker
from startwork.container import Container
from startwork.git import Repository as GitRepository
from startwork.integrations import Integration, IntegrationRegistry
from startwork.issues import Author, Issue, Repository
from startwork.quickpick import Disposable
from startwork.steps import InputStep, is_directive_item
from startwork.telemetry import Telemetry


UPDATED = datetime.datetime(2024, 5, 1, 12, 0, tzinfo=datetime.timezone.utc)


def make_issue(id="42", title="Fix crash", owner="acme", repo="app", author="ana",
               updated=UPDATED, body="It crashes on start", integration_id="github"):
    return Issue(
        id=id, title=title, body=body,
        repository=Repository(owner, repo),
        author=Author(author, f"https://github.com/{author}.png"),
        updated_date=updated,
        url=f"https://github.com/{owner}/{repo}/issues/{id}",
        integration_id=integration_id,
    )


# ═════════════════════════════════════════════════════════════════════════════
# FAKES
# ═════════════════════════════════════════════════════════════════════════════

class FakeIntegration(Integration):
    id = "github"
    name = "GitHub"

    def __init__(self, connected=True, connect_result=True, issues=None,
                 issues_error=None, probe_error=None, connect_error=None, integration_id="github"):
        super().__init__()
        self.id = integration_id
        self._connected = connected
        self.connect_result = connect_result
        self.issues = list(issues or [])
        self.issues_error = issues_error
        self.probe_error = probe_error
        self.connect_error = connect_error
        self.connect_calls = []
        self.fetch_calls = 0

    async def is_connected(self):
        if self.probe_error:
            raise self.probe_error
        self._connected = bool(self._connected)
        return self._connected

    async def connect(self, source):
        self.connect_calls.append(source)
        if self.connect_error:
            raise self.connect_error
        self._connected = self.connect_result
        return self.connect_result

    async def get_my_issues(self):
        self.fetch_calls += 1
        if self.issues_error:
            raise self.issues_error
        return list(self.issues)


class FakeGit:
    def __init__(self, repositories=None, current="main", fail=None):
        self.repositories = repositories if repositories is not None else [GitRepository("/work/app")]
        self.current = current
        self.fail = fail
        self.created = []
        self.is_discovering_repositories = None

    async def current_branch(self, repo):
        return self.current

    async def branches(self, repo):
        return [self.current, "develop"]

    def validate_branch_name(self, name):
        if not name or " " in name:
            return False, "invalid"
        return True, None

    async def create_branch(self, repo, name, reference, switch=True):
        if self.fail:
            raise self.fail
        self.created.append((repo, name, reference, switch))


class FakeHandle:
    def __init__(self, step):
        self.step = step
        self.placeholders = []
        self._placeholder = getattr(step, "placeholder", None)
        self.ignore_focus_out = getattr(step, "ignore_focus_out", False)
        self.freezes = []

    @property
    def placeholder(self):
        return self._placeholder

    @placeholder.setter
    def placeholder(self, value):
        self.placeholders.append(value)
        self._placeholder = value

    def suspend_dismissal(self):
        disposable = Disposable()
        self.freezes.append(disposable)
        return disposable


class ScriptedHost:
    """Answers each shown step with the next scripted answer.

    An answer is BACK / QUIT, a string (input steps), or a callable
    ``answer(step, handle) -> selection``.
    """

    def __init__(self, *answers):
        self.answers = list(answers)
        self.shown = []
        self.handles = []

    def show(self, step):
        handle = FakeHandle(step)
        self.shown.append(step)
        self.handles.append(handle)
        if step.on_did_activate is not None:
            step.on_did_activate(handle)
        if not self.answers:
            raise AssertionError(f"no scripted answer for {step!r}")
        answer = self.answers.pop(0)
        if callable(answer):
            return answer(step, handle)
        return answer

    def titles(self):
        return [s.title for s in self.shown]


def pick(label):
    def _answer(step, handle):
        for item in step.items:
            if getattr(item, "label", None) == label:
                return [item]
        raise AssertionError(f"{label!r} not in {[getattr(i, 'label', None) for i in step.items]}")
    return _answer


def click(label, button):
    def _answer(step, handle):
        item = next(i for i in step.items if getattr(i, "label", None) == label)
        if step.on_did_click_item_button(handle, button, item):
            return [item]
        raise AssertionError("button did not continue the step")
    return _answer


def accept(step, handle):
    """Accept an input step's pre-filled value."""
    assert isinstance(step, InputStep)
    return step.value


def pick_directive(step, handle):
    item = next(i for i in step.items if is_directive_item(i))
    return [item]


# ═════════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def github():
    return FakeIntegration(connected=True, issues=[make_issue()])


@pytest.fixture
def fake_git():
    return FakeGit()


@pytest.fixture
def make_container(fake_git):
    def _make(*integrations, telemetry=None, which=lambda exe: f"/usr/bin/{exe}", **settings):
        factories = {i.id: (lambda i=i: i) for i in integrations}
        config = {
            "cloud_integrations": False,
            "supported_integrations": [i.id for i in integrations],
            "slugify_branch_names": True,
            "skip_confirmations": [],
            "disabled_features": [],
            "telemetry": False,
        }
        config.update(settings)
        return Container(
            config,
            integrations=IntegrationRegistry(factories),
            git=fake_git,
            access=AccessChecker(config["disabled_features"], which=which),
            telemetry=telemetry or Telemetry(enabled=False),
        )
    return _make
