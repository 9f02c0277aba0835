"""领域性质与端到端场景（纯内存，不涉及存储）"""

import pytest
from taskflow.core.exceptions import InvalidArgumentError, InvalidStateError, InvariantViolationError
from taskflow.core.models import (
    Email,
    Password,
    Project,
    ProjectStatus,
    Task,
    TaskStatus,
    User,
    UserStatus,
)


class TestValueObjectProperties:
    """值对象性质"""

    @pytest.mark.parametrize(
        "raw",
        ["Alice@X.com", "  bob.smith+tag@Mail.Example.org ", "UPPER_CASE%1@host-name.io"],
    )
    def test_email_normalization_is_idempotent(self, raw):
        once = Email.of(raw)
        assert Email.of(once.value).value == once.value
        assert once.value == once.value.lower()

    @pytest.mark.parametrize("raw", ["Ab1!xyz", "abcdefg1!", "ABCDEFG1!", "Abcdefgh!", "Abcdefgh1"])
    def test_strict_policy_failures(self, raw):
        with pytest.raises(InvalidArgumentError):
            Password.of(raw)

    @pytest.mark.parametrize("length", [6, 7, 8, 20, 64])
    def test_weak_policy_accepts_six_or_more(self, length):
        assert Password.of_weak("a" * length) is not None

    @pytest.mark.parametrize("seed", ["a", "aA", "aA1", "aA1!"])
    def test_strength_monotonic_in_length(self, seed):
        scores = [
            Password.of_weak((seed * 20)[:length]).strength for length in range(6, 21)
        ]
        assert scores == sorted(scores)
        assert all(0 <= s <= 100 for s in scores)


class TestAggregateProperties:
    """聚合规则"""

    @pytest.mark.parametrize("close", ["complete", "archive"])
    def test_task_against_closed_project(self, project: Project, close: str):
        project.complete()
        if close == "archive":
            project.archive()
        before = project.tasks
        with pytest.raises(InvariantViolationError):
            Task.create("Too late", None, project)
        assert project.tasks == before

    def test_complete_directly_from_todo(self, task: Task):
        with pytest.raises(InvalidStateError):
            task.complete()
        assert task.status == TaskStatus.TODO

    @pytest.mark.parametrize("pending", [TaskStatus.TODO, TaskStatus.IN_PROGRESS])
    def test_project_completion_blocked_by_pending(self, project: Project, pending):
        task = Task.create("Pending", None, project)
        if pending == TaskStatus.IN_PROGRESS:
            task.start()
        with pytest.raises(InvariantViolationError):
            project.complete()
        task.cancel()
        project.complete()
        assert project.status == ProjectStatus.COMPLETED

    def test_deactivate_iff_active_project(self, alice: User):
        first = Project.create("First", None, alice)
        second = Project.create("Second", None, alice)
        first.complete()
        with pytest.raises(InvariantViolationError):
            alice.deactivate()
        second.complete()
        second.archive()
        alice.deactivate()
        assert alice.status == UserStatus.INACTIVE


class TestScenarios:
    """端到端场景"""

    def test_single_task_project_completes(self):
        u = User.create("alice123", "alice@x.com", "secret1")
        p = Project.create("Launch", None, u)
        t1 = Task.create("Write outline", None, p)
        t1.start()
        t1.complete()
        p.complete()
        assert p.status == ProjectStatus.COMPLETED
        assert p.progress == 100.0

    def test_half_done_project_cannot_complete(self):
        u = User.create("alice123", "alice@x.com", "secret1")
        p = Project.create("Launch", None, u)
        done = Task.create("Write outline", None, p)
        done.start()
        done.complete()
        Task.create("Review outline", None, p)

        with pytest.raises(InvariantViolationError):
            p.complete()
        assert p.status == ProjectStatus.ACTIVE
        assert p.progress == 50.0
