"""Tests for TaskAuthenticationResolver."""

from __future__ import annotations

from bbcreds.context import TaskAuthenticationResolver
from bbcreds.models import ANONYMOUS_PRINCIPAL, Principal, Task


class TestTaskAuthenticationResolver:
    def test_task_default_authentication(self) -> None:
        bob = Principal(name="bob")
        task = Task(full_name="team/repo", default_authentication=bob)
        assert TaskAuthenticationResolver().default_authentication_of(task) == bob

    def test_unconfigured_task_is_anonymous(self) -> None:
        task = Task(full_name="team/repo")
        principal = TaskAuthenticationResolver().default_authentication_of(task)
        assert principal == ANONYMOUS_PRINCIPAL
        assert principal.system is False

    def test_authenticator_takes_precedence(self) -> None:
        ci = Principal(name="ci-bot")
        resolver = TaskAuthenticationResolver([lambda task: ci])
        task = Task(full_name="team/repo", default_authentication=Principal(name="bob"))
        assert resolver.default_authentication_of(task) == ci

    def test_authenticator_returning_none_passes(self) -> None:
        bob = Principal(name="bob")
        resolver = TaskAuthenticationResolver()
        resolver.register(lambda task: None)
        task = Task(full_name="team/repo", default_authentication=bob)
        assert resolver.default_authentication_of(task) == bob

    def test_first_answer_wins(self) -> None:
        first = Principal(name="first")
        resolver = TaskAuthenticationResolver()
        resolver.register(lambda task: None)
        resolver.register(lambda task: first)
        resolver.register(lambda task: Principal(name="second"))
        assert resolver.default_authentication_of(Task(full_name="x")) == first

    def test_authenticator_sees_task(self) -> None:
        seen: list[str] = []

        def record(task: Task) -> None:
            seen.append(task.full_name)
            return None

        TaskAuthenticationResolver([record]).default_authentication_of(Task(full_name="a/b"))
        assert seen == ["a/b"]
