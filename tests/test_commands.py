# tests/test_commands.py

from __future__ import annotations

from pathlib import Path

from taskhub.cli.commands import CommandRegistry, registry, short_id


def test_command_registry_routes_and_aliases(state) -> None:
    reg = CommandRegistry()
    called: list[list[str]] = []

    def handler(state, args):
        called.append(args)
        return "ok"

    reg.register("a", handler, "a", aliases=["alpha"])

    assert reg.handle(state, "/a x y") == "ok"
    assert reg.handle(state, "/ALPHA") == "ok"
    assert called == [["x", "y"], []]
    assert "/a - a" in reg.build_help()
    assert "alpha" not in reg.build_help()


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_commands_require_login(state) -> None:
    assert registry.handle(state, "/tasks") == "Error: Authentication required"
    assert registry.handle(state, "/logout") == "Nobody is logged in."


def test_task_session_end_to_end(state) -> None:
    assert registry.handle(state, "/register alice alice@example.com Alice Johnson") == "User alice registered"
    assert registry.handle(state, "/login alice") == "Welcome, Alice Johnson!"
    assert state.current_user_id is not None

    reply = registry.handle(state, "/add Write report priority=high category=work tags=q3,finance")
    assert reply is not None and reply.startswith("Created [ ]")
    assert "#q3 #finance" in reply

    task = state.tasks.find_all()[0]
    assert task.priority == "high"

    listing = registry.handle(state, "/tasks category=work")
    assert "Write report" in listing

    assert registry.handle(state, f"/done {short_id(task)}").startswith("[x]")
    assert task.is_completed

    assert registry.handle(state, f"/set {task.id} title=Renamed").startswith("Updated")
    assert task.title == "Renamed"

    assert registry.handle(state, f"/note {short_id(task)} called finance") == "Task updated"
    assert "called finance" in registry.handle(state, f"/show {short_id(task)}")

    assert "Total: 1" in registry.handle(state, "/stats")
    assert "Renamed" in registry.handle(state, "/search renamed")

    assert registry.handle(state, f"/rm {short_id(task)}") == 'Task "Renamed" deleted'
    assert registry.handle(state, "/tasks") == "No tasks."


def test_other_users_tasks_are_hidden(state) -> None:
    registry.handle(state, "/register alice alice@example.com")
    registry.handle(state, "/register bob bob@example.com")
    registry.handle(state, "/login alice")
    registry.handle(state, "/add secret plan")
    task = state.tasks.find_all()[0]

    registry.handle(state, "/login bob")
    assert registry.handle(state, f"/show {short_id(task)}") == "Error: You do not have access to this task"
    assert registry.handle(state, "/whoami").startswith("bob <bob@example.com>")


def test_export_and_import_files(state, tmp_path: Path) -> None:
    registry.handle(state, "/register alice alice@example.com")
    registry.handle(state, "/login alice")
    registry.handle(state, "/add keep me")

    path = tmp_path / "export" / "snapshot.json"
    assert registry.handle(state, f"/export {path}") == f"Exported to {path}."
    assert path.exists()

    registry.handle(state, "/clear")
    assert len(state.tasks) == 0

    assert registry.handle(state, f"/import {path}") == f"Imported {path}: 1 users, 1 tasks."
    assert state.tasks.find_all()[0].title == "keep me"

    assert registry.handle(state, f"/import {tmp_path / 'missing.json'}") == "Import failed (see log)."


def test_add_and_set_coerce_hours(state) -> None:
    registry.handle(state, "/register alice alice@example.com")
    registry.handle(state, "/login alice")

    reply = registry.handle(state, "/add Plan trip estimatedHours=3")
    assert reply is not None and reply.startswith("Created")
    task = state.tasks.find_all()[0]
    assert task.estimated_hours == 3
    assert isinstance(task.estimated_hours, float)

    assert registry.handle(state, "/add Other estimatedHours=abc") == "Error: estimatedHours must be a number"
    assert len(state.tasks) == 1

    registry.handle(state, f"/set {short_id(task)} timeSpent=1.5")
    assert task.actual_hours == 1.5
    assert registry.handle(state, f"/set {short_id(task)} timeSpent=lots") == "Error: timeSpent must be a number"


def test_tasks_overdue_false_lists_the_rest(state) -> None:
    registry.handle(state, "/register alice alice@example.com")
    registry.handle(state, "/login alice")
    registry.handle(state, "/add Late dueDate=2000-01-01T00:00:00.000Z")
    registry.handle(state, "/add Someday")

    listing = registry.handle(state, "/tasks overdue=false")
    assert "Someday" in listing
    assert "Late" not in listing
