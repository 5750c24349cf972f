# src/taskhub/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..core.result import Result
from ..core.state import AppState
from ..tasks.task_models import Task
from .bootstrap import export_to_file, import_from_file

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."
        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting helpers ----


def short_id(task: Task) -> str:
    return task.id.removeprefix("task_")[:SHORT_ID_LEN]


def format_task(task: Task) -> str:
    mark = "x" if task.is_completed else " "
    parts = [f"[{mark}] {short_id(task)} {task.title}", f"({task.priority.value}, {task.category.value}, {task.status.value})"]
    if task.due_date is not None:
        days = task.days_until_due
        when = task.due_date.strftime("%Y-%m-%d")
        parts.append(f"due {when} OVERDUE" if task.is_overdue else f"due {when} ({days}d)")
    if task.tags:
        parts.append("#" + " #".join(task.tags))
    return " ".join(parts)


def _split_options(args: list[str]) -> tuple[list[str], dict[str, Any]]:
    """Separate key=value options from free words. tags=a,b becomes a list."""
    words: list[str] = []
    opts: dict[str, Any] = {}
    for a in args:
        key, sep, value = a.partition("=")
        if sep and key:
            opts[key] = value.split(",") if key in ("tags", "addTags", "removeTags") else value
        else:
            words.append(a)
    if "due" in opts:
        opts["dueDate"] = opts.pop("due") or None
    return words, opts


def _coerce_hours(opts: dict[str, Any]) -> str | None:
    """Turn numeric options into floats in place; returns an error reply on bad input."""
    for key in ("estimatedHours", "timeSpent"):
        if key in opts:
            try:
                opts[key] = float(opts[key])
            except ValueError:
                return f"Error: {key} must be a number"
    return None


def _resolve_task_id(state: AppState, raw: str) -> str:
    """Accept a full id or an unambiguous prefix of the hex part."""
    if state.tasks.find_by_id(raw) is not None:
        return raw
    matches = [t.id for t in state.tasks.find_all() if t.id.removeprefix("task_").startswith(raw)]
    return matches[0] if len(matches) == 1 else raw


def _reply(result: Result, render: Callable[[Any], str] | None = None) -> str:
    if not result.success:
        return f"Error: {result.error}"
    if render is not None:
        return render(result.data)
    return result.message or "OK"


def _task_list(tasks: list[Task]) -> str:
    if not tasks:
        return "No tasks."
    return "\n".join(format_task(t) for t in tasks)


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_register(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /register <username> <email> [full name]"
    result = state.user_controller.register(
        {"username": args[0], "email": args[1], "fullName": " ".join(args[2:])}
    )
    return _reply(result)


def cmd_login(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /login <username>"
    result = state.user_controller.login(args[0])
    if result.success:
        state.current_user_id = result.data["id"]
        logger.info("Console session user=%s", state.current_user_id)
    return _reply(result)


def cmd_logout(state: AppState, args: list[str]) -> str:
    if state.current_user_id is None:
        return "Nobody is logged in."
    logger.info("Console session ended user=%s", state.current_user_id)
    state.current_user_id = None
    return "Logged out."


def cmd_whoami(state: AppState, args: list[str]) -> str:
    result = state.user_controller.get_current_user(state.current_user_id)
    return _reply(result, lambda d: f"{d['username']} <{d['email']}> {d['fullName']}".rstrip())


def cmd_users(state: AppState, args: list[str]) -> str:
    result = state.user_controller.get_all_users(state.current_user_id)
    return _reply(result, lambda users: "\n".join(f"{u['username']} {u['fullName']}".rstrip() for u in users))


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks                          -> my tasks, newest first
    /tasks category=work sortBy=priority sortOrder=desc overdue=false
    """
    _, opts = _split_options(args)
    result = state.task_controller.get_tasks(state.current_user_id, opts)
    return _reply(result, _task_list)


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add <title words> [category=.. priority=.. due=YYYY-MM-DD tags=a,b estimatedHours=.. assignee=<username>]"""
    words, opts = _split_options(args)
    error = _coerce_hours(opts)
    if error:
        return error
    if "assignee" in opts:
        user = state.users.find_by_username(opts.pop("assignee"))
        opts["assigneeId"] = user.id if user else "unknown"
    result = state.task_controller.create_task(state.current_user_id, {"title": " ".join(words), **opts})
    return _reply(result, lambda t: f"Created {format_task(t)}")


def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <task id>"
    result = state.task_controller.get_task(state.current_user_id, _resolve_task_id(state, args[0]))

    def render(t: Task) -> str:
        lines = [format_task(t)]
        if t.description:
            lines.append(f"  {t.description}")
        lines.append(f"  hours: {t.actual_hours:g}/{t.estimated_hours:g} ({t.progress_percentage:.0f}%)")
        for n in t.notes:
            lines.append(f"  - {n.created_at:%Y-%m-%d %H:%M} {n.content}")
        return "\n".join(lines)

    return _reply(result, render)


def cmd_set(state: AppState, args: list[str]) -> str:
    """/set <task id> key=value ... (title, status, priority, category, due, tags, estimatedHours)"""
    if len(args) < 2:
        return "Usage: /set <task id> key=value ..."
    _, opts = _split_options(args[1:])
    error = _coerce_hours(opts)
    if error:
        return error
    result = state.task_controller.update_task(state.current_user_id, _resolve_task_id(state, args[0]), opts)
    return _reply(result, lambda t: f"Updated {format_task(t)}")


def cmd_note(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /note <task id> <text>"
    result = state.task_controller.update_task(
        state.current_user_id, _resolve_task_id(state, args[0]), {"note": " ".join(args[1:])}
    )
    return _reply(result)


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <task id>"
    result = state.task_controller.toggle_task_status(state.current_user_id, _resolve_task_id(state, args[0]))
    return _reply(result, lambda t: format_task(t))


def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <task id>"
    return _reply(state.task_controller.delete_task(state.current_user_id, _resolve_task_id(state, args[0])))


def cmd_clear(state: AppState, args: list[str]) -> str:
    return _reply(state.task_controller.clear_all_tasks(state.current_user_id))


def cmd_search(state: AppState, args: list[str]) -> str:
    return _reply(state.task_controller.search_tasks(state.current_user_id, " ".join(args)), _task_list)


def cmd_stats(state: AppState, args: list[str]) -> str:
    result = state.task_controller.get_task_stats(state.current_user_id)

    def render(stats) -> str:
        lines = [
            f"Total: {stats.total}  completed: {stats.completed} ({stats.completion_rate}%)  "
            f"overdue: {stats.overdue}  due soon: {stats.due_soon}",
            "By status:   " + ", ".join(f"{k}={v}" for k, v in stats.by_status.items()),
            "By priority: " + ", ".join(f"{k}={v}" for k, v in stats.by_priority.items()),
            "By category: " + ", ".join(f"{k}={v}" for k, v in stats.by_category.items()),
        ]
        return "\n".join(lines)

    return _reply(result, render)


def cmd_overdue(state: AppState, args: list[str]) -> str:
    return _reply(state.task_controller.get_overdue_tasks(state.current_user_id), _task_list)


def cmd_soon(state: AppState, args: list[str]) -> str:
    days = None
    if args:
        try:
            days = int(args[0])
        except ValueError:
            return "Usage: /soon [days]"
    return _reply(state.task_controller.get_tasks_due_soon(state.current_user_id, days), _task_list)


def cmd_export(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /export <file.json>"
    return f"Exported to {args[0]}." if export_to_file(state, args[0]) else "Export failed (see log)."


def cmd_import(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /import <file.json>"
    if not import_from_file(state, args[0]):
        return "Import failed (see log)."
    return f"Imported {args[0]}: {len(state.users)} users, {len(state.tasks)} tasks."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("register", cmd_register, help_text="Create a user: /register <username> <email> [full name].")
registry.register("login", cmd_login, help_text="Act as a user: /login <username>.")
registry.register("logout", cmd_logout, help_text="Stop acting as the current user.")
registry.register("whoami", cmd_whoami, help_text="Show the current user.")
registry.register("users", cmd_users, help_text="List active users.")
registry.register("tasks", cmd_tasks, help_text="List my tasks: /tasks [category=.. status=.. sortBy=.. sortOrder=..].", aliases=["ls"])
registry.register("add", cmd_add, help_text="Create a task: /add <title> [category=.. priority=.. due=.. tags=a,b].")
registry.register("show", cmd_show, help_text="Show one task: /show <id>.")
registry.register("set", cmd_set, help_text="Update a task: /set <id> key=value ...")
registry.register("note", cmd_note, help_text="Append a note: /note <id> <text>.")
registry.register("done", cmd_done, help_text="Toggle completed/pending: /done <id>.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.")
registry.register("clear", cmd_clear, help_text="Delete all my tasks.")
registry.register("search", cmd_search, help_text="Search my tasks: /search <text>.")
registry.register("stats", cmd_stats, help_text="Show my task statistics.")
registry.register("overdue", cmd_overdue, help_text="List my overdue tasks.")
registry.register("soon", cmd_soon, help_text="List my tasks due soon: /soon [days].")
registry.register("export", cmd_export, help_text="Export all data: /export <file.json>.")
registry.register("import", cmd_import, help_text="Import data: /import <file.json>.")
