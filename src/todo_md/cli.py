"""Command-line interface for todo-md."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from .actions import toggle_done_or_increment_count
from .config import ConfigModel, get_config, load_config
from .due import DueDate, DueState
from .edits import TextEdit, apply_edits
from .exceptions import NoActiveDocument, TodoMdError
from .parser import ParsedDocument, parse_document
from .recurring import reset_for_new_visit
from .task import Task
from .tree import TaskTree
from .views import TreeItemKind, due_tasks, group_items
from .utils.datetime import now_local, parse_iso_date

logger = logging.getLogger(__name__)

console = Console()

DUE_STYLES = {
    DueState.DUE: ("green", "due"),
    DueState.OVERDUE: ("red", "overdue"),
    DueState.INVALID: ("magenta", "invalid"),
    DueState.NOT_DUE: ("dim", "not due"),
}


def resolve_document_path(file: Optional[str], config: ConfigModel) -> Path:
    """Pick the file to work on: the argument, else the configured default.

    Raises:
        NoActiveDocument: If neither is available or the file does not exist
    """
    path = file or config.default_file
    if not path:
        raise NoActiveDocument("No task file given and no default_file configured")
    path = Path(path).expanduser()
    if not path.exists():
        raise NoActiveDocument(f"Task file not found: {path}")
    return path


def read_lines(path: Path) -> List[str]:
    return path.read_text(encoding="utf-8").splitlines()


def write_lines(path: Path, lines: List[str]) -> None:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def load_document(file: Optional[str]) -> ParsedDocument:
    config = get_config()
    path = resolve_document_path(file, config)
    return parse_document(read_lines(path), config=config)


def format_task_for_display(task: Task) -> str:
    """Format a task for display."""
    text_parts = []
    text_parts.append("[green]✔[/green]" if task.done else "○")
    if task.priority:
        text_parts.append(f"[yellow]({task.priority})[/yellow]")
    text_parts.append(f"[strike]{task.title}[/strike]" if task.done else task.title)

    if task.projects:
        text_parts.append(f"[blue]{' '.join('+' + project for project in task.projects)}[/blue]")
    if task.contexts:
        text_parts.append(f"[cyan]{' '.join('@' + context for context in task.contexts)}[/cyan]")
    if task.tags:
        text_parts.append(f"[cyan]{' '.join('#' + tag for tag in task.tags)}[/cyan]")
    if task.count:
        text_parts.append(f"[dim]{task.count.current}/{task.count.needed}[/dim]")
    if task.due:
        color, label = DUE_STYLES[task.due.is_due]
        text_parts.append(f"[{color}]{label}: {task.due.raw}[/{color}]")
    if task.overdue:
        text_parts.append(f"[red]missed {task.overdue.since.isoformat()}[/red]")

    return " ".join(text_parts)


def add_branch(node: Tree, tree: TaskTree, task: Task, show_hidden: bool = False) -> None:
    branch = node.add(f"[dim]{task.line_number + 1}[/dim] {format_task_for_display(task)}")
    if task.collapsed:
        return
    for child in tree.subtasks(task):
        if child.hidden and not show_hidden:
            continue
        add_branch(branch, tree, child, show_hidden)


def fail(message: str) -> None:
    console.print(f"[red]❌ {message}[/red]")
    sys.exit(1)


@click.group()
@click.option("--config", type=click.Path(), help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def main(ctx, config, verbose):
    """todo-md - work with plain-text task lists."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if config:
        load_config(Path(config))
    else:
        get_config()


@main.command()
@click.argument("file", required=False)
@click.option("--all", "show_all", is_flag=True, help="Include hidden tasks")
def show(file, show_all):
    """Show the task tree of a file."""
    try:
        document = load_document(file)
    except TodoMdError as e:
        fail(str(e))

    tree = document.tree
    if not tree.roots:
        console.print("[yellow]No tasks found.[/yellow]")
        return

    root = Tree(f"[bold]{len(tree.flat)} tasks[/bold]")
    for task in tree.roots:
        if task.hidden and not show_all:
            continue
        add_branch(root, tree, task, show_all)
    console.print(root)


@main.command()
@click.argument("file", required=False)
def due(file):
    """List tasks that are due or overdue today."""
    try:
        document = load_document(file)
    except TodoMdError as e:
        fail(str(e))

    tasks = due_tasks(document.tree)
    if not tasks:
        console.print("[green]Nothing is due today.[/green]")
        return

    table = Table(title=f"Due ({len(tasks)})")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Task")
    table.add_column("Due")
    table.add_column("State")
    for task in tasks:
        color, label = DUE_STYLES[task.due.is_due]
        table.add_row(str(task.line_number + 1), task.title, task.due.raw, f"[{color}]{label}[/{color}]")
    console.print(table)


@main.command()
@click.argument("file", required=False)
@click.option("--kind", "-k", type=click.Choice(['tag', 'project', 'context']), default="tag",
              help="What to group by")
def groups(file, kind):
    """Count tasks per tag, project or context."""
    try:
        document = load_document(file)
    except TodoMdError as e:
        fail(str(e))

    config = get_config()
    group_kind = TreeItemKind(kind)
    sort = {
        TreeItemKind.TAG_GROUP: config.sort_tags_view,
        TreeItemKind.PROJECT_GROUP: config.sort_projects_view,
        TreeItemKind.CONTEXT_GROUP: config.sort_contexts_view,
    }[group_kind]
    items = group_items(document.tree, group_kind, sort)
    if not items:
        console.print(f"[yellow]No {kind}s found.[/yellow]")
        return

    table = Table(title=f"{kind}s ({len(items)})")
    table.add_column(kind.capitalize())
    table.add_column("Tasks", justify="right")
    for item in items:
        table.add_row(item.title, str(item.count))
    console.print(table)


@main.command()
@click.argument("expression")
@click.option("--date", "-d", "target", help="Target date (YYYY-MM-DD), defaults to today")
def check(expression, target):
    """Evaluate a due expression."""
    target_date = now_local()
    if target:
        target_date = parse_iso_date(target)
        if target_date is None:
            fail("Invalid date format. Use YYYY-MM-DD")

    due_date = DueDate(expression, target_date)
    color, label = DUE_STYLES[due_date.is_due]
    console.print(f"[{color}]{label}[/{color}] on {due_date.target_date.isoformat()}")
    if due_date.is_recurring:
        console.print("[dim]recurring[/dim]")
    if due_date.is_range:
        console.print("[dim]range[/dim]")
    upcoming = due_date.closest_due_date_in_the_future
    if upcoming and due_date.is_due != DueState.INVALID:
        console.print(f"next due: {upcoming.isoformat()}")


def write_edits(path: Path, lines: List[str], edits: List[TextEdit], dry_run: bool) -> None:
    for edit in edits:
        console.print(f"[dim]{edit.line_number + 1}[/dim] {edit.kind.value} {edit.new_text!r}")
    if dry_run or not edits:
        return
    write_lines(path, apply_edits(lines, edits))
    logger.info("Applied %d edits to %s", len(edits), path)


@main.command()
@click.argument("file", required=False)
@click.option("--last-visit", "-l", required=True, help="Day the file was last opened (YYYY-MM-DD)")
@click.option("--dry-run", is_flag=True, help="Only print the edits")
def reset(file, last_visit, dry_run):
    """Start a new cycle for recurring tasks."""
    config = get_config()
    try:
        path = resolve_document_path(file, config)
    except TodoMdError as e:
        fail(str(e))

    last_visit_date = parse_iso_date(last_visit)
    if last_visit_date is None:
        fail("Invalid date format. Use YYYY-MM-DD")

    lines = read_lines(path)
    now = now_local()
    document = parse_document(lines, config=config, target_date=now)
    edits = reset_for_new_visit(document.tasks, datetime.combine(last_visit_date, datetime.min.time()), now)
    if not edits:
        console.print("[green]Nothing to reset.[/green]")
        return
    write_edits(path, lines, edits, dry_run)
    console.print(f"[green]✅ {len(edits)} edits{' (dry run)' if dry_run else ''}[/green]")


@main.command()
@click.argument("file", required=False)
@click.option("--line", "-n", "line", type=int, required=True, help="1-based line number of the task")
@click.option("--dry-run", is_flag=True, help="Only print the edits")
def done(file, line, dry_run):
    """Toggle a task done, or advance its counter."""
    config = get_config()
    try:
        path = resolve_document_path(file, config)
    except TodoMdError as e:
        fail(str(e))

    lines = read_lines(path)
    document = parse_document(lines, config=config)
    task = document.tree.get(line - 1)
    if task is None:
        fail(f"No task on line {line}")

    write_edits(path, lines, toggle_done_or_increment_count(task, config), dry_run)


if __name__ == "__main__":
    main()
