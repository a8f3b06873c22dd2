from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from .config import AppConfig, load_config, save_config
from .interaction import BoardController, ModalMode
from .tasks.kanban import KanbanBoard
from .tasks.models import CardStatus, STATUSES
from .tasks.render import BoardView, print_board, print_card_detail
from .tasks.storage import CardStore, StorageError

app = typer.Typer(no_args_is_help=True, help="Three-column Kanban board.")

console = Console()

STATUS_HELP = "Column: " + "/".join(s.value for s in STATUSES)


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Optional[str] = typer.Option(None, "--data-dir", help="Directory holding local_storage.json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Three-column Kanban board."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cfg = load_config()
    if data_dir is not None:
        cfg = cfg.model_copy(update={"data_dir": data_dir})
    ctx.obj = cfg


def _config(ctx: typer.Context) -> AppConfig:
    return ctx.obj if isinstance(ctx.obj, AppConfig) else load_config()


def _open_board(ctx: typer.Context) -> KanbanBoard:
    cfg = _config(ctx)
    return KanbanBoard(CardStore.in_dir(cfg.data_path(), cfg.storage_key))


def _parse_status(value: str) -> CardStatus:
    try:
        return CardStatus(value.strip().lower())
    except ValueError:
        console.print(f"[red]Invalid status: {value}[/red] ({STATUS_HELP})")
        raise typer.Exit(1)


@contextmanager
def _storage_errors() -> Iterator[None]:
    try:
        yield
    except StorageError as e:
        console.print(f"[red]Could not save the board: {e}[/red]")
        raise typer.Exit(1)


@app.command("board")
def board_cmd(ctx: typer.Context) -> None:
    """Show the board."""
    print_board(_open_board(ctx).cards, console)


@app.command("show")
def show_cmd(
    ctx: typer.Context,
    card_id: str = typer.Argument(..., help="Card ID"),
) -> None:
    """Show one card."""
    card = _open_board(ctx).get_card(card_id)
    if card is None:
        console.print(f"[red]Card not found: {escape(card_id)}[/red]")
        raise typer.Exit(1)
    print_card_detail(card, console)


@app.command("add")
def add_cmd(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Card title"),
    description: str = typer.Option("", "--desc", "-d", help="Description"),
    status: str = typer.Option("todo", "--status", "-s", help=STATUS_HELP),
) -> None:
    """Create a card."""
    board = _open_board(ctx)
    with _storage_errors():
        card = board.create(title, description, _parse_status(status))
    if card is None:
        console.print("[red]Title required.[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Created: {escape(str(card))}[/green]", highlight=False)


@app.command("edit")
def edit_cmd(
    ctx: typer.Context,
    card_id: str = typer.Argument(..., help="Card ID"),
    title: str = typer.Argument(..., help="New title"),
    description: Optional[str] = typer.Option(None, "--desc", "-d", help="New description (kept if omitted)"),
) -> None:
    """Change a card's title and description."""
    board = _open_board(ctx)
    card = board.get_card(card_id)
    if card is None:
        console.print(f"[red]Card not found: {escape(card_id)}[/red]")
        raise typer.Exit(1)
    if description is None:
        description = card.description
    with _storage_errors():
        updated = board.edit(card_id, title, description)
    if updated is None:
        console.print("[red]Title required.[/red]")
        raise typer.Exit(1)
    console.print(f"[cyan]Updated: {escape(str(updated))}[/cyan]", highlight=False)


@app.command("move")
def move_cmd(
    ctx: typer.Context,
    card_id: str = typer.Argument(..., help="Card ID"),
    status: str = typer.Argument(..., help=STATUS_HELP),
) -> None:
    """Move a card to another column."""
    board = _open_board(ctx)
    new_status = _parse_status(status)
    card = board.get_card(card_id)
    if card is None:
        console.print(f"[red]Card not found: {escape(card_id)}[/red]")
        raise typer.Exit(1)
    old_status = card.status
    with _storage_errors():
        moved = board.move(card_id, new_status)
    if moved is None:
        console.print(f"[yellow]{escape(card_id)} is already in {new_status.value}[/yellow]")
        return
    console.print(f"[cyan]Moved {escape(card_id)}: {old_status.value} → {new_status.value}[/cyan]")


@app.command("rm")
def rm_cmd(
    ctx: typer.Context,
    card_id: str = typer.Argument(..., help="Card ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a card."""
    board = _open_board(ctx)
    if board.get_card(card_id) is None:
        console.print(f"[red]Card not found: {escape(card_id)}[/red]")
        raise typer.Exit(1)
    if not yes and not typer.confirm("Delete this card?"):
        raise typer.Abort()
    with _storage_errors():
        board.delete(card_id)
    console.print(f"[red]Deleted card: {escape(card_id)}[/red]")


@app.command("clear")
def clear_cmd(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete every card."""
    board = _open_board(ctx)
    with _storage_errors():
        cleared = board.clear_all(lambda message: yes or typer.confirm(message))
    if cleared:
        console.print("[yellow]Board cleared[/yellow]")
    elif not board.cards:
        console.print("[dim]Board is already empty[/dim]")


SHELL_HELP = """Commands:
  add <status>         Add a card to a column (todo/doing/done)
  edit <id>            Edit or delete a card
  mv <id> <status>     Move a card to another column
  show <id>            Show a card
  clear                Delete all cards
  help                 Show this help
  quit                 Leave the shell

While entering a title, type 'esc' to cancel."""


class Shell:
    """Interactive board session driving BoardController."""

    def __init__(self, board: KanbanBoard, out: Console):
        self.out = out
        self.controller = BoardController(board, confirm=self._confirm, on_render=self._draw)

    def _confirm(self, message: str) -> bool:
        return Confirm.ask(message, console=self.out)

    def _draw(self, view: Optional[BoardView] = None) -> None:
        print_board(self.controller.board.cards, self.out)

    def _fill_modal(self) -> None:
        """Prompt for the dialog fields until saved or cancelled."""
        modal = self.controller.modal
        while self.controller.modal.is_open:
            if modal.title:
                title = Prompt.ask("Title", default=modal.title, console=self.out)
            else:
                title = Prompt.ask("Title", console=self.out)
            if title.strip().lower() == "esc":
                self.controller.key_press("Escape")
                return
            self.controller.set_fields(title=title)

            if modal.mode == ModalMode.EDIT:
                description = Prompt.ask("Description", default=modal.description, console=self.out)
                self.controller.set_fields(description=description)
                action = Prompt.ask("Action", choices=["save", "delete", "cancel"], default="save", console=self.out)
                if action == "cancel":
                    self.controller.cancel()
                    return
                if action == "delete":
                    self.controller.delete()
                    return
            else:
                description = Prompt.ask("Description", default="", console=self.out)
                self.controller.set_fields(description=description)

            self.controller.key_press("Enter", ctrl=True)
            if self.controller.modal.is_open:
                self.out.print("[red]Title required.[/red]")

    def handle(self, line: str) -> bool:
        """Run one command; False when the session should end."""
        tokens = line.split()
        if not tokens:
            return True
        cmd = tokens[0].lower()

        if cmd in ("quit", "exit", "q"):
            return False
        if cmd == "help":
            self.out.print(SHELL_HELP, markup=False)
        elif cmd == "add" and len(tokens) == 2:
            try:
                self.controller.click_add(tokens[1].lower())
            except ValueError:
                self.out.print(f"[red]Invalid status: {tokens[1]}[/red]")
                return True
            self._fill_modal()
        elif cmd == "edit" and len(tokens) == 2:
            if not self.controller.click_card(tokens[1]):
                self.out.print(f"[red]Card not found: {escape(tokens[1])}[/red]")
                return True
            self._fill_modal()
        elif cmd == "mv" and len(tokens) == 3:
            try:
                status = CardStatus(tokens[2].lower())
            except ValueError:
                self.out.print(f"[red]Invalid status: {tokens[2]}[/red]")
                return True
            self.controller.drag_start(tokens[1])
            self.controller.drag_over(status)
            if self.controller.drop(status) is None:
                self.out.print("[dim]Nothing moved[/dim]")
            self.controller.drag_end()
        elif cmd == "show" and len(tokens) == 2:
            card = self.controller.board.get_card(tokens[1])
            if card is None:
                self.out.print(f"[red]Card not found: {escape(tokens[1])}[/red]")
            else:
                print_card_detail(card, self.out)
        elif cmd == "clear":
            if not self.controller.click_clear_all():
                self.out.print("[dim]Nothing cleared[/dim]")
        else:
            self.out.print("Unknown command. Type 'help' for instructions.")
        return True

    def run(self) -> None:
        self._draw()
        while True:
            try:
                line = Prompt.ask("\n[bold]kanban[/bold]", console=self.out)
            except (KeyboardInterrupt, EOFError):
                break
            with _storage_errors():
                if not self.handle(line):
                    break
        self.out.print("Goodbye.")


@app.command("shell")
def shell_cmd(ctx: typer.Context) -> None:
    """Interactive board session."""
    Shell(_open_board(ctx), console).run()


@app.command("web")
def web_cmd(
    ctx: typer.Context,
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port"),
    host: Optional[str] = typer.Option(None, "--host", help="Host"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Debug mode"),
) -> None:
    """Serve the board in the browser."""
    try:
        from .web import run_server
    except ImportError:
        console.print("[red]FastAPI not installed![/red]")
        console.print("Install with: pip install fastapi uvicorn")
        raise typer.Exit(1)

    cfg = _config(ctx)
    host = host or cfg.host
    port = port or cfg.port
    console.print(f"[green]Serving the board on http://{host}:{port}[/green]")
    run_server(_open_board(ctx), port=port, host=host, debug=debug or cfg.debug, title=cfg.title)


@app.command("config")
def config_cmd(
    data_dir: Optional[str] = typer.Option(None, "--data-dir"),
    storage_key: Optional[str] = typer.Option(None, "--storage-key"),
    title: Optional[str] = typer.Option(None, "--title"),
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port"),
) -> None:
    """Save/update the config."""
    cfg = load_config()
    data = cfg.model_dump()
    if data_dir is not None:
        data["data_dir"] = str(Path(data_dir).expanduser())
    if storage_key is not None:
        data["storage_key"] = storage_key
    if title is not None:
        data["title"] = title
    if host is not None:
        data["host"] = host
    if port is not None:
        data["port"] = port

    save_config(AppConfig(**data))
    console.print_json(AppConfig(**data).model_dump_json())


if __name__ == "__main__":
    app()
