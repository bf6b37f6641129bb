"""Interactive menu over the cookbook catalog."""

from enum import IntEnum
import logging
import re
import sys
from typing import Callable, TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

import config
from domain.catalog import AllocationFailure, Catalog, EntryNotFound
from domain.repository import RecordStore, StorageReadFailure, StorageWriteFailure


CONFIG = config.Config()


logger = logging.getLogger(__name__)


MENU = """
--- MENU ---
1. Display all
2. Add recipe
3. View recipe
4. Update recipe
5. Delete recipe
Q. Exit"""


ID_PATTERN = re.compile(r"\s*(\d+)")


class MenuChoice(IntEnum):
    DISPLAY_ALL = 1
    ADD = 2
    VIEW = 3
    UPDATE = 4
    DELETE = 5


def parse_entry_id(text: str) -> int | None:
    match = ID_PATTERN.match(text)
    if match is None:
        logger.warning("Invalid input.")
        return None
    return int(match.group(1))


def parse_choice(text: str) -> MenuChoice:
    """Leading digits pick the option, so ``2x`` still means add."""
    match = ID_PATTERN.match(text)
    if match is None:
        raise ValueError(text)
    return MenuChoice(int(match.group(1)))


def printable(text: str) -> str:
    # Lone surrogates from undecodable store bytes become U+FFFD.
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def configure_logging(level: str, console: Console | None = None) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[RichHandler(console=console, show_path=False)],
    )


class Menu:
    def __init__(
        self,
        catalog: Catalog,
        *,
        console: Console | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.catalog = catalog
        self.console = Console() if console is None else console
        self.stream = sys.stdin if stream is None else stream
        self.actions: dict[MenuChoice, Callable[[], None]] = {
            MenuChoice.DISPLAY_ALL: self.show_all,
            MenuChoice.ADD: self.add,
            MenuChoice.VIEW: self.view,
            MenuChoice.UPDATE: self.update,
            MenuChoice.DELETE: self.delete,
        }

    def read_line(self, prompt: str) -> str | None:
        """One line without its terminator, or ``None`` at end of input."""
        line = self.console.input(prompt, markup=False, stream=self.stream)
        if not line:
            return None
        return line.rstrip("\r\n")

    def read_id(self) -> int | None:
        self.display_all()
        line = self.read_line("ID of the recipe (int): ")
        if line is None:
            return None
        return parse_entry_id(line)

    def run(self) -> None:
        while True:
            self.console.print(MENU)
            choice = self.read_line("Choice: ")
            if choice is None:
                break
            self.console.print()

            if choice[:1] in ("q", "Q"):
                break

            try:
                action = self.actions[parse_choice(choice)]
            except ValueError:
                self.console.print("Invalid option.")
                continue

            try:
                action()
            except StorageWriteFailure as e:
                self.console.print(
                    f"Changes kept in memory, could not save {e}.", markup=False
                )
            except AllocationFailure as e:
                self.console.print(f"Could not create recipe {e}.", markup=False)

        self.console.print("Saving and exiting... Goodbye!")

    def show_all(self) -> None:
        logger.info("Displaying all recipes...")
        self.display_all()

    def display_all(self) -> None:
        summaries = self.catalog.list_summaries()
        if not summaries:
            logger.info("The cookbook is empty!")
            return

        table = Table(title="Recipes", show_lines=False)
        table.add_column("ID")
        table.add_column("Name")
        for id, name in summaries:
            table.add_row(str(id), Text(printable(name)))
        self.console.print(table)

    def add(self) -> None:
        logger.info("Adding a new recipe...")
        name = self.read_line("Name: ") or ""
        body = self.read_line("Recipe: ") or ""

        if self.catalog.add(name, body) is not None:
            logger.info("New recipe saved!")

    def view(self) -> None:
        entry_id = self.read_id()
        if entry_id is None:
            return

        try:
            entry = self.catalog.view(entry_id)
        except EntryNotFound:
            return

        self.console.print(
            Panel(
                Text(printable(entry.body)),
                title=Text(f"[{entry.id}] {printable(entry.name)}"),
                expand=False,
            )
        )

    def update(self) -> None:
        logger.info("Update recipe...")
        entry_id = self.read_id()
        if entry_id is None:
            return

        name = self.read_line("Name (Press 'Enter' to keep current): ")
        body = self.read_line("Recipe (Press 'Enter' to keep current): ")

        try:
            entry = self.catalog.update(entry_id, name, body)
        except EntryNotFound:
            return
        if entry is not None:
            logger.info("Recipe '%d' is updated.", entry_id)

    def delete(self) -> None:
        logger.info("Delete recipe...")
        entry_id = self.read_id()
        if entry_id is None:
            return

        try:
            self.catalog.delete(entry_id)
        except EntryNotFound:
            return
        logger.info("Recipe '%d' is deleted.", entry_id)


def main() -> None:
    console = Console()
    configure_logging(CONFIG.log_level, console)

    try:
        catalog = Catalog.load(
            RecordStore(CONFIG.store_path),
            name_max_length=CONFIG.name_max_length,
            body_max_length=CONFIG.body_max_length,
        )
    except StorageReadFailure as e:
        console.print(f"Could not read {e}, refusing to start.", markup=False)
        raise SystemExit(1)

    console.print(f"===== {CONFIG.title} =====", markup=False)
    Menu(catalog, console=console).run()


if __name__ == "__main__":
    main()
