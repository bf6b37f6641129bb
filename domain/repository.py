import logging
from pathlib import Path
from typing import Iterable, TextIO, TypeAlias


logger = logging.getLogger(__name__)


Record: TypeAlias = tuple[str, str]


NAME_MARKER = "Name:"
BODY_MARKER = "Receipt:"
NAME_PREFIX = "Name: "
BODY_PREFIX = "Receipt: "

ERRORS = "surrogateescape"
NEWLINE = {"r": None, "a": "\n", "w": "\n"}


class StorageError(Exception):
    pass


class StorageReadFailure(StorageError):
    pass


class StorageWriteFailure(StorageError):
    pass


def parse_records(lines: Iterable[str]) -> list[Record]:
    """Pair each ``Name:`` line with the ``Receipt:`` line that follows it.

    Lines matching neither marker are skipped. A name with no body after it is
    dropped with a warning.
    """
    records: list[Record] = []
    pending: str | None = None

    for line in lines:
        line = line.rstrip("\r\n")
        if line.startswith(NAME_MARKER):
            if pending is not None:
                logger.warning("Partial record %r discarded.", pending)
            pending = line[len(NAME_PREFIX) :]
        elif pending is not None and line.startswith(BODY_MARKER):
            records.append((pending, line[len(BODY_PREFIX) :]))
            pending = None

    if pending is not None:
        logger.warning("Partial record %r discarded.", pending)

    return records


def format_record(name: str, body: str) -> str:
    if any(c in field for field in (name, body) for c in "\r\n"):
        logger.warning(
            "Record %r contains a line break and will not reload intact.", name
        )
    return f"{NAME_PREFIX}{name}\n{BODY_PREFIX}{body}\n"


class RecordStore:
    """Flat two-lines-per-record text file.

    Bytes that are not valid UTF-8 pass through as lone surrogates, so files
    written by other tools load and rewrite unchanged.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _open(self, mode: str) -> TextIO:
        return open(
            self.path,
            mode,
            encoding="utf-8",
            errors=ERRORS,
            newline=NEWLINE[mode],
        )

    def load_all(self) -> list[Record]:
        try:
            with self._open("r") as f:
                records = parse_records(f)
        except FileNotFoundError:
            logger.warning("Store %s does not exist, starting empty.", self.path)
            return []
        except OSError as e:
            logger.error("Could not read %s.", self.path)
            raise StorageReadFailure(f"{self.path}") from e

        logger.debug("Read %d record(s) from %s.", len(records), self.path)
        return records

    def append_one(self, name: str, body: str) -> None:
        try:
            with self._open("a") as f:
                f.write(format_record(name, body))
        except OSError as e:
            logger.error("Could not open %s for writing.", self.path)
            raise StorageWriteFailure(f"{self.path}") from e

    def rewrite_all(self, records: Iterable[Record]) -> None:
        try:
            with self._open("w") as f:
                for name, body in records:
                    f.write(format_record(name, body))
        except OSError as e:
            logger.error("Could not rewrite %s.", self.path)
            raise StorageWriteFailure(f"{self.path}") from e
        logger.info("File updated.")
