"""Command line entry point.

This module provides a class called Main used to initialize a python script
invoked from command line, and the ``tvspdx`` program built on top of it.

The scripts support by default the following switches::

    -v|--verbose to enable verbose mode (-v -v also logs parser transitions)
    -h|--help    display command line help
    --log-file FILE
                 to redirect logs to a given file (this is independent of
                 verbose option)
    --nocolor    disable color and progress bars
    --json-logs  emit JSON formatted logs
"""

from __future__ import annotations

from argparse import ArgumentParser
import logging
import os
import signal
import sys
import threading

from typing import TYPE_CHECKING

import tvspdx.log
from tvspdx.config import ParserConfig
from tvspdx.error import TagValueError
from tvspdx.parser import parse_tag_values
from tvspdx.reader import read_tag_values
from tvspdx.writer import write_tagvalue

if TYPE_CHECKING:
    from types import FrameType
    from typing import NoReturn
    from argparse import Namespace
    from tvspdx.model import Document

logger = tvspdx.log.getLogger("main")


class Main:
    """Class that implement argument parsing.

    :ivar args: list of positional parameters after processing options
    """

    def __init__(
        self,
        name: str | None = None,
        argument_parser: ArgumentParser | None = None,
    ):
        """Initialize Main object.

        :param name: name of the program (if not specified the filename without
            extension is taken)
        :param argument_parser: the ArgumentParser to use for parsing
            command-line arguments (if not specified, an ArgumentParser will be
            created by Main)
        """
        main = sys.modules["__main__"]

        if name is not None:
            self.name = name
        elif hasattr(main, "__file__") and main.__file__ is not None:
            self.name = os.path.splitext(os.path.basename(main.__file__))[0]
        else:
            self.name = "unknown"

        if argument_parser is None:
            argument_parser = ArgumentParser(prog=self.name)

        tvspdx.log.add_logging_argument_group(
            argument_parser, default_level=logging.INFO
        )

        self.args: Namespace | None = None
        self.argument_parser = argument_parser
        self.__log_handlers_set = False

        def sigterm_handler(sig: int, frame: FrameType | None) -> NoReturn:  # unix-only
            """Automatically convert SIGTERM to SystemExit exception.

            :param sig: signal action
            :param frame: the interrupted stack frame
            """
            del sig, frame
            logging.critical("SIGTERM received")
            raise SystemExit("SIGTERM received")

        if sys.platform != "win32":  # unix-only
            if threading.current_thread() is threading.main_thread():
                # Signal can only be used in the main thread
                signal.signal(signal.SIGTERM, sigterm_handler)

    def parse_args(
        self, args: list[str] | None = None, known_args_only: bool = False
    ) -> None:
        """Parse options and set console logger.

        :param args: the list of positional parameters. If None then
            ``sys.argv[1:]`` is used
        :param known_args_only: does not produce an error when extra
            arguments are present
        """
        if known_args_only:
            self.args, _ = self.argument_parser.parse_known_args(args)
        else:
            self.args = self.argument_parser.parse_args(args)

        if not self.__log_handlers_set:
            tvspdx.log.activate_with_args(self.args, logging.INFO)
            self.__log_handlers_set = True


def summary(doc: Document) -> str:
    """Return a one line description of a parsed document."""
    return (
        f"{doc.name} ({doc.spdx_version}): {len(doc.packages)} package(s),"
        f" {len(doc.files)} file(s), {len(doc.snippets)} snippet(s),"
        f" {len(doc.relationships)} relationship(s)"
    )


def parse_file(path: str, strict: bool = False) -> Document:
    """Read and parse a tag-value document.

    :param path: path to the document
    :param strict: see :class:`tvspdx.parser.TagValueParser`
    :raise TagValueError: if the document cannot be read or parsed
    """
    try:
        with open(path, encoding="utf-8") as f:
            pairs = read_tag_values(f)
    except OSError as err:
        raise TagValueError(f"cannot read file: {err.strerror}") from err
    except UnicodeDecodeError as err:
        raise TagValueError(f"cannot decode file: {err}") from err
    logger.debug(f"read {len(pairs)} pair(s)", path=path)
    return parse_tag_values(pairs, strict=strict)


def main(args: list[str] | None = None) -> None:
    m = Main(name="tvspdx")
    m.argument_parser.add_argument(
        "files", nargs="+", metavar="FILE", help="tag-value documents to parse"
    )
    m.argument_parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="reject repeated single-valued tags instead of keeping the last one"
        " (default taken from the [parser] configuration section)",
    )
    m.argument_parser.add_argument(
        "--dump",
        action="store_true",
        help="print the parsed documents in tag-value format",
    )
    m.parse_args(args)

    if TYPE_CHECKING:
        assert m.args is not None

    strict = m.args.strict
    if strict is None:
        strict = ParserConfig.load().strict_single_value

    failures = 0
    for path in tvspdx.log.progress_bar(m.args.files, desc="parsing", unit="file"):
        doc_logger = logger.for_document(path)
        try:
            doc = parse_file(path, strict=strict)
        except TagValueError as err:
            state = getattr(err, "state", None)
            doc_logger.error(
                f"{path}: {err}",
                line=getattr(err, "line", None),
                state=state.value if state is not None else None,
            )
            failures += 1
            continue

        doc_logger.info(f"{path}: {summary(doc)}")
        if m.args.dump:
            print("\n".join(write_tagvalue(doc)))

    if failures:
        logger.error(f"{failures} document(s) could not be parsed")
        sys.exit(1)
