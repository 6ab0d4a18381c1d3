"""Logging for tvspdx programs.

Records are about tag-value documents: the adapter returned by
:func:`getLogger` accepts ``path``, ``line`` and ``state`` keywords giving
the position in the document a record refers to. They are kept in the JSON
logs, and :meth:`DocumentLoggerAdapter.for_document` binds the path once for
all the records about one document::

    logger = tvspdx.log.getLogger("check").for_document("glibc.spdx")
    logger.error("unknown tag", line=12, state="Package")

The parser state transitions go to :func:`debug`, which stays silent until
:func:`activate` is called with ``tvspdx_debug=True`` (``-v -v`` on the
command line).
"""

from __future__ import annotations
from dataclasses import dataclass

import json
import logging
import os
import sys
import time
from typing import TYPE_CHECKING, ClassVar

from colorama import Fore, Style
from tqdm import tqdm

from tvspdx.config import ConfigSection

if TYPE_CHECKING:
    from typing import Any, Iterator, Mapping, MutableMapping, Optional, Sequence
    from typing import Tuple, TypeVar
    from argparse import ArgumentParser, _ArgumentGroup, Namespace

    T = TypeVar("T")


@dataclass
class LogConfig(ConfigSection):
    """The ``[log]`` configuration section.

    :ivar pretty: colors and progress bars when the output is a terminal
    :ivar stream_fmt: format of the console records
    :ivar file_fmt: format of the records written to ``--log-file``
    """

    title: ClassVar[str] = "log"

    pretty: bool = True
    stream_fmt: str = "%(levelname)-8s %(message)s"
    file_fmt: str = "%(asctime)s: %(name)-24s: %(levelname)-8s %(message)s"


log_config = LogConfig.load()

pretty_cli = log_config.pretty and sys.stdout.isatty()

# Position in a tag-value document a record may carry
DOCUMENT_CONTEXT = ("path", "line", "state")

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class JSONFormatter(logging.Formatter):
    """Format records as one JSON object per line.

    Empty attributes are left out, so a record only carries the document
    context it was logged with.
    """

    STD_ATTR = ("asctime", "levelname", "name", "message", "module", "exc_text")

    def __init__(
        self,
        date_fmt: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ):
        """Initialize a formatter.

        :param date_fmt: see logging module
        :param context: constant attributes added to every record
        """
        # asctime is only computed when the format uses it
        super().__init__(fmt="%(asctime)s", datefmt=date_fmt)
        self.context = dict(context or {})

    def format(self, record: logging.LogRecord) -> str:
        super().format(record)
        json_record = {
            attr: getattr(record, attr, None)
            for attr in self.STD_ATTR + DOCUMENT_CONTEXT
        }
        json_record.update(self.context)
        return json.dumps({attr: val for attr, val in json_record.items() if val})


class DocumentLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter moving the document context keywords to the record."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        for key in DOCUMENT_CONTEXT:
            if key in kwargs:
                extra[key] = kwargs.pop(key)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def for_document(self, path: str) -> DocumentLoggerAdapter:
        """Return an adapter adding *path* to all its records."""
        return DocumentLoggerAdapter(self.logger, {**(self.extra or {}), "path": path})


def progress_bar(it: Iterator[T] | Sequence[T], **kwargs: Any) -> Iterator[T]:
    """Iterate over *it* with a tqdm progress bar on stderr.

    The bar is disabled, but still a tqdm object, when the output is not
    pretty.

    :param kwargs: see tqdm documentation
    """
    return tqdm(it, disable=not pretty_cli, file=sys.stderr, **kwargs)


class TqdmHandler(logging.StreamHandler):  # all: no cover
    """Write records above the progress bars, with a colored level name."""

    colors = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Style.DIM,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }

    def emit(self, record: logging.LogRecord) -> None:
        msg = self.format(record)
        color = self.colors.get(record.levelno)
        if color is not None and msg.startswith(record.levelname):
            msg = (
                color
                + record.levelname
                + Fore.RESET
                + Style.RESET_ALL
                + msg[len(record.levelname) :]
            )
        tqdm.write(msg, file=sys.stderr)


class NullHandler(logging.Handler):
    """Handler doing nothing."""

    def emit(self, _: logging.LogRecord) -> None:
        pass


def getLogger(name: str) -> DocumentLoggerAdapter:
    """Get the ``tvspdx.<name>`` logger.

    The ``tvspdx`` logger always has a handler so that programs that do not
    call :func:`activate` do not get warnings about missing handlers.

    :param name: logger name, relative to ``tvspdx``
    """
    root = logging.getLogger("tvspdx")
    if not any(isinstance(h, NullHandler) for h in root.handlers):
        root.addHandler(NullHandler())
    return DocumentLoggerAdapter(logging.getLogger(f"tvspdx.{name}"), {})


def add_log_handler(
    level: int,
    log_format: str,
    datefmt: Optional[str] = None,
    filename: Optional[str] = None,
    json_format: bool = False,
) -> None:
    """Add a handler with GMT timestamps to the root logger.

    :param level: level of the handler
    :param log_format: format of the records, unless *json_format*
    :param datefmt: date/time format
    :param filename: write the records to that file instead of stderr
    :param json_format: format records with :class:`JSONFormatter`
    """
    handler: logging.Handler
    if filename is not None:
        handler = logging.FileHandler(filename)
    elif pretty_cli:  # all: no cover
        handler = TqdmHandler()
    else:
        handler = logging.StreamHandler()

    fmt: logging.Formatter
    if json_format:
        fmt = JSONFormatter(datefmt)
    else:
        fmt = logging.Formatter(log_format, datefmt)
    fmt.converter = time.gmtime  # type: ignore

    handler.setFormatter(fmt)
    handler.setLevel(level)
    logging.getLogger("").addHandler(handler)


def add_logging_argument_group(
    argument_parser: ArgumentParser, default_level: int = logging.WARNING
) -> _ArgumentGroup:
    """Add the logging options to *argument_parser*.

    To be used with :func:`activate_with_args`.

    :param argument_parser: the parser in which the group will be created
    :param default_level: the console level when no option is given
    """
    log_group = argument_parser.add_argument_group(title="logging arguments")
    log_group.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="make the log output to the console more verbose,"
        " twice to show the parser state transitions",
    )
    log_group.add_argument(
        "--log-file",
        metavar="FILE",
        default=None,
        help="store all the logs into the specified file",
    )
    log_group.add_argument(
        "--loglevel",
        default=logging.getLevelName(default_level),
        choices=LEVEL_NAMES,
        help="set the console log level",
    )
    log_group.add_argument(
        "--nocolor",
        default=False,
        action="store_true",
        help="disable color and progress bars",
    )
    log_group.add_argument(
        "--json-logs",
        default="json-logs" in os.environ.get("TVSPDX_ENABLE_FEATURE", "").split(","),
        action="store_true",
        help="enable JSON formatted logs. They can be activated as well by"
        " setting the env var TVSPDX_ENABLE_FEATURE=json-logs.",
    )
    return log_group


def activate_with_args(args: Namespace, default_level: int = logging.WARNING) -> None:
    """Activate logging from the options of :func:`add_logging_argument_group`.

    :param args: the result of parsing arguments
    :param default_level: the level ``-v`` options count from
    """
    global pretty_cli

    if args.verbose > 0:
        level = default_level - 10 * args.verbose
    else:
        level = logging.getLevelName(args.loglevel)

    if args.nocolor:
        pretty_cli = False

    activate(
        level=level,
        filename=args.log_file,
        json_format=args.json_logs,
        tvspdx_debug=level < logging.DEBUG,
    )


def activate(
    stream_format: str = log_config.stream_fmt,
    file_format: str = log_config.file_fmt,
    datefmt: Optional[str] = None,
    level: int = logging.INFO,
    filename: Optional[str] = None,
    tvspdx_debug: bool = False,
    json_format: bool = False,
) -> None:
    """Send the logs to stderr, and to *filename* if given.

    :param stream_format: format of the console records
    :param file_format: format of the file records
    :param datefmt: date/time format
    :param level: level of the console handler
    :param filename: also log everything down to DEBUG in that file
    :param tvspdx_debug: let :func:`debug` emit the parser state transitions
    :param json_format: emit JSON records instead of formatted lines
    """
    # Handlers do the filtering
    logging.getLogger("").setLevel(logging.DEBUG)

    add_log_handler(
        level=level, log_format=stream_format, datefmt=datefmt, json_format=json_format
    )
    if filename is not None:
        add_log_handler(
            level=min(level, logging.DEBUG),
            log_format=file_format,
            datefmt=datefmt,
            filename=filename,
            json_format=json_format,
        )

    if tvspdx_debug:
        debug_logger.setLevel(logging.DEBUG)


debug_logger = getLogger("debug")
debug_logger.setLevel(logging.CRITICAL + 1)

debug = debug_logger.debug
