"""
    Copyright 2025 Inmanta

    Licensed under the Apache License, Version 2.0 (the "License");
    you may not use this file except in compliance with the License.
    You may obtain a copy of the License at

        http://www.apache.org/licenses/LICENSE-2.0

    Unless required by applicable law or agreed to in writing, software
    distributed under the License is distributed on an "AS IS" BASIS,
    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
    See the License for the specific language governing permissions and
    limitations under the License.

    Contact: code@inmanta.com
"""

import logging
import logging.config
import os
import sys
from argparse import Namespace
from collections import abc
from typing import Optional, TextIO, Union

import colorlog
import yaml
from colorlog.formatter import LogColors

from soyparse import const

LOGGER = logging.getLogger(__name__)


def _is_on_tty() -> bool:
    return (hasattr(sys.stdout, "isatty") and sys.stdout.isatty()) or const.ENVIRON_FORCE_TTY in os.environ


"""
This dictionary maps the verbosity levels of the command line to the corresponding Python log levels
"""
log_levels = {
    "0": logging.ERROR,
    "1": logging.WARNING,
    "2": logging.INFO,
    "3": logging.DEBUG,
    "4": 3,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "TRACE": 3,
}

logging.addLevelName(3, "TRACE")


def python_log_level_to_name(python_log_level: int) -> str:
    """Convert a python log level to a human readable version that works in log config files"""
    result = logging.getLevelName(python_log_level)
    if result.startswith("Level "):
        return str(python_log_level)
    return result


def convert_log_level(log_level: str, cli: bool = False) -> int:
    """
    Convert the given log level (a verbosity count or a level name) to the corresponding Python log level.

    :param cli: True if the logs will be outputted to the CLI. The minimal level on the CLI is always WARNING.
    """
    # maximum of 4 v's
    if log_level.isdigit() and int(log_level) > 4:
        log_level = "4"
    if cli and (log_level == "ERROR" or (log_level.isdigit() and int(log_level) < 1)):
        log_level = "WARNING"
    return log_levels[log_level]


class FullLoggingConfig:
    """
    A logging config that can be applied on Python's logging framework.

    This class supports only version 1 of Python's dictConfig format.
    """

    def __init__(
        self,
        *,
        formatters: Optional[abc.Mapping[str, object]] = None,
        handlers: Optional[abc.Mapping[str, object]] = None,
        loggers: Optional[abc.Mapping[str, object]] = None,
        root_handlers: Optional[list[str]] = None,
        root_log_level: Optional[Union[int, str]] = None,
    ) -> None:
        self.formatters = formatters if formatters else {}
        self.handlers = handlers if handlers else {}
        self.loggers = loggers if loggers else {}
        self.root_handlers = root_handlers if root_handlers else []
        self.root_log_level = root_log_level

    def apply_config(self) -> None:
        """
        Configure the logging system with this logging config.
        """
        logging.config.dictConfig(self._to_dict_config())

    def _to_dict_config(self) -> dict[str, object]:
        """
        Convert this object into a dictionary format that can be passed to logging.config.dictConfig() method
        to configure logging.
        """
        return {
            "version": 1,
            "formatters": dict(self.formatters),
            "handlers": dict(self.handlers),
            "loggers": dict(self.loggers),
            "root": {
                "handlers": self.root_handlers,
                **({"level": self.root_log_level} if self.root_log_level else {}),
            },
            "disable_existing_loggers": False,
        }


class Options(Namespace):
    """
    The options that configure the SoyLoggerConfig:

    :param log_file: if this attribute is set, the logs will be written to the specified file instead of the stream
                     specified in `get_instance`.
    :param log_file_level: the logging level for the file handler (if `log_file` is set), see `log_levels`.
    :param verbose: the verbosity level of the log messages. can be a number from 0 to 4.
                    if a bigger number is provided, 4 will be used.
    :param timed: if true,  adds the time to the formatter in the log lines.
    :param logging_config: Path to a yaml file with a dict-based logging config. Overrides all other options.
    """

    log_file: Optional[str] = None
    log_file_level: str = "INFO"
    verbose: int = 0
    timed: bool = False
    logging_config: Optional[str] = None


class LoggingConfigBuilder:
    def get_bootstrap_logging_config(
        self, stream: TextIO = sys.stdout, python_log_level: int = logging.INFO
    ) -> FullLoggingConfig:
        """
        The logging config used between the moment that the process starts and the moment that the command line
        options are parsed and applied.
        """
        name_root_handler = "soy_console_handler"
        log_level_name = python_log_level_to_name(python_log_level)
        return FullLoggingConfig(
            formatters={
                "soy_console_formatter": self._get_multiline_formatter_config(),
            },
            handlers={
                name_root_handler: {
                    "class": "logging.StreamHandler",
                    "formatter": "soy_console_formatter",
                    "level": log_level_name,
                    "stream": stream,
                },
            },
            root_handlers=[name_root_handler],
            root_log_level=log_level_name,
        )

    def get_logging_config_from_options(self, stream: TextIO, options: Options) -> FullLoggingConfig:
        """
        Return the logging config based on the options passed on the CLI.
        """
        handlers: dict[str, object] = {}
        handler_root_logger: str
        log_level: int

        if options.log_file:
            log_level = convert_log_level(options.log_file_level)
            handler_root_logger = "soy_file_handler"
            handlers[handler_root_logger] = {
                "class": "logging.handlers.WatchedFileHandler",
                "level": python_log_level_to_name(log_level),
                "formatter": "soy_log_formatter",
                "filename": options.log_file,
                "mode": "a+",
            }
        else:
            log_level = convert_log_level(str(options.verbose), cli=True)
            handler_root_logger = "soy_console_handler"
            handlers[handler_root_logger] = {
                "class": "logging.StreamHandler",
                "formatter": "soy_console_formatter",
                "level": python_log_level_to_name(log_level),
                "stream": stream,
            }

        formatters = {
            # Always add all the formatters, even if they are not used by configuration. This way
            # the formatters can be used if the user dumps the logging config to file.
            "soy_console_formatter": self._get_multiline_formatter_config(options),
            "soy_log_formatter": {
                "format": "%(asctime)s %(levelname)-8s %(name)-10s %(message)s",
            },
        }

        return FullLoggingConfig(
            formatters=formatters,
            handlers=handlers,
            root_handlers=[handler_root_logger],
            root_log_level=python_log_level_to_name(log_level),
        )

    def _get_multiline_formatter_config(self, options: Optional[Options] = None) -> dict[str, object]:
        """
        Returns the dict-based formatter config for logs that will be sent to the console.

        :param options: The options requested by the user or None if the options are not parsed yet.
        """
        log_format = "%(asctime)s " if options and options.timed else ""
        if _is_on_tty():
            log_format += "%(log_color)s%(name)-25s%(levelname)-8s%(reset)s%(blue)s%(message)s"
            log_colors = {"DEBUG": "cyan", "INFO": "green", "WARNING": "yellow", "ERROR": "red", "CRITICAL": "red"}
        else:
            log_format += "%(name)-25s%(levelname)-8s%(message)s"
            log_colors = None

        return {
            "()": "soyparse.logging.MultiLineFormatter",
            "fmt": log_format,
            "log_colors": log_colors,
            "reset": _is_on_tty(),
            "no_color": not _is_on_tty(),
        }


def read_logging_config(file_name: str) -> dict[str, object]:
    """
    Read a dict-based logging config from a yaml file.
    """
    try:
        with open(file_name, "r") as fh:
            logging_config_as_str = fh.read()
    except FileNotFoundError:
        raise Exception(f"Logging config file {file_name} doesn't exist.")

    try:
        result = yaml.safe_load(logging_config_as_str)
    except yaml.YAMLError:
        raise Exception(f"Failed to parse logging config file from {file_name} as yaml.")
    if not isinstance(result, dict):
        raise Exception(f"Logging config file {file_name} should contain a mapping, got {result!r}.")
    return result


class SoyLoggerConfig:
    """
    This class is the entry-point for configuring the Python logging framework.

    Call `get_instance` first, it installs a console handler so the command line parser can already log. Then call
    `apply_options` to install the configuration requested on the command line.
    """

    _instance: Optional["SoyLoggerConfig"] = None

    def __init__(self, stream: TextIO = sys.stdout) -> None:
        self._stream = stream
        self._handlers: abc.Sequence[logging.Handler] = self._apply_logging_config(
            LoggingConfigBuilder().get_bootstrap_logging_config(stream)
        )
        self._loaded_config: Optional[FullLoggingConfig] = None
        self._options_applied: Optional[Options] = None

    @classmethod
    def get_instance(cls, stream: TextIO = sys.stdout) -> "SoyLoggerConfig":
        """
        This method should be used to obtain an instance of this class, because this class is a singleton.

        :param stream: The stream to send log messages to. Default is standard output (sys.stdout)
        """
        if cls._instance:
            if not cls._instance._handlers:
                raise Exception("No handlers found.")
            handler = cls._instance._handlers[0]
            if isinstance(handler, logging.StreamHandler) and handler.stream != stream:
                raise Exception("Instance already exists with a different stream")
        else:
            cls._instance = cls(stream)
        return cls._instance

    @classmethod
    def clean_instance(cls) -> None:
        """
        Remove and close the handlers installed by the current instance.
        """
        if cls._instance is not None:
            for handler in cls._instance._handlers:
                logging.root.removeHandler(handler)
                handler.close()
        cls._instance = None

    def apply_options(self, options: Options) -> None:
        """
        Apply the logging options passed on the command line.
        """
        if self._options_applied is not None:
            raise Exception(
                f"Options can only be applied once to a handler. Previously applied options: {self._options_applied}"
            )
        self._options_applied = options

        if options.logging_config:
            dict_config = read_logging_config(options.logging_config)
            handlers_before = list(logging.root.handlers)
            try:
                logging.config.dictConfig(dict_config)
            except (ValueError, TypeError, AttributeError, ImportError) as e:
                raise Exception(f"Failed to apply the logging config defined in {options.logging_config}.") from e
            self._handlers = [handler for handler in logging.root.handlers if handler not in handlers_before]
            LOGGER.debug("Applied logging config from %s", options.logging_config)
        else:
            logging_config = LoggingConfigBuilder().get_logging_config_from_options(self._stream, options)
            self._handlers = self._apply_logging_config(logging_config)

    def _apply_logging_config(self, logging_config: FullLoggingConfig) -> abc.Sequence[logging.Handler]:
        handlers_before = list(logging.root.handlers)
        logging_config.apply_config()
        self._loaded_config = logging_config
        return [handler for handler in logging.root.handlers if handler not in handlers_before]


class MultiLineFormatter(colorlog.ColoredFormatter):
    """
    Formatter for multi-line log records: continuation lines are indented to align with the message of the first line.
    """

    def __init__(
        self,
        fmt: Optional[str] = None,
        *,
        log_colors: Optional[LogColors] = None,
        reset: bool = True,
        no_color: bool = False,
    ):
        super().__init__(fmt, log_colors=log_colors, reset=reset, no_color=no_color)
        self.fmt = fmt

    def get_header_length(self, record: logging.LogRecord) -> int:
        """
        Get the header length of a given log record, without color codes.
        """
        formatter = colorlog.ColoredFormatter(
            fmt=self.fmt,
            log_colors=self.log_colors,
            reset=False,
            no_color=True,
        )
        header = formatter.format(
            logging.LogRecord(
                record.name,
                record.levelno,
                record.pathname,
                record.lineno,
                "",
                (),
                None,
            )
        )
        return len(header)

    def format(self, record: logging.LogRecord) -> str:
        indent: str = " " * self.get_header_length(record)
        head, *tail = super().format(record).splitlines(True)
        return head + "".join(indent + line for line in tail)
