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

    Command line development guidelines
    ###################################

    do's and don'ts
    ----------------
    MUST NOT: sys.exit => use command.CLIException
    SHOULD NOT: print( => use logger for messages, only print for final output


    Entry points
    ------------
    @command annotation to register new command
"""

import argparse
import json
import logging
import sys
import time
from collections import abc

import yaml

from soyparse import config, const
from soyparse.ast import CompilerException, to_data
from soyparse.ast import export as ast_export
from soyparse.ast.declarations import Program
from soyparse.command import CLIException, Commander, ShowUsageException, command
from soyparse.config import Config
from soyparse.logging import SoyLoggerConfig
from soyparse.parser.soyParser import parse_file

LOGGER = logging.getLogger("soyparse")


def read_program(path: str) -> Program:
    """
    Parse the given file. Files that can not be read are reported as a CLIException.
    """
    try:
        return parse_file(path)
    except OSError as e:
        raise CLIException("Unable to read %s: %s" % (path, e.strerror or e), exitcode=const.EXIT_FAILURE)


def files_parser_config(parser: argparse.ArgumentParser, parent_parsers: abc.Sequence[argparse.ArgumentParser]) -> None:
    parser.add_argument("files", nargs="+", help="The template files to process")


def check_parser_config(parser: argparse.ArgumentParser, parent_parsers: abc.Sequence[argparse.ArgumentParser]) -> None:
    files_parser_config(parser, parent_parsers)
    parser.add_argument(
        "--export-report",
        dest="export_report",
        help="Write a json report with the templates and errors of every file to this file",
        default=None,
    )


def check_file(path: str) -> ast_export.FileReport:
    """
    Parse a single file and print the outcome.
    """
    t1 = time.time()
    try:
        program = parse_file(path)
    except CompilerException as e:
        print(e.format())
        return ast_export.FileReport(file=path, errors=[e.export()])
    except OSError as e:
        print("%s: unable to read file: %s" % (path, e.strerror or e))
        error = ast_export.Error(type="%s.%s" % (type(e).__module__, type(e).__qualname__), message=str(e))
        return ast_export.FileReport(file=path, errors=[error])
    LOGGER.debug("Parsing %s took %0.03f seconds", path, time.time() - t1)
    print("%s: OK" % path)
    return ast_export.FileReport(file=path, templates=list(program.template_names()))


@command("check", help_msg="Parse template files and report syntax errors", parser_config=check_parser_config)
def check(options: argparse.Namespace) -> None:
    report = ast_export.ParseReport(files=[check_file(path) for path in options.files])

    if options.export_report:
        with open(options.export_report, "w", encoding="utf-8") as fh:
            fh.write(report.model_dump_json(indent=config.output_indent.get()))
        LOGGER.info("Report written to %s", options.export_report)

    if report.is_failure():
        failed: list[str] = [file.file for file in report.files if file.errors]
        raise CLIException("%d of %d files failed to parse" % (len(failed), len(report.files)), exitcode=const.EXIT_FAILURE)


def dump_parser_config(parser: argparse.ArgumentParser, parent_parsers: abc.Sequence[argparse.ArgumentParser]) -> None:
    parser.add_argument("file", help="The template file to dump")
    parser.add_argument(
        "--format",
        dest="format",
        choices=[output_format.value for output_format in const.OutputFormat],
        default=None,
        help="Output format, defaults to the output.format config option",
    )


@command("dump", help_msg="Print the syntax tree of a template file", parser_config=dump_parser_config)
def dump(options: argparse.Namespace) -> None:
    program = read_program(options.file)
    output_format = const.OutputFormat(options.format) if options.format else config.output_format.get()
    data = to_data(program)
    if output_format is const.OutputFormat.json:
        print(json.dumps(data, indent=config.output_indent.get()))
    else:
        print(yaml.safe_dump(data, sort_keys=False), end="")


@command(
    "templates", help_msg="Print the fully qualified name of every template in the files", parser_config=files_parser_config
)
def templates(options: argparse.Namespace) -> None:
    for path in options.files:
        program = read_program(path)
        for name in program.template_names():
            print(name)


@command("list-commands", help_msg="Print out an overview of all commands", add_verbose_flag=False)
def list_commands(options: argparse.Namespace) -> None:
    print("The following commands are available:")
    for cmd in Commander.commands().values():
        print(" {}: {}".format(cmd.name, cmd.help))


def help_parser_config(parser: argparse.ArgumentParser, parent_parsers: abc.Sequence[argparse.ArgumentParser]) -> None:
    parser.add_argument("subcommand", help="Output help for a particular subcommand", nargs="?", default=None)


@command("help", help_msg="show a help message and exit", parser_config=help_parser_config, add_verbose_flag=False)
def help_command(options: argparse.Namespace) -> None:
    parser = cmd_parser()
    if options.subcommand is None:
        parser.print_help()
    elif options.subcommand not in Commander.commands():
        raise ShowUsageException("Unknown command %s" % options.subcommand)
    else:
        parser.parse_args([options.subcommand, "-h"])


def cmd_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="soyparse")
    parser.add_argument("-c", "--config", dest="config_file", help="Use this config file", default=None)
    parser.add_argument("--log-file", dest="log_file", help="Path to the logfile")
    parser.add_argument(
        "--log-file-level",
        dest="log_file_level",
        choices=["0", "1", "2", "3", "4", "ERROR", "WARNING", "INFO", "DEBUG", "TRACE"],
        default="INFO",
        help="Log level for messages going to the logfile: 0=ERROR, 1=WARNING, 2=INFO, 3=DEBUG",
    )
    parser.add_argument(
        "--logging-config",
        dest="logging_config",
        help="A yaml file with a dict-based logging config, overrides all other logging options",
        default=None,
    )
    parser.add_argument("--timed-logs", dest="timed", help="Add timestamps to logs", action="store_true")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log level for messages going to the console. Default is warnings,"
        "-v warning, -vv info, -vvv debug and -vvvv trace",
    )
    parser.add_argument(
        "-X", "--extended-errors", dest="errors", help="Show stack traces for errors", action="store_true", default=False
    )

    verbosity_parser = argparse.ArgumentParser(add_help=False)
    verbosity_parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=argparse.SUPPRESS,
        help="Log level for messages going to the console. Default is warnings,"
        "-v warning, -vv info, -vvv debug and -vvvv trace",
    )

    subparsers = parser.add_subparsers(title="commands")
    for cmd in Commander.commands().values():
        cmd.add_parser(subparsers, verbosity_parser)

    return parser


def app() -> None:
    """
    Run the command line tool
    """
    log_config = SoyLoggerConfig.get_instance(sys.stdout)

    parser = cmd_parser()
    options = parser.parse_args()

    log_config.apply_options(options)

    logging.captureWarnings(True)

    # Load the configuration
    Config.load_config(options.config_file)

    # start the command
    if not hasattr(options, "func"):
        # show help
        parser.print_usage()
        return

    def report(e: BaseException) -> None:
        if not options.errors:
            if isinstance(e, CompilerException):
                print(e.format(), file=sys.stderr)
            else:
                print(str(e), file=sys.stderr)
        else:
            sys.excepthook(*sys.exc_info())

    try:
        options.func(options)
    except ShowUsageException as e:
        print(e.args[0], file=sys.stderr)
        parser.print_usage()
    except CLIException as e:
        report(e)
        sys.exit(e.exitcode)
    except Exception as e:
        report(e)
        sys.exit(const.EXIT_FAILURE)
    except KeyboardInterrupt as e:
        report(e)
        sys.exit(const.EXIT_FAILURE)
    sys.exit(const.EXIT_OK)


if __name__ == "__main__":
    app()
