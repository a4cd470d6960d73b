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

import argparse
import json
import sys

import pytest
import yaml

import soyparse.app
from soyparse.app import cmd_parser
from soyparse.ast import export as ast_export
from soyparse.command import CLIException, Command, Commander, ShowUsageException
from soyparse.config import Config

VALID = """{namespace a.b}
{template .hello}
  Hello {$name}
{/template}
{deltemplate x.button}{/deltemplate}
"""

INVALID = """{namespace a.b}
{template .hello}
  {else}
{/template}
"""


def app(args):
    parser = cmd_parser()

    options = parser.parse_args(args=args)

    Config.load_config(options.config_file)

    if not hasattr(options, "func"):
        # show help
        parser.print_usage()
        return

    options.func(options)


def test_help(capsys):
    with pytest.raises(SystemExit):
        app(["-h"])
    out, _ = capsys.readouterr()
    assert "usage: soyparse" in out

    app(["help"])
    out, _ = capsys.readouterr()
    assert "commands:" in out

    with pytest.raises(SystemExit):
        app(["help", "check"])
    out, _ = capsys.readouterr()
    assert "--export-report" in out

    with pytest.raises(ShowUsageException):
        app(["help", "unknown"])


def test_list_commands(capsys):
    app(["list-commands"])
    out, _ = capsys.readouterr()
    assert out.startswith("The following commands are available:")
    for name in ("check", "dump", "templates", "help"):
        assert " %s: " % name in out


def test_command_registry():
    def run(options):
        pass

    with pytest.raises(Exception, match="Command check already registered"):
        Commander.add(Command("check", run, "again"))

    def config(parser, parents):
        parser.add_argument("target")

    parser = argparse.ArgumentParser(prog="x")
    verbosity = argparse.ArgumentParser(add_help=False)
    verbosity.add_argument("-v", "--verbose", action="count", default=argparse.SUPPRESS)
    subparsers = parser.add_subparsers()
    Command("quiet", run, "no flags", parser_config=config, add_verbose_flag=False).add_parser(subparsers, verbosity)
    Command("loud", run, "with flags").add_parser(subparsers, verbosity)

    options = parser.parse_args(["quiet", "t"])
    assert options.func is run
    assert options.target == "t"
    assert parser.parse_args(["loud", "-vv"]).verbose == 2
    with pytest.raises(SystemExit):
        parser.parse_args(["quiet", "t", "-v"])


def test_check(soy_config, write_soy, capsys):
    path = write_soy(VALID)
    app(["check", path])
    out, _ = capsys.readouterr()
    assert out == "%s: OK\n" % path


def test_check_failure(soy_config, write_soy, capsys):
    good = write_soy(VALID, "good.soy")
    bad = write_soy(INVALID, "bad.soy")
    with pytest.raises(CLIException) as e:
        app(["check", good, bad])
    assert e.value.exitcode == 1
    assert str(e.value) == "1 of 2 files failed to parse"
    out, _ = capsys.readouterr()
    assert "%s: OK" % good in out
    assert "Syntax error at line 3, column 3" in out
    assert "(%s:3:3)" % bad in out


def test_check_report(soy_config, write_soy, tmp_path):
    good = write_soy(VALID, "good.soy")
    bad = write_soy(INVALID, "bad.soy")
    missing = str(tmp_path / "missing.soy")
    report_file = tmp_path / "report.json"
    with pytest.raises(CLIException):
        app(["check", good, bad, missing, "--export-report", str(report_file)])

    report = ast_export.ParseReport.model_validate_json(report_file.read_text())
    assert [f.file for f in report.files] == [good, bad, missing]
    assert report.files[0].templates == ["a.b.hello", "x.button"]
    assert report.files[0].errors == []
    error = report.files[1].errors[0]
    assert error.category == ast_export.ErrorCategory.parser
    assert error.location.uri == bad
    assert error.location.range.start == ast_export.Position(line=2, character=2)
    assert "'{/template}'" in error.expected
    assert report.files[2].errors[0].category == ast_export.ErrorCategory.internal
    assert report.files[2].errors[0].type == "builtins.FileNotFoundError"


def test_dump_json(soy_config, write_soy, capsys):
    path = write_soy(VALID)
    app(["dump", path])
    out, _ = capsys.readouterr()
    data = json.loads(out)
    assert data["kind"] == "Program"
    assert data["namespace"] == ["a", "b"]
    assert [t["name"] for t in data["templates"]] == [".hello", "x.button"]
    assert data["templates"][1]["kind"] == "DelTemplate"


def test_dump_yaml(soy_config, write_soy, capsys):
    path = write_soy(VALID)
    app(["dump", "--format", "yaml", path])
    out, _ = capsys.readouterr()
    assert yaml.safe_load(out)["templates"][0]["body"][1]["raw"] == "$name"


def test_dump_format_from_config(soy_config, write_soy, tmp_path, capsys):
    path = write_soy(VALID)
    cfg = tmp_path / "custom.cfg"
    cfg.write_text("[output]\nformat=yaml\n")
    app(["-c", str(cfg), "dump", path])
    out, _ = capsys.readouterr()
    assert out.startswith("kind: Program\n")


def test_dump_errors(soy_config, write_soy, tmp_path):
    with pytest.raises(CLIException) as e:
        app(["dump", str(tmp_path / "missing.soy")])
    assert e.value.exitcode == 1
    assert "Unable to read" in str(e.value)

    with pytest.raises(CLIException):
        app(["templates", str(tmp_path / "missing.soy")])


def test_templates(soy_config, write_soy, capsys):
    first = write_soy(VALID, "first.soy")
    second = write_soy("{namespace c}{template .t}{/template}", "second.soy")
    app(["templates", first, second])
    out, _ = capsys.readouterr()
    assert out.splitlines() == ["a.b.hello", "x.button", "c.t"]


@pytest.mark.parametrize("source,exitcode", [(VALID, 0), (INVALID, 1)])
def test_exit_code(soy_config, write_soy, monkeypatch, capsys, source, exitcode):
    path = write_soy(source)
    monkeypatch.setattr(sys, "argv", ["soyparse", "check", path])
    with pytest.raises(SystemExit) as e:
        soyparse.app.app()
    assert e.value.code == exitcode
    if exitcode:
        _, err = capsys.readouterr()
        assert "1 of 1 files failed to parse" in err
