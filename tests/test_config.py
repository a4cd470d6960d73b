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

import pytest

from soyparse import config, const
from soyparse.config import Config, Option, is_output_format, is_positive_int
from soyparse.parser import config as parser_config
from utils import log_contains


def test_defaults(soy_config):
    assert parser_config.max_nesting_depth.get() == 32
    assert config.output_format.get() is const.OutputFormat.json
    assert config.output_indent.get() == 2


def test_config_file(soy_config, tmp_path):
    cfg = tmp_path / "soyparse.cfg"
    cfg.write_text("[parser]\nmax_nesting_depth=5\n\n[output]\nformat=yaml\n")
    Config.load_config(str(cfg), main_cfg_file=str(tmp_path / "missing.cfg"))
    assert parser_config.max_nesting_depth.get() == 5
    assert config.output_format.get() is const.OutputFormat.yaml


def test_local_config_file(soy_config, tmp_path):
    (tmp_path / ".soyparse.cfg").write_text("[output]\nindent=4\n")
    Config.load_config(main_cfg_file=str(tmp_path / "missing.cfg"))
    assert config.output_indent.get() == 4


def test_missing_config_file(soy_config, tmp_path, caplog):
    Config.load_config(str(tmp_path / "nope.cfg"), main_cfg_file=str(tmp_path / "missing.cfg"))
    log_contains(caplog, "soyparse.config", logging.WARNING, "does not exist")
    assert parser_config.max_nesting_depth.get() == 32


def test_environment_overrides_file(soy_config, monkeypatch):
    parser_config.max_nesting_depth.set("5")
    assert parser_config.max_nesting_depth.get() == 5
    monkeypatch.setenv("SOYPARSE_PARSER_MAX_NESTING_DEPTH", "7")
    assert parser_config.max_nesting_depth.get() == 7
    assert Config.get("parser", "max_nesting_depth") == 7


def test_invalid_values(soy_config):
    parser_config.max_nesting_depth.set("0")
    with pytest.raises(ValueError):
        parser_config.max_nesting_depth.get()
    config.output_format.set("xml")
    with pytest.raises(ValueError):
        config.output_format.get()


def test_validators(soy_config):
    assert is_positive_int("3") == 3
    with pytest.raises(ValueError):
        is_positive_int("-1")
    assert is_output_format("yaml") is const.OutputFormat.yaml
    with pytest.raises(ValueError):
        is_output_format("xml")


def test_undefined_option(soy_config, caplog):
    assert Config.get("unknown", "x", "default") == "default"
    log_contains(caplog, "soyparse.config", logging.WARNING, "Config section unknown not defined")


def test_option_registration(soy_config, caplog):
    option = Option("test", "some_option", 3, "An option used in tests", is_positive_int)
    assert option.name == "some-option"
    assert option.get() == 3
    assert Config.get("test", "some_option", "3") == 3
    option.set("4")
    assert Config.get("test", "some-option") == 4
    Config.get("test", "other")
    log_contains(caplog, "soyparse.config", logging.WARNING, "Config name other not defined in section test")
