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
from collections import abc
from configparser import ConfigParser

import pytest

from soyparse.config import Config
from soyparse.logging import SoyLoggerConfig


@pytest.fixture(autouse=True)
def clean_reset(monkeypatch) -> abc.Iterator[None]:
    """
    Start every test with an empty configuration and without the logging handlers of a previous test.
    """
    for name in ("SOYPARSE_PARSER_MAX_NESTING_DEPTH", "SOYPARSE_OUTPUT_FORMAT", "SOYPARSE_OUTPUT_INDENT"):
        monkeypatch.delenv(name, raising=False)
    Config._reset()
    yield
    Config._reset()
    SoyLoggerConfig.clean_instance()


@pytest.fixture
def soy_config(tmp_path, monkeypatch) -> abc.Iterator[ConfigParser]:
    """
    A configuration that does not pick up config files from the machine running the tests.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    Config.load_config(main_cfg_file=str(tmp_path / "missing.cfg"))
    yield Config._get_instance()


@pytest.fixture
def write_soy(tmp_path):
    """
    Write template source to a file and return its path.
    """

    def write(source: str, name: str = "test.soy") -> str:
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return str(path)

    return write


@pytest.fixture
def debug_logging(caplog) -> abc.Iterator[None]:
    with caplog.at_level(logging.DEBUG, logger="soyparse"):
        yield
