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
import os
from collections import defaultdict
from configparser import ConfigParser, Interpolation
from typing import Callable, Generic, Optional, TypeVar, Union, overload

from soyparse import const

LOGGER = logging.getLogger(__name__)


def _normalize_name(name: str) -> str:
    return name.replace("_", "-")


def _get_from_env(section: str, name: str) -> Optional[str]:
    return os.environ.get(f"SOYPARSE_{section}_{name}".replace("-", "_").upper(), default=None)


class LenientConfigParser(ConfigParser):
    def optionxform(self, name: str) -> str:
        name = _normalize_name(name)
        return super(LenientConfigParser, self).optionxform(name)


class Config(object):
    __instance: Optional[ConfigParser] = None
    __config_definition: dict[str, dict[str, "Option"]] = defaultdict(lambda: {})

    @classmethod
    def load_config(cls, config_file: Optional[str] = None, main_cfg_file: str = "/etc/soyparse/soyparse.cfg") -> None:
        """
        Load the configuration file
        """
        local_cfg_files: list[str] = [os.path.expanduser("~/.soyparse.cfg"), ".soyparse.cfg"]

        # Files with a higher index in the list, override config options defined by files with a lower index
        files: list[str] = [main_cfg_file] + local_cfg_files
        if config_file is not None:
            if not os.path.isfile(config_file):
                LOGGER.warning("Config file %s does not exist", config_file)
            files.append(config_file)

        config = LenientConfigParser(interpolation=Interpolation())
        loaded = config.read(files)
        LOGGER.debug("Loaded config from %s", loaded)
        cls.__instance = config

    @classmethod
    def _get_instance(cls) -> ConfigParser:
        if cls.__instance is None:
            cls.load_config()
        assert cls.__instance is not None
        return cls.__instance

    @classmethod
    def _reset(cls) -> None:
        cls.__instance = None

    @overload
    @classmethod
    def get(cls) -> ConfigParser:
        ...

    @overload
    @classmethod
    def get(cls, section: str, name: str, default_value: Optional[str] = None) -> Optional[str]:
        ...

    @classmethod
    def get(
        cls, section: Optional[str] = None, name: Optional[str] = None, default_value: Optional[str] = None
    ) -> Union[str, ConfigParser, None]:
        """
        Get the entire config or get a value directly
        """
        cfg = cls._get_instance()
        if section is None:
            return cfg

        assert name is not None
        name = _normalize_name(name)

        opt = cls.validate_option_request(section, name, default_value)

        val = _get_from_env(section, name)
        if val is not None:
            LOGGER.debug(f"Setting {section}:{name} was set using an environment variable")
        else:
            val = cfg.get(section, name, fallback=default_value)

        if not opt:
            return val
        return opt.validate(val)

    @classmethod
    def set(cls, section: str, name: str, value: str) -> None:
        """
        Override a value
        """
        name = _normalize_name(name)

        if section not in cls._get_instance():
            cls._get_instance().add_section(section)
        cls._get_instance().set(section, name, value)

    @classmethod
    def register_option(cls, option: "Option") -> None:
        cls.__config_definition[option.section][option.name] = option

    @classmethod
    def validate_option_request(cls, section: str, name: str, default_value: Optional[str]) -> Optional["Option"]:
        if section not in cls.__config_definition:
            LOGGER.warning("Config section %s not defined" % (section))
            return None
        if name not in cls.__config_definition[section]:
            LOGGER.warning("Config name %s not defined in section %s" % (name, section))
            return None
        opt = cls.__config_definition[section][name]
        if default_value is not None and opt.get_default_value() != default_value:
            LOGGER.warning(
                "Inconsistent default value for option %s.%s: defined as %s, got %s"
                % (section, name, opt.default, default_value)
            )

        return opt


def is_int(value: Union[int, str]) -> int:
    """int"""
    return int(value)


def is_positive_int(value: Union[int, str]) -> int:
    """positive int"""
    result = int(value)
    if result <= 0:
        raise ValueError("Not a positive integer: %s" % value)
    return result


def is_str(value: str) -> str:
    """str"""
    return str(value)


def is_output_format(value: Union[const.OutputFormat, str]) -> const.OutputFormat:
    """one of json, yaml"""
    return const.OutputFormat(value)


T = TypeVar("T")


class Option(Generic[T]):
    """
    Defines an option and exposes it for use

    All config option should be define prior to use, at the module level.

    :param section: section in the config file
    :param name: name of the option
    :param default: default value for this option, either a value or a function returning the value
    :param documentation: the documentation for this option
    :param validator: a function responsible for turning the string representation of the option into the correct type.
        Its docstring is used as representation for the type of the option.
    """

    def __init__(
        self,
        section: str,
        name: str,
        default: Union[T, None, Callable[[], T]],
        documentation: str,
        validator: Callable[[str], T] = is_str,
    ) -> None:
        self.section = section
        self.name = _normalize_name(name)
        self.validator = validator
        self.documentation = documentation
        self.default = default
        Config.register_option(self)

    def get(self) -> T:
        val = _get_from_env(self.section, self.name)
        if val is None:
            val = Config._get_instance().get(self.section, self.name, fallback=self.get_default_value())
        return self.validate(val)

    def validate(self, value: str) -> T:
        return self.validator(value)

    def get_default_value(self) -> Optional[T]:
        defa = self.default
        if callable(defa):
            return defa()
        else:
            return defa

    def set(self, value: str) -> None:
        """Only for tests"""
        Config.set(self.section, self.name, value)


#############################
# Output
#############################
output_format = Option(
    "output",
    "format",
    const.OutputFormat.json,
    "The format used by `soyparse dump` when no --format is given",
    is_output_format,
)

output_indent = Option("output", "indent", 2, "Indentation used when writing json output", is_int)
