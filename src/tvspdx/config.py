"""Read tvspdx config file."""
from __future__ import annotations
from dataclasses import fields, dataclass

from typing import TYPE_CHECKING, get_type_hints, ClassVar

from typeguard import check_type, TypeCheckError
from tomlkit import parse
from tomlkit.exceptions import TOMLKitError

import logging
import os

if TYPE_CHECKING:
    from typing import Type, TypeVar

    T = TypeVar("T", bound="ConfigSection")


def known_config_files() -> list[str]:
    """Return the configuration files to look for, in loading order.

    ``TVSPDX_CONFIG`` replaces the default locations when set.
    """
    if "TVSPDX_CONFIG" in os.environ:
        return [os.environ["TVSPDX_CONFIG"]]
    return [
        os.path.join(
            os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config")),
            "tvspdx.toml",
        ),
        os.path.expanduser("~/tvspdx.toml"),
    ]


@dataclass
class ConfigSection:
    title: ClassVar[str]

    @classmethod
    def load(cls: Type[T]) -> T:
        """Load a section of the configuration file.

        To load a new section, subclass ConfigSection and document the
        fields that you expect to parse, e.g.::

            @dataclass
            class MyConfig(ConfigSection):
                title = "my_config_subsection"
                option : str = "default value"

        my_config = MyConfig.load()

        Values whose type does not match the field annotation are logged
        and ignored, the field default is kept.
        """
        schema = get_type_hints(cls)
        cls_fields = {f.name: schema[f.name] for f in fields(cls) if f.name != "title"}
        kwargs = {}

        for k, v in Config.load_section(cls.title).items():
            if k in cls_fields:
                try:
                    check_type(v, cls_fields[k])
                except TypeCheckError as err:
                    logging.error(f"{cls.title}.{k}: {err}")
                else:
                    kwargs[k] = v

        return cls(**kwargs)  # type: ignore


@dataclass
class ParserConfig(ConfigSection):
    """Tag-value parser settings.

    :ivar strict_single_value: when True, a tag that may appear only once per
        section raises an error when repeated instead of overwriting the
        previous value.
    """

    title: ClassVar[str] = "parser"

    strict_single_value: bool = False


class Config:
    """Load tvspdx configuration file and validate each section.

    This class expose the .load_section(<section>) method that can be used
    by ConfigSection instance corresponding to the loaded configuration
    section after validation.
    """

    data: ClassVar[dict] = {}
    loaded: ClassVar[bool] = False

    @classmethod
    def load_section(cls, section: str) -> dict:
        """Load a configuration section content.

        :param section: if contains "." nested subsection will be found. For
            instance "log.fmt" will return the section:

            [log]
              [log.fmt]
        :return: the configuration dict
        """
        if not cls.loaded:
            cls.load()

        subsections = section.split(".")
        result = cls.data
        for subsection in subsections:
            result = result.get(subsection, {})

        return result

    @classmethod
    def load_file(cls, filename: str) -> None:
        """Load one configuration file on top of the current data.

        :param filename: configuration file to load
        """
        with open(filename) as f:
            try:
                cls.data.update(parse(f.read()).unwrap())
            except TOMLKitError as e:
                logging.error(f"cannot load {filename}: {e}")
        cls.loaded = True

    @classmethod
    def load(cls) -> None:
        """Load the configuration file(s).

        Note that this method is automatically called the first time
        .load_section() is called.
        """
        for config_file in known_config_files():
            if os.path.isfile(config_file):
                cls.load_file(config_file)
        cls.loaded = True

    @classmethod
    def reset(cls) -> None:
        """Forget any loaded configuration."""
        cls.data = {}
        cls.loaded = False
