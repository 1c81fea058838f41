"""Application state and configuration."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from itembisect.core.base import BaseConfig, BaseState
from itembisect.core.log import Logger
from itembisect.core.yaml_settings import (
    CONFIG_FILENAME,
    YamlWithIncludesSettingsSource,
)

# Names usable in {a.b} templates besides fields of State itself,
# e.g. {platformdirs.user_state_dir}
TEMPLATE_NAMESPACE = {
    'os': os,
    'platformdirs': platformdirs,
    'Path': Path,
}


class BisectConfig(BaseConfig):
    """What to bisect and how to test each item."""

    test_with: str | None = Field(
        default=None,
        description=(
            "Command run for every tested item. The placeholder is "
            "replaced with the item (e.g. 'make test REV=@i')"
        ),
    )
    items_from_file: Path | None = Field(
        default=None,
        description="Text file listing the items, one per line, good first",
    )
    next_state_with: str | None = Field(
        default=None,
        description=(
            "Optional command run before the test to switch to the item "
            "(e.g. 'git checkout @i')"
        ),
    )
    placeholder: str = Field(
        default="@i",
        description="Token replaced by the current item in commands",
    )
    workdir: Path | None = Field(
        default=None,
        description="Working directory for both commands",
    )
    command_timeout: int | None = Field(
        default=None,
        description="Seconds before a command is killed (none by default)",
    )
    show_output: bool = Field(
        default=True,
        description="Echo command output to the terminal",
    )
    binary: bool = Field(
        default=False,
        description="Only accept pass/fail verdicts (no ignore)",
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default_factory=Logger,
        description="Logger configuration and runtime instance"
    )
    bisect: BisectConfig = Field(
        default_factory=BisectConfig,
        description="Bisection inputs and command settings"
    )
    session_name: str = Field(
        default="bisect",
        description="Name of this session (used for log paths)",
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir("itembisect",
                                                     appauthor=False))
        ),
        description=(
            "Root directory for log files "
            "(supports {platformdirs.*} templates)"
        ),
    )

    def setup_logging(self) -> Logger:
        """Install the configured logger as the global singleton."""
        from itembisect.core.log import setup_logger
        from itembisect.core.yaml_settings import _cleanup_bootstrap_logger

        self.logger = setup_logger(
            log_root=self.log_root,
            session_name=self.session_name,
            console=self.logger.console,
            file=self.logger.file,
            logfire=self.logger.logfire,
            level=self.logger.level,
        )
        _cleanup_bootstrap_logger()
        return self.logger


class BisectRunState(BaseState):
    """Bisection workflow runtime state (mutates during execution)."""

    items: Any = Field(
        default=None,
        description="Loaded ItemSequence",
    )
    oracle: Any = Field(
        default=None,
        description=(
            "Verdict source; a console prompt is used when unset"
        ),
    )
    tester: Any = Field(
        default=None,
        description="Per-item test step handed to the engine",
    )
    report: Any = Field(
        default=None,
        description="Final Report once the engine finishes",
    )
    status: str = Field(
        default="pending",
        description="Workflow status: pending, loaded, running, complete",
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)


class Runtime(BaseModel):
    """Runtime state grouped by workflow."""

    bisect: BisectRunState = Field(
        default_factory=BisectRunState,
        description="Bisection workflow runtime state"
    )


class State(BaseSettings):
    """Configuration plus runtime state; the object every workflow node
    receives.

    - config: loaded from YAML/env/CLI, read-only during a run
    - runtime: mutated by workflow nodes
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)"
    )
    runtime: Runtime = Field(
        default_factory=Runtime,
        description="Runtime state (mutates during workflow execution)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to include and merge. "
            "Use --include on CLI or include: in YAML files."
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file=CONFIG_FILENAME,
        env_file=".env",
        env_prefix="ITEMBISECT_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore'
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Highest priority first: init args, YAML (with includes),
        .env, environment, secrets."""
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    @model_validator(mode="after")
    def substitute_templates(self) -> "State":
        """Expand {config.x} and {platformdirs.x} templates in every
        string and Path field."""
        self._substitute_recursive(self)
        return self

    def _substitute_recursive(self, obj: Any) -> None:
        if isinstance(obj, BaseModel):
            for field_name in obj.__class__.model_fields:
                value = getattr(obj, field_name)
                new_value = self._substitute_value(value)
                if new_value is not value:
                    setattr(obj, field_name, new_value)
        elif isinstance(obj, dict):
            for key in obj:
                obj[key] = self._substitute_value(obj[key])
        elif isinstance(obj, list):
            for i, value in enumerate(obj):
                obj[i] = self._substitute_value(value)

    def _substitute_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self._substitute_string(value)
        if isinstance(value, Path):
            return Path(self._substitute_string(str(value)))
        if isinstance(value, (BaseModel, dict, list)):
            self._substitute_recursive(value)
        return value

    def _substitute_string(self, value: str) -> str:
        """Replace {dotted.path} references; unknown ones are kept.

        Examples:
            "{config.session_name}.log" -> "bisect.log"
            "{platformdirs.user_state_dir}"
            -> "~/.local/state/itembisect"
        """
        def replace_template(match):
            parts = match.group(1).split(".")

            if parts[0] in TEMPLATE_NAMESPACE:
                obj = TEMPLATE_NAMESPACE[parts[0]]
                parts = parts[1:]
            else:
                obj = self

            try:
                for part in parts:
                    obj = getattr(obj, part)
                if callable(obj):
                    obj = obj('itembisect', appauthor=False)
                return str(obj)
            except (AttributeError, TypeError):
                return match.group(0)

        return re.sub(r'\{([a-z._]+)\}', replace_template, value)


__all__ = [
    "BisectConfig",
    "BisectRunState",
    "Config",
    "Runtime",
    "State",
]
