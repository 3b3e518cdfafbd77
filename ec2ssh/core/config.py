import copy
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from omegaconf import OmegaConf
from omegaconf.errors import InterpolationResolutionError

from ec2ssh.constants import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATH,
    DEFAULT_REGION,
    DEFAULT_SSM_COMMAND,
)
from ec2ssh.core.profiles import region_for_profile
from ec2ssh.core.resolver import ResolverPolicy
from ec2ssh.core.selection import InstanceTemplate
from ec2ssh.models import FilterPredicate, RegionQuery
from ec2ssh.templates import DEFAULT_LIST_TEMPLATE, DEFAULT_PREVIEW_TEMPLATE

logger = logging.getLogger(__name__)


def split_list(value: Any) -> list[str]:
    """Normalise a list or comma-separated string into a list of strings."""
    if value is None:
        return []

    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]

    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]

    raise ValueError(f"Expected a list or comma-separated string, got {type(value).__name__}")


@dataclass(frozen=True)
class ConnectOptions:
    """Fully merged options for one connect run."""

    regions: tuple[str, ...]
    use_private_ip: bool
    filters: tuple[str, ...]
    template: str
    preview_template: str
    profile: str | None = None
    print_only: bool = False
    ssm_tag_key: str = ""
    ssm_tag_value: str = ""
    ssm_command: str = DEFAULT_SSM_COMMAND

    def region_queries(self) -> list[RegionQuery]:
        """One query per region, filters validated.

        Raises
        ------
        FilterSyntaxError
            If a filter is malformed
        """
        return [RegionQuery.from_strings(region, self.filters) for region in self.regions]

    def resolver_policy(self) -> ResolverPolicy:
        return ResolverPolicy(
            use_private_ip=self.use_private_ip,
            ssm_tag_key=self.ssm_tag_key,
            ssm_tag_value=self.ssm_tag_value,
        )


class ConfigLoader:
    """Load and merge YAML configuration with defaults.

    Parameters
    ----------
    region_lookup : Callable[[str | None], str | None] | None
        Maps a profile to its configured region. Defaults to reading the AWS
        shared config
    """

    def __init__(self, region_lookup: Callable[[str | None], str | None] | None = None) -> None:
        self.BUILT_IN_DEFAULTS = {
            "regions": [DEFAULT_REGION],
            "use_private_ip": True,
            "filters": [],
            "template": DEFAULT_LIST_TEMPLATE,
            "preview_template": DEFAULT_PREVIEW_TEMPLATE,
            "ssm": {
                "tag_key": "",
                "tag_value": "",
                "command": DEFAULT_SSM_COMMAND,
            },
        }
        self.region_lookup = region_lookup or region_for_profile

    @staticmethod
    def default_config_path() -> Path:
        """Return ``$EC2SSH_CONFIG`` or the per-user config path."""
        return Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)).expanduser()

    def load_config(self, config_path: str | None = None) -> dict[str, Any]:
        """Load configuration from YAML file.

        Parameters
        ----------
        config_path : str | None
            Path to YAML config file. If None, checks EC2SSH_CONFIG env var,
            then falls back to ~/.config/ec2-ssh/config.yaml

        Returns
        -------
        dict[str, Any]
            Parsed configuration with all variable interpolations resolved,
            or an empty dict when the file does not exist

        Raises
        ------
        ValueError
            If the file is not valid YAML or interpolation fails
        RuntimeError
            If the file cannot be read
        omegaconf.errors.InterpolationResolutionError
            If undefined variables are referenced or circular references exist
        """
        config_file = Path(config_path).expanduser() if config_path else self.default_config_path()

        if not config_file.exists():
            logger.debug("No config file at %s, using defaults", config_file)
            return {}

        try:
            cfg = OmegaConf.load(config_file)
        except yaml.YAMLError as e:
            logger.error("Failed to parse YAML config file %s: %s", config_file, e)
            raise ValueError(f"Invalid YAML in {config_file}: {e}") from e
        except OSError as e:
            logger.error("Failed to read config file %s: %s", config_file, e)
            raise RuntimeError(f"Failed to read config file {config_file}: {e}") from e

        if cfg is None:
            return {}

        hoisted: list[str] = []
        if "vars" in cfg:
            vars_dict = OmegaConf.to_container(cfg.vars, resolve=False)
            for key, value in vars_dict.items():
                if key not in cfg:
                    cfg[key] = value
                    hoisted.append(key)

        try:
            config = OmegaConf.to_container(cfg, resolve=True, throw_on_missing=True)
        except InterpolationResolutionError as e:
            logger.error("Failed to resolve configuration variables: %s", e)
            raise
        except (ValueError, KeyError, AttributeError) as e:
            logger.error("Failed to resolve configuration variables: %s", e)
            raise ValueError(f"Configuration variable resolution error: {e}") from e

        if not isinstance(config, dict):
            raise ValueError(f"Config file {config_file} must contain a mapping")

        for key in ["vars", *hoisted]:
            config.pop(key, None)
        return config

    def merge_config(
        self,
        config: dict[str, Any],
        overrides: dict[str, Any] | None = None,
        profile: str | None = None,
    ) -> dict[str, Any]:
        """Merge built-in defaults, file configuration and CLI overrides.

        When neither the file nor the overrides name any region and a profile
        is given, the profile's region from the AWS config is used.

        Parameters
        ----------
        config : dict[str, Any]
            Configuration from ``load_config``
        overrides : dict[str, Any] | None
            Values from the command line; None values are ignored
        profile : str | None
            Active AWS profile

        Returns
        -------
        dict[str, Any]
            Merged configuration
        """
        merged = copy.deepcopy(self.BUILT_IN_DEFAULTS)
        regions_given = False

        for source in (config, overrides or {}):
            for key, value in source.items():
                if value is None:
                    continue

                if key in ("region", "regions"):
                    merged["regions"] = list(dict.fromkeys(split_list(value)))
                    regions_given = True
                elif key == "ssm" and isinstance(value, dict):
                    merged["ssm"].update(value)
                else:
                    merged[key] = value

        if not regions_given and profile:
            detected = self.region_lookup(profile)
            if detected:
                logger.debug("Using region %s from profile %s", detected, profile)
                merged["regions"] = [detected]

        return merged

    def validate_config(self, config: dict[str, Any]) -> None:
        """Validate configuration has required fields and correct types.

        Parameters
        ----------
        config : dict[str, Any]
            Merged configuration to validate

        Raises
        ------
        ValueError
            If configuration is invalid
        """
        self._validate_regions(config)
        self._validate_types(config)
        self._validate_filters(config)
        self._validate_templates(config)

    def _validate_regions(self, config: dict[str, Any]) -> None:
        regions = config.get("regions")

        if not isinstance(regions, list):
            raise ValueError("regions must be a list")

        if not regions:
            raise ValueError("at least one region is required")

        for region in regions:
            if not isinstance(region, str) or not region:
                raise ValueError("regions entries must be non-empty strings")

    def _validate_types(self, config: dict[str, Any]) -> None:
        type_validations = {
            "use_private_ip": (bool, "use_private_ip must be a boolean"),
            "filters": (list, "filters must be a list"),
            "template": (str, "template must be a string"),
            "preview_template": (str, "preview_template must be a string"),
            "ssm": (dict, "ssm must be a mapping"),
        }

        for field, (expected_type, type_msg) in type_validations.items():
            if field in config and not isinstance(config[field], expected_type):
                raise ValueError(type_msg)

        for key in ("tag_key", "tag_value", "command"):
            value = config["ssm"].get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"ssm.{key} must be a string")

        if config["ssm"].get("tag_value") and not config["ssm"].get("tag_key"):
            raise ValueError("ssm.tag_value requires ssm.tag_key")

    def _validate_filters(self, config: dict[str, Any]) -> None:
        for raw in config.get("filters", []):
            if not isinstance(raw, str):
                raise ValueError("filters entries must be strings")
            FilterPredicate.parse(raw)

    def _validate_templates(self, config: dict[str, Any]) -> None:
        InstanceTemplate(config["template"])
        InstanceTemplate(config["preview_template"])

    def build_options(
        self,
        config: dict[str, Any],
        profile: str | None = None,
        print_only: bool = False,
    ) -> ConnectOptions:
        """Validate a merged configuration and freeze it into ConnectOptions.

        Raises
        ------
        ValueError
            If configuration is invalid
        """
        self.validate_config(config)
        ssm = config["ssm"]

        return ConnectOptions(
            regions=tuple(config["regions"]),
            use_private_ip=config["use_private_ip"],
            filters=tuple(config["filters"]),
            template=config["template"],
            preview_template=config["preview_template"],
            profile=profile or None,
            print_only=print_only,
            ssm_tag_key=ssm.get("tag_key") or "",
            ssm_tag_value=ssm.get("tag_value") or "",
            ssm_command=ssm.get("command") or DEFAULT_SSM_COMMAND,
        )
