#!/usr/bin/env python3
"""ec2ssh - fuzzy-find EC2 instances and open shell sessions to them."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any

import boto3

for _boto_module in ["botocore", "boto3", "urllib3"]:
    logging.getLogger(_boto_module).setLevel(logging.WARNING)

from ec2ssh import __version__  # noqa: E402
from ec2ssh.cli.completion import BASH_COMPLETION_SCRIPT  # noqa: E402
from ec2ssh.cli.main import main  # noqa: E402
from ec2ssh.cli.parsing import build_cli_overrides  # noqa: E402
from ec2ssh.core.aggregator import RegionAggregator  # noqa: E402
from ec2ssh.core.config import ConfigLoader, ConnectOptions  # noqa: E402
from ec2ssh.core.pipeline import ConnectPipeline  # noqa: E402
from ec2ssh.core.profiles import format_profiles, list_profiles  # noqa: E402
from ec2ssh.core.recovery import CredentialRecovery  # noqa: E402
from ec2ssh.core.selection import (  # noqa: E402
    FzfSelector,
    InstanceTemplate,
    SelectionAdapter,
    Selector,
)
from ec2ssh.providers.aws.directory import InstanceDirectory  # noqa: E402
from ec2ssh.providers.aws.errors import handle_aws_errors  # noqa: E402
from ec2ssh.providers.exceptions import ProviderCredentialsError  # noqa: E402
from ec2ssh.services.session import SessionDispatcher  # noqa: E402
from ec2ssh.templates import CONFIG_TEMPLATE  # noqa: E402

logger = logging.getLogger(__name__)


class Ec2ssh:
    """Main CLI interface for ec2ssh.

    All collaborators can be injected for testing.

    Parameters
    ----------
    session_factory : Callable[..., Any] | None
        Factory for boto3 sessions. Defaults to boto3.Session
    selector : Selector | None
        Interactive selector. Defaults to FzfSelector
    runner : Callable[..., Any] | None
        Process runner with the ``subprocess.run`` signature, shared by the
        selector, SSO login and session dispatch
    which : Callable[[str], str | None] | None
        Executable lookup with the ``shutil.which`` signature
    config_loader : ConfigLoader | None
        Configuration loader
    """

    def __init__(
        self,
        session_factory: Callable[..., Any] | None = None,
        selector: Selector | None = None,
        runner: Callable[..., Any] | None = None,
        which: Callable[[str], str | None] | None = None,
        config_loader: ConfigLoader | None = None,
    ) -> None:
        self._session_factory = session_factory or boto3.Session
        self._selector = selector
        self._runner = runner
        self._which = which
        self._config_loader = config_loader or ConfigLoader()

    def _load_options(
        self,
        profile: str | None,
        region: str | list[str] | tuple[str, ...] | None,
        use_private_ip: str | bool | None,
        filters: str | list[str] | tuple[str, ...] | None,
        print_only: bool,
    ) -> ConnectOptions:
        config = self._config_loader.load_config()
        overrides = build_cli_overrides(
            region=region, use_private_ip=use_private_ip, filters=filters
        )
        merged = self._config_loader.merge_config(config, overrides, profile=profile)
        return self._config_loader.build_options(
            merged, profile=profile, print_only=print_only
        )

    def _check_default_credentials(self) -> None:
        """Fail early with a usage hint when no profile and no credentials exist.

        Raises
        ------
        ProviderCredentialsError
            If the default credential chain yields nothing
        """
        with handle_aws_errors():
            credentials = self._session_factory().get_credentials()

        if credentials is None:
            raise ProviderCredentialsError(
                "No AWS profile specified and no default credentials found.\n\n"
                "Usage:\n"
                "  ec2-ssh connect <profile>  # Use a specific profile\n\n"
                f"Available profiles: {format_profiles(list_profiles())}"
            )

    def _build_pipeline(self, options: ConnectOptions) -> ConnectPipeline:
        """Wire the connect pipeline for ``options``."""
        directory = InstanceDirectory(
            profile=options.profile, session_factory=self._session_factory
        )
        selection = SelectionAdapter(
            selector=self._selector or FzfSelector(runner=self._runner),
            list_template=InstanceTemplate(options.template),
            preview_template=InstanceTemplate(options.preview_template),
        )
        dispatcher = SessionDispatcher(
            profile=options.profile,
            ssm_command=options.ssm_command,
            runner=self._runner,
            which=self._which,
        )

        return ConnectPipeline(
            aggregator=RegionAggregator(directory),
            recovery=CredentialRecovery(options.profile, runner=self._runner),
            selection=selection,
            policy=options.resolver_policy(),
            dispatcher=dispatcher,
            print_only=options.print_only,
        )

    def connect(
        self,
        profile: str | None = None,
        region: str | list[str] | tuple[str, ...] | None = None,
        use_private_ip: str | bool | None = None,
        filters: str | list[str] | tuple[str, ...] | None = None,
        print_only: bool = False,
    ) -> int:
        """Pick instances interactively and open shell sessions to them."""
        options = self._load_options(profile, region, use_private_ip, filters, print_only)
        queries = options.region_queries()

        if not options.profile:
            self._check_default_credentials()

        logger.debug(
            "Querying %s with %d filters", ", ".join(options.regions), len(options.filters)
        )
        return self._build_pipeline(options).run(queries)

    def profiles(self) -> None:
        """List profiles from the AWS shared config."""
        for profile in list_profiles():
            print(profile)

    def completion(self) -> None:
        """Print a bash completion script."""
        print(BASH_COMPLETION_SCRIPT, end="")

    def version(self) -> str:
        """Show the ec2ssh version."""
        return __version__

    def init(self, force: bool = False) -> None:
        """Create a default ec2-ssh configuration file."""
        config_file = ConfigLoader.default_config_path()

        if config_file.exists() and not force:
            logger.error("%s already exists. Use --force to overwrite.", config_file)
            sys.exit(1)

        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w") as f:
            f.write(CONFIG_TEMPLATE)

        print(f"Created {config_file} configuration file.")


if __name__ == "__main__":
    main()
