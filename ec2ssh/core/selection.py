"""Interactive instance selection through fzf."""

from __future__ import annotations

import logging
import shlex
import subprocess
import tempfile
from collections.abc import Callable
from pathlib import Path
from string import Formatter
from typing import Any, Protocol

from ec2ssh.constants import FZF_ABORT_EXIT_CODE, FZF_BINARY, FZF_NO_MATCH_EXIT_CODE
from ec2ssh.core.signals import interactive_child
from ec2ssh.models import InstanceRecord

logger = logging.getLogger(__name__)

_SAMPLE_RECORD = InstanceRecord(instance_id="i-00000000", state="running")


class SelectionAborted(Exception):
    """The user cancelled the interactive selection."""


class SelectionError(RuntimeError):
    """The selection tool is missing or failed."""


class TemplateError(ValueError):
    """A display template references an unknown field or is malformed."""


class _TagLookup(dict):
    def __missing__(self, key: str) -> str:
        return ""


def template_fields(record: InstanceRecord) -> dict[str, Any]:
    """Return the fields available to list and preview templates."""
    tags = record.tag_map
    tag_lines = "\n".join(f"  {key}: {value}" for key, value in sorted(tags.items()))

    return {
        "instance_id": record.instance_id,
        "name": record.name,
        "state": record.state,
        "region": record.region,
        "instance_type": record.instance_type or "",
        "private_ip": record.private_ip or "",
        "public_ip": record.public_ip or "",
        "public_dns": record.public_dns or "",
        "tags": _TagLookup(tags),
        "tag_lines": tag_lines,
    }


class InstanceTemplate:
    """A ``str.format`` template rendered against an instance.

    The template is test-rendered on construction so that mistakes surface as
    configuration errors before any network call.

    Parameters
    ----------
    template : str
        Format string, e.g. ``"{instance_id}: {tags[Name]}"``

    Raises
    ------
    TemplateError
        If the template is malformed or references an unknown field
    """

    def __init__(self, template: str) -> None:
        self.template = template

        try:
            list(Formatter().parse(template))
        except ValueError as e:
            raise TemplateError(f"Invalid template {template!r}: {e}") from e

        self.render(_SAMPLE_RECORD)

    def render(self, record: InstanceRecord) -> str:
        try:
            return self.template.format_map(template_fields(record))
        except KeyError as e:
            raise TemplateError(
                f"Unknown field {e} in template {self.template!r}"
            ) from e
        except (IndexError, AttributeError, ValueError) as e:
            raise TemplateError(f"Invalid template {self.template!r}: {e}") from e


class Selector(Protocol):
    """Interactive multi-select over display strings."""

    def choose(self, items: list[str], previews: list[str]) -> list[int]: ...


class FzfSelector:
    """Multi-select with the fzf binary.

    Each line fed to fzf is ``index<TAB>display``; the index column is hidden
    and used to map the chosen lines back. Previews are written to a temporary
    directory and shown with ``cat``.

    Parameters
    ----------
    runner : Callable[..., Any] | None
        Process runner with the ``subprocess.run`` signature
    binary : str
        fzf executable name or path
    """

    def __init__(
        self, runner: Callable[..., Any] | None = None, binary: str = FZF_BINARY
    ) -> None:
        self.runner = runner or subprocess.run
        self.binary = binary

    def build_args(self, preview_dir: str) -> list[str]:
        preview_command = f"cat {shlex.quote(preview_dir)}/{{1}}.txt"
        return [
            self.binary,
            "--multi",
            "--delimiter",
            "\t",
            "--with-nth",
            "2..",
            "--preview",
            preview_command,
            "--preview-window",
            "right:50%:wrap",
        ]

    def choose(self, items: list[str], previews: list[str]) -> list[int]:
        """Let the user pick items.

        Parameters
        ----------
        items : list[str]
            One display string per item
        previews : list[str]
            One preview string per item

        Returns
        -------
        list[int]
            Chosen indexes in the order fzf reports them. Empty when nothing
            matched

        Raises
        ------
        SelectionAborted
            If the user pressed Esc or Ctrl+C
        SelectionError
            If fzf is not installed or failed
        """
        lines = "\n".join(
            f"{index}\t{' '.join(item.splitlines())}" for index, item in enumerate(items)
        )

        with tempfile.TemporaryDirectory(prefix="ec2ssh-") as preview_dir:
            for index, preview in enumerate(previews):
                (Path(preview_dir) / f"{index}.txt").write_text(preview)

            try:
                with interactive_child():
                    result = self.runner(
                        self.build_args(preview_dir),
                        input=lines,
                        text=True,
                        stdout=subprocess.PIPE,
                        check=False,
                    )
            except FileNotFoundError as e:
                raise SelectionError(
                    f"{self.binary} not found. Install with: brew install fzf"
                ) from e

        if result.returncode == FZF_ABORT_EXIT_CODE:
            raise SelectionAborted()

        if result.returncode == FZF_NO_MATCH_EXIT_CODE:
            return []

        if result.returncode != 0:
            raise SelectionError(f"{self.binary} exited with status {result.returncode}")

        indexes: list[int] = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            index_str = line.split("\t", 1)[0]
            try:
                indexes.append(int(index_str))
            except ValueError:
                raise SelectionError(f"Unexpected selection output: {line!r}") from None

        return indexes


class SelectionAdapter:
    """Render instances for a selector and map the choice back.

    Parameters
    ----------
    selector : Selector
        Interactive selection collaborator
    list_template : InstanceTemplate
        Template for the one-line display string
    preview_template : InstanceTemplate
        Template for the preview pane
    """

    def __init__(
        self,
        selector: Selector,
        list_template: InstanceTemplate,
        preview_template: InstanceTemplate,
    ) -> None:
        self.selector = selector
        self.list_template = list_template
        self.preview_template = preview_template

    def select(self, records: list[InstanceRecord]) -> list[int]:
        """Return the indexes of the instances the user picked.

        Raises
        ------
        SelectionAborted
            If the user cancelled
        SelectionError
            If the selector failed or returned an out-of-range index
        """
        items = [self.list_template.render(record) for record in records]
        previews = [self.preview_template.render(record) for record in records]

        indexes = self.selector.choose(items, previews)

        for index in indexes:
            if not 0 <= index < len(records):
                raise SelectionError(f"Selection index {index} out of range")

        logger.debug("Selected %d of %d instances", len(indexes), len(records))
        return indexes
