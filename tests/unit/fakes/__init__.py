"""Test doubles for ec2ssh collaborators."""

from fakes.fake_directory import FakeDirectory
from fakes.fake_runner import FakeRunner
from fakes.fake_selector import FakeSelector

__all__ = ["FakeDirectory", "FakeRunner", "FakeSelector"]
