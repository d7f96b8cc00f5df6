from __future__ import annotations

import io
import os
from typing import Iterable, List, Optional

import pytest
from hypothesis import HealthCheck, settings

from cmdshell.commands import CommandTree, build_tree
from cmdshell.interface import BaseCLI, Shell, help_args, help_call

# Default profile for local runs and CI
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
# Quick profile for iterating
settings.register_profile("dev", max_examples=25, deadline=None)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


class FakeCLI(BaseCLI):
    """Scripted frontend: hands out queued lines, then reports end of input."""

    def __init__(self, lines: Iterable[Optional[str]] = ()) -> None:
        super().__init__()
        self.lines: List[Optional[str]] = list(lines)
        self.prompts: List[str] = []
        self.messages: List[str] = []
        self.entered = False
        self.exited = False
        self.history_calls: List[tuple] = []
        self.history_error: Optional[OSError] = None

    def load_history(self, path, limit) -> None:
        self.history_calls.append(("load", path, limit))
        if self.history_error is not None:
            raise self.history_error

    def save_history(self, path, limit) -> None:
        self.history_calls.append(("save", path, limit))
        if self.history_error is not None:
            raise self.history_error

    def setup(self) -> None:
        self.entered = True

    def teardown(self) -> None:
        self.exited = True

    def get_line(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        if not self.lines:
            return None
        return self.lines.pop(0)

    def message(self, text: str) -> None:
        self.messages.append(text)


def _echo(*args: str) -> tuple[str, ...]:
    return args


def _boom(*args: str) -> None:
    raise RuntimeError("boom")


def make_tree() -> CommandTree:
    return build_tree({
        "help": {
            "description": "Print helpful information",
            "method": help_call(),
            "complete": help_args(),
        },
        "h": {"synonym_of": "help", "excluded_from_completion": True},
        "config": {
            "description": "Configure things",
            "subtree": {
                "network": {
                    "description": "Network settings",
                    "subtree": {
                        "set-dns": {
                            "description": "Set the DNS server",
                            "min_args": 1,
                            "max_args": 1,
                            "proc": _echo,
                        },
                        "show": {
                            "description": "Show network settings",
                            "proc": "dns: none\n",
                        },
                    },
                },
            },
        },
        "copy": {
            "description": "Copy things",
            "min_args": 1,
            "max_args": 2,
            "proc": _echo,
            "complete": [["alpha", "beta"], "Destination name"],
        },
        "remind": {"description": "Takes anything", "complete": "Type anything"},
        "fail": {"description": "Always fails", "proc": _boom},
        "empty": {"description": "Does nothing"},
    })


@pytest.fixture
def tree() -> CommandTree:
    return make_tree()


@pytest.fixture
def out() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def err() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def make_shell(tree, out, err):
    """Factory: a Shell over the test tree fed by a FakeCLI."""

    def _make(lines: Iterable[Optional[str]] = (), **kwargs) -> Shell:
        kwargs.setdefault("commands", tree)
        kwargs.setdefault("app", "test")
        return Shell(cli=FakeCLI(lines), out=out, err=err, **kwargs)

    return _make


@pytest.fixture
def fake_cli():
    """The scripted frontend class, for tests that build their own Shell."""
    return FakeCLI
