from __future__ import annotations

import logging
from pathlib import Path

from cmdshell.commands import CommandResult, build_tree
from cmdshell.config import ShellConfig
from cmdshell.errors import CommandNotFound
from cmdshell.interface import Shell, complete_files


# ---------------- accessors ----------------

def test_prompt_defaults_to_app_name(make_shell):
    shell = make_shell()
    assert shell.prompt() == "test> "
    assert shell.prompt("new> ") == "test> "
    assert shell.prompt() == "new> "


def test_commands_and_exit_flag_accessors(make_shell, tree):
    shell = make_shell()
    assert shell.commands() is tree
    old = shell.commands({"only": {"proc": "x\n"}})
    assert old is tree
    assert list(shell.commands()) == ["only"]

    assert shell.exit_requested() is False
    assert shell.exit_requested(True) is False
    assert shell.exit_requested() is True


def test_add_commands_merges_into_tree(make_shell, out):
    shell = make_shell()
    shell.add_commands({"extra": {"proc": "extra!\n"}})
    shell.call_cmd(["extra"])
    assert out.getvalue() == "extra!\n"


def test_tree_edits_after_construction_are_seen(make_shell, tree, out):
    shell = make_shell()
    tree["late"] = build_tree({"late": {"proc": "late\n"}})["late"]
    shell.call_cmd(["late"])
    assert out.getvalue() == "late\n"


# ---------------- the loop ----------------

def test_process_a_cmd_runs_one_line(make_shell):
    shell = make_shell(["copy a b"])
    result = shell.process_a_cmd()
    assert isinstance(result, CommandResult)
    assert result.value == ("a", "b")
    assert shell.cli.prompts == ["test> "]


def test_errors_go_to_the_error_channel(make_shell, err):
    shell = make_shell(["nosuch thing"])
    result = shell.process_a_cmd()
    assert isinstance(result.error, CommandNotFound)
    assert err.getvalue() == "[error] nosuch doesn't exist.\n"


def test_malformed_line_is_reported_and_not_run(make_shell, err):
    shell = make_shell(["copy 'a"])
    assert shell.process_a_cmd() is None
    assert err.getvalue().startswith("[error] need closing quote ['] at char 5:")
    assert shell.cli.history() == ["copy 'a"]


def test_end_of_input_requests_exit(make_shell, out):
    shell = make_shell([])
    assert shell.process_a_cmd() is None
    assert shell.exit_requested() is True
    assert out.getvalue() == "\n"


def test_run_stops_at_end_of_input(make_shell, out):
    shell = make_shell(["config network show", "", "config network show"])
    shell.run()
    assert out.getvalue() == "dns: none\ndns: none\n\n"
    assert shell.cli.entered and shell.cli.exited


def test_run_stops_when_a_command_requests_exit(make_shell, fake_cli, out):
    commands = {
        "quit": {"method": lambda ctx: ctx.shell.exit_requested(True)},
        "say": {"proc": "said\n"},
    }
    shell = Shell(commands=commands, cli=fake_cli(["say", "quit", "say"]), out=out)
    shell.run()
    assert out.getvalue() == "said\n"
    assert shell.cli.lines == ["say"]


def test_blank_line_does_nothing_by_default(make_shell, out):
    shell = make_shell(["config network show", "   "])
    shell.process_a_cmd()
    assert shell.process_a_cmd() is None
    assert out.getvalue() == "dns: none\n"


def test_blank_line_can_repeat_previous_command(make_shell, out):
    shell = make_shell(["copy a", ""], blank_repeats_cmd=True)
    shell.process_a_cmd()
    result = shell.process_a_cmd()
    assert result.value == ("a",)
    assert out.getvalue() == "copy a\n"


def test_history_records_joined_lines_without_repeats(make_shell):
    shell = make_shell(["copy  'a'", "copy a", "copy 'b c'"])
    for _ in range(3):
        shell.process_a_cmd()
    assert shell.cli.history() == ["copy a", r"copy b\ c"]
    assert shell.prevcmd == r"copy b\ c"


# ---------------- completion hook ----------------

def test_completion_function_returns_escaped_candidates(make_shell):
    shell = make_shell(commands={"open": {"complete": lambda ctx: ["my file", "it's"]}})
    assert shell.completion_function("", "open ", 5) == [r"my\ file", r"it\'s"]


def test_completion_function_uses_cursor_from_start_and_text(make_shell):
    shell = make_shell()
    assert shell.completion_function("co", "co", 0) == ["config", "copy"]
    assert shell.completion_function("n", "config n", 7) == ["network"]


def test_completion_function_matches_escaped_and_quoted_tokens(make_shell, tmp_path):
    (tmp_path / "my file.txt").write_text("x", encoding="utf-8")
    (tmp_path / "other").mkdir()
    shell = make_shell(commands={"ls": {"complete": lambda ctx: complete_files(ctx, str(tmp_path))}})
    assert shell.completion_function(r"my\ f", r"ls my\ f", 3) == [r"my\ file.txt"]
    assert shell.completion_function('"my f', 'ls "my f', 3) == [r"my\ file.txt"]


def test_completion_function_filters_list_candidates(make_shell):
    shell = make_shell()
    assert shell.completion_function("b", "copy b", 5) == ["beta"]


def test_namespace_ignores_its_own_action_and_completion(make_shell, out):
    shell = make_shell(commands={
        "ns": {
            "description": "A namespace",
            "proc": "never printed\n",
            "complete": ["never", "offered"],
            "subtree": {"sub": {"description": "A subcommand", "proc": "sub\n"}},
        },
    })
    result = shell.call_cmd(["ns"])
    assert result.ok
    assert out.getvalue() == f"{'sub':>20} -- A subcommand\n"
    assert shell.completion_function("", "ns ", 3) == ["sub"]


def test_repeated_completion_shows_reminder(make_shell):
    shell = make_shell()
    assert shell.completion_function("", "copy x ", 7) == []
    assert shell.cli.messages == []
    assert shell.completion_function("", "copy x ", 7) == []
    assert shell.cli.messages == ["Destination name"]


def test_new_prompt_resets_repeat_detection(make_shell):
    shell = make_shell(["copy a"])
    shell.completion_function("", "copy x ", 7)
    shell.process_a_cmd()
    shell.completion_function("", "copy x ", 7)
    assert shell.cli.messages == []


def test_completion_disabled(fake_cli):
    cli = fake_cli()
    Shell(commands={}, cli=cli, enable_completion=False)
    assert cli._completer is None


def test_completion_debug_logging(make_shell, caplog):
    shell = make_shell(debug_complete=4)
    with caplog.at_level(logging.DEBUG, logger="cmdshell"):
        shell.completion_function("n", "config n", 7)
    assert "tokens=<config>, <n>" in caplog.text
    assert "returning ['network']" in caplog.text
    assert "context=" in caplog.text


# ---------------- history file ----------------

def test_history_file_is_handed_to_the_frontend(make_shell, tmp_path):
    path = tmp_path / "history"
    shell = make_shell(["copy a"], history_file=path, history_max=2)
    shell.run()
    assert shell.cli.history_calls == [("load", path, 2), ("save", path, 2)]


def test_history_path_expands_the_home_directory(make_shell):
    shell = make_shell(history_file="~/.test_history")
    shell.load_history()
    assert shell.cli.history_calls[0][1] == Path("~/.test_history").expanduser()


def test_no_history_file_without_a_path_or_a_limit(make_shell, tmp_path):
    shell = make_shell(["copy a"])
    shell.run()
    assert shell.cli.history_calls == []

    shell = make_shell(["copy a"], history_file=tmp_path / "history", history_max=0)
    shell.run()
    assert shell.cli.history_calls == []


def test_history_failures_are_reported(make_shell, tmp_path, err):
    path = tmp_path / "missing-dir" / "history"
    shell = make_shell(["copy a"], history_file=path)
    shell.cli.history_error = PermissionError("denied")
    shell.run()
    assert err.getvalue() == (
        f"[error] Could not read {path}: denied\n"
        f"[error] Could not open {path} for writing: denied\n"
    )


# ---------------- configuration ----------------

def test_from_config(fake_cli):
    config = ShellConfig(app_name="demo", token_chars="=", blank_repeats_cmd=True, history_file=None)
    shell = Shell.from_config(config, cli=fake_cli())
    assert shell.prompt() == "demo> "
    assert shell.parser.token_chars == "="
    assert shell.blank_repeats_cmd is True
