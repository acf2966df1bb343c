"""
Tests for the REPL: parsing, command execution, session context and
autocomplete.
"""

import pytest
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import fragment_list_to_text, to_formatted_text

from kanbo.repl.main import execute_command, format_prompt, repl_context
from kanbo.repl.completer import create_completer
from kanbo.repl.parser import parse_command


@pytest.fixture(autouse=True)
def session(store):
    """Point the REPL session at the in-memory test store."""
    repl_context.store = store
    repl_context.current_column_id = None
    yield repl_context
    repl_context.store = None
    repl_context.current_column_id = None


def run(line):
    return execute_command(parse_command(line))


@pytest.fixture
def board(store):
    run('column add "To Do"')
    run("column add Done")
    run('add "Write docs"')
    run("add Fix bug")
    run("add Ship it --column Done")
    return store


# --- Parser ---


def test_parse_command_with_quotes_and_flags():
    result = parse_command('ADD "Write docs" -p high --due tomorrow')

    assert result.command == "add"
    assert result.args == ["Write docs"]
    assert result.flags == {"priority": "high", "due": "tomorrow"}


def test_parse_boolean_flags():
    result = parse_command("column rm Done --yes")

    assert result.args == ["rm", "Done"]
    assert result.flags == {"yes": True}


def test_parse_flag_without_value():
    assert parse_command("add Task --priority").flags == {"priority": True}


def test_parse_yes_does_not_swallow_argument():
    assert parse_command("column rm -y Done").args == ["rm", "Done"]


def test_parse_dash_is_positional():
    assert parse_command("edit 3 -p -").flags == {"priority": "-"}
    assert parse_command("mv 3 -1").args == ["3", "-1"]


def test_parse_empty_and_unclosed_quote():
    assert parse_command("   ").command == ""
    assert parse_command('add "unclosed').args == ['"unclosed']


# --- Command execution ---


def test_exit_and_quit_stop_loop():
    assert run("exit") is False
    assert run("QUIT") is False
    assert run("") is True


def test_unknown_command(capsys):
    assert run("frobnicate") is True

    assert "Unknown command" in capsys.readouterr().out


def test_add_goes_to_first_column(board):
    state = board.get_state()

    assert [t.title for t in state.column_tasks("col-1")] == ["Write docs", "Fix bug"]
    assert [t.title for t in state.column_tasks("col-2")] == ["Ship it"]


def test_add_without_columns(store, capsys):
    run("add Orphan")

    assert "no columns" in capsys.readouterr().out
    assert store.get_state().tasks == {}


def test_add_with_flags(store):
    run("column add Todo")

    run('add Release -d "Tag it" -p medium --due 2024-12-25')

    task = store.get_state().tasks["task-1"]
    assert task.description == "Tag it"
    assert task.priority.value == "Medium"
    assert task.due_date.isoformat() == "2024-12-25"


def test_add_rejects_flag_without_value(store, capsys):
    run("column add Todo")

    run("add Release --due")

    assert "--due needs a value" in capsys.readouterr().out
    assert store.get_state().tasks == {}


def test_use_sets_target_column(board, session, capsys):
    run("use done")
    run("add Deploy")

    assert session.current_column_id == "col-2"
    assert session.get_prompt() == "kanbo:[Done]> "
    titles = [t.title for t in board.get_state().column_tasks("col-2")]
    assert titles == ["Ship it", "Deploy"]

    run("use none")
    assert session.current_column_id is None
    assert session.get_prompt() == "kanbo> "


def test_use_unknown_column(board, session, capsys):
    run("use Nowhere")

    assert "not found" in capsys.readouterr().out
    assert session.current_column_id is None


def test_prompt_escapes_column_markup(store, session):
    run('column add "<b>&co"')
    run("use 1")

    text = fragment_list_to_text(to_formatted_text(format_prompt()))

    assert text == "kanbo:[<b>&co]> "


def test_deleted_current_column_is_forgotten(board, session):
    run("use Done")
    run("column rm Done --yes")

    assert session.current_column() is None
    assert session.get_prompt() == "kanbo> "


def test_edit(board):
    run('edit 2 "Fix the bug" -p high --due none')

    task = board.get_state().tasks["task-2"]
    assert task.title == "Fix the bug"
    assert task.priority.value == "High"
    assert task.due_date is None


def test_edit_blank_title_reports_error(board, capsys):
    run('edit 1 "  "')

    assert "cannot be empty" in capsys.readouterr().out
    assert board.get_state().tasks["task-1"].title == "Write docs"


def test_done_undone_multiple(board):
    run("done 1,3")
    assert service_completed(board) == {"task-1", "task-3"}

    run("undone 1")
    assert service_completed(board) == {"task-3"}


def service_completed(store):
    return {t.id for t in store.get_state().tasks.values() if t.is_completed}


def test_rm_multiple(board, capsys):
    run("rm 1 2")

    assert set(board.get_state().tasks) == {"task-3"}
    assert "Deleted: Fix bug" in capsys.readouterr().out


def test_view(board, capsys):
    run("view 3")

    out = capsys.readouterr().out
    assert "Ship it" in out
    assert "Done" in out


def test_mv(board):
    run("mv 2 1")

    assert board.get_state().columns["col-1"].task_ids == ("task-2", "task-1")


def test_show(board, capsys):
    run("show")

    out = capsys.readouterr().out
    assert "Write docs" in out
    assert "2 column(s), 3 task(s), 0 done" in out


def test_rename_board(board):
    run("rename Sprint 12")

    assert board.get_state().board.name == "Sprint 12"


def test_column_rename_and_mv(board):
    run("column rename 1 Backlog")
    run("column mv Done 1")

    state = board.get_state()
    assert [c.name for c in state.ordered_columns()] == ["Done", "Backlog"]


def test_column_rm_asks_for_confirmation(board, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    run("column rm 1")
    assert len(board.get_state().columns) == 2
    assert "Cancelled" in capsys.readouterr().out

    monkeypatch.setattr("builtins.input", lambda prompt: "y")
    run("column rm 1")
    assert list(board.get_state().columns) == ["col-2"]
    assert set(board.get_state().tasks) == {"task-3"}


def test_column_unknown_subcommand(capsys):
    run("column frob")

    assert "Unknown column command" in capsys.readouterr().out


def test_help(capsys):
    run("help")

    assert "column add <name>" in capsys.readouterr().out


# --- Completer ---


def completions(text, session):
    completer = create_completer(session)
    return [c.text for c in completer.get_completions(Document(text), None)]


def test_complete_commands(session):
    assert completions("un", session) == ["undone"]
    assert "column" in completions("", session)


def test_complete_column_subcommands(session):
    assert completions("column r", session) == ["rename", "rm"]


def test_complete_column_names(board, session):
    assert completions("use ", session) == ["none", "clear", '"To Do"', "Done"]
    assert completions("add x --column D", session) == ["Done"]
    assert completions("column rm T", session) == ['"To Do"']


def test_complete_priorities(session):
    assert completions("add x -p h", session) == ["high"]


def test_complete_task_numbers(board, session):
    assert completions("done ", session) == ["1", "2", "3"]


def test_complete_flags(session):
    assert completions("add x --d", session) == ["--desc", "--due"]
