"""Tests for the command-line interface in main.py."""

import io
import json

import pytest
from rich.console import Console

import main


@pytest.fixture
def content_file(tmp_path, mixed_content):
    """Write the mixed content document to a temporary file."""
    path = tmp_path / "content.json"
    path.write_text(mixed_content, encoding="utf-8")
    return path


def _recording_console() -> Console:
    return Console(file=io.StringIO(), width=120, force_terminal=False)


class TestParseAnswer:
    """Tests for decoding answers given on the command line."""

    def test_json_answer(self):
        """Should decode JSON answers."""
        assert main.parse_answer('["a", "b"]') == ["a", "b"]
        assert main.parse_answer("2") == 2

    def test_plain_text_answer(self):
        """Should pass non-JSON answers through as text."""
        assert main.parse_answer("b, a, c") == "b, a, c"


class TestEvaluateCommand:
    """Tests for the evaluate subcommand."""

    def test_correct_answer_json_output(self, content_file, capsys):
        """Should print a camelCase verdict and exit with 0 for a correct answer."""
        code = main.main(
            ["evaluate", str(content_file), "--block", "ord-1", "--kind", "ordering", "--answer", '["b","a","c"]', "--json"]
        )
        assert code == main.EXIT_CORRECT
        payload = json.loads(capsys.readouterr().out)
        assert payload["isCorrect"] is True
        assert payload["correctAnswer"] == {"order": ["b", "a", "c"]}

    def test_incorrect_answer(self, content_file, capsys):
        """Should exit with 1 for an incorrect answer."""
        code = main.main(
            ["evaluate", str(content_file), "-b", "m-1", "-k", "matching", "-a", '{"i1": "i2"}', "--json", "--lang", "en"]
        )
        assert code == main.EXIT_INCORRECT
        payload = json.loads(capsys.readouterr().out)
        assert payload["feedback"] == "Some of the matches need another look."

    def test_kind_inferred(self, content_file, capsys):
        """Should infer the kind when --kind is omitted."""
        code = main.main(["evaluate", str(content_file), "-b", "mc-single", "-a", "1", "--json"])
        assert code == main.EXIT_CORRECT
        capsys.readouterr()

    def test_answer_file(self, content_file, tmp_path, capsys):
        """Should read the answer from a file."""
        answer = tmp_path / "answer.json"
        answer.write_text(json.dumps({"blanks": [{"blankId": "blank1", "value": "book"}, {"blankId": "blank2", "value": "desk"}]}))
        code = main.main(["evaluate", str(content_file), "-b", "gf-1", "--answer-file", str(answer), "--json"])
        assert code == main.EXIT_CORRECT
        capsys.readouterr()

    def test_block_not_found(self, content_file, capsys):
        """Should exit with 2 and report the error for unknown blocks."""
        code = main.main(["evaluate", str(content_file), "-b", "nope", "-k", "ordering", "-a", '["a"]', "--json"])
        assert code == main.EXIT_NOT_FOUND
        assert json.loads(capsys.readouterr().out)["error"] == "Block not found"

    def test_empty_submission(self, content_file, capsys):
        """Should exit with 3 when no answer is given."""
        code = main.main(["evaluate", str(content_file), "-b", "ord-1", "-k", "ordering", "--json"])
        assert code == main.EXIT_EMPTY_SUBMISSION
        capsys.readouterr()

    def test_unsupported_kind(self, content_file, capsys):
        """Should exit with 4 for an unknown kind."""
        code = main.main(["evaluate", str(content_file), "-b", "ord-1", "-k", "essay", "-a", "x"])
        assert code == main.EXIT_UNSUPPORTED_KIND
        assert "Unsupported kind" in capsys.readouterr().err

    def test_missing_content_file(self, tmp_path, capsys):
        """Should exit with 2 and report an unreadable content file."""
        missing = tmp_path / "missing.json"
        code = main.main(["evaluate", str(missing), "-b", "ord-1", "-a", '["a"]', "--json"])
        assert code == main.EXIT_NOT_FOUND
        assert json.loads(capsys.readouterr().out)["error"] == "Cannot read file"

    def test_missing_answer_file(self, content_file, tmp_path, capsys):
        """Should exit with 2 when the answer file cannot be read."""
        code = main.main(
            ["evaluate", str(content_file), "-b", "ord-1", "--answer-file", str(tmp_path / "none.json")]
        )
        assert code == main.EXIT_NOT_FOUND
        assert "Cannot read file" in capsys.readouterr().err

    def test_panel_output(self, content_file):
        """Should render a verdict panel with per-unit details."""
        args = main.create_parser().parse_args(
            ["evaluate", str(content_file), "-b", "ord-1", "-a", '["a","b","c"]', "--lang", "en"]
        )
        console = _recording_console()
        code = main.run_evaluate(args, console=console)
        output = console.file.getvalue()
        assert code == main.EXIT_INCORRECT
        assert "Not quite!" in output
        assert "ordering" in output

    def test_answer_options_are_exclusive(self, content_file, tmp_path):
        """Should refuse --answer together with --answer-file."""
        with pytest.raises(SystemExit):
            main.main(["evaluate", str(content_file), "-b", "x", "-a", "1", "--answer-file", str(tmp_path / "a")])


class TestInspectCommand:
    """Tests for the inspect subcommand."""

    def test_lists_blocks(self, content_file):
        """Should list every block id."""
        args = main.create_parser().parse_args(["inspect", str(content_file)])
        console = _recording_console()
        assert main.run_inspect(args, console=console) == main.EXIT_CORRECT
        output = console.file.getvalue()
        for block_id in ("gf-1", "m-1", "mc-single", "mc-multi", "ord-1"):
            assert block_id in output

    def test_missing_file(self, tmp_path, capsys):
        """Should exit with 2 and show an error panel for a missing file."""
        args = main.create_parser().parse_args(["inspect", str(tmp_path / "nope.json")])
        assert main.run_inspect(args, console=_recording_console()) == main.EXIT_NOT_FOUND
        assert "Cannot read file" in capsys.readouterr().err

    def test_no_blocks(self, tmp_path):
        """Should exit with 2 when the document has no blocks."""
        path = tmp_path / "empty.json"
        path.write_text("{}")
        args = main.create_parser().parse_args(["inspect", str(path)])
        assert main.run_inspect(args, console=_recording_console()) == main.EXIT_NOT_FOUND
