# tests/test_cli.py
import json
from unittest.mock import patch

from typer.testing import CliRunner

from threadline.cli import app
from threadline.errors import NetworkError, NotFoundError, ThreadIntegrityError, ThreadShapeError
from threadline.flatten import flatten


runner = CliRunner()


def test_show_prints_flat_thread(threads) -> None:
    thread = threads.node(
        "abc",
        parent=threads.node("p", text="the question"),
        replies=[threads.node("r1", handle="bob.test", text="an answer")],
        text="the focal post",
    )

    with patch("threadline.cli.load_post_thread", return_value=flatten(thread)) as mock_load:
        result = runner.invoke(app, ["show", "alice.test", "abc"])

    assert result.exit_code == 0
    assert mock_load.call_args[0][1:] == ("alice.test", "abc")
    lines = result.output.splitlines()
    assert lines[0].endswith("@alice.test: the question")
    assert lines[1].startswith(">> [1]")
    assert "the focal post" in lines[1]
    assert "@bob.test: an answer" in lines[2]
    assert "Anchor index: 1" in result.output


def test_show_json(threads) -> None:
    thread = threads.node("abc", parent=threads.node("p"))

    with patch("threadline.cli.load_post_thread", return_value=flatten(thread)):
        result = runner.invoke(app, ["show", "alice.test", "abc", "--json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["anchor_index"] == 1
    assert [e["role"] for e in data["entries"]] == ["ancestor", "focal"]


def test_show_post_not_found() -> None:
    with patch("threadline.cli.load_post_thread", side_effect=ThreadShapeError()):
        result = runner.invoke(app, ["show", "alice.test", "gone"])

    assert result.exit_code == 1
    assert "Post not found" in result.output


def test_show_handle_not_found() -> None:
    with patch("threadline.cli.load_post_thread", side_effect=NotFoundError("Unable to resolve handle")):
        result = runner.invoke(app, ["show", "nobody.test", "abc"])

    assert result.exit_code == 1
    assert "Unable to resolve handle" in result.output


def test_show_malformed_thread() -> None:
    with patch("threadline.cli.load_post_thread", side_effect=ThreadIntegrityError("Malformed thread node: x")):
        result = runner.invoke(app, ["show", "alice.test", "abc"])

    assert result.exit_code == 1
    assert "malformed" in result.output


def test_show_network_error() -> None:
    with patch("threadline.cli.load_post_thread", side_effect=NetworkError("Could not reach appview")):
        result = runner.invoke(app, ["show", "alice.test", "abc"])

    assert result.exit_code == 1
    assert "Could not reach appview" in result.output


def test_show_bad_config(tmp_path) -> None:
    result = runner.invoke(app, ["show", "alice.test", "abc", "--config", str(tmp_path / "missing.json")])

    assert result.exit_code != 0


def test_health_command() -> None:
    with patch("threadline.cli.AppViewClient.health_check", return_value=(True, "AppView reachable")):
        result = runner.invoke(app, ["health"])
    assert result.exit_code == 0
    assert "reachable" in result.output

    with patch("threadline.cli.AppViewClient.health_check", return_value=(False, "Timeout connecting to AppView")):
        result = runner.invoke(app, ["health"])
    assert result.exit_code == 1
