"""Tests for the command-line interface."""

import argparse
import json

import pytest

from neo4j_glue import cli


class TestParseParam:

    def test_json_values(self):
        assert cli._parse_param("age=30") == ("age", 30)
        assert cli._parse_param('tags=["a", "b"]') == ("tags", ["a", "b"])
        assert cli._parse_param("flag=true") == ("flag", True)

    def test_plain_string_fallback(self):
        assert cli._parse_param("name=Alice") == ("name", "Alice")

    def test_value_may_contain_equals(self):
        assert cli._parse_param("expr=a=b") == ("expr", "a=b")

    @pytest.mark.parametrize("value", ["novalue", "=1"])
    def test_malformed(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            cli._parse_param(value)


class TestCommands:

    def test_run_prints_json(self, fake_graph_database, capsys, monkeypatch):
        calls = []

        def fake_run(session, query, params):
            calls.append((query, params))
            return [{"name": "Alice"}]

        monkeypatch.setattr(cli, "run", fake_run)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["run", "MATCH (p) WHERE p.age > $age RETURN p.name AS name", "--param", "age=30"])

        assert exc_info.value.code == 0
        assert calls == [("MATCH (p) WHERE p.age > $age RETURN p.name AS name", {"age": 30})]
        output = json.loads(capsys.readouterr().out)
        assert output == {"count": 1, "results": [{"name": "Alice"}]}
        assert fake_graph_database.drivers[0].closed

    def test_ping_exit_status(self, fake_graph_database, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["ping"])
        assert exc_info.value.code == 0
        assert "ok" in capsys.readouterr().out

    def test_ephemeral_destroys_on_interrupt(self, monkeypatch, capsys):
        destroyed = []

        class FakeEphemeral:
            url = "bolt://localhost:50000"
            storage_dir = "/tmp/1700000000123"

            def destroy(self):
                destroyed.append(True)

        def interrupt():
            raise KeyboardInterrupt

        monkeypatch.setattr(cli, "create_ephemeral_connection", lambda config: FakeEphemeral())
        monkeypatch.setattr(cli, "_wait_for_interrupt", interrupt)

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["ephemeral"])

        assert exc_info.value.code == 0
        assert destroyed == [True]
        assert "bolt://localhost:50000" in capsys.readouterr().out

    def test_command_required(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 2
