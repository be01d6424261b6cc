"""
Tests for the operator CLI.
"""
import json

from vintageshock.cli import ENV_CONFIG, build_parser, main


class TestParser:

    def test_config_from_environment(self, monkeypatch):
        monkeypatch.setenv(ENV_CONFIG, "/tmp/elsewhere.json")
        args = build_parser().parse_args(["status"])
        assert args.config == "/tmp/elsewhere.json"

    def test_serve_defaults(self):
        args = build_parser().parse_args(["serve"])
        assert args.host == "127.0.0.1"
        assert args.port == 3051

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out


class TestCommands:

    def test_init_then_status(self, tmp_path, capsys):
        path = str(tmp_path / "vintageshock.json")
        assert main(["-c", path, "init"]) == 0
        assert json.loads(open(path).read())["intensity"] == 30

        assert main(["-c", path, "status"]) == 0
        out = capsys.readouterr().out
        assert "VintageShock Status:" in out
        assert "API Token: Not configured" in out

    def test_init_refuses_to_overwrite(self, tmp_path, capsys):
        path = tmp_path / "vintageshock.json"
        path.write_text("{}")
        assert main(["-c", str(path), "init"]) == 1
        assert "already exists" in capsys.readouterr().out
        assert main(["-c", str(path), "init", "--force"]) == 0

    def test_set_shows_path(self, tmp_path, capsys):
        path = str(tmp_path / "vintageshock.json")
        assert main(["-c", path, "set"]) == 0
        assert path in capsys.readouterr().out

    def test_test_without_credentials(self, tmp_path, capsys):
        path = str(tmp_path / "vintageshock.json")
        assert main(["-c", path, "test"]) == 1
        assert "not configured" in capsys.readouterr().out

    def test_test_when_disabled(self, tmp_path, capsys):
        path = tmp_path / "vintageshock.json"
        path.write_text(json.dumps({"enabled": False}))
        assert main(["-c", str(path), "test"]) == 1
        assert "disabled" in capsys.readouterr().out
