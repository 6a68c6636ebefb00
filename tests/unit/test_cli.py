"""Unit tests for the CLI."""

import json

from steer_ops_gateway.cli import main


class TestCLI:
    """Test CLI subcommands."""

    def test_list_operations(self, capsys):
        main(["list-operations"])

        out = capsys.readouterr().out
        assert "listUsers [authOps]" in out
        assert "deployHosting [hostingOps]" in out

    def test_list_operations_by_category_json(self, capsys):
        main(["list-operations", "--category", "dataOps", "--json"])

        entries = json.loads(capsys.readouterr().out)
        assert {entry["name"] for entry in entries} == {"queryDocuments", "deployRules", "getDataSchema"}

    def test_show_config_reads_environment(self, capsys, monkeypatch):
        monkeypatch.setenv("STEER_OPS_CONFIG_JSON", json.dumps({"retryConfig": {"maxRetries": 5}}))

        main(["show-config"])

        config = json.loads(capsys.readouterr().out)
        assert config["retryConfig"]["maxRetries"] == 5
        assert config["rateLimits"]["authOps"]["points"] == 500

    def test_no_command_prints_help(self, capsys):
        main([])

        assert "usage" in capsys.readouterr().out.lower()
