from click.testing import CliRunner

import kubedeployer.cli as cli_module


def _fake_deployer(captured, exit_code=0):
    class FakeDeployer:
        def __init__(self, **kwargs):
            captured.update(kwargs)

        def run(self):
            return exit_code

    return FakeDeployer


def test_cli_defaults_to_staging_latest(tmp_path, monkeypatch):
    captured = {}
    monkeypatch.setattr(cli_module, "Deployer", _fake_deployer(captured))
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SLACK_WEBHOOK", raising=False)

    result = CliRunner().invoke(cli_module.main, [])

    assert result.exit_code == 0
    assert captured["environment"] == "staging"
    assert captured["version"] == "latest"
    assert captured["slack_webhook"] is None
    assert captured["settings"].registry == "your-registry.com"


def test_cli_positional_arguments_and_webhook_env(tmp_path, monkeypatch):
    captured = {}
    monkeypatch.setattr(cli_module, "Deployer", _fake_deployer(captured))
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(
        cli_module.main,
        ["production", "v2.3.1"],
        env={"SLACK_WEBHOOK": "https://hooks.example.com/abc"},
    )

    assert result.exit_code == 0
    assert captured["environment"] == "production"
    assert captured["version"] == "v2.3.1"
    assert captured["slack_webhook"] == "https://hooks.example.com/abc"


def test_cli_uses_config_and_allows_cli_override(tmp_path, monkeypatch):
    config_file = tmp_path / "deploy.yml"
    config_file.write_text(
        "environment: qa\n"
        "version: '3.2'\n"
        "registry: registry.example.com\n"
        "replica_sets_to_keep: 5\n"
        "health_settle_seconds: 10\n",
        encoding="utf-8",
    )

    captured = {}
    monkeypatch.setattr(cli_module, "Deployer", _fake_deployer(captured))

    result = CliRunner().invoke(
        cli_module.main,
        ["--config", str(config_file), "--registry", "cli.example.com", "--dry-run", "prod"],
    )

    assert result.exit_code == 0
    assert captured["environment"] == "prod"
    assert captured["version"] == "3.2"
    assert captured["dry_run"] is True
    settings = captured["settings"]
    assert settings.registry == "cli.example.com"
    assert settings.replica_sets_to_keep == 5
    assert settings.health_settle_seconds == 10


def test_cli_uses_default_config_file_when_present(tmp_path, monkeypatch):
    (tmp_path / ".kubedeployer.yml").write_text("environment: demo\n", encoding="utf-8")

    captured = {}
    monkeypatch.setattr(cli_module, "Deployer", _fake_deployer(captured))
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(cli_module.main, [])

    assert result.exit_code == 0
    assert captured["environment"] == "demo"


def test_cli_propagates_failure_exit_code(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_module, "Deployer", _fake_deployer({}, exit_code=1))
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(cli_module.main, ["staging"])

    assert result.exit_code == 1


def test_cli_rejects_unknown_config_keys(tmp_path, monkeypatch):
    config_file = tmp_path / "deploy.yml"
    config_file.write_text("namespace: custom\n", encoding="utf-8")
    monkeypatch.setattr(cli_module, "Deployer", _fake_deployer({}))

    result = CliRunner().invoke(cli_module.main, ["--config", str(config_file)])

    assert result.exit_code == 2
    assert "Unknown configuration keys: namespace" in result.output


def test_cli_coerces_quoted_numbers_from_config(tmp_path, monkeypatch):
    config_file = tmp_path / "deploy.yml"
    config_file.write_text(
        "rollout_timeout_seconds: '300'\nreplica_sets_to_keep: '4'\n", encoding="utf-8"
    )
    captured = {}
    monkeypatch.setattr(cli_module, "Deployer", _fake_deployer(captured))

    result = CliRunner().invoke(cli_module.main, ["--config", str(config_file)])

    assert result.exit_code == 0
    assert captured["settings"].rollout_timeout_seconds == 300
    assert captured["settings"].replica_sets_to_keep == 4


def test_cli_rejects_invalid_value_before_deploying(tmp_path, monkeypatch):
    config_file = tmp_path / "deploy.yml"
    config_file.write_text("rollout_timeout_seconds: soon\n", encoding="utf-8")
    captured = {}
    monkeypatch.setattr(cli_module, "Deployer", _fake_deployer(captured))

    result = CliRunner().invoke(cli_module.main, ["--config", str(config_file)])

    assert result.exit_code == 2
    assert "rollout_timeout_seconds" in result.output
    assert captured == {}


def test_cli_rejects_negative_health_retries(tmp_path, monkeypatch):
    captured = {}
    monkeypatch.setattr(cli_module, "Deployer", _fake_deployer(captured))
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(cli_module.main, ["--health-retries", "-1"])

    assert result.exit_code == 2
    assert captured == {}
