import logging
import os

import click
from rich.logging import RichHandler

from . import constants
from .core import Deployer
from .errors import ConfigError
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
)


@click.command()
@click.argument("environment", required=False)
@click.argument("version", required=False)
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {constants.DEFAULT_CONFIG_FILE} if present.",
)
@click.option("--registry", required=False, help="Container registry host.")
@click.option("--image-name", required=False, help="Image repository name inside the registry.")
@click.option(
    "--slack-webhook",
    required=False,
    envvar="SLACK_WEBHOOK",
    help="Webhook URL for deployment notifications (env: SLACK_WEBHOOK).",
)
@click.option(
    "--health-settle-seconds",
    required=False,
    type=float,
    default=None,
    help="Seconds to wait before probing the health endpoint (default: 30).",
)
@click.option(
    "--health-retries",
    required=False,
    type=int,
    default=None,
    help="Additional health checks after the first failure (default: 0).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=None,
    help="Log the commands that would run without touching the registry or cluster.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option(
    "--report-file",
    type=click.Path(),
    help="Write a JSON report of the run to this path.",
)
def main(
    environment,
    version,
    config,
    registry,
    image_name,
    slack_webhook,
    health_settle_seconds,
    health_retries,
    dry_run,
    verbose,
    log_file,
    report_file,
):
    """Build, push and roll out the application to ENVIRONMENT at VERSION."""
    logger = logging.getLogger("kubedeployer")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), constants.DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except ConfigError as exc:
        raise click.UsageError(str(exc)) from exc

    environment = str(
        _resolve_option(
            environment,
            config_values,
            "environment",
            default=constants.DEFAULT_ENVIRONMENT,
        )
    )
    version = str(
        _resolve_option(version, config_values, "version", default=constants.DEFAULT_VERSION)
    )
    slack_webhook = _resolve_option(slack_webhook, config_values, "slack_webhook")
    dry_run = bool(_resolve_option(dry_run, config_values, "dry_run", default=False))
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    report_file = _resolve_option(report_file, config_values, "report_file")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    try:
        settings = config_loader.build_settings(
            config_values,
            {
                "registry": registry,
                "image_name": image_name,
                "health_settle_seconds": health_settle_seconds,
                "health_retries": health_retries,
            },
        )
    except ConfigError as exc:
        raise click.UsageError(str(exc)) from exc

    deployer = Deployer(
        environment=environment,
        version=version,
        settings=settings,
        slack_webhook=slack_webhook,
        dry_run=dry_run,
        report_file=report_file,
    )

    raise SystemExit(deployer.run())


if __name__ == "__main__":
    main()
