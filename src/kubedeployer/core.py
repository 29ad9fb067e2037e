import logging
import shutil
import time
from typing import Callable, List, Optional, Tuple

import requests
from rich.console import Console
from rich.markup import escape

from . import constants
from .errors import DeployerError
from .errors_catalog import actionable_error
from .models import (
    DeploymentRequest,
    DeploymentSettings,
    NotificationEvent,
    NotificationStatus,
    PipelineState,
    StepResult,
)
from .services.cleanup import CleanupService
from .services.cluster import ClusterService
from .services.command_runner import CommandRunner
from .services.container_engine import ContainerEngineService
from .services.health import HealthCheckService
from .services.notifier import WebhookNotifier
from .services.prerequisites import PrerequisiteService
from .services.report import RunReportService

console = Console()
logger = logging.getLogger("kubedeployer")


class Deployer:
    """Runs the build, push and rollout pipeline for one environment/version pair."""

    def __init__(
        self,
        environment: str = constants.DEFAULT_ENVIRONMENT,
        version: str = constants.DEFAULT_VERSION,
        settings: Optional[DeploymentSettings] = None,
        slack_webhook: Optional[str] = None,
        dry_run: bool = False,
        report_file: Optional[str] = None,
        command_runner: Optional[CommandRunner] = None,
        requests_module=requests,
        which: Optional[Callable[[str], Optional[str]]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or DeploymentSettings()
        self.request = DeploymentRequest.create(environment, version, self.settings)
        self.dry_run = dry_run

        self.state = PipelineState.IDLE
        self.history: List[StepResult] = []
        self.current_step_name: Optional[str] = None
        self._step_started = 0.0

        self.command_runner = command_runner or CommandRunner(logger=logger, dry_run=dry_run)
        self.prerequisite_service = PrerequisiteService(logger=logger, which=which or shutil.which)
        self.container_engine = ContainerEngineService(
            logger=logger,
            run_cmd=self.command_runner.run,
        )
        self.cluster_service = ClusterService(
            logger=logger,
            run_cmd=self.command_runner.run,
            pipe_cmd=self.command_runner.pipe,
        )
        self.health_service = HealthCheckService(
            logger=logger,
            requests_module=requests_module,
            sleep=sleep,
        )
        self.cleanup_service = CleanupService(logger=logger, cluster_service=self.cluster_service)
        self.notifier = WebhookNotifier(
            webhook_url=slack_webhook,
            logger=logger,
            requests_module=requests_module,
            dry_run=dry_run,
        )
        self.report_service = RunReportService(report_file=report_file, logger=logger)

    def _pipeline(self) -> List[Tuple[str, PipelineState, Callable[[], None]]]:
        return [
            ("check_prerequisites", PipelineState.CHECKING_PREREQS, self.check_prerequisites),
            ("build_image", PipelineState.BUILDING, self.build_image),
            ("push_image", PipelineState.PUSHING, self.push_image),
            ("deploy", PipelineState.DEPLOYING, self.deploy),
            ("health_check", PipelineState.HEALTH_CHECKING, self.health_check),
            ("smoke_test", PipelineState.SMOKE_TESTING, self.smoke_test),
        ]

    def _transition(self, state: PipelineState):
        logger.debug("State: %s -> %s", self.state.value, state.value)
        self.state = state

    def _run_step(self, name: str, callback: Callable[[], None], fatal: bool = True) -> StepResult:
        """Runs one step and turns its failure into a failed ``StepResult``.

        Fatal steps only absorb ``DeployerError``; anything else reaches the
        run-wide guard. Non-fatal steps absorb every ``Exception`` and log it
        as a warning.
        """
        self.current_step_name = name
        self._step_started = time.monotonic()

        try:
            callback()
        except DeployerError as exc:
            return self._step_failed(name, exc, fatal)
        except Exception as exc:
            if fatal:
                raise
            return self._step_failed(name, exc, fatal)

        self.current_step_name = None
        return self._record(
            StepResult(name=name, success=True, duration_seconds=self._elapsed()),
            "success",
        )

    def _step_failed(self, name: str, exc: Exception, fatal: bool) -> StepResult:
        if fatal:
            logger.error(str(exc))
        else:
            logger.warning("%s failed: %s", name, exc)
        self.current_step_name = None
        error = actionable_error(
            name,
            reason=str(exc),
            image=self.request.full_image_name,
            namespace=self.request.namespace,
        )
        return self._record(
            StepResult(name=name, success=False, error=error, duration_seconds=self._elapsed()),
            "failed",
        )

    def _record(self, result: StepResult, status: str) -> StepResult:
        self.history.append(result)
        self.report_service.record_step(result, status)
        return result

    def _elapsed(self) -> float:
        return time.monotonic() - self._step_started

    def _close_interrupted_step(self, status: str, error: str):
        if self.current_step_name:
            self._record(
                StepResult(
                    name=self.current_step_name,
                    success=False,
                    error=error,
                    duration_seconds=self._elapsed(),
                ),
                status,
            )

    def check_prerequisites(self):
        self.prerequisite_service.check(
            required=self.settings.required_tools,
            optional=self.settings.optional_tools,
        )

    def build_image(self):
        self.container_engine.build(
            tag=self.request.full_image_name,
            dockerfile=self.settings.dockerfile,
            context=self.settings.build_context,
        )

    def push_image(self):
        self.container_engine.push(self.request.full_image_name)

    def deploy(self):
        namespace = self.request.namespace
        app = self.settings.app_name
        root = self.settings.manifests_root.rstrip("/")
        logger.info("Deploying to Kubernetes namespace: %s", namespace)

        self.cluster_service.ensure_namespace(namespace)
        self.cluster_service.apply_manifests(
            f"{root}/deployments/{self.request.environment}/", namespace
        )
        self.cluster_service.apply_manifests(
            f"{root}/services/{self.request.environment}/", namespace
        )
        self.cluster_service.set_image(app, app, self.request.full_image_name, namespace)
        self.cluster_service.rollout_status(
            app,
            namespace,
            timeout_seconds=self.settings.rollout_timeout_seconds,
            grace_seconds=constants.ROLLOUT_TIMEOUT_GRACE_SECONDS,
        )
        logger.info("Deployment completed successfully")

    def health_check(self):
        logger.info("Running health checks...")
        address = self.cluster_service.get_service_ingress_ip(
            self.settings.app_name, self.request.namespace
        )
        if address is None:
            logger.debug(
                "No load balancer ingress found, using %s",
                self.settings.health_fallback_address,
            )
        url = self.health_service.build_url(
            address,
            self.settings.health_fallback_address,
            self.settings.health_path,
        )

        if self.dry_run:
            logger.info("[dry-run] GET %s", url)
            return

        self.health_service.check(
            url,
            settle_seconds=self.settings.health_settle_seconds,
            timeout=self.settings.health_timeout_seconds,
            retries=self.settings.health_retries,
            backoff_seconds=self.settings.health_retry_backoff_seconds,
        )

    def smoke_test(self):
        logger.info("Running smoke tests...")
        app = self.settings.app_name
        namespace = self.request.namespace
        target = (
            f"http://{app}.{namespace}.svc.cluster.local:"
            f"{self.settings.service_port}{self.settings.health_path}"
        )
        self.cluster_service.run_smoke_pod(
            f"smoke-test-{self.request.run_id}",
            self.settings.smoke_test_image,
            namespace,
            ["curl", "-f", target],
        )
        logger.info("Smoke tests passed")

    def cleanup_old_deployments(self):
        self.cleanup_service.prune_replica_sets(
            self.request.namespace,
            self.settings.app_name,
            self.settings.replica_sets_to_keep,
        )

    def _notify(self, status: NotificationStatus, message: str):
        self.notifier.send(NotificationEvent(status=status, message=message))

    def _notify_failure(self, step_name: str):
        self._notify(
            NotificationStatus.ERROR,
            f"❌ Deployment to {self.request.environment} failed! "
            f"Version: {self.request.version} (step: {step_name})",
        )
        self._transition(PipelineState.NOTIFIED_FAILURE)
        self._transition(PipelineState.TERMINATED)

    def run(self) -> int:
        exit_code = 1
        report_status = "failed"
        report_error: Optional[str] = None

        try:
            console.print("[bold blue]Starting deployment process...[/bold blue]")
            logger.info("Environment: %s", self.request.environment)
            logger.info("Version: %s", self.request.version)
            logger.info("Image: %s", self.request.full_image_name)
            self.report_service.start_run(
                run_id=self.request.run_id,
                request={
                    "environment": self.request.environment,
                    "version": self.request.version,
                    "namespace": self.request.namespace,
                    "image": self.request.full_image_name,
                    "dry_run": self.dry_run,
                },
            )

            for name, state, callback in self._pipeline():
                self._transition(state)
                result = self._run_step(name, callback)
                if not result.success:
                    console.print(f"[bold red]Error:[/bold red] {escape(result.error or '')}")
                    logger.error("Deployment failed at step '%s'", name)
                    self._notify_failure(name)
                    report_error = result.error
                    return exit_code

            self._transition(PipelineState.CLEANING_UP)
            cleanup = self._run_step("cleanup", self.cleanup_old_deployments, fatal=False)
            if not cleanup.success:
                logger.warning("Cleanup did not complete, continuing.")

            self._notify(
                NotificationStatus.SUCCESS,
                f"✅ Deployment to {self.request.environment} completed successfully! "
                f"Version: {self.request.version}",
            )
            self._transition(PipelineState.NOTIFIED_SUCCESS)
            console.print("[bold green]Deployment process completed successfully![/bold green]")
            report_status = "success"
            exit_code = 0
            return exit_code

        except KeyboardInterrupt:
            console.print("[bold red]Deployment cancelled by user.[/bold red]")
            logger.info("Deployment cancelled by user")
            report_status = "aborted"
            report_error = "Deployment cancelled by user."
            self._close_interrupted_step("aborted", report_error)
            self._notify_failure(self.current_step_name or "run")
            exit_code = 130
            return exit_code
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {escape(str(exc))}")
            logger.exception("Unexpected error")
            failed_step = self.current_step_name or "run"
            self._close_interrupted_step("failed", str(exc))
            self._notify_failure(failed_step)
            report_error = str(exc)
            exit_code = 1
            return exit_code
        finally:
            self.report_service.finalize(report_status, error=report_error)
