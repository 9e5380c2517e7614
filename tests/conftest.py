"""Shared test fixtures for ncsetup tests."""

import itertools
from collections.abc import Callable

import pytest
from typer.testing import CliRunner

from ncsetup.config import ProvisionConfig, apply_overrides
from ncsetup.core import build_steps, run_pipeline
from ncsetup.core.registry import access_url
from ncsetup.models import HostTarget, PipelineRun
from ncsetup.services import resolve_credentials

from fakes import FakeHost, fake_toolbox, fresh_host


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def config() -> ProvisionConfig:
    """Configuration for a public domain with one optional app."""
    return apply_overrides(
        ProvisionConfig(),
        server__domain="cloud.example.com",
        application__apps=["calendar"],
    )


@pytest.fixture
def host(config: ProvisionConfig) -> FakeHost:
    return fresh_host(config)


@pytest.fixture
def target() -> HostTarget:
    return HostTarget(
        hostname="cloud", address="cloud.example.com", os_id="Ubuntu", os_version="24.04"
    )


@pytest.fixture
def install(host: FakeHost, target: HostTarget) -> Callable[[ProvisionConfig], PipelineRun]:
    """Run the full pipeline against the fake host with deterministic secrets."""
    counter = itertools.count(1)

    def generate() -> str:
        return f"generated-secret-{next(counter):02d}"

    def run(config: ProvisionConfig) -> PipelineRun:
        credentials = resolve_credentials(config, generate)
        steps = build_steps(config, fake_toolbox(host, config), credentials)
        result = run_pipeline(
            steps,
            host=target,
            access_url=access_url(config),
            credentials=credentials,
        )
        result.access_url = access_url(config, result)
        return result

    return run
