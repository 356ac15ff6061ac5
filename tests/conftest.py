"""Shared pytest fixtures for all test modules."""

import os
import subprocess
import sys

import pytest
import yaml
from google.api_core import exceptions
from google.cloud import run_v2

from rundock.template.store import load_template

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the rundock CLI as a subprocess."""

    def _run(*args, env=None):
        full_env = dict(os.environ)
        # Never pick up a developer's real project from the environment.
        for var in (
            "GCP_PROJECT_ID",
            "GOOGLE_CLOUD_PROJECT",
            "GCP_REGION",
            "RUNDOCK_TEMPLATE",
            "RUNDOCK_DEPLOYER_URL",
            "RUNDOCK_DEPLOYER_TOKEN",
        ):
            full_env.pop(var, None)
        full_env.update(env or {})
        result = subprocess.run(
            [sys.executable, "-m", "rundock.rundock", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env=full_env,
        )
        return result.returncode, result.stdout, result.stderr

    return _run


# ── Template fixtures ───────────────────────────────────────────────


SAMPLE_TEMPLATE = {
    "labels": {"managed-by": "rundock"},
    "template": {
        "containers": [
            {
                "image": "repo/base:stable",
                "ports": [{"container_port": 8080}],
                "env": [{"name": "LOG_LEVEL", "value": "info"}],
                "resources": {"limits": {"cpu": "1", "memory": "512Mi"}, "cpu_idle": True},
            }
        ],
        "scaling": {"min_instance_count": 0, "max_instance_count": 10},
        "timeout": "300s",
    },
}


@pytest.fixture
def template_path(tmp_path):
    """A template file with a concrete (non-placeholder) image."""
    path = tmp_path / "service.yaml"
    with open(path, "w") as f:
        yaml.dump(SAMPLE_TEMPLATE, f)
    return str(path)


@pytest.fixture
def placeholder_template_path(tmp_path):
    """A template file whose image is still the {{CONTAINER_IMAGE}} placeholder."""
    document = yaml.safe_load(yaml.dump(SAMPLE_TEMPLATE))
    document["template"]["containers"][0]["image"] = "{{CONTAINER_IMAGE}}"
    path = tmp_path / "placeholder.yaml"
    with open(path, "w") as f:
        yaml.dump(document, f)
    return str(path)


@pytest.fixture
def base_template(template_path):
    return load_template(template_path)


# ── Fake control plane ──────────────────────────────────────────────


class FakeOperation:
    """Long-running operation that has already settled."""

    def __init__(self, service=None, error=None):
        self.service = service
        self.error = error
        self.timeouts = []

    async def result(self, timeout=None):
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        return self.service


class FakeTransport:
    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


class FakeServicesClient:
    """In-memory stand-in for run_v2.ServicesAsyncClient.

    Services are keyed by fully-qualified name. create_service raises
    AlreadyExists for a taken name, update_service raises NotFound for a
    missing one, just like the real control plane.
    """

    def __init__(self, reconciling=False):
        self.transport = FakeTransport()
        self.services = {}
        self.generations = {}
        self.calls = []
        self.requests = []
        self.reconciling = reconciling
        self.create_error = None
        self.update_error = None
        self.operation_error = None

    def _settle(self, name, service):
        short = name.rsplit("/", 1)[-1]
        generation = self.generations.get(name, 0) + 1
        self.generations[name] = generation
        service.name = name
        service.uri = f"https://{short}-abc123-ew.a.run.app"
        service.reconciling = self.reconciling
        service.latest_ready_revision = f"{name}/revisions/{short}-{generation:05d}-xyz"
        self.services[name] = service
        return FakeOperation(run_v2.Service(service), error=self.operation_error)

    async def create_service(self, request=None):
        name = f"{request.parent}/services/{request.service_id}"
        self.calls.append(("create", name))
        self.requests.append(request)
        if self.create_error is not None:
            raise self.create_error
        if name in self.services:
            raise exceptions.AlreadyExists(f"Resource '{name}' already exists.")
        return self._settle(name, run_v2.Service(request.service))

    async def update_service(self, request=None):
        name = request.service.name
        self.calls.append(("update", name))
        self.requests.append(request)
        if self.update_error is not None:
            raise self.update_error
        if name not in self.services:
            raise exceptions.NotFound(f"Resource '{name}' not found.")
        return self._settle(name, run_v2.Service(request.service))


@pytest.fixture
def control_plane():
    """Empty fake Cloud Run control plane."""
    return FakeServicesClient()


@pytest.fixture
def fake_client_class():
    """The FakeServicesClient class itself, for tests that need a tweaked control plane."""
    return FakeServicesClient
