"""Deploy pipeline: template → merge → validate → adapt → reconcile."""

import logging
from dataclasses import dataclass

from rundock.config import DEFAULT_REGION, Settings
from rundock.reconcile.reconciler import Reconciler
from rundock.reconcile.types import DeployResult
from rundock.spec.adapt import to_transport_shape
from rundock.spec.merge import merge
from rundock.spec.overrides import Overrides
from rundock.spec.types import MergedSpec, ServiceIdentity, TransportSpec
from rundock.spec.validate import ensure_valid
from rundock.template.store import TemplateStore

logger = logging.getLogger(__name__)


@dataclass
class CompiledService:
    """A validated service ready to hand to the reconciler."""

    identity: ServiceIdentity
    spec: MergedSpec
    transport: TransportSpec


def resolve_identity(overrides: Overrides, settings: Settings) -> ServiceIdentity:
    """Fill project and region from settings when the request leaves them out."""
    project_id = overrides.project_id if overrides.project_id is not None else settings.project_id
    region = overrides.region if overrides.region is not None else (settings.region or DEFAULT_REGION)
    return ServiceIdentity(
        service_name=overrides.service_name or "",
        project_id=project_id or "",
        region=region,
    )


def compile_service(overrides: Overrides, settings=None, store=None) -> CompiledService:
    """Run everything up to, but not including, the control plane.

    Raises:
        ConfigLoadError / ConfigParseError if the template is unusable.
        ValidationError with every violation if the result is not deployable.
    """
    settings = settings or Settings()
    store = store or TemplateStore(settings.template_path)

    base = store.load()
    identity = resolve_identity(overrides, settings)
    spec = merge(base, overrides)
    ensure_valid(spec, identity)
    return CompiledService(identity=identity, spec=spec, transport=to_transport_shape(spec))


async def deploy(overrides: Overrides, settings=None, store=None, reconciler=None) -> DeployResult:
    """Compile *overrides* and create-or-update the service. Single entry point.

    Without an injected *reconciler*, a Cloud Run client is opened for this
    call only and closed before returning.
    """
    settings = settings or Settings()
    compiled = compile_service(overrides, settings=settings, store=store)
    if reconciler is not None:
        return await reconciler.reconcile(compiled.identity, compiled.transport)
    async with Reconciler(operation_timeout=settings.operation_timeout) as owned:
        return await owned.reconcile(compiled.identity, compiled.transport)


async def deploy_request(body, settings=None, store=None, reconciler=None) -> DeployResult:
    """Deploy from a JSON request body (see Overrides.from_dict)."""
    return await deploy(Overrides.from_dict(body), settings=settings, store=store, reconciler=reconciler)
