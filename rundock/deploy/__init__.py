"""Deploy library: pipeline orchestration."""

from rundock.deploy.orchestrate import (
    CompiledService,
    compile_service,
    deploy,
    deploy_request,
    resolve_identity,
)

__all__ = [
    "CompiledService",
    "compile_service",
    "deploy",
    "deploy_request",
    "resolve_identity",
]
