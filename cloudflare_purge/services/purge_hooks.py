"""Lifecycle hook closures that turn content changes into purges.

Each closure handles one event end to end: mint a correlation id,
evaluate the purge-everything policy, classify the change, resolve the
scope and dispatch it either through the purge endpoint (in-process, as
an internal call) or straight to the executor.

Hooks always hand the document back untouched. In direct mode executor
errors propagate to the host; in endpoint mode the endpoint has already
turned them into a JSON error, which is logged here.
"""

import json
from typing import Any

from cloudflare_purge.core.auth import INTERNAL_CALL_HEADER
from cloudflare_purge.core.configuration import PluginConfiguration
from cloudflare_purge.core.exceptions import PurgeEndpointError
from cloudflare_purge.core.models import PurgeContext, PurgeRequest, UrlBuilderArgs
from cloudflare_purge.host import AFTER_CHANGE, AFTER_DELETE, Hook, HookArgs, HostRequest
from cloudflare_purge.logging_config import (
    bind_correlation_id,
    get_logger,
    new_correlation_id,
)
from cloudflare_purge.middleware.correlation import CORRELATION_ID_HEADER
from cloudflare_purge.routers.purge import EndpointRequest, PurgeHandler
from cloudflare_purge.services.event_classifier import is_purge_worthy
from cloudflare_purge.services.purge_executor import execute
from cloudflare_purge.services.scope_resolver import resolve_scope

logger = get_logger(__name__)


def _target_slugs(args: HookArgs) -> dict[str, str | None]:
    return {
        "collection": args.collection.slug if args.collection else None,
        "global_slug": args.global_config.slug if args.global_config else None,
    }


def build_event(config: PluginConfiguration, args: HookArgs, operation: str) -> UrlBuilderArgs:
    """The ``url_builder`` view of a hook invocation."""
    req = args.req
    return UrlBuilderArgs(
        doc=args.doc,
        operation=operation,
        base_url=config.base_url,
        collection_slug=args.collection.slug if args.collection else None,
        global_slug=args.global_config.slug if args.global_config else None,
        locale=req.locale if (config.localized and req is not None) else None,
        req=req,
    )


async def call_internal_purge_endpoint(
    handler: PurgeHandler,
    req: HostRequest | None,
    purge_request: PurgeRequest,
) -> dict[str, Any]:
    """Invoke the purge endpoint in-process as a trusted internal call.

    Returns:
        The endpoint's JSON body.

    Raises:
        PurgeEndpointError: The endpoint answered with a non-200 status.
    """
    scope = purge_request.scope
    correlation_id = purge_request.correlation_id
    body: dict[str, Any] = (
        {"purgeEverything": True} if scope.purge_everything else {"files": list(scope.files)}
    )
    response = await handler(
        EndpointRequest(
            user=req.user if req is not None else None,
            body=body,
            headers={INTERNAL_CALL_HEADER: "true", CORRELATION_ID_HEADER: correlation_id},
        )
    )
    payload = json.loads(response.body)

    if response.status_code != 200:
        raise PurgeEndpointError(response.status_code, correlation_id, payload)

    logger.info(
        "Purge via internal endpoint completed",
        correlation_id=correlation_id,
        endpoint_correlation_id=payload.get("correlationId"),
        status=response.status_code,
        success=payload.get("success"),
    )
    return payload


async def run_purge_pipeline(
    config: PluginConfiguration,
    handler: PurgeHandler | None,
    args: HookArgs,
    operation: str,
    correlation_id: str,
) -> None:
    """Classify, scope and dispatch one event. At most one purge request."""
    event = build_event(config, args, operation)

    purge_everything = config.purge_everything.evaluate(event)
    if not purge_everything and operation != "delete":
        metadata = args.collection or args.global_config
        if not is_purge_worthy(metadata, args.doc, args.previous_doc):
            logger.info(
                "Change is not a publish (drafts enabled), no purge",
                correlation_id=correlation_id,
                **_target_slugs(args),
            )
            return

    scope = await resolve_scope(event, config, correlation_id, purge_everything=purge_everything)
    if scope.is_empty:
        logger.info("No URLs to purge", correlation_id=correlation_id, **_target_slugs(args))
        return

    purge_request = PurgeRequest(scope=scope, correlation_id=correlation_id)

    if config.use_endpoint and handler is not None:
        try:
            await call_internal_purge_endpoint(handler, args.req, purge_request)
        except PurgeEndpointError as exc:
            body = exc.body if isinstance(exc.body, dict) else {}
            logger.error(
                "Purge via internal endpoint failed",
                correlation_id=correlation_id,
                endpoint_correlation_id=body.get("correlationId"),
                status=exc.status,
                error=body.get("error"),
                details=body.get("details"),
            )
        return

    await execute(
        purge_request.scope,
        config.credentials,
        PurgeContext(
            correlation_id=purge_request.correlation_id,
            debug=config.debug,
            log_provider_json=config.log_provider_json,
        ),
    )


def _make_hook(
    config: PluginConfiguration,
    handler: PurgeHandler | None,
    hook_name: str,
) -> Hook:
    async def purge_hook(args: HookArgs) -> dict[str, Any]:
        if hook_name == AFTER_DELETE:
            operation = "delete"
        else:
            operation = "create" if args.operation == "create" else "update"
        correlation_id = new_correlation_id()

        with bind_correlation_id(correlation_id):
            logger.info(
                f"{hook_name} purge hook started",
                correlation_id=correlation_id,
                operation=operation,
                use_endpoint=config.use_endpoint,
                **_target_slugs(args),
            )
            await run_purge_pipeline(config, handler, args, operation, correlation_id)
            logger.info(f"{hook_name} purge hook finished", correlation_id=correlation_id)

        return args.doc

    purge_hook.__name__ = f"cloudflare_purge_{hook_name}"
    return purge_hook


def make_after_change_hook(config: PluginConfiguration, handler: PurgeHandler | None = None) -> Hook:
    """Hook for create/update on a collection or global."""
    return _make_hook(config, handler, AFTER_CHANGE)


def make_after_delete_hook(config: PluginConfiguration, handler: PurgeHandler | None = None) -> Hook:
    """Hook for deletes on a collection. Deletes are always purge-worthy."""
    return _make_hook(config, handler, AFTER_DELETE)
