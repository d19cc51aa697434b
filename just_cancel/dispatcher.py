"""
Protocol Dispatcher

Implements the MCP operations exposed by the server:

- list_resources / list_resource_templates / read_resource: widget HTML
- list_tools: tool descriptors with input/output schemas
- call_tool: validate arguments, read the uploaded statement, classify,
  assemble the structured payload and record one analytics event

Hard failures (unknown tool, invalid arguments, unknown resource) raise
JustCancelError subclasses. Statement fetch/extraction failures are soft:
they are reported in ``file_parsing_error`` and the call still succeeds.
"""

import time
import traceback
from typing import Any

from .analytics.event_log import EventLog
from .analytics.events import EventKind
from .catalog import Catalog, Widget, widget_meta
from .client.extraction import TextExtractor
from .client.file_client import StatementFileClient
from .detection.classifier import (
    SubscriptionCandidate,
    SubscriptionStatus,
    classify,
    merge_candidates,
)
from .detection.patterns import get_pattern
from .errors import (
    ExtractionError,
    FileFetchError,
    InvalidArguments,
    UnknownResource,
    UnknownTool,
)
from .logging_config import get_logger
from .utils.context import ClientContext, infer_total_spend
from .utils.formatters import format_structured_content, total_monthly_spend
from .utils.validators import (
    BankStatementRef,
    ManualSubscription,
    ToolArguments,
    validate_tool_arguments,
)

logger = get_logger(__name__)


def _elapsed_ms(start_time: float) -> int:
    return int((time.monotonic() - start_time) * 1000)


def _manual_candidate(item: ManualSubscription) -> SubscriptionCandidate:
    """User-listed subscription, with logo and cancel link when the service is known."""
    pattern = get_pattern(item.service)
    return SubscriptionCandidate(
        service=item.service,
        monthly_cost=item.monthly_cost,
        category=item.category or "Other",
        status=SubscriptionStatus.CONFIRMED,
        logo=pattern.logo if pattern else None,
        cancel_link=pattern.cancel_url if pattern else None,
    )


def _inferred_query(args: ToolArguments, spend: float | None) -> str:
    parts = []
    if args.subscriptions:
        parts.append(f"{len(args.subscriptions)} subscriptions")
    if spend:
        parts.append(f"Spend: ${spend:g}")
    return ", ".join(parts) if parts else "Just Cancel"


class ProtocolDispatcher:
    """Routes MCP requests to the catalog, the classifier and the event log."""

    def __init__(
        self,
        catalog: Catalog,
        event_log: EventLog,
        file_client: StatementFileClient,
        extractor: TextExtractor,
    ):
        self.catalog = catalog
        self.event_log = event_log
        self.file_client = file_client
        self.extractor = extractor

    # ============================================================================
    # Resources
    # ============================================================================

    def list_resources(self) -> list[dict]:
        return self.catalog.resources()

    def list_resource_templates(self) -> list[dict]:
        return self.catalog.resource_templates()

    def read_resource(self, uri: str) -> dict:
        """
        Look up a widget resource by URI.

        Returns:
            Resource contents (HTML body plus metadata), unmodified

        Raises:
            UnknownResource: If no resource has this URI
        """
        widget = self.catalog.widget_for_uri(str(uri))
        if widget is None:
            raise UnknownResource(str(uri))
        return self.catalog.resource_contents(widget)

    # ============================================================================
    # Tools
    # ============================================================================

    def list_tools(self) -> list[dict]:
        return self.catalog.tools()

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        meta: dict[str, Any] | None = None,
    ) -> dict:
        """
        Run the subscription analysis tool.

        Args:
            name: Tool name from the catalog
            arguments: Raw tool arguments
            meta: Request ``_meta`` sent by the client

        Returns:
            Dict with ``content`` (always empty), ``structuredContent`` and ``_meta``

        Raises:
            UnknownTool: Name not in the catalog
            InvalidArguments: Arguments fail the input schema
        """
        start_time = time.monotonic()
        meta = meta or {}

        widget = self.catalog.widget_for_tool(name)
        if widget is None:
            await self.event_log.record(
                EventKind.TOOL_CALL_ERROR, {"error": "Unknown tool", "toolName": name}
            )
            raise UnknownTool(name)

        try:
            args = validate_tool_arguments(arguments)
        except InvalidArguments as e:
            logger.warning(f"Invalid arguments for {name}: {e.message}", extra={"tool_name": name})
            await self.event_log.record(
                EventKind.PARAMETER_PARSE_ERROR,
                {"toolName": name, "params": arguments, "error": e.message},
            )
            raise

        context = ClientContext.from_meta(meta)

        try:
            return await self._run_analysis(widget, args, context, meta, start_time)
        except Exception as e:
            logger.exception(f"Tool call failed: {e}", extra={"tool_name": name})
            await self.event_log.record(
                EventKind.TOOL_CALL_ERROR,
                {
                    "toolName": name,
                    "error": str(e),
                    "stack": traceback.format_exc(),
                    "responseTime": _elapsed_ms(start_time),
                    "device": context.device,
                    "userAgent": context.user_agent,
                },
            )
            raise

    async def _run_analysis(
        self,
        widget: Widget,
        args: ToolArguments,
        context: ClientContext,
        meta: dict[str, Any],
        start_time: float,
    ) -> dict:
        spend_override = args.total_monthly_spend
        if spend_override is None:
            spend_override = infer_total_spend(meta)

        # Uploaded statement first, then pasted text
        candidates: list[SubscriptionCandidate] = []
        file_parsing_error = None
        if args.bank_statement is not None:
            candidates, file_parsing_error = await self._parse_statement_file(args.bank_statement)

        if args.statement_text:
            candidates = merge_candidates(candidates, classify(args.statement_text))

        # Manual entries are never deduplicated
        candidates += [_manual_candidate(item) for item in args.subscriptions]

        monthly_spend = total_monthly_spend(candidates, override=spend_override)

        if args.is_empty:
            input_source = "default"
        elif args.bank_statement is not None:
            input_source = "file_upload"
        else:
            input_source = "user"

        structured = format_structured_content(
            candidates,
            monthly_spend=monthly_spend,
            view_filter=args.view_filter,
            input_source=input_source,
            file_parsing_error=file_parsing_error,
            from_file=args.bank_statement is not None,
        )

        result_meta = {
            **widget_meta(widget),
            "openai.com/widget": self.catalog.embedded_resource(widget),
        }

        has_input = bool(
            args.subscriptions
            or (args.statement_text and args.statement_text.strip())
            or args.bank_statement
        )
        if has_input:
            await self.event_log.record(
                EventKind.TOOL_CALL_SUCCESS,
                {
                    "toolName": widget.id,
                    "params": args.raw,
                    "inferredQuery": _inferred_query(args, spend_override),
                    "responseTime": _elapsed_ms(start_time),
                    "subscriptionsFound": len(candidates),
                    "device": context.device,
                    "userLocation": context.location,
                    "userLocale": context.locale,
                    "userAgent": context.user_agent,
                },
            )
        else:
            await self.event_log.record(
                EventKind.TOOL_CALL_EMPTY,
                {
                    "toolName": widget.id,
                    "params": args.raw,
                    "reason": "No subscription details provided",
                    "device": context.device,
                },
            )

        logger.info(
            f"Returning {len(candidates)} subscriptions ({input_source})",
            extra={"tool_name": widget.id},
        )

        return {"content": [], "structuredContent": structured, "_meta": result_meta}

    async def _parse_statement_file(
        self, statement: BankStatementRef
    ) -> tuple[list[SubscriptionCandidate], str | None]:
        """
        Download and classify an uploaded statement.

        Returns:
            (candidates, error message or None)
        """
        try:
            fetched = await self.file_client.fetch(statement.download_url)
            if fetched.is_pdf:
                text = await self.extractor.extract_text(fetched.content)
            else:
                text = fetched.content.decode("utf-8", errors="replace")
        except (FileFetchError, ExtractionError) as e:
            logger.error(f"Statement file parsing failed: {e.message}")
            await self.event_log.record(
                EventKind.FILE_PARSE_ERROR,
                {"file_id": statement.file_id, "error": e.message},
            )
            return [], e.message

        candidates = classify(text)
        logger.info(f"Found {len(candidates)} subscriptions in statement {statement.file_id}")
        await self.event_log.record(
            EventKind.FILE_PARSE_SUCCESS,
            {
                "file_id": statement.file_id,
                "content_type": fetched.content_type,
                "text_length": len(text),
                "subscriptions_found": len(candidates),
            },
        )
        return candidates, None
