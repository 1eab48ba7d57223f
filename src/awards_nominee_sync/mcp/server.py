"""MCP server exposing the nominee reconciliation pipeline."""

import asyncio
import json
import logging
import sys

import attrs
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from ..config import get_settings
from ..models.categories import Category
from ..models.nominee import Nomination
from ..services.category_rules import requirements_for
from ..services.pipeline import NomineePipeline, build_pipeline
from ..services.tmdb import parse_date

logger = logging.getLogger(__name__)

NOMINATION_SCHEMA = {
    "type": "object",
    "properties": {
        "ceremony_year": {
            "type": "integer",
            "description": "Year of the awards ceremony (e.g., 2024)",
        },
        "eligibility_year": {
            "type": "integer",
            "description": "Release year the nomination covers (default: ceremony_year - 1)",
        },
        "category": {
            "type": "string",
            "description": "Category name or alias (e.g., 'Best Picture', 'Best Director')",
        },
        "nominee_text": {
            "type": "string",
            "description": "Nominee as listed, e.g. 'Oppenheimer' or 'Bradley Cooper (Maestro)'",
        },
        "is_winner": {"type": "boolean", "description": "Whether the nominee won"},
        "alternative_title": {
            "type": "string",
            "description": "Known alternative or international title to search",
        },
    },
    "required": ["ceremony_year", "category", "nominee_text"],
}


def to_json(value) -> str:
    """Serialize attrs records (dates as ISO strings, enums by value)."""
    if attrs.has(type(value)):
        value = attrs.asdict(value)
    return json.dumps(value, indent=2, default=_json_default)


def _json_default(value):
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def entity_summary(entity) -> dict:
    """Compact view of a nominee entity (credits and videos left out)."""
    return {
        "id": entity.id,
        "name": entity.name,
        "category": entity.category.value,
        "ceremony_year": entity.ceremony_year,
        "tmdb_id": entity.tmdb_id,
        "title": entity.title,
        "biography": entity.biography,
        "release_date": entity.release_date,
        "runtime": entity.runtime,
        "trailer_url": entity.trailer_url,
        "match_confidence": entity.match_confidence,
        "data_complete": entity.data_complete,
        "validation_status": entity.validation_status.value,
        "validation_errors": list(entity.validation_errors),
        "last_synced": entity.last_synced,
    }


def create_mcp_server(pipeline: NomineePipeline | None = None) -> Server:
    """Create and configure the MCP server."""
    server = Server("awards-nominee-sync")
    if pipeline is None:
        pipeline = build_pipeline(get_settings())

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [
            Tool(
                name="sync_nominee",
                description="Match a nomination to its TMDb movie, enrich it, validate it and store the result",
                inputSchema=NOMINATION_SCHEMA,
            ),
            Tool(
                name="process_batch",
                description="Sync many nominations with bounded concurrency. Returns counts and per-item failure reasons.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "nominations": {
                            "type": "array",
                            "items": NOMINATION_SCHEMA,
                            "description": "Nominations to sync",
                        },
                        "batch_size": {
                            "type": "integer",
                            "description": "Nominations processed concurrently (default from SYNC_BATCH_SIZE)",
                        },
                    },
                    "required": ["nominations"],
                },
            ),
            Tool(
                name="validate_nominee",
                description="Re-run category, season and media validation on a stored nominee without re-fetching metadata",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "nominee_id": {"type": "integer", "description": "Stored nominee id"},
                    },
                    "required": ["nominee_id"],
                },
            ),
            Tool(
                name="get_validation_report",
                description="Get the latest validation report for a stored nominee",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "nominee_id": {"type": "integer", "description": "Stored nominee id"},
                    },
                    "required": ["nominee_id"],
                },
            ),
            Tool(
                name="validate_all_nominees",
                description="Re-validate every stored nominee and return valid and invalid counts",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "ceremony_year": {
                            "type": "integer",
                            "description": "Only re-validate nominees of this ceremony",
                        },
                    },
                },
            ),
            Tool(
                name="check_roster",
                description="Compare stored nominees of a ceremony against the official nominee list per category",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "ceremony_year": {"type": "integer", "description": "Ceremony year"},
                        "expected": {
                            "type": "object",
                            "description": "Official nominees: category name -> list of nominee names",
                            "additionalProperties": {"type": "array", "items": {"type": "string"}},
                        },
                    },
                    "required": ["ceremony_year", "expected"],
                },
            ),
            Tool(
                name="check_eligibility",
                description="Check a release date against the eligibility window of a ceremony year",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "release_date": {
                            "type": "string",
                            "description": "Release date (YYYY-MM-DD)",
                        },
                        "ceremony_year": {"type": "integer", "description": "Ceremony year"},
                        "category": {
                            "type": "string",
                            "description": "Optional category; feature categories also need a runtime",
                        },
                        "runtime": {"type": "integer", "description": "Runtime in minutes"},
                    },
                    "required": ["release_date", "ceremony_year"],
                },
            ),
            Tool(
                name="list_categories",
                description="List supported award categories with their required credits",
                inputSchema={"type": "object", "properties": {}},
            ),
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        try:
            if name == "sync_nominee":
                nomination = Nomination.from_record(arguments)
                outcome = await pipeline.run(nomination)
                if outcome.entity is None:
                    result = {
                        "name": nomination.nominee_text,
                        "category": nomination.category.value,
                        "state": outcome.state.value,
                        "reason": outcome.reason,
                    }
                else:
                    result = {"state": outcome.state.value, **entity_summary(outcome.entity)}
                return [TextContent(type="text", text=to_json(result))]

            elif name == "process_batch":
                nominations = [Nomination.from_record(r) for r in arguments["nominations"]]
                summary = await pipeline.process_batch(
                    nominations, batch_size=arguments.get("batch_size")
                )
                return [TextContent(type="text", text=to_json(summary))]

            elif name == "validate_nominee":
                entity = await pipeline.store.get(arguments["nominee_id"])
                if entity is None:
                    return [TextContent(type="text", text="Nominee not found")]
                validation = await pipeline.validate_nominee(entity)
                result = {
                    "valid": validation.valid,
                    "nominee": entity_summary(validation.entity),
                    "category": attrs.asdict(validation.category),
                    "season": attrs.asdict(validation.season),
                    "media": {
                        "poster": validation.media.poster,
                        "backdrop": validation.media.backdrop,
                        "best_trailer": validation.media.best_trailer,
                        "score": validation.media.score,
                    },
                    "report": attrs.asdict(validation.report),
                }
                return [TextContent(type="text", text=to_json(result))]

            elif name == "get_validation_report":
                report = await pipeline.get_validation_report(arguments["nominee_id"])
                if report is None:
                    return [TextContent(type="text", text="No validation report found")]
                return [TextContent(type="text", text=to_json(report))]

            elif name == "validate_all_nominees":
                sweep = await pipeline.validate_all(arguments.get("ceremony_year"))
                result = {
                    "total_validated": sweep.total_validated,
                    "valid": sweep.valid,
                    "invalid": sweep.invalid,
                    "results": [
                        {"valid": r.valid, **entity_summary(r.entity)} for r in sweep.results
                    ],
                }
                return [TextContent(type="text", text=to_json(result))]

            elif name == "check_roster":
                expected = {
                    Category.parse(category): names
                    for category, names in arguments["expected"].items()
                }
                report = await pipeline.check_roster(arguments["ceremony_year"], expected)
                result = {**attrs.asdict(report), "error_count": report.error_count}
                return [TextContent(type="text", text=to_json(result))]

            elif name == "check_eligibility":
                category = arguments.get("category")
                eligibility = pipeline.season.check_eligibility(
                    parse_date(arguments["release_date"]),
                    arguments["ceremony_year"],
                    category=Category.parse(category) if category else None,
                    runtime=arguments.get("runtime"),
                )
                return [TextContent(type="text", text=to_json(eligibility))]

            elif name == "list_categories":
                result = [
                    {
                        "name": c.value,
                        "kind": c.kind.value,
                        "nominee_format": c.shape.value,
                        "required_credits": list(requirements_for(c).required_credit_roles),
                    }
                    for c in Category
                ]
                return [TextContent(type="text", text=to_json(result))]

            else:
                return [TextContent(type="text", text=f"Unknown tool: {name}")]

        except Exception as e:
            logger.exception("Tool %s failed", name)
            return [TextContent(type="text", text=f"Error: {str(e)}")]

    return server


async def main():
    """Run the MCP server."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    pipeline = build_pipeline(settings)
    server = create_mcp_server(pipeline)
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await pipeline.close()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
