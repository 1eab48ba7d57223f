"""Tests for MCP server helpers."""

import json
from datetime import date, datetime, timezone

from awards_nominee_sync.mcp.server import create_mcp_server, entity_summary, to_json
from awards_nominee_sync.models import (
    BatchSummary,
    Category,
    ItemFailure,
    NomineeEntity,
    RosterIssue,
    RosterIssueKind,
    RosterReport,
    ValidationStatus,
)


class TestSerialization:
    """Tests for JSON replies."""

    def test_batch_summary_json(self):
        """Test attrs records serialize with nested failures."""
        summary = BatchSummary(
            processed=2,
            total=2,
            succeeded=1,
            failed=1,
            failures=[ItemFailure(name="Nonexistent Film", category="Best Picture", reason="No match")],
        )
        data = json.loads(to_json(summary))
        assert data["succeeded"] == 1
        assert data["failures"][0]["name"] == "Nonexistent Film"

    def test_entity_summary(self):
        """Test dates become ISO strings and enums their values."""
        entity = NomineeEntity(
            name="Oppenheimer",
            category=Category.PICTURE,
            ceremony_year=2024,
            eligibility_year=2023,
            id=1,
            release_date=date(2023, 7, 19),
            last_synced=datetime(2024, 3, 10, tzinfo=timezone.utc),
            validation_status=ValidationStatus.FAILED,
            validation_errors=["Missing required credits: Producer"],
        )
        data = json.loads(to_json(entity_summary(entity)))
        assert data["category"] == "Best Picture"
        assert data["release_date"] == "2023-07-19"
        assert data["last_synced"].startswith("2024-03-10T00:00:00")
        assert data["validation_status"] == "failed"
        assert data["validation_errors"] == ["Missing required credits: Producer"]


    def test_roster_report_json(self):
        """Test roster issues serialize with their kind and category values."""
        report = RosterReport(
            ceremony_year=2024,
            total_nominees=1,
            issues=[
                RosterIssue(
                    kind=RosterIssueKind.MISSING,
                    category=Category.PICTURE,
                    details="Missing nominee: Past Lives in Best Picture",
                    severity="high",
                    recommendation='Add nominee "Past Lives" to Best Picture',
                )
            ],
            category_counts={"Best Picture": 1},
        )
        data = json.loads(to_json(report))
        assert data["issues"][0]["kind"] == "missing"
        assert data["issues"][0]["category"] == "Best Picture"
        assert data["category_counts"] == {"Best Picture": 1}

class TestCreateServer:
    """Tests for server creation."""

    def test_create_with_pipeline(self, pipeline):
        """Test the server is created around an injected pipeline."""
        server = create_mcp_server(pipeline)
        assert server.name == "awards-nominee-sync"
