"""Tests for metadata generation, validation, rendering and persistence."""

import json
from datetime import UTC, datetime
from pathlib import Path
from unittest import mock

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from aireset.config import ResetConfig
from aireset.constants import METADATA_FILE, SCHEMA_VERSION, UNKNOWN
from aireset.core.metadata_handler import (
    collect_provenance,
    ensure_valid,
    format_size,
    generate_metadata,
    parse_metadata,
    render_metadata,
    serialize_metadata,
    validate_metadata,
    write_metadata,
)
from aireset.errors import InvalidInputError, MetadataValidationError
from aireset.models import ArchiveMetadata, ArchiveOperation, FileCounts


@pytest.fixture
def metadata(workspace: Path, config: ResetConfig) -> ArchiveMetadata:
    """Metadata for a full reset of the workspace fixture."""
    return generate_metadata(
        "full",
        workspace,
        config,
        archive_name="20260101-000000-000000-full-reset",
        created=datetime(2026, 1, 1, tzinfo=UTC),
    )


def _as_json(metadata: ArchiveMetadata) -> dict:
    return json.loads(serialize_metadata(metadata))


@pytest.mark.unit
class TestGenerateMetadata:
    """Tests for generate_metadata."""

    def test_generated_metadata_is_valid(self, metadata: ArchiveMetadata) -> None:
        """Freshly generated metadata passes validation."""
        assert validate_metadata(metadata).valid

    def test_fields(self, metadata: ArchiveMetadata, workspace: Path) -> None:
        """Schema version, operation, directories and zero counts are set."""
        assert metadata.version == SCHEMA_VERSION
        assert metadata.operation == ArchiveOperation.FULL
        assert metadata.contents.directories[0] == ".ai/memory"
        assert metadata.contents.files.total == 0
        assert metadata.contents.total_size == 0
        assert metadata.source.path == str(workspace.resolve())
        assert metadata.details.archive_name == "20260101-000000-000000-full-reset"

    def test_provenance_unknown_outside_git(self, workspace: Path) -> None:
        """Revision and branch fall back to unknown outside a repository."""
        source = collect_provenance(workspace)
        assert source.vcs_revision == UNKNOWN
        assert source.vcs_branch == UNKNOWN

    @pytest.mark.slow
    def test_provenance_from_git(self, temp_git_repo: Path) -> None:
        """Revision and branch are read from git when available."""
        source = collect_provenance(temp_git_repo)
        assert len(source.vcs_revision) == 40
        assert source.vcs_branch != UNKNOWN

    def test_provenance_user_failure(self, workspace: Path) -> None:
        """A failing user lookup yields unknown rather than raising."""
        with mock.patch("getpass.getuser", side_effect=OSError("no user")):
            assert collect_provenance(workspace).user == UNKNOWN

    def test_invalid_operation(self, workspace: Path, config: ResetConfig) -> None:
        """Unknown operations are rejected."""
        with pytest.raises(InvalidInputError, match="Invalid operation"):
            generate_metadata("explode", workspace, config)

    def test_non_policy_operation_needs_categories(
        self, workspace: Path, config: ResetConfig
    ) -> None:
        """archive and pre-restore cannot resolve their own categories."""
        with pytest.raises(InvalidInputError, match="explicit category list"):
            generate_metadata("pre-restore", workspace, config)


@pytest.mark.unit
class TestValidateMetadata:
    """Tests for validate_metadata."""

    def test_missing_fields_reported_together(self, metadata: ArchiveMetadata) -> None:
        """Every missing field is reported in one pass."""
        data = _as_json(metadata)
        del data["version"]
        del data["restoration"]
        result = validate_metadata(data)
        assert not result.valid
        fields = {v.field for v in result.violations}
        assert {"version", "restoration"} <= fields

    def test_count_mismatch_reported_with_missing_field(self, metadata: ArchiveMetadata) -> None:
        """The counts check still runs when another field is missing."""
        data = _as_json(metadata)
        del data["version"]
        data["contents"]["files"]["total"] = 5
        result = validate_metadata(data)
        fields = {v.field for v in result.violations}
        assert {"version", "contents.files.total"} <= fields

    def test_unparseable_counts_not_double_reported(self, metadata: ArchiveMetadata) -> None:
        """Mistyped counts give the schema violation only."""
        data = _as_json(metadata)
        data["contents"]["files"]["total"] = "many"
        result = validate_metadata(data)
        assert [v.field for v in result.violations] == ["contents.files.total"]

    def test_unparseable_timestamp(self, metadata: ArchiveMetadata) -> None:
        """A non-ISO timestamp is a violation."""
        data = _as_json(metadata)
        data["created"] = "yesterday"
        result = validate_metadata(data)
        assert [v.field for v in result.violations] == ["created"]

    def test_naive_timestamp(self, metadata: ArchiveMetadata) -> None:
        """A timestamp without an offset is a violation."""
        data = _as_json(metadata)
        data["created"] = "2026-01-01T00:00:00"
        assert not validate_metadata(data).valid

    def test_unknown_operation(self, metadata: ArchiveMetadata) -> None:
        """The operation must be one of the known values."""
        data = _as_json(metadata)
        data["operation"] = "nuke"
        assert [v.field for v in validate_metadata(data).violations] == ["operation"]

    def test_non_list_directories(self, metadata: ArchiveMetadata) -> None:
        """contents.directories must be a list."""
        data = _as_json(metadata)
        data["contents"]["directories"] = ".ai/memory"
        assert "contents.directories" in {v.field for v in validate_metadata(data).violations}

    def test_string_count_rejected(self, metadata: ArchiveMetadata) -> None:
        """Counts are strict integers."""
        data = _as_json(metadata)
        data["contents"]["totalSize"] = "12"
        assert "contents.totalSize" in {v.field for v in validate_metadata(data).violations}

    def test_total_must_match_category_sum(self, metadata: ArchiveMetadata) -> None:
        """The total must equal the sum of the per-category counts."""
        metadata.contents.files = FileCounts(categories={"memory": 2}, total=3)
        result = validate_metadata(metadata)
        assert [v.field for v in result.violations] == ["contents.files.total"]

    def test_not_an_object(self) -> None:
        """Non-object JSON is rejected."""
        result = validate_metadata([1, 2])  # type: ignore[arg-type]
        assert result.violations[0].message == "must be a JSON object"

    def test_ensure_valid_carries_all_violations(self, metadata: ArchiveMetadata) -> None:
        """ensure_valid raises with the complete violation list."""
        data = _as_json(metadata)
        del data["version"]
        data["operation"] = "nuke"
        with pytest.raises(MetadataValidationError) as exc_info:
            ensure_valid(data)
        assert len(exc_info.value.violations) == 2
        assert "violations" in exc_info.value.to_dict()


@pytest.mark.unit
class TestSerialization:
    """Tests for JSON serialization and persistence."""

    def test_camel_case_keys(self, metadata: ArchiveMetadata) -> None:
        """On-disk keys are camelCase."""
        data = _as_json(metadata)
        assert "vcsRevision" in data["source"]
        assert "totalSize" in data["contents"]
        assert "generatorVersion" in data["details"]

    def test_parse_rejects_bad_json(self) -> None:
        """Unparseable text raises MetadataValidationError."""
        with pytest.raises(MetadataValidationError, match="unparseable JSON"):
            parse_metadata("{not json")

    def test_write_refuses_invalid_metadata(
        self, tmp_path: Path, metadata: ArchiveMetadata
    ) -> None:
        """Invalid metadata is never persisted."""
        metadata.contents.files = FileCounts(categories={}, total=5)
        with pytest.raises(MetadataValidationError):
            write_metadata(tmp_path, metadata)
        assert not (tmp_path / METADATA_FILE).exists()

    def test_write_then_parse(self, tmp_path: Path, metadata: ArchiveMetadata) -> None:
        """A written record parses back to an equal model."""
        path = write_metadata(tmp_path, metadata)
        assert path.name == METADATA_FILE
        assert parse_metadata(path.read_text()) == metadata
        assert not (tmp_path / f"{METADATA_FILE}.tmp").exists()


class TestMetadataProperties:
    """Property-based tests for metadata serialization."""

    @given(
        counts=st.dictionaries(
            st.text(min_size=1, max_size=20), st.integers(min_value=0, max_value=10**6)
        ),
        size=st.integers(min_value=0, max_value=10**12),
        user=st.text(max_size=30),
        created=st.datetimes(
            min_value=datetime(2000, 1, 1), max_value=datetime(2100, 1, 1), timezones=st.just(UTC)
        ),
    )
    @settings(max_examples=50)
    def test_json_round_trip(
        self, counts: dict[str, int], size: int, user: str, created: datetime
    ) -> None:
        """Serialization followed by parsing loses nothing."""
        metadata = ArchiveMetadata.model_validate(
            {
                "version": SCHEMA_VERSION,
                "created": created.isoformat(),
                "operation": "archive",
                "source": {"path": "/w", "user": user},
                "contents": {
                    "directories": [],
                    "files": {"categories": counts, "total": sum(counts.values())},
                    "totalSize": size,
                },
                "restoration": {"compatible": ["aireset"], "requirements": []},
            }
        )
        assert validate_metadata(metadata).valid
        assert parse_metadata(serialize_metadata(metadata)) == metadata


@pytest.mark.unit
class TestRenderMetadata:
    """Tests for render_metadata and format_size."""

    def test_sections(self, metadata: ArchiveMetadata) -> None:
        """The rendering lists every section."""
        text = render_metadata(metadata)
        for heading in (
            "Archive Information:",
            "Source Information:",
            "Contents:",
            "Archived Directories:",
            "Restoration:",
        ):
            assert heading in text
        assert "  • .ai/memory" in text

    def test_deterministic(self, metadata: ArchiveMetadata) -> None:
        """The same metadata always renders the same text."""
        assert render_metadata(metadata) == render_metadata(metadata)

    @pytest.mark.parametrize(
        ("size", "expected"),
        [(0, "0 B"), (1023, "1023 B"), (1024, "1.0 KB"), (1536, "1.5 KB"), (1024**3, "1.0 GB")],
    )
    def test_format_size(self, size: int, expected: str) -> None:
        """Sizes are shown in binary units."""
        assert format_size(size) == expected
