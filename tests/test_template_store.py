"""Tests for template lookup and placeholder substitution."""

from datetime import date
from pathlib import Path

import pytest

from aireset.config import ResetConfig
from aireset.core.category_resolver import resolve_categories
from aireset.core.template_store import (
    default_placeholders,
    get_template_path,
    missing_templates,
    render_template,
    require_templates,
    substitute_placeholders,
)
from aireset.errors import InvalidInputError


@pytest.mark.unit
class TestPlaceholders:
    """Tests for placeholder values and substitution."""

    def test_default_placeholders(self, config: ResetConfig) -> None:
        """DATE uses the configured format; PROJECT the project name."""
        config.templates.date_format = "%d/%m/%Y"
        values = default_placeholders(config, today=date(2026, 2, 1))
        assert values == {"DATE": "01/02/2026", "PROJECT": "demo"}

    def test_substitute_every_occurrence(self) -> None:
        """All occurrences are replaced; unknown keys are left alone."""
        text = "[DATE] and [DATE] for [OTHER]"
        assert substitute_placeholders(text, {"DATE": "today"}) == "today and today for [OTHER]"


@pytest.mark.unit
class TestTemplates:
    """Tests for template files."""

    def test_template_path(self, workspace: Path, config: ResetConfig) -> None:
        """Templates live at <dir>/<name>.template.md."""
        path = get_template_path(workspace, config, "lessons")
        assert path == workspace / ".ai/templates/lessons.template.md"

    def test_render(self, workspace: Path, config: ResetConfig) -> None:
        """Rendering fills placeholders."""
        text = render_template(workspace, config, "lessons", {"DATE": "d", "PROJECT": "p"})
        assert text == "# Lessons\n\nProject: p\nLast reset: d\n"

    def test_render_missing(self, workspace: Path, config: ResetConfig) -> None:
        """A missing template raises InvalidInputError."""
        with pytest.raises(InvalidInputError, match="Template not found"):
            render_template(workspace, config, "absent")

    def test_missing_templates_lists_all(self, workspace: Path, config: ResetConfig) -> None:
        """Every missing template is reported."""
        for name in ("lessons", "decisions"):
            get_template_path(workspace, config, name).unlink()
        categories = resolve_categories("medium", config)
        assert len(missing_templates(workspace, config, categories)) == 2
        with pytest.raises(InvalidInputError) as exc_info:
            require_templates(workspace, config, categories)
        assert "lessons.template.md" in exc_info.value.message
        assert "decisions.template.md" in exc_info.value.message

    def test_clear_categories_need_no_templates(
        self, tmp_path: Path, config: ResetConfig
    ) -> None:
        """Only template-reset categories require templates."""
        require_templates(tmp_path, config, resolve_categories("light", config))
