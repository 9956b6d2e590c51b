"""
Tests for xds_scaffold.renderer
===============================

Test Organization
-----------------
- TestRender: Placeholder substitution
- TestTomlString: Quoting values for TOML templates
- TestRenderTemplate: Rendering loaded templates
- TestWriteRendered: Writing rendered content
- TestCopyVerbatim: Static asset copying
"""

from pathlib import Path

import pytest
import tomli

from xds_scaffold.errors import NotFoundError, RenderError, UnboundPlaceholderError, WriteError
from xds_scaffold.models import ProjectDescriptor
from xds_scaffold.renderer import (
    copy_verbatim,
    render,
    render_template,
    toml_string,
    write_rendered,
)
from xds_scaffold.resolver import build_bindings
from xds_scaffold.store import TemplateStore, placeholders_of


# =============================================================================
# Render Tests
# =============================================================================

class TestRender:
    """Tests for render."""

    def test_simple_substitution(self) -> None:
        assert render("# {{PROJECT_NAME}}\n", {"PROJECT_NAME": "myapp"}) == "# myapp\n"

    def test_repeated_placeholder(self) -> None:
        text = "{{PROJECT_NAME}}-{{PROJECT_NAME}}"
        assert render(text, {"PROJECT_NAME": "x"}) == "x-x"

    def test_whitespace_inside_markers(self) -> None:
        assert render("{{ PROJECT_NAME }}", {"PROJECT_NAME": "myapp"}) == "myapp"

    def test_values_of_different_length(self) -> None:
        """Substitution is textual; longer values do not clip the rest."""
        text = "a {{X}} b {{Y}} c"
        assert render(text, {"X": "a-much-longer-value", "Y": ""}) == "a a-much-longer-value b  c"

    def test_values_are_literal(self) -> None:
        """Values are not rendered again."""
        assert render("{{X}}", {"X": "{% raw %}"}) == "{% raw %}"

    def test_unused_bindings_ignored(self) -> None:
        assert render("plain", {"PROJECT_NAME": "x"}) == "plain"

    def test_trailing_newline_kept(self) -> None:
        assert render("line\n", {}).endswith("\n")

    def test_unbound_placeholder(self) -> None:
        with pytest.raises(UnboundPlaceholderError) as exc_info:
            render("{{UNKNOWN_VAR}}", {})

        assert exc_info.value.placeholder == "UNKNOWN_VAR"
        assert str(exc_info.value) == "Unbound placeholder 'UNKNOWN_VAR'"

    def test_leftmost_unbound_reported(self) -> None:
        text = "{{PROJECT_NAME}} {{SECOND}} {{FIRST}}"
        with pytest.raises(UnboundPlaceholderError) as exc_info:
            render(text, {"PROJECT_NAME": "x"})

        assert exc_info.value.placeholder == "SECOND"

    def test_unbound_names_template(self) -> None:
        with pytest.raises(UnboundPlaceholderError, match="in template 'x.j2'"):
            render("{{MISSING}}", {}, template="x.j2")

    def test_undefined_loop_variable(self) -> None:
        """Names outside the placeholder vocabulary still fail strictly."""
        with pytest.raises(UnboundPlaceholderError) as exc_info:
            render("{{ package }}", {})

        assert exc_info.value.placeholder == "package"

    def test_unbound_is_render_error(self) -> None:
        with pytest.raises(RenderError):
            render("{{MISSING}}", {})

    def test_invalid_syntax(self) -> None:
        with pytest.raises(RenderError, match="Invalid syntax in 'bad.j2'"):
            render("ok\n{% for %}\n", {}, template="bad.j2")

    def test_package_loop(self) -> None:
        text = '[{% for p in PACKAGE_DIRS.split(",") %}"{{ p }}"{% if not loop.last %}, {% endif %}{% endfor %}]'
        assert render(text, {"PACKAGE_DIRS": "api,models"}) == '["api", "models"]'

    def test_toml_filter(self) -> None:
        text = "description = {{ PROJECT_DESCRIPTION | toml }}\n"
        content = render(text, {"PROJECT_DESCRIPTION": 'My "fast" C:\\tool'})

        assert tomli.loads(content)["description"] == 'My "fast" C:\\tool'

    def test_toml_filter_unbound(self) -> None:
        with pytest.raises(UnboundPlaceholderError) as exc_info:
            render("x = {{ PROJECT_DESCRIPTION | toml }}", {})

        assert exc_info.value.placeholder == "PROJECT_DESCRIPTION"


# =============================================================================
# TOML String Tests
# =============================================================================

class TestTomlString:
    """Tests for toml_string."""

    def test_plain(self) -> None:
        assert toml_string("REST API service") == '"REST API service"'

    def test_quotes_and_backslashes(self) -> None:
        assert toml_string('a "b" \\c') == '"a \\"b\\" \\\\c"'

    @pytest.mark.parametrize(
        "value",
        ["line one\nline two", "tab\there", "bell\x07", "unicode ✓ 🚀", "it's"],
    )
    def test_parses_back(self, value: str) -> None:
        assert tomli.loads(f"v = {toml_string(value)}")["v"] == value


# =============================================================================
# Render Template Tests
# =============================================================================

class TestRenderTemplate:
    """Rendering the bundled templates with a real binding set."""

    def test_readme(self, descriptor: ProjectDescriptor) -> None:
        template = TemplateStore().load("project/README.md.j2")

        content = render_template(template, build_bindings(descriptor))

        assert content.splitlines()[0] == "# myapi"
        assert "REST API service" in content
        assert placeholders_of(content) == []

    def test_pyproject_includes_packages(self, descriptor: ProjectDescriptor) -> None:
        template = TemplateStore().load("python/pyproject.toml.template")

        content = render_template(template, build_bindings(descriptor))

        assert 'name = "myapi"' in content
        assert '"api", "models", "services"' in content

    def test_missing_binding_names_template(self) -> None:
        template = TemplateStore().load("project/README.md.j2")

        with pytest.raises(UnboundPlaceholderError) as exc_info:
            render_template(template, {"PROJECT_NAME": "x"})

        assert exc_info.value.placeholder == "PROJECT_DESCRIPTION"
        assert exc_info.value.template == "project/README.md.j2"


# =============================================================================
# Write Tests
# =============================================================================

class TestWriteRendered:
    """Tests for write_rendered."""

    def test_writes_content(self, tmp_path: Path) -> None:
        dest = tmp_path / "README.md"

        assert write_rendered(dest, "# myapp\n") == dest
        assert dest.read_text() == "# myapp\n"

    def test_overwrites(self, tmp_path: Path) -> None:
        dest = tmp_path / "README.md"
        dest.write_text("old")

        write_rendered(dest, "new")

        assert dest.read_text() == "new"

    def test_missing_parent(self, tmp_path: Path) -> None:
        dest = tmp_path / "missing" / "README.md"

        with pytest.raises(WriteError) as exc_info:
            write_rendered(dest, "x")

        assert exc_info.value.path == dest


# =============================================================================
# Copy Tests
# =============================================================================

class TestCopyVerbatim:
    """Tests for copy_verbatim."""

    def test_byte_identical(self, tmp_path: Path) -> None:
        source = tmp_path / "settings.json"
        source.write_bytes(b'{"a": "{{NOT_A_PLACEHOLDER}}"}\r\n\xe2\x9c\x93')
        dest = tmp_path / "copy.json"

        copy_verbatim(source, dest)

        assert dest.read_bytes() == source.read_bytes()

    def test_repeat_copy_identical(self, tmp_path: Path) -> None:
        source = tmp_path / "a.ini"
        source.write_text("[mypy]\nstrict = True\n")

        first = copy_verbatim(source, tmp_path / "one.ini").read_bytes()
        second = copy_verbatim(source, tmp_path / "two.ini").read_bytes()

        assert first == second

    def test_missing_source(self, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError):
            copy_verbatim(tmp_path / "nope", tmp_path / "dest")

    def test_missing_destination_dir(self, tmp_path: Path) -> None:
        source = tmp_path / "a.ini"
        source.write_text("x")

        with pytest.raises(WriteError):
            copy_verbatim(source, tmp_path / "missing" / "a.ini")
