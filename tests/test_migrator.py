"""
Tests for the legacy script migration utility.
"""

import pytest

from forge.core.migrator import (
    DEFAULT_MIGRATION_MAP,
    ModuleMigrator,
    load_mapping,
)
from forge.domain.models import MigrationEntry
from forge.errors import MigrationError


def legacy_script(*functions: str) -> str:
    """Build a monolithic script embedding one heredoc module per function."""
    parts = ["#!/bin/bash", "set -e", ""]
    for function in functions:
        parts += [
            f"{function}() {{",
            "cat << 'MODULE_EOF'",
            f"# body of {function}",
            f'echo "{function}"',
            "MODULE_EOF",
            "}",
            "",
        ]
    parts += ['print_module_01_content > "$1"', ""]
    return "\n".join(parts)


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "out" / "modules"


class TestExtraction:
    """Tests for heredoc extraction."""

    def test_extracts_lines_between_markers(self, tmp_path, output_dir):
        source = tmp_path / "setup-saas.sh"
        source.write_text(legacy_script("print_module_01_content", "print_module_02_content"))
        migrator = ModuleMigrator(source, output_dir)
        assert migrator.extract("print_module_02_content") == [
            "# body of print_module_02_content",
            'echo "print_module_02_content"',
        ]

    def test_unknown_function_yields_nothing(self, tmp_path, output_dir):
        source = tmp_path / "setup-saas.sh"
        source.write_text(legacy_script("print_module_01_content"))
        assert ModuleMigrator(source, output_dir).extract("print_module_07_content") == []

    def test_unterminated_block_yields_nothing(self, tmp_path, output_dir):
        source = tmp_path / "setup-saas.sh"
        source.write_text("broken() {\ncat << 'MODULE_EOF'\necho half\n")
        assert ModuleMigrator(source, output_dir).extract("broken") == []

    def test_prefix_named_function_not_confused(self, tmp_path, output_dir):
        """print_module_01_content must not match print_module_01_content_old."""
        source = tmp_path / "setup-saas.sh"
        source.write_text(
            "print_module_01_content_old() {\ncat << 'MODULE_EOF'\nold\nMODULE_EOF\n}\n"
            "print_module_01_content() {\ncat << 'MODULE_EOF'\nnew\nMODULE_EOF\n}\n"
        )
        assert ModuleMigrator(source, output_dir).extract("print_module_01_content") == ["new"]

    def test_missing_source(self, tmp_path, output_dir):
        with pytest.raises(MigrationError):
            ModuleMigrator(tmp_path / "nope.sh", output_dir).extract("anything")


class TestMigration:
    """Tests for writing module files."""

    def test_module_file_content(self, tmp_path, output_dir):
        """The written file is header + extracted body + footer, executable."""
        source = tmp_path / "setup-saas.sh"
        source.write_text("f() {\ncat << 'MODULE_EOF'\ncontent\nMODULE_EOF\n}\n")
        entry = MigrationEntry(
            function="f",
            path="core/frontend-setup.sh",
            title="Frontend Setup",
            description="Sets up Next.js frontend with dependencies",
            entrypoint="setup_frontend",
        )
        migrator = ModuleMigrator(source, output_dir, [entry])

        target = migrator.migrate_entry(entry)

        assert target == output_dir / "core" / "frontend-setup.sh"
        expected = migrator.render_header(entry) + "content\n" + migrator.render_footer(entry)
        assert target.read_text() == expected
        assert target.stat().st_mode & 0o777 == 0o755

    def test_header_and_footer_shape(self, tmp_path, output_dir):
        entry = DEFAULT_MIGRATION_MAP[3]
        migrator = ModuleMigrator(tmp_path / "unused.sh", output_dir)

        header = migrator.render_header(entry)
        footer = migrator.render_footer(entry)

        assert header.startswith("#!/bin/bash\n# modules/features/auth-system.sh\n")
        assert "# Module: Authentication System\n" in header
        assert "# Version: 2.0.0\n" in header
        assert "# Depends: none\n" in header
        assert 'MODULE_NAME="auth-system"' in header
        assert 'PROJECT_NAME=${1:-"lean-saas-app"}' in header
        assert "lib/logger.sh" in header
        assert "    setup_auth_system \"$@\"\n" in footer
        assert "trap 'log_error \"Module failed at line $LINENO\"' ERR" in footer
        assert footer.endswith('main "$@"\n')

    def test_migrate_all_reports_partial_success(self, tmp_path, output_dir):
        """A missing function is counted and the remaining entries still migrate."""
        functions = [e.function for e in DEFAULT_MIGRATION_MAP if e.function != "print_module_05_content"]
        source = tmp_path / "setup-saas.sh"
        source.write_text(legacy_script(*functions))
        migrator = ModuleMigrator(source, output_dir)

        report = migrator.migrate_all()

        assert report.ratio == "8/9"
        assert report.failed == ["print_module_05_content"]
        assert not (output_dir / "features" / "ui-components.sh").exists()
        assert (output_dir / "advanced" / "dev-tools.sh").exists()

    def test_validate_source_lists_missing(self, tmp_path, output_dir):
        source = tmp_path / "setup-saas.sh"
        source.write_text(legacy_script("print_module_01_content"))
        missing = ModuleMigrator(source, output_dir).validate_source()
        assert "print_module_01_content" not in missing
        assert len(missing) == 8

    def test_validate_source_missing_file(self, tmp_path, output_dir):
        with pytest.raises(MigrationError):
            ModuleMigrator(tmp_path / "nope.sh", output_dir).validate_source()

    def test_full_run(self, tmp_path, output_dir):
        source = tmp_path / "setup-saas.sh"
        source.write_text(legacy_script(*[e.function for e in DEFAULT_MIGRATION_MAP]))

        report = ModuleMigrator(source, output_dir).run()

        assert report.complete
        assert report.ratio == "9/9"
        for category in ("core", "features", "advanced"):
            assert (output_dir / category).is_dir()
        index = (output_dir / "index.md").read_text()
        assert "## Core Modules" in index
        assert "- **frontend-setup** - Sets up Next.js frontend with dependencies" in index

    def test_source_not_modified(self, tmp_path, output_dir):
        source = tmp_path / "setup-saas.sh"
        text = legacy_script(*[e.function for e in DEFAULT_MIGRATION_MAP])
        source.write_text(text)
        ModuleMigrator(source, output_dir).run()
        assert source.read_text() == text


class TestMappingFile:
    """Tests for load_mapping."""

    def test_list_form(self, tmp_path):
        path = tmp_path / "map.yaml"
        path.write_text(
            "- function: print_module_01_content\n"
            "  path: core/base.sh\n"
            "  title: Base\n"
            "  description: Base layout\n"
        )
        entries = load_mapping(path)
        assert entries[0].path == "core/base.sh"
        assert entries[0].setup_function == "setup_base"

    def test_modules_key_form(self, tmp_path):
        path = tmp_path / "map.yaml"
        path.write_text(
            "modules:\n"
            "  - function: f\n"
            "    path: extra/thing.sh\n"
            "    title: Thing\n"
            "    entrypoint: do_thing\n"
        )
        entries = load_mapping(path)
        assert entries[0].category == "extra"
        assert entries[0].setup_function == "do_thing"

    def test_missing_file(self, tmp_path):
        with pytest.raises(MigrationError):
            load_mapping(tmp_path / "absent.yaml")

    def test_invalid_entries(self, tmp_path):
        path = tmp_path / "map.yaml"
        path.write_text("- path: core/base.sh\n")
        with pytest.raises(MigrationError):
            load_mapping(path)

    def test_custom_category_directory_created(self, tmp_path, output_dir):
        entry = MigrationEntry(function="f", path="extra/thing.sh", title="Thing")
        ModuleMigrator(tmp_path / "unused.sh", output_dir, [entry]).prepare_layout()
        assert (output_dir / "extra").is_dir()
