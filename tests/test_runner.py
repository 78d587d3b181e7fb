"""
Tests for module execution.
"""

from unittest.mock import patch

import pytest

from forge.core.registry import describe
from forge.core.runner import FAILURE_TAIL_LINES, LAUNCH_FAILURE_EXIT_CODE, ModuleRunner
from forge.errors import ModuleExecutionError


class TestModuleRunner:
    """Tests for ModuleRunner."""

    def test_successful_run(self, settings, write_module, workdir, read_trace):
        """A zero exit produces a record and runs in the given directory."""
        path = write_module("hello", body='echo "hello from $1"')
        record = ModuleRunner(settings).run(describe(path, "core"), workdir, "demo")
        assert record.name == "hello"
        assert record.exit_code == 0
        assert record.succeeded
        assert "hello from demo" in record.output
        assert record.duration_seconds >= 0
        assert read_trace() == [("hello", str(workdir.resolve()))]

    def test_module_made_executable(self, settings, write_module, workdir):
        path = write_module("chmod-me")
        path.chmod(0o644)
        ModuleRunner(settings).run(describe(path, "core"), workdir, "demo")
        assert path.stat().st_mode & 0o100

    def test_environment_exported(self, settings, write_module, workdir, tmp_path):
        """PROJECT_NAME, TEMPLATE_CONFIG and DEBUG reach the module."""
        path = write_module(
            "env",
            body='echo "$PROJECT_NAME|$TEMPLATE_CONFIG|$DEBUG"',
        )
        manifest = tmp_path / "templates" / "lean.yaml"
        record = ModuleRunner(settings, debug=True).run(
            describe(path, "core"), workdir, "demo", manifest_path=manifest
        )
        assert f"demo|{manifest}|1" in record.output

    def test_lib_dir_exported(self, settings, write_module, workdir):
        path = write_module("lib", body='echo "lib=$FORGE_LIB_DIR"')
        record = ModuleRunner(settings).run(describe(path, "core"), workdir, "demo")
        assert f"lib={settings.lib_dir}" in record.output

    def test_failure_raises_with_record(self, settings, write_module, workdir):
        """Non-zero exit propagates as ModuleExecutionError with the status."""
        path = write_module("broken", body='echo "about to fail"; exit 4')
        with pytest.raises(ModuleExecutionError) as exc_info:
            ModuleRunner(settings).run(describe(path, "core"), workdir, "demo")
        error = exc_info.value
        assert error.exit_code == 4
        assert error.record.name == "broken"
        assert "about to fail" in error.record.output
        assert "broken" in str(error)

    def test_stderr_is_captured(self, settings, write_module, workdir):
        path = write_module("loud", body='echo "to stderr" >&2')
        record = ModuleRunner(settings).run(describe(path, "core"), workdir, "demo")
        assert "to stderr" in record.output

    def test_unlaunchable_module(self, settings, workdir):
        """A script without a shebang cannot be exec'd and is reported as 127."""
        path = settings.modules_dir / "core" / "no-shebang.sh"
        path.write_text("echo nope\n")
        with pytest.raises(ModuleExecutionError) as exc_info:
            ModuleRunner(settings).run(describe(path, "core"), workdir, "demo")
        assert exc_info.value.exit_code == LAUNCH_FAILURE_EXIT_CODE

    def test_python_module(self, settings, workdir):
        path = settings.modules_dir / "core" / "py-step.py"
        path.write_text("import sys\nprint('python got', sys.argv[1])\n")
        record = ModuleRunner(settings).run(describe(path, "core"), workdir, "demo")
        assert "python got demo" in record.output


class TestOutputRelay:
    """Tests for noisy-line filtering."""

    NOISY = 'echo "npm WARN deprecated thing"; echo "useful line"; echo ""'

    def test_noise_detection(self, settings):
        runner = ModuleRunner(settings)
        assert runner.is_noise("npm WARN deprecated glob@7")
        assert runner.is_noise(" WARN  Issues with peer dependencies found")
        assert runner.is_noise("")
        assert not runner.is_noise("Project structure created")

    def test_noise_dropped_without_debug(self, settings, write_module, workdir):
        """Noisy lines are kept in the record but not relayed."""
        path = write_module("noisy", body=self.NOISY)
        with patch("forge.core.runner.console") as mock_console:
            record = ModuleRunner(settings).run(describe(path, "core"), workdir, "demo")
        relayed = " ".join(call.args[0] for call in mock_console.print.call_args_list)
        assert "useful line" in relayed
        assert "npm WARN" not in relayed
        assert "npm WARN deprecated thing" in record.output

    def test_everything_relayed_in_debug(self, settings, write_module, workdir):
        path = write_module("noisy", body=self.NOISY)
        with patch("forge.core.runner.console") as mock_console:
            ModuleRunner(settings, debug=True).run(describe(path, "core"), workdir, "demo")
        relayed = " ".join(call.args[0] for call in mock_console.print.call_args_list)
        assert "npm WARN deprecated thing" in relayed

    def test_errors_are_not_noise(self, settings):
        runner = ModuleRunner(settings)
        assert not runner.is_noise(" ERR_PNPM_PEER_DEP_ISSUES  Unmet peer dependencies")
        assert not runner.is_noise("error: option --app-dir is deprecated and was removed")
        assert runner.is_noise("warning glob@7.2.3: Glob versions prior to v9 are deprecated")

    def test_failure_output_replayed(self, settings, write_module, workdir):
        """A failing module's last lines reach the console even when they look like noise."""
        path = write_module(
            "frontend-setup",
            body=(
                'echo " WARN  deprecated inflight@1.0.6" >&2; '
                'echo " ERR_PNPM_PEER_DEP_ISSUES  Unmet peer dependencies" >&2; '
                'echo "error: option --app-dir is deprecated and was removed" >&2; '
                "exit 1"
            ),
        )
        with patch("forge.core.runner.console") as mock_console:
            with pytest.raises(ModuleExecutionError):
                ModuleRunner(settings).run(describe(path, "core"), workdir, "demo")
        relayed = " ".join(call.args[0] for call in mock_console.print.call_args_list)
        assert "ERR_PNPM_PEER_DEP_ISSUES  Unmet peer dependencies" in relayed
        assert "error: option --app-dir is deprecated and was removed" in relayed
        assert "WARN  deprecated inflight@1.0.6" in relayed

    def test_failure_tail_is_bounded(self, settings, write_module, workdir):
        path = write_module(
            "chatty", body='for i in $(seq 1 50); do echo "line $i"; done; exit 2'
        )
        with patch("forge.core.runner.console") as mock_console:
            with pytest.raises(ModuleExecutionError):
                ModuleRunner(settings).run(describe(path, "core"), workdir, "demo")
        replayed = [
            call.args[0]
            for call in mock_console.print.call_args_list
            if call.args[0].startswith("[red]  ")
        ]
        assert len(replayed) == FAILURE_TAIL_LINES
        assert replayed[-1].endswith("line 50")
