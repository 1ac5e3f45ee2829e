"""Tests for external command execution."""

import asyncio
import sys

import pytest

from abi_export import tooling
from abi_export.errors import ToolError
from abi_export.tooling import ToolSettings, run_tool


class TestToolSettings:
    """Tests for ToolSettings."""

    def test_defaults(self):
        settings = ToolSettings()

        assert settings.verbosity == "short"
        assert settings.env_overrides == {}

    def test_invalid_verbosity(self):
        with pytest.raises(ValueError):
            ToolSettings(verbosity="loud")

    def test_environment_merges_overrides(self, monkeypatch):
        monkeypatch.setenv("BASE_VAR", "base")
        settings = ToolSettings(env_overrides={"EXTRA_VAR": "extra"})

        env = settings.environment()

        assert env["BASE_VAR"] == "base"
        assert env["EXTRA_VAR"] == "extra"


class TestRunTool:
    """Tests for run_tool."""

    @pytest.mark.asyncio
    async def test_returns_stdout(self):
        out = await run_tool(ToolSettings(), sys.executable, "-c", "print('hello')")

        assert out.strip() == "hello"

    @pytest.mark.asyncio
    async def test_env_overrides_reach_child(self):
        settings = ToolSettings(env_overrides={"ABI_TOOL_TEST": "on"})

        out = await run_tool(
            settings, sys.executable, "-c", "import os; print(os.environ['ABI_TOOL_TEST'])"
        )

        assert out.strip() == "on"

    @pytest.mark.asyncio
    async def test_full_verbosity_still_returns_stdout(self):
        out = await run_tool(ToolSettings(verbosity="full"), sys.executable, "-c", "print(42)")

        assert out.strip() == "42"

    @pytest.mark.asyncio
    async def test_cwd(self, tmp_path):
        out = await run_tool(
            ToolSettings(), sys.executable, "-c", "import os; print(os.getcwd())", cwd=tmp_path
        )

        assert out.strip() == str(tmp_path.resolve())

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises(self):
        script = "import sys; sys.stderr.write('compile failed'); sys.exit(3)"

        with pytest.raises(ToolError) as excinfo:
            await run_tool(ToolSettings(), sys.executable, "-c", script)

        assert excinfo.value.returncode == 3
        assert "compile failed" in excinfo.value.stderr
        assert "exit code 3" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_missing_executable_raises(self, tmp_path):
        with pytest.raises(ToolError) as excinfo:
            await run_tool(ToolSettings(), str(tmp_path / "no-such-forge"), "inspect")

        assert excinfo.value.returncode is None

    @pytest.mark.asyncio
    async def test_cancellation_survives_already_exited_child(self, monkeypatch):
        class ExitedProcess:
            returncode = None

            async def communicate(self):
                raise asyncio.CancelledError()

            def terminate(self):
                raise ProcessLookupError()

            async def wait(self):
                return 0

        async def fake_exec(*args, **kwargs):
            return ExitedProcess()

        monkeypatch.setattr(tooling.asyncio, "create_subprocess_exec", fake_exec)

        with pytest.raises(asyncio.CancelledError):
            await run_tool(ToolSettings(), "forge", "inspect")
