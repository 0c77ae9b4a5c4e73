import asyncio
import sys
from pathlib import Path

import pytest

from compat_checker.checks.runtime_probe import ProbeResult, RuntimeProbe, truncate_output
from compat_checker.config import ProbeSettings
from compat_checker.errors import CheckCancelled

from conftest import GREETING, FakeInvoker, make_probe_settings, run


def test_matching_output_records_nothing(context, probe_settings):
    invoker = FakeInvoker(stdout=["", GREETING, ""])

    outcome = run(RuntimeProbe(probe_settings, invoker, platform="linux").run(context))

    assert outcome.compatible is True
    assert context.warnings == []
    assert len(context.telemetry) == 0


def test_probe_is_launched_from_bin_dir_with_root_as_cwd(tmp_path, context, probe_settings):
    invoker = FakeInvoker()

    run(RuntimeProbe(probe_settings, invoker, platform="linux").run(context))

    call = invoker.calls[0]
    expected = tmp_path / "bin" / "testDotNet8Compatibility" / "TestDotNet8Compatibility"
    assert Path(call["file_name"]) == expected
    assert call["working_directory"] == str(tmp_path)
    assert call["arguments"] == ()
    assert call["environment"] is None


def test_windows_probe_has_exe_suffix(tmp_path):
    settings = make_probe_settings(tmp_path, create=False)

    path = RuntimeProbe(settings, FakeInvoker(), platform="win32").probe_path()

    assert path.name == "TestDotNet8Compatibility.exe"


def test_nonzero_exit_code_warns_and_records(context, probe_settings):
    invoker = FakeInvoker(exit_code=134, stdout=[GREETING])

    outcome = run(RuntimeProbe(probe_settings, invoker, platform="linux").run(context))

    assert outcome.compatible is False
    assert outcome.warned is True
    assert context.warnings == ["The runner is not compatible with .NET 8."]
    assert [entry.message for entry in context.telemetry] == [
        f".NET 8 OS compatibility test failed with exit code '134' and output: {GREETING}"
    ]


def test_unexpected_output_combines_both_streams(context, probe_settings):
    invoker = FakeInvoker(exit_code=0, stdout=["partial"], stderr=["Segmentation fault"])

    run(RuntimeProbe(probe_settings, invoker, platform="linux").run(context))

    assert context.warnings == ["The runner is not compatible with .NET 8."]
    assert context.telemetry.entries[0].message.endswith("output: partial\nSegmentation fault")


def test_omitted_annotation_still_records_telemetry(context, probe_settings):
    invoker = FakeInvoker(exit_code=1, stdout=[])

    outcome = run(RuntimeProbe(probe_settings, invoker, platform="linux").run(context, omit_annotation=True))

    assert outcome.warned is False
    assert context.warnings == []
    assert len(context.telemetry) == 1


def test_long_output_is_truncated_in_telemetry(context, probe_settings):
    invoker = FakeInvoker(exit_code=1, stdout=["x" * 250])

    run(RuntimeProbe(probe_settings, invoker, platform="linux").run(context))

    message = context.telemetry.entries[0].message
    assert message.endswith("output: " + "x" * 200 + "[...]")


def test_truncate_output_boundaries():
    assert truncate_output("y" * 200) == "y" * 200
    assert truncate_output("y" * 199) == "y" * 199
    assert truncate_output("y" * 250) == "y" * 200 + "[...]"


def test_probe_result_output_is_joined_and_trimmed():
    result = ProbeResult(exit_code=0, lines=["  first", "second  "])

    assert result.output == "first\nsecond"
    assert not result.succeeded("first second")


def test_missing_probe_is_recorded(tmp_path, context):
    settings = make_probe_settings(tmp_path, create=False)
    invoker = FakeInvoker()

    outcome = run(RuntimeProbe(settings, invoker, platform="linux").run(context))

    assert invoker.calls == []
    assert context.warnings == []
    assert outcome.error is not None
    message = context.telemetry.entries[0].message
    assert message.startswith(
        "An error occurred while testing .NET 8 compatibility; "
        "exception type 'compat_checker.errors.ProbeNotFoundError'; message: "
    )


def test_spawn_failure_is_recorded(context, probe_settings):
    invoker = FakeInvoker(error=PermissionError("Permission denied"))

    outcome = run(RuntimeProbe(probe_settings, invoker, platform="linux").run(context))

    assert outcome.error == "Permission denied"
    assert context.warnings == []
    assert "exception type 'builtins.PermissionError'; message: Permission denied" in context.telemetry.entries[0].message


def test_cancellation_during_probe_propagates(context, probe_settings):
    invoker = FakeInvoker(block=True)

    async def scenario():
        asyncio.get_running_loop().call_later(0.01, context.cancellation.cancel)
        await RuntimeProbe(probe_settings, invoker, platform="linux").run(context)

    with pytest.raises(CheckCancelled):
        run(scenario())
    assert len(context.telemetry) == 0


def test_expected_output_is_configurable(context, tmp_path):
    base = make_probe_settings(tmp_path)
    settings = ProbeSettings(
        bin_dir=base.bin_dir,
        root_dir=base.root_dir,
        expected_output="runtime ok",
        runtime_name="Runtime 9",
    )
    invoker = FakeInvoker(stdout=[GREETING])

    run(RuntimeProbe(settings, invoker, platform="linux").run(context))

    assert context.warnings == ["The runner is not compatible with Runtime 9."]


@pytest.mark.skipif(sys.platform.startswith("win"), reason="uses a POSIX shell script as the probe")
def test_real_probe_script(tmp_path, context):
    from compat_checker.process import AsyncProcessInvoker

    settings = make_probe_settings(tmp_path, create=False)
    probe = RuntimeProbe(settings, AsyncProcessInvoker(), platform="linux").probe_path()
    probe.parent.mkdir(parents=True)
    probe.write_text(f"#!/bin/sh\necho '{GREETING}'\n", encoding="utf-8")
    probe.chmod(0o755)

    outcome = run(RuntimeProbe(settings, AsyncProcessInvoker(), platform="linux").run(context))

    assert outcome.compatible is True
    assert len(context.telemetry) == 0
