"""SubprocessRunner against real (POSIX shell) commands."""

from __future__ import annotations


def test_runs_command_and_captures_output():
    from ekslogs.providers.command_runner import SubprocessRunner

    res = SubprocessRunner().run(["sh", "-c", "echo out; echo err >&2"])

    assert res.ok
    assert res.stdout == "out\n"
    assert res.stderr == "err\n"


def test_merge_stderr_folds_into_stdout():
    from ekslogs.providers.command_runner import SubprocessRunner

    res = SubprocessRunner().run(["sh", "-c", "echo out; echo err >&2"], merge_stderr=True)

    assert "out\n" in res.stdout
    assert "err\n" in res.stdout
    assert res.stderr == ""


def test_runs_with_c_locale():
    from ekslogs.providers.command_runner import SubprocessRunner

    res = SubprocessRunner().run(["sh", "-c", "echo $LC_ALL"])
    assert res.stdout.strip() == "C"


def test_missing_binary_is_reported_not_raised():
    from ekslogs.providers.command_runner import SubprocessRunner

    runner = SubprocessRunner()
    res = runner.run(["definitely-not-a-real-tool-xyz", "--version"])

    assert runner.which("definitely-not-a-real-tool-xyz") is None
    assert res.missing
    assert not res.ok
    assert res.returncode == 127


def test_timeout_is_reported_not_raised():
    from ekslogs.providers.command_runner import SubprocessRunner

    res = SubprocessRunner().run(["sleep", "5"], timeout=0.2)

    assert res.timed_out
    assert not res.ok


def test_nonzero_exit_keeps_output():
    from ekslogs.providers.command_runner import SubprocessRunner

    res = SubprocessRunner().run(["sh", "-c", "echo partial; exit 3"])

    assert res.returncode == 3
    assert res.stdout == "partial\n"
    assert not res.ok


def test_default_runner_satisfies_protocol():
    from ekslogs.providers.command_runner import CommandRunner, get_command_runner

    assert isinstance(get_command_runner(), CommandRunner)
