from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    from ekslogs.core.config import load_collector_config

    monkeypatch.setenv("EKS_LOG_COLLECTOR_OUTPUT_DIR", str(tmp_path))
    load_collector_config.cache_clear()
    yield
    load_collector_config.cache_clear()


def _fake_run(captured, **report_fields):
    from ekslogs.core.models import RunReport

    def _run(mode, *, config=None, **kwargs):
        captured["mode"] = mode
        captured["config"] = config
        return RunReport(mode=mode, **report_fields)

    return _run


def test_help_exits_zero(capsys):
    import main

    with pytest.raises(SystemExit) as exc:
        main.main(["--help"])

    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "--mode" in out
    assert "debug-only" in out


def test_unknown_flag_exits_one_with_help(capsys):
    import main

    with pytest.raises(SystemExit) as exc:
        main.main(["--verbose"])

    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "usage:" in err
    assert "--verbose" in err


def test_invalid_mode_exits_one():
    import main

    with pytest.raises(SystemExit) as exc:
        main.main(["--mode", "full"])

    assert exc.value.code == 1


def test_default_mode_is_brief(monkeypatch, tmp_path):
    import main

    captured = {}
    monkeypatch.setattr(
        "ekslogs.pipeline.pipeline.run_collection",
        _fake_run(captured, archive_path=str(tmp_path / "ekslogsbundle.tar.gz")),
    )

    assert main.main([]) == 0
    assert captured["mode"] == "brief"
    assert captured["config"].output_dir == str(tmp_path)


def test_fatal_report_sets_exit_code(monkeypatch, capsys):
    import main

    captured = {}
    monkeypatch.setattr(
        "ekslogs.pipeline.pipeline.run_collection",
        _fake_run(captured, exit_code=1, fatal_reason="This script must be run as root!"),
    )

    assert main.main(["--mode", "debug"]) == 1
    assert captured["mode"] == "debug"
    assert "ERROR: This script must be run as root!.. exiting..." in capsys.readouterr().err
