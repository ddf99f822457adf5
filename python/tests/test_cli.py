import json

import pytest

from stackvm.cli import main


def test_run_arithmetic(capsys):
    assert main(["run", "arithmetic"]) == 0
    assert capsys.readouterr().out.splitlines() == ["30", "10"]


def test_list_programs(capsys):
    assert main(["list"]) == 0
    out = capsys.readouterr().out
    assert "gcd" in out
    assert "countdown" in out


def test_unknown_program_is_usage_error(capsys):
    with pytest.raises(SystemExit) as info:
        main(["run", "nope"])
    assert info.value.code == 2


def test_input_file_feeds_read(tmp_path, capsys):
    script = tmp_path / "input.txt"
    script.write_text("oops\n21\n", encoding="utf-8")
    assert main(["run", "echo", "--input", str(script)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["enter a number", "error: Invalid input 'oops': not an integer", "42"]


def test_input_file_running_dry(tmp_path, capsys):
    script = tmp_path / "input.txt"
    script.write_text("", encoding="utf-8")
    assert main(["run", "greet", "--input", str(script)]) == 1
    assert "end of input while line requested by SCAN @ 1" in capsys.readouterr().err


def test_missing_input_file(tmp_path, capsys):
    assert main(["run", "echo", "--input", str(tmp_path / "missing.txt")]) == 2
    assert "cannot read input file" in capsys.readouterr().err


def test_fault_exit_code(capsys):
    assert main(["run", "gcd", "--max-call-depth", "2"]) == 1
    assert "error: call_stack_overflow:" in capsys.readouterr().err


def test_max_steps(capsys):
    assert main(["run", "countdown", "--max-steps", "3"]) == 0
    assert "Max steps 3 reached" in capsys.readouterr().err


def test_dump_prints_final_state(capsys):
    assert main(["run", "gcd", "--dump"]) == 0
    out = capsys.readouterr().out
    lines = out.splitlines()
    assert lines[0] == "6"
    snapshot = json.loads("\n".join(lines[1:]))
    assert snapshot["state"] == "halted"
    assert snapshot["stack"] == [6]
    assert snapshot["labels"] == {"gcd": 5, "gcd_done": 26}


def test_trace_is_logged(caplog, capsys):
    with caplog.at_level("INFO", logger="stackvm.cli"):
        assert main(["run", "arithmetic", "--trace"]) == 0
    assert "trace 0000: PUSH 10" in caplog.text
    traced = [r for r in caplog.records if r.name == "stackvm.cli" and r.getMessage().startswith("trace ")]
    assert len(traced) == 7


def test_bad_call_depth_environment_is_usage_error(monkeypatch, capsys):
    monkeypatch.setenv("STACKVM_MAX_CALL_DEPTH", "deep")
    with pytest.raises(SystemExit) as info:
        main(["run", "arithmetic"])
    assert info.value.code == 2
    assert "invalid int value: 'deep'" in capsys.readouterr().err


def test_call_depth_from_environment(monkeypatch, capsys):
    monkeypatch.setenv("STACKVM_MAX_CALL_DEPTH", "2")
    assert main(["run", "gcd"]) == 1
    assert "call_stack_overflow" in capsys.readouterr().err
