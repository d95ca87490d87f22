import io
import re

import pytest

from gridduel import runner
from gridduel.agents import MinimaxAgent
from gridduel.search_config import DEFAULT_MAX_NODES, SearchConfig
from gridduel.types import Move, MoveType, Point

APPROACH = "5 5 A\n30 5 2 20 1\n30 4 0 0 1\n0\nA A1 B A5 \n"
ATTACK = "5 5 A\n30 3 2 10 1\n30 4 1 0 1\n0\nA A1 B A2 \n"
CONTESTED = "5 5 A\n30 5 2 20 1\n30 4 1 20 1\n1\n5 0 0 0\nA A1 o0 C3 m E5 B E1\n"
DENSE = (
    "8 8 B\n30 5 2 40 1\n30 4 1 40 1\n3\n5 0 0 0\n0 3 0 0\n0 0 2 1\n"
    "A A1 o0 C3 m D6 o1 F2 m G7 o2 H5 B H8 \n"
)


def _write(tmp_path, text):
    path = tmp_path / "input.txt"
    path.write_text(text, encoding="utf-8")
    return str(path)


def _run(path, agent, **kwargs):
    stdout = io.StringIO()
    stderr = io.StringIO()
    r = runner.Runner(agent, stdout=stdout, stderr=stderr)
    code = r.run(path, **kwargs)
    return code, stdout.getvalue().strip(), stderr.getvalue().strip()


def test_best_move_reads_file(tmp_path):
    path = _write(tmp_path, ATTACK)
    assert runner.best_move(path) == Move(MoveType.ATTACK, Point(0, 2))


def test_best_move_passes_on_bad_input(tmp_path):
    assert runner.best_move(_write(tmp_path, "5 5 A\nbad\n")).is_pass
    assert runner.best_move(str(tmp_path / "missing.txt")).is_pass


def test_run_prints_move(tmp_path):
    path = _write(tmp_path, APPROACH)
    code, out, err = _run(path, MinimaxAgent(SearchConfig(depth=8)), show_stats=True)
    assert code == 0
    assert out == "m A 4"
    assert "side=A" in err
    assert "search stats" in err


def test_run_malformed_input_passes(tmp_path):
    code, out, err = _run(_write(tmp_path, "5 5 Q\n"), MinimaxAgent())
    assert code == 0
    assert out == "p . 0"
    assert "Malformed" in err


def test_run_missing_file(tmp_path):
    code, out, err = _run(str(tmp_path / "nope.txt"), MinimaxAgent())
    assert code == 1
    assert out == "p . 0"
    assert "ERROR" in err


def test_exception_triggers_fallback(tmp_path):
    class BoomAgent:
        def choose_move(self, *args, **kwargs):
            raise RuntimeError("boom")

    code, out, err = _run(_write(tmp_path, ATTACK), BoomAgent())
    assert code == 0
    assert out == "a A 2"
    assert "Fallback" in err


def test_show_successors(tmp_path):
    code, out, err = _run(_write(tmp_path, APPROACH), MinimaxAgent(SearchConfig(depth=4)), show_successors=True)
    assert code == 0
    assert "m A 4 stamina=17 board='A A4 B A5 '" in err
    assert "p . 0 stamina=20" in err


def test_main_quiet(tmp_path, capsys):
    path = _write(tmp_path, ATTACK)
    with pytest.raises(SystemExit) as exc:
        runner.main([path, "--quiet", "--preset", "fast"])
    assert exc.value.code == 0
    captured = capsys.readouterr()
    assert captured.out.strip() == "a A 2"
    assert captured.err == ""


@pytest.mark.parametrize("text", [CONTESTED, DENSE])
def test_run_default_agent_returns_on_busy_boards(tmp_path, text):
    agent = MinimaxAgent()
    code, out, err = _run(_write(tmp_path, text), agent, show_stats=True)
    assert code == 0
    assert re.fullmatch(r"[map] ([A-Za-z]|\.) \d+", out)
    assert "search stats" in err
    assert agent.last_stats.nodes <= DEFAULT_MAX_NODES + 1
    assert agent.last_stats.depth_reached >= 1
