from gridduel import engine
from gridduel.agents import GreedyAgent, MinimaxAgent, RandomAgent
from gridduel.board import Board
from gridduel.search_config import DEFAULT_DEPTH, DEFAULT_MAX_NODES, SearchConfig
from gridduel.types import GameState, Item, Move, MoveType, PlayerStats, Point, Side


def make_state(text, a=(30, 5, 2, 20, 1), b=(30, 4, 0, 0, 1), height=5, width=5) -> GameState:
    board = Board.from_encoded(text, height, width, strict=True)
    return GameState(players=(PlayerStats(*a), PlayerStats(*b)), board=board)


def test_approaches_distant_opponent():
    state = make_state("A A1 B A5 ")
    agent = MinimaxAgent()
    move = agent.choose_move(state, Side.A, [])
    assert move == Move(MoveType.MOVE, Point(0, 4))
    assert agent.last_stats.root_children == 2
    assert agent.last_stats.root_scored == 2
    assert not agent.last_stats.budget_exhausted
    assert agent.last_stats.depth_reached == DEFAULT_DEPTH


def test_attacks_adjacent_opponent():
    state = make_state("A A1 B A2 ", a=(30, 3, 2, 10, 1), b=(30, 4, 1, 0, 1))
    move = MinimaxAgent().choose_move(state, Side.A, [])
    assert move == Move(MoveType.ATTACK, Point(0, 2))


def test_search_depth_only_drops_on_pass():
    state = make_state("A A1 B A5 ")
    agent = MinimaxAgent()
    # Walk and strike happen inside a single level of depth.
    assert agent.search(state, 1, Side.A, Side.A) == engine.evaluate(state, Side.A) + 5
    assert agent.search(state, 0, Side.A, Side.A) == engine.evaluate(state, Side.A)


def test_prefers_kill_over_item():
    catalog = [Item(0, 20, 0, 0)]
    state = make_state("B C2 A C5 o0 E5 ", a=(30, 5, 2, 12, 1), b=(1, 4, 0, 0, 1))

    greedy = GreedyAgent().choose_move(state, Side.A, catalog)
    assert greedy == Move(MoveType.MOVE, Point(4, 5))

    agent = MinimaxAgent()
    move = agent.choose_move(state, Side.A, catalog)
    assert move == Move(MoveType.MOVE, Point(2, 3))
    assert agent.last_stats.best_score == engine.WIN_SCORE


def test_inconsistent_root_passes():
    state = make_state("A A1 o3 A2 B E5 ")
    assert MinimaxAgent().choose_move(state, Side.A, []).is_pass
    assert GreedyAgent().choose_move(state, Side.A, []).is_pass
    assert RandomAgent(seed=1).choose_move(state, Side.A, []).is_pass


def test_node_budget_returns_first_root_move():
    state = make_state("A A1 B A5 ")
    agent = MinimaxAgent(SearchConfig(max_nodes=1))
    move = agent.choose_move(state, Side.A, [])
    assert move == Move(MoveType.MOVE, Point(0, 4))
    assert agent.last_stats.budget_exhausted
    assert agent.last_stats.root_scored == 0


def test_duplicate_passes_searched_once():
    state = make_state("A A1 B A5 ", a=(30, 5, 2, 5, 1))
    agent = MinimaxAgent(SearchConfig(depth=4))
    move = agent.choose_move(state, Side.A, [])
    assert move.is_pass
    assert agent.last_stats.duplicate_children > 0


def test_random_agent_is_reproducible():
    state = make_state("A A1 m C3 B E5 ", a=(30, 5, 2, 5, 1))
    legal = [move for _, move in engine.generate_successors(state, Side.A, [])]
    first = RandomAgent(seed=7).choose_move(state, Side.A, [])
    second = RandomAgent(seed=7).choose_move(state, Side.A, [])
    assert first == second
    assert first in legal


def plain_minimax(state, depth, to_move, searching, catalog):
    if depth == 0 or engine.is_terminal(state):
        return engine.evaluate(state, searching)
    values = []
    for child, move in engine.generate_successors(state, to_move, catalog):
        if move.is_pass:
            values.append(plain_minimax(child, depth - 1, to_move.opponent(), searching, catalog))
        else:
            values.append(plain_minimax(child, depth, to_move, searching, catalog))
    return max(values) if to_move is searching else min(values)


def test_transposition_table_matches_plain_minimax():
    catalog = [Item(5, 0, 0, 0)]
    state = make_state("A A1 o0 B2 m C3 B D4 ", a=(30, 5, 2, 12, 1), b=(30, 4, 1, 12, 1), height=4, width=4)
    expected_move, expected_score = None, float("-inf")
    for child, move in engine.generate_successors(state, Side.A, catalog):
        score = plain_minimax(child, 2, Side.A, Side.A, catalog)
        if expected_move is None or score > expected_score:
            expected_move, expected_score = move, score

    agent = MinimaxAgent(SearchConfig(depth=2, max_nodes=None))
    assert agent.choose_move(state, Side.A, catalog) == expected_move
    assert agent.last_stats.best_score == expected_score
    assert agent.last_stats.depth_reached == 2


def test_default_search_returns_on_contested_board():
    catalog = [Item(5, 0, 0, 0)]
    state = make_state("A A1 o0 C3 m E5 B E1 ", a=(30, 5, 2, 20, 1), b=(30, 4, 1, 20, 1))
    legal = [move for _, move in engine.generate_successors(state, Side.A, catalog)]
    agent = MinimaxAgent()
    move = agent.choose_move(state, Side.A, catalog)
    assert move in legal
    stats = agent.last_stats
    assert stats.nodes <= DEFAULT_MAX_NODES + 1
    assert stats.depth_reached >= 1
    assert stats.tt_hits > 0


def test_default_search_returns_on_dense_board():
    catalog = [Item(5, 0, 0, 0), Item(0, 3, 0, 0), Item(0, 0, 2, 1)]
    state = make_state(
        "A A1 o0 C3 m D6 o1 F2 m G7 o2 H5 B H8 ",
        a=(30, 5, 2, 40, 1),
        b=(30, 4, 1, 40, 1),
        height=8,
        width=8,
    )
    legal = [move for _, move in engine.generate_successors(state, Side.B, catalog)]
    agent = MinimaxAgent()
    move = agent.choose_move(state, Side.B, catalog)
    assert move in legal
    assert agent.last_stats.nodes <= DEFAULT_MAX_NODES + 1
    assert agent.last_stats.root_children == len(legal)


def test_cut_short_iteration_keeps_previous_depth():
    state = make_state("A A1 B A5 ")
    full = MinimaxAgent(SearchConfig(depth=1, max_nodes=None))
    expected = full.choose_move(state, Side.A, [])
    budget = full.last_stats.nodes + 1

    agent = MinimaxAgent(SearchConfig(depth=30, max_nodes=budget))
    assert agent.choose_move(state, Side.A, []) == expected
    assert agent.last_stats.depth_reached == 1
    assert agent.last_stats.budget_exhausted
