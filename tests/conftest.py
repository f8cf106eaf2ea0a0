"""测试共用的 fixture"""
from typing import List, Sequence

import numpy as np
import pytest

from dizhu.encoding import deal_action
from dizhu.state import DouDizhuGame, GameState


def deal_hands(game: DouDizhuGame, hands: Sequence[Sequence[int]], face_up: int = 0) -> GameState:
    """
    按指定手牌发牌，返回叫牌阶段的状态

    第 i 张发出的牌属于座位 i % 3，因此按座位交替取牌

    Args:
        hands: 三个座位各 17 张牌 (牌 id)
        face_up: 明牌位置，先叫牌座位为 face_up % 3
    """
    state = game.new_initial_state()
    state.apply_action(face_up)
    for i in range(51):
        state.apply_action(deal_action(hands[i % 3][i // 3]))
    return state


def play_random_game(state: GameState, rng: np.random.Generator) -> List[int]:
    """随机走到终局，返回执行的动作序列"""
    actions = []
    while not state.is_terminal():
        if state.is_chance_node():
            outcomes = state.chance_outcomes()
            action = outcomes[rng.integers(len(outcomes))][0]
        else:
            legal = state.legal_actions()
            action = legal[rng.integers(len(legal))]
        state.apply_action(action)
        actions.append(action)
    return actions


@pytest.fixture
def game():
    return DouDizhuGame()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def fixed_hands():
    """
    0 号: 3-6 各四张 + 黑桃 7
    1 号: 8-J 各四张 + 红桃 7
    2 号: Q-2 各四张 + 梅花 7
    底牌: 方块 7、小王、大王
    """
    def suits(ranks):
        return [suit * 13 + rank for rank in ranks for suit in range(4)]

    return [
        suits(range(0, 4)) + [4],
        suits(range(5, 9)) + [17],
        suits(range(9, 13)) + [30],
    ]


@pytest.fixture
def deal(game):
    """返回按指定手牌发牌的函数"""
    def _deal(hands, face_up=0):
        return deal_hands(game, hands, face_up)
    return _deal


@pytest.fixture
def play_random():
    return play_random_game
