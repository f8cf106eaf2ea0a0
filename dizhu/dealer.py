"""
发牌

发牌阶段是一串机会节点:
1. 决定第几张发出的牌明牌 (决定谁先叫牌)
2. 每次从未发的牌中等概率抽一张，按座位轮流发出，共发 51 张

剩下的 3 张为底牌。
"""
from typing import List, Tuple
import numpy as np

from .cards import NUM_CARDS, NUM_CARDS_LEFT_OVER, NUM_PLAYERS, rank_of
from .encoding import DEALING_ACTION_BASE
from .errors import check_invariant


class Dealer:
    """
    发牌状态

    Attributes:
        deck: 未发出的牌标记 (54,)
        face_up_position: 明牌位置，-1 表示尚未决定
        first_player: 拿到明牌的座位 (先叫牌)，-1 表示尚未发到
        face_up_rank: 明牌的点数
        num_dealt: 已发出的牌数
    """

    def __init__(self, num_players: int = NUM_PLAYERS):
        self.num_players = num_players
        self.num_to_deal = NUM_CARDS - NUM_CARDS_LEFT_OVER
        self.deck = np.ones(NUM_CARDS, dtype=np.int8)
        self.face_up_position = -1
        self.first_player = -1
        self.face_up_rank = -1
        self.num_dealt = 0

    @property
    def finished(self) -> bool:
        return self.num_dealt == self.num_to_deal

    def legal_actions(self) -> List[int]:
        """当前机会节点的所有结果"""
        if self.face_up_position == -1:
            return list(range(DEALING_ACTION_BASE))
        return [DEALING_ACTION_BASE + int(card) for card in np.flatnonzero(self.deck)]

    def chance_outcomes(self) -> List[Tuple[int, float]]:
        """
        机会节点的结果及概率

        Returns:
            [(动作编号, 概率), ...]，概率和为 1
        """
        outcomes = self.legal_actions()
        prob = 1.0 / len(outcomes)
        return [(action, prob) for action in outcomes]

    def apply(self, action: int, hands: np.ndarray) -> int:
        """
        执行一个发牌动作

        Args:
            action: 动作编号
            hands: 各座位手牌计数 (num_players, 15)，原地修改

        Returns:
            收到牌的座位，决定明牌位置时返回 -1
        """
        # 先决定明牌位置
        if self.face_up_position == -1:
            self.face_up_position = action
            return -1

        card = action - DEALING_ACTION_BASE
        check_invariant(self.deck[card] == 1, f"Card {card} dealt twice")

        seat = self.num_dealt % self.num_players
        rank = rank_of(card)

        # 拿到明牌的玩家先叫牌
        if self.num_dealt == self.face_up_position:
            self.first_player = seat
            self.face_up_rank = rank

        hands[seat][rank] += 1
        self.deck[card] = 0
        self.num_dealt += 1
        return seat

    def bottom(self) -> List[int]:
        """底牌 (发牌结束后剩余的牌 id)"""
        check_invariant(self.finished, "Bottom cards requested before dealing finished")
        return [int(card) for card in np.flatnonzero(self.deck)]
