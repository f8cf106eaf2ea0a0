"""
动作编码

所有动作 (发牌、叫牌、出牌) 共用一个整数编号空间，按阶段划分为互不重叠的区间:

- [0, 51): 明牌位置 (第几张发出的牌翻开)
- [51, 105): 发出的牌 (id - 51 为牌 id)
- 105: PASS (叫牌阶段的不叫与出牌阶段的不出共用)
- [106, 106 + max_bid): 叫分 1..max_bid
- 其余: 出牌动作，按牌型分组 (单张、对子、三张、三带一、三带二、顺子、
  连对、飞机、飞机带单、飞机带对、炸弹、王炸)

编号需保持稳定，已记录的对局日志依赖该编号。
"""
from typing import Dict, Iterable, List, Optional, Tuple
import itertools
import numpy as np

from .cards import (
    Rank,
    CHAIN_MAX_RANK,
    MAX_HAND_SIZE,
    NUM_CARDS,
    NUM_CARDS_LEFT_OVER,
    NUM_RANKS,
    card_to_str,
    ranks_to_str,
)
from .actions import (
    Action,
    ActionType,
    MIN_STRAIGHT_LEN,
    MIN_STRAIGHT_PAIR_LEN,
    MIN_AIRPLANE_LEN,
    CHAIN_GROUP_SIZE,
)


# 明牌位置动作数 = 发出的牌数
DEALING_ACTION_BASE = NUM_CARDS - NUM_CARDS_LEFT_OVER

# 叫牌动作起点，同时是 PASS
BIDDING_ACTION_BASE = DEALING_ACTION_BASE + NUM_CARDS
PASS_ACTION = BIDDING_ACTION_BASE

DEFAULT_MAX_BID = 3

# 参与连续牌型的点数个数 (3 到 A)
NUM_CHAIN_RANKS = CHAIN_MAX_RANK + 1

# 非王点数
NON_JOKER_RANKS = tuple(range(Rank.BLACK_JOKER))


def bid_action(bid: int) -> int:
    """叫分 -> 动作编号"""
    return BIDDING_ACTION_BASE + bid


def deal_action(card: int) -> int:
    """发牌 -> 动作编号"""
    return DEALING_ACTION_BASE + card


def _max_chain_len(action_type: ActionType) -> int:
    """单手牌 (最多 20 张) 能容纳的最长连续组数"""
    return min(MAX_HAND_SIZE // CHAIN_GROUP_SIZE[action_type], NUM_CHAIN_RANKS)


def _chains(min_len: int, max_len: int) -> Iterable[Tuple[int, ...]]:
    """按长度、起点顺序枚举所有连续点数序列"""
    for length in range(min_len, max_len + 1):
        for start in range(NUM_CHAIN_RANKS - length + 1):
            yield tuple(range(start, start + length))


class ActionEncoder:
    """
    动作编码器

    将 Action 对象与动作编号相互转换。出牌表按固定顺序一次性构建，
    由游戏上下文 (DouDizhuGame) 持有，不使用全局单例。
    """

    def __init__(self, max_bid: int = DEFAULT_MAX_BID):
        """
        Args:
            max_bid: 最高叫分，决定出牌动作的起始编号
        """
        self.max_bid = max_bid
        self.play_action_base = BIDDING_ACTION_BASE + max_bid + 1

        self._action_to_idx: Dict[Tuple[int, ...], int] = {}
        self._idx_to_action: List[Action] = []
        self._category_base: Dict[ActionType, int] = {}
        self._build_action_space()

    def _add(self, cards: Iterable[int], action_type: ActionType):
        action = Action.from_cards(list(cards), action_type)
        self._action_to_idx[action.cards] = self.play_action_base + len(self._idx_to_action)
        self._idx_to_action.append(action)

    def _begin(self, action_type: ActionType):
        self._category_base[action_type] = self.play_action_base + len(self._idx_to_action)

    def _build_action_space(self):
        """
        构建完整出牌动作表

        - 单张: 15 (3-2, 小王, 大王)
        - 对子/三张/炸弹: 各 13
        - 三带一: 13 × 14, 三带二: 13 × 12
        - 顺子/连对/飞机: 按长度、起点枚举
        - 飞机带单/带对: 翅膀点数互不相同且不与主体重合
        - 王炸: 1
        """
        self._begin(ActionType.SINGLE)
        for rank in range(NUM_RANKS):
            self._add([rank], ActionType.SINGLE)

        self._begin(ActionType.PAIR)
        for rank in NON_JOKER_RANKS:
            self._add([rank] * 2, ActionType.PAIR)

        self._begin(ActionType.TRIPLE)
        for rank in NON_JOKER_RANKS:
            self._add([rank] * 3, ActionType.TRIPLE)

        # 三带一
        self._begin(ActionType.TRIPLE_SINGLE)
        for main in NON_JOKER_RANKS:
            for kicker in range(NUM_RANKS):
                if kicker != main:
                    self._add([main] * 3 + [kicker], ActionType.TRIPLE_SINGLE)

        # 三带二
        self._begin(ActionType.TRIPLE_PAIR)
        for main in NON_JOKER_RANKS:
            for kicker in NON_JOKER_RANKS:
                if kicker != main:
                    self._add([main] * 3 + [kicker] * 2, ActionType.TRIPLE_PAIR)

        # 顺子、连对、飞机不带
        serial = (
            (ActionType.STRAIGHT, MIN_STRAIGHT_LEN, 1),
            (ActionType.STRAIGHT_PAIR, MIN_STRAIGHT_PAIR_LEN, 2),
            (ActionType.AIRPLANE, MIN_AIRPLANE_LEN, 3),
        )
        for action_type, min_len, repeat in serial:
            self._begin(action_type)
            for chain in _chains(min_len, _max_chain_len(action_type)):
                self._add([r for r in chain for _ in range(repeat)], action_type)

        # 飞机带单
        self._begin(ActionType.AIRPLANE_SINGLE)
        for chain in _chains(MIN_AIRPLANE_LEN, _max_chain_len(ActionType.AIRPLANE_SINGLE)):
            airplane = [r for r in chain for _ in range(3)]
            available = [r for r in range(NUM_RANKS) if r not in chain]
            for kickers in itertools.combinations(available, len(chain)):
                self._add(airplane + list(kickers), ActionType.AIRPLANE_SINGLE)

        # 飞机带对
        self._begin(ActionType.AIRPLANE_PAIR)
        for chain in _chains(MIN_AIRPLANE_LEN, _max_chain_len(ActionType.AIRPLANE_PAIR)):
            airplane = [r for r in chain for _ in range(3)]
            available = [r for r in NON_JOKER_RANKS if r not in chain]
            for kickers in itertools.combinations(available, len(chain)):
                pairs = [r for r in kickers for _ in range(2)]
                self._add(airplane + pairs, ActionType.AIRPLANE_PAIR)

        self._begin(ActionType.BOMB)
        for rank in NON_JOKER_RANKS:
            self._add([rank] * 4, ActionType.BOMB)

        self._begin(ActionType.ROCKET)
        self._add([Rank.BLACK_JOKER, Rank.RED_JOKER], ActionType.ROCKET)

    @property
    def num_actions(self) -> int:
        """动作编号总数 (含发牌与叫牌)"""
        return self.play_action_base + self.num_play_actions

    @property
    def num_play_actions(self) -> int:
        """出牌动作数"""
        return len(self._idx_to_action)

    def category_base(self, action_type: ActionType) -> int:
        """某牌型的第一个动作编号"""
        return self._category_base[action_type]

    def bid_actions(self, above: int) -> List[int]:
        """所有高于 above 的叫分动作"""
        return [bid_action(bid) for bid in range(above + 1, self.max_bid + 1)]

    def is_bid_action(self, idx: int) -> bool:
        return BIDDING_ACTION_BASE < idx < self.play_action_base

    def is_play_action(self, idx: int) -> bool:
        return self.play_action_base <= idx < self.num_actions

    def encode(self, action: Action) -> int:
        """
        将 Action 编码为动作编号

        Args:
            action: Action 对象

        Returns:
            动作编号，未找到返回 -1
        """
        if action.is_pass:
            return PASS_ACTION
        return self._action_to_idx.get(action.cards, -1)

    def decode(self, idx: int) -> Optional[Action]:
        """
        将出牌动作编号解码为 Action

        Args:
            idx: 动作编号

        Returns:
            Action 对象，不是出牌动作返回 None
        """
        if idx == PASS_ACTION:
            return Action.pass_action()
        if not self.is_play_action(idx):
            return None
        return self._idx_to_action[idx - self.play_action_base]

    def get_legal_action_indices(self, legal_actions: List[Action]) -> List[int]:
        """
        获取合法动作的编号列表 (升序)

        Args:
            legal_actions: 合法 Action 列表

        Returns:
            编号列表
        """
        indices = []
        for action in legal_actions:
            idx = self.encode(action)
            if idx >= 0:
                indices.append(idx)
        return sorted(indices)

    def build_legal_mask(self, legal_indices: List[int]) -> np.ndarray:
        """
        构建合法动作掩码

        Args:
            legal_indices: 合法动作编号

        Returns:
            (num_actions,) 数组
        """
        mask = np.zeros(self.num_actions, dtype=np.float32)
        mask[list(legal_indices)] = 1
        return mask

    def action_to_string(self, idx: int) -> str:
        """动作编号的可读形式"""
        if 0 <= idx < DEALING_ACTION_BASE:
            return f"Decide first card up position {idx}"
        if DEALING_ACTION_BASE <= idx < BIDDING_ACTION_BASE:
            return f"Deal {card_to_str(idx - DEALING_ACTION_BASE)}"
        if idx == PASS_ACTION:
            return "Pass"
        if self.is_bid_action(idx):
            return f"Bid {idx - BIDDING_ACTION_BASE}"
        action = self.decode(idx)
        if action is None:
            raise ValueError(f"Invalid action id: {idx}")
        return ranks_to_str(action.cards)
