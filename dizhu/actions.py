"""
动作类型定义与动作生成器

出牌动作只关心点数，用已排序的点数元组表示
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import itertools

import numpy as np

from .cards import Rank, CHAIN_MAX_RANK, NUM_RANKS


class ActionType(IntEnum):
    """动作/牌型类型"""
    PASS = 0              # 不出 / 过
    SINGLE = 1            # 单张
    PAIR = 2              # 对子
    TRIPLE = 3            # 三张
    TRIPLE_SINGLE = 4     # 三带一
    TRIPLE_PAIR = 5       # 三带二
    STRAIGHT = 6          # 顺子 (至少5张)
    STRAIGHT_PAIR = 7     # 连对 (至少3对)
    AIRPLANE = 8          # 飞机不带 (至少2个三张)
    AIRPLANE_SINGLE = 9   # 飞机带单
    AIRPLANE_PAIR = 10    # 飞机带对
    BOMB = 11             # 炸弹 (四张相同)
    ROCKET = 12           # 王炸
    WRONG = 13            # 非法牌型


# 顺子/连对/飞机的最小长度
MIN_STRAIGHT_LEN = 5     # 顺子至少 5 张
MIN_STRAIGHT_PAIR_LEN = 3  # 连对至少 3 对
MIN_AIRPLANE_LEN = 2     # 飞机至少 2 个三张

# 连续牌型每组占用的牌数 (主体 + 翅膀)
CHAIN_GROUP_SIZE: Dict[ActionType, int] = {
    ActionType.STRAIGHT: 1,
    ActionType.STRAIGHT_PAIR: 2,
    ActionType.AIRPLANE: 3,
    ActionType.AIRPLANE_SINGLE: 4,
    ActionType.AIRPLANE_PAIR: 5,
}


@dataclass(frozen=True, slots=True)
class Action:
    """
    不可变动作表示

    Attributes:
        cards: 出牌的点数元组 (已排序)
        action_type: 动作类型
        rank: 比较大小用的主牌点数，PASS/WRONG 为 -1
    """
    cards: Tuple[int, ...]
    action_type: ActionType
    rank: int = -1

    @classmethod
    def pass_action(cls) -> 'Action':
        """创建 PASS 动作"""
        return cls(cards=(), action_type=ActionType.PASS)

    @classmethod
    def from_cards(cls, cards: Sequence[int], action_type: Optional[ActionType] = None) -> 'Action':
        """从点数列表创建动作 (未指定牌型时自动检测)"""
        from .rules import RuleEngine

        sorted_cards = tuple(sorted(int(c) for c in cards))
        if action_type is None:
            action_type, rank = RuleEngine.classify(sorted_cards)
        else:
            rank = RuleEngine.get_rank(sorted_cards, action_type)
        return cls(cards=sorted_cards, action_type=action_type, rank=rank)

    @property
    def is_pass(self) -> bool:
        return self.action_type == ActionType.PASS

    @property
    def is_bomb(self) -> bool:
        """炸弹或王炸 (计入翻倍)"""
        return self.action_type in (ActionType.BOMB, ActionType.ROCKET)

    @property
    def chain_length(self) -> int:
        """连续牌型的组数，非连续牌型为 0"""
        group = CHAIN_GROUP_SIZE.get(self.action_type)
        if group is None:
            return 0
        return len(self.cards) // group

    def counts(self) -> np.ndarray:
        """点数计数向量"""
        return np.bincount(np.asarray(self.cards, dtype=np.int64), minlength=NUM_RANKS)

    def __len__(self) -> int:
        return len(self.cards)


class ActionGenerator:
    """
    合法动作生成器

    根据手牌 (点数计数向量) 生成所有可能的出牌组合
    """

    def __init__(self, hand_counts: Sequence[int]):
        """
        Args:
            hand_counts: 长度 15 的手牌计数向量
        """
        self.card_count: List[int] = [int(c) for c in hand_counts]

        # 预生成基础牌型
        self._singles: List[List[int]] = []
        self._pairs: List[List[int]] = []
        self._triples: List[List[int]] = []
        self._bombs: List[List[int]] = []
        self._rocket: Optional[List[int]] = None

        self._gen_basic_types()

    def _gen_basic_types(self):
        """预生成单张、对子、三张、炸弹"""
        for rank, count in enumerate(self.card_count):
            if count >= 1:
                self._singles.append([rank])
            if rank >= Rank.BLACK_JOKER:
                continue
            if count >= 2:
                self._pairs.append([rank, rank])
            if count >= 3:
                self._triples.append([rank, rank, rank])
            if count >= 4:
                self._bombs.append([rank, rank, rank, rank])

        # 王炸
        if self.card_count[Rank.BLACK_JOKER] and self.card_count[Rank.RED_JOKER]:
            self._rocket = [Rank.BLACK_JOKER, Rank.RED_JOKER]

    def gen_singles(self) -> List[List[int]]:
        """生成所有单张 (含王)"""
        return self._singles.copy()

    def gen_pairs(self) -> List[List[int]]:
        """生成所有对子"""
        return self._pairs.copy()

    def gen_triples(self) -> List[List[int]]:
        """生成所有三张"""
        return self._triples.copy()

    def gen_bombs(self) -> List[List[int]]:
        """生成所有炸弹 (不含王炸)"""
        return self._bombs.copy()

    def gen_rocket(self) -> List[List[int]]:
        """生成王炸"""
        return [self._rocket] if self._rocket else []

    def gen_triple_single(self) -> List[List[int]]:
        """生成所有三带一"""
        result = []
        for triple in self._triples:
            for single in self._singles:
                if single[0] != triple[0]:
                    result.append(sorted(triple + single))
        return result

    def gen_triple_pair(self) -> List[List[int]]:
        """生成所有三带对"""
        result = []
        for triple in self._triples:
            for pair in self._pairs:
                if pair[0] != triple[0]:
                    result.append(sorted(triple + pair))
        return result

    def _gen_serial(self, base_cards: List[List[int]], min_len: int,
                    repeat: int, required_len: int = 0) -> List[List[int]]:
        """
        生成连续牌型的通用方法

        Args:
            base_cards: 基础牌 (单张/对子/三张列表)
            min_len: 最小连续长度
            repeat: 每个点数重复次数 (1=顺子, 2=连对, 3=飞机)
            required_len: 要求的精确长度，0 表示不限制
        """
        # 2和王不能参与顺子
        valid_ranks = sorted(set(
            c[0] for c in base_cards
            if c[0] <= CHAIN_MAX_RANK
        ))

        if len(valid_ranks) < min_len:
            return []

        result = []

        # 找连续序列
        for start_idx in range(len(valid_ranks)):
            for end_idx in range(start_idx + min_len - 1, len(valid_ranks)):
                seq = valid_ranks[start_idx:end_idx + 1]

                if seq[-1] - seq[0] != len(seq) - 1:
                    break

                seq_len = len(seq)

                # 如果指定了长度，只生成该长度
                if required_len > 0 and seq_len != required_len:
                    if seq_len < required_len:
                        continue
                    break

                cards = []
                for rank in seq:
                    cards.extend([rank] * repeat)
                result.append(cards)

        return result

    def gen_straight(self, required_len: int = 0) -> List[List[int]]:
        """生成顺子"""
        return self._gen_serial(self._singles, MIN_STRAIGHT_LEN, 1, required_len)

    def gen_straight_pair(self, required_len: int = 0) -> List[List[int]]:
        """生成连对"""
        return self._gen_serial(self._pairs, MIN_STRAIGHT_PAIR_LEN, 2, required_len)

    def gen_airplane(self, required_len: int = 0) -> List[List[int]]:
        """生成飞机不带"""
        return self._gen_serial(self._triples, MIN_AIRPLANE_LEN, 3, required_len)

    def gen_airplane_single(self, required_len: int = 0) -> List[List[int]]:
        """生成飞机带单 (翅膀点数互不相同，且不能是飞机本身的点数)"""
        result = []

        for airplane in self.gen_airplane(required_len):
            airplane_set = set(airplane)
            airplane_len = len(airplane) // 3
            available = [s[0] for s in self._singles if s[0] not in airplane_set]

            for combo in itertools.combinations(available, airplane_len):
                result.append(sorted(airplane + list(combo)))

        return result

    def gen_airplane_pair(self, required_len: int = 0) -> List[List[int]]:
        """生成飞机带对"""
        result = []

        for airplane in self.gen_airplane(required_len):
            airplane_set = set(airplane)
            airplane_len = len(airplane) // 3
            available = [p[0] for p in self._pairs if p[0] not in airplane_set]

            for combo in itertools.combinations(available, airplane_len):
                pairs = [rank for rank in combo for _ in range(2)]
                result.append(sorted(airplane + pairs))

        return result

    def _generators(self) -> Dict[ActionType, Callable[..., List[List[int]]]]:
        return {
            ActionType.SINGLE: self.gen_singles,
            ActionType.PAIR: self.gen_pairs,
            ActionType.TRIPLE: self.gen_triples,
            ActionType.TRIPLE_SINGLE: self.gen_triple_single,
            ActionType.TRIPLE_PAIR: self.gen_triple_pair,
            ActionType.STRAIGHT: self.gen_straight,
            ActionType.STRAIGHT_PAIR: self.gen_straight_pair,
            ActionType.AIRPLANE: self.gen_airplane,
            ActionType.AIRPLANE_SINGLE: self.gen_airplane_single,
            ActionType.AIRPLANE_PAIR: self.gen_airplane_pair,
            ActionType.BOMB: self.gen_bombs,
            ActionType.ROCKET: self.gen_rocket,
        }

    def generate_all(self) -> List[Action]:
        """
        生成所有可能的出牌动作 (主动出牌，不含 PASS)

        Returns:
            所有合法动作列表
        """
        actions = []
        for action_type, generator in self._generators().items():
            for cards in generator():
                actions.append(Action.from_cards(cards, action_type))
        return actions

    def generate_responses(self, last_action: Action) -> List[Action]:
        """
        生成对当前最大出牌的合法响应

        Args:
            last_action: 本轮当前最大的出牌

        Returns:
            所有合法响应动作列表 (含 PASS)
        """
        # PASS 表示主动出牌
        if last_action.is_pass:
            return self.generate_all()

        responses = [Action.pass_action()]

        # 王炸无法被打过
        if last_action.action_type == ActionType.ROCKET:
            return responses

        last_type = last_action.action_type
        generator = self._generators()[last_type]

        # 同类型、同长度、更大的牌
        if last_type in CHAIN_GROUP_SIZE:
            candidates = generator(last_action.chain_length)
        else:
            candidates = generator()
        for cards in candidates:
            action = Action.from_cards(cards, last_type)
            if action.rank > last_action.rank:
                responses.append(action)

        # 炸弹可以打任何非炸弹牌型
        if last_type != ActionType.BOMB:
            for cards in self.gen_bombs():
                responses.append(Action.from_cards(cards, ActionType.BOMB))

        # 王炸可以打任何牌
        for cards in self.gen_rocket():
            responses.append(Action.from_cards(cards, ActionType.ROCKET))

        return responses
