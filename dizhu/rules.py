"""
规则引擎 - 牌型检测、大小比较、合法性验证、计分

所有方法都是纯函数，无状态
"""
from typing import Dict, List, Optional, Sequence, Tuple
from collections import Counter, defaultdict

from .cards import Rank, CHAIN_MAX_RANK, NUM_RANKS, NUM_PLAYERS, card_rank_group
from .actions import Action, ActionType, MIN_STRAIGHT_LEN, MIN_STRAIGHT_PAIR_LEN, MIN_AIRPLANE_LEN


class RuleEngine:
    """
    斗地主规则引擎

    提供牌型检测、大小比较、合法性验证、计分等功能
    所有方法都是静态方法，无状态
    """

    @staticmethod
    def is_consecutive(ranks: Sequence[int]) -> bool:
        """
        检查点数列表是否连续

        Args:
            ranks: 已排序的点数列表

        Returns:
            是否连续
        """
        for i in range(len(ranks) - 1):
            if ranks[i + 1] - ranks[i] != 1:
                return False
        return True

    @staticmethod
    def is_chain(ranks: Sequence[int], min_len: int) -> bool:
        """连续、长度足够、且不含 2 和王"""
        return (
            len(ranks) >= min_len
            and max(ranks) <= CHAIN_MAX_RANK
            and RuleEngine.is_consecutive(ranks)
        )

    @staticmethod
    def detect_action_type(cards: Sequence[int]) -> ActionType:
        """
        检测牌型

        Args:
            cards: 点数列表

        Returns:
            牌型枚举值
        """
        if not cards:
            return ActionType.PASS

        n = len(cards)
        counter = Counter(int(c) for c in cards)

        # 点数越界或张数超过该点数的总张数
        for rank, count in counter.items():
            if not 0 <= rank < NUM_RANKS or count > card_rank_group(rank):
                return ActionType.WRONG

        unique_ranks = sorted(counter.keys())

        # 单张
        if n == 1:
            return ActionType.SINGLE

        # 王炸
        if n == 2 and set(unique_ranks) == {Rank.BLACK_JOKER, Rank.RED_JOKER}:
            return ActionType.ROCKET

        # 对子、三张、炸弹
        if len(counter) == 1:
            if n == 2:
                return ActionType.PAIR
            if n == 3:
                return ActionType.TRIPLE
            return ActionType.BOMB

        # 统计各数量的点数
        by_count: Dict[int, List[int]] = defaultdict(list)
        for rank in unique_ranks:
            by_count[counter[rank]].append(rank)

        # 三带一 / 三带二
        if len(counter) == 2 and len(by_count.get(3, [])) == 1:
            if n == 4:
                return ActionType.TRIPLE_SINGLE
            if n == 5:
                return ActionType.TRIPLE_PAIR

        # 顺子、连对、飞机不带: 所有点数张数相同且连续
        if len(by_count) == 1:
            if 1 in by_count and RuleEngine.is_chain(unique_ranks, MIN_STRAIGHT_LEN):
                return ActionType.STRAIGHT
            if 2 in by_count and RuleEngine.is_chain(unique_ranks, MIN_STRAIGHT_PAIR_LEN):
                return ActionType.STRAIGHT_PAIR
            if 3 in by_count and RuleEngine.is_chain(unique_ranks, MIN_AIRPLANE_LEN):
                return ActionType.AIRPLANE
            return ActionType.WRONG

        # 飞机带翅膀: 翅膀点数互不相同，且不与飞机主体重合
        triples = by_count.get(3, [])
        if triples and RuleEngine.is_chain(triples, MIN_AIRPLANE_LEN):
            kickers = [r for r in unique_ranks if counter[r] != 3]
            if len(kickers) == len(triples):
                if len(by_count.get(1, [])) == len(kickers):
                    return ActionType.AIRPLANE_SINGLE
                if len(by_count.get(2, [])) == len(kickers):
                    return ActionType.AIRPLANE_PAIR

        return ActionType.WRONG

    @staticmethod
    def get_rank(cards: Sequence[int], action_type: ActionType) -> int:
        """
        获取主牌点数 (用于大小比较)

        Args:
            cards: 点数列表
            action_type: 牌型

        Returns:
            主牌点数，PASS/WRONG 返回 -1
        """
        if action_type in (ActionType.PASS, ActionType.WRONG) or not cards:
            return -1

        # 王炸最大
        if action_type == ActionType.ROCKET:
            return NUM_RANKS

        # 带牌: 取三张部分的最小点数
        if action_type in (ActionType.TRIPLE_SINGLE, ActionType.TRIPLE_PAIR,
                           ActionType.AIRPLANE_SINGLE, ActionType.AIRPLANE_PAIR):
            counter = Counter(cards)
            return min(rank for rank, count in counter.items() if count == 3)

        # 单张、对子、三张、炸弹、顺子、连对、飞机: 取最小点数
        return min(cards)

    @staticmethod
    def classify(cards: Sequence[int]) -> Tuple[ActionType, int]:
        """牌型与主牌点数"""
        action_type = RuleEngine.detect_action_type(cards)
        return action_type, RuleEngine.get_rank(cards, action_type)

    @staticmethod
    def can_beat(action: Action, winning: Action) -> bool:
        """
        判断 action 能否压过本轮当前最大的出牌

        - 同牌型、同张数、主牌更大
        - 炸弹压任何非炸弹、非王炸
        - 王炸压任何牌

        Args:
            action: 挑战者
            winning: 本轮当前最大的出牌

        Returns:
            是否能压过
        """
        if action.is_pass or winning.is_pass:
            return False
        if action.action_type == ActionType.WRONG:
            return False

        if action.action_type == ActionType.ROCKET:
            return winning.action_type != ActionType.ROCKET
        if winning.action_type == ActionType.ROCKET:
            return False

        if action.action_type == ActionType.BOMB and winning.action_type != ActionType.BOMB:
            return True

        return (
            action.action_type == winning.action_type
            and len(action) == len(winning)
            and action.rank > winning.rank
        )

    @staticmethod
    def is_valid_play(
        action: Action,
        last_action: Optional[Action],
        hand: Sequence[int]
    ) -> bool:
        """
        验证出牌是否合法

        Args:
            action: 要出的牌
            last_action: 本轮当前最大的出牌 (None 表示主动出牌)
            hand: 当前手牌计数向量

        Returns:
            是否合法
        """
        leading = last_action is None or last_action.is_pass

        if action.is_pass:
            # 主动出牌时不能 PASS
            return not leading

        if action.action_type == ActionType.WRONG:
            return False

        # 检查牌是否在手中
        for rank, count in Counter(action.cards).items():
            if hand[rank] < count:
                return False

        if leading:
            return True

        return RuleEngine.can_beat(action, last_action)

    @staticmethod
    def is_spring(landlord: int, plays_per_player: Sequence[int]) -> bool:
        """
        检查是否春天

        地主只出过一手牌 (反春)，或两个农民都没有出过牌

        Args:
            landlord: 地主座位
            plays_per_player: 每个座位非 PASS 出牌的次数
        """
        if plays_per_player[landlord] == 1:
            return True
        return all(
            plays == 0
            for seat, plays in enumerate(plays_per_player)
            if seat != landlord
        )

    @staticmethod
    def calculate_score(
        landlord: Optional[int],
        winner: Optional[int],
        bid_count: int,
        bombs_count: int,
        is_spring: bool,
        num_players: int = NUM_PLAYERS,
    ) -> List[float]:
        """
        计算得分

        Args:
            landlord: 地主座位 (None 表示无人叫牌)
            winner: 最先出完牌的座位
            bid_count: 叫牌倍数
            bombs_count: 炸弹数量 (含王炸)
            is_spring: 是否春天

        Returns:
            各座位得分，零和
        """
        if landlord is None or winner is None:
            return [0.0] * num_players

        # 炸弹、春天各翻一倍
        score = bid_count * 2 ** (bombs_count + int(is_spring))
        sign = 1 if winner == landlord else -1

        returns = [float(-sign * score)] * num_players
        returns[landlord] = float(sign * 2 * score)
        return returns
