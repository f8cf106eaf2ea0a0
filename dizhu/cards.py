"""
牌的定义与编码

斗地主使用 54 张牌：
- 3-10, J, Q, K, A, 2 各 4 张 (4 种花色)
- 小王、大王各 1 张

每张牌是 [0, 54) 内的整数:
- 0-51: suit * 13 + rank
- 52: 小王, 53: 大王

规则判断只看点数 (rank)，手牌用长度为 15 的计数向量表示。
"""
from enum import IntEnum
from typing import Dict, Iterable, List
import numpy as np


NUM_PLAYERS = 3
NUM_SUITS = 4
NUM_CARDS_PER_SUIT = 13
NUM_RANKS = NUM_CARDS_PER_SUIT + 2
NUM_CARDS = NUM_CARDS_PER_SUIT * NUM_SUITS + 2

# 底牌数量
NUM_CARDS_LEFT_OVER = 3

# 每位玩家发到的牌数
NUM_CARDS_PER_PLAYER = (NUM_CARDS - NUM_CARDS_LEFT_OVER) // NUM_PLAYERS

# 地主拿到底牌后的最大手牌数
MAX_HAND_SIZE = NUM_CARDS_PER_PLAYER + NUM_CARDS_LEFT_OVER


class Rank(IntEnum):
    """点数定义 (按大小排序)"""
    THREE = 0
    FOUR = 1
    FIVE = 2
    SIX = 3
    SEVEN = 4
    EIGHT = 5
    NINE = 6
    TEN = 7
    JACK = 8
    QUEEN = 9
    KING = 10
    ACE = 11
    TWO = 12
    BLACK_JOKER = 13
    RED_JOKER = 14


# 顺子/连对/飞机的最大点数 (2 和王不能参与)
CHAIN_MAX_RANK = Rank.ACE

BLACK_JOKER_CARD = NUM_CARDS - 2
RED_JOKER_CARD = NUM_CARDS - 1

# 点数到显示字符的映射
RANK_TO_STR: Dict[int, str] = {
    0: '3', 1: '4', 2: '5', 3: '6', 4: '7',
    5: '8', 6: '9', 7: '10', 8: 'J', 9: 'Q',
    10: 'K', 11: 'A', 12: '2', 13: 'X', 14: 'D'
}

# 显示字符到点数的映射
STR_TO_RANK: Dict[str, int] = {v: k for k, v in RANK_TO_STR.items()}

SUIT_TO_STR = ('S', 'H', 'C', 'D')


def rank_of(card: int) -> int:
    """牌 -> 点数"""
    if not 0 <= card < NUM_CARDS:
        raise ValueError(f"Invalid card id: {card}")
    if card == BLACK_JOKER_CARD:
        return Rank.BLACK_JOKER
    if card == RED_JOKER_CARD:
        return Rank.RED_JOKER
    return card % NUM_CARDS_PER_SUIT


def card_rank_group(rank: int) -> int:
    """同一点数的牌有几张 (普通牌 4 张，王各 1 张)"""
    if not 0 <= rank < NUM_RANKS:
        raise ValueError(f"Invalid rank: {rank}")
    return 1 if rank >= Rank.BLACK_JOKER else NUM_SUITS


# 每个点数的最大张数
RANK_GROUP_SIZES = np.array([card_rank_group(r) for r in range(NUM_RANKS)], dtype=np.int64)


def card_to_str(card: int) -> str:
    """单张牌的可读形式，如 'S10'、'X'"""
    rank = rank_of(card)
    if rank >= Rank.BLACK_JOKER:
        return RANK_TO_STR[rank]
    return SUIT_TO_STR[card // NUM_CARDS_PER_SUIT] + RANK_TO_STR[rank]


def cards_to_counts(cards: Iterable[int]) -> np.ndarray:
    """
    将牌列表投影为点数计数向量

    Args:
        cards: 牌 id 列表

    Returns:
        长度 15 的计数向量
    """
    counts = np.zeros(NUM_RANKS, dtype=np.int64)
    for card in cards:
        counts[rank_of(card)] += 1
    return counts


def ranks_to_counts(ranks: Iterable[int]) -> np.ndarray:
    """点数列表 -> 计数向量"""
    return np.bincount(np.asarray(list(ranks), dtype=np.int64), minlength=NUM_RANKS)


def counts_to_ranks(counts: np.ndarray) -> List[int]:
    """计数向量 -> 已排序的点数列表"""
    ranks = []
    for rank in range(NUM_RANKS):
        ranks.extend([rank] * int(counts[rank]))
    return ranks


def ranks_to_str(ranks: Iterable[int]) -> str:
    """
    将点数列表转换为可读字符串

    Returns:
        如 "34567" 或 "JQKA2XD"
    """
    return ''.join(RANK_TO_STR.get(r, '?') for r in sorted(ranks))


def counts_to_str(counts: np.ndarray) -> str:
    return ranks_to_str(counts_to_ranks(counts))


def str_to_ranks(s: str) -> List[int]:
    """
    将字符串转换为点数列表

    Args:
        s: 牌字符串，如 "34567" 或 "101010JJ"

    Returns:
        点数列表
    """
    ranks = []
    i = 0
    while i < len(s):
        if s[i:i + 2] == '10':
            ranks.append(Rank.TEN)
            i += 2
        else:
            ranks.append(STR_TO_RANK[s[i]])
            i += 1
    return ranks


def counts_to_onehot(counts: np.ndarray) -> np.ndarray:
    """
    每个点数的张数编码为 one-hot

    普通点数 5 维 (0-4 张)，王 2 维 (0-1 张)，共 13 * 5 + 2 * 2 = 69 维

    Args:
        counts: 长度 15 的计数向量

    Returns:
        69 维 numpy 数组
    """
    parts = []
    for rank in range(NUM_RANKS):
        onehot = np.zeros(card_rank_group(rank) + 1, dtype=np.float32)
        onehot[int(counts[rank])] = 1
        parts.append(onehot)
    return np.concatenate(parts)


ONEHOT_SIZE = int(sum(card_rank_group(r) + 1 for r in range(NUM_RANKS)))
