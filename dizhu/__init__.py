"""
Core Layer - 纯游戏逻辑

Modules:
    cards: 牌定义与编码
    actions: 动作类型与生成
    rules: 规则引擎 (牌型识别、比较、计分)
    encoding: 动作编号
    dealer: 发牌
    auction: 叫牌
    trick: 出牌轮次
    state: 游戏状态
    config: 游戏配置
    errors: 异常定义
"""
from .cards import (
    Rank,
    NUM_PLAYERS,
    NUM_CARDS,
    NUM_RANKS,
    RANK_TO_STR,
    STR_TO_RANK,
    rank_of,
    card_to_str,
    cards_to_counts,
    ranks_to_counts,
    counts_to_ranks,
    ranks_to_str,
    str_to_ranks,
    counts_to_onehot,
)

from .actions import (
    ActionType,
    Action,
    ActionGenerator,
    MIN_STRAIGHT_LEN,
    MIN_STRAIGHT_PAIR_LEN,
    MIN_AIRPLANE_LEN,
)

from .rules import RuleEngine

from .encoding import (
    ActionEncoder,
    DEALING_ACTION_BASE,
    BIDDING_ACTION_BASE,
    PASS_ACTION,
    bid_action,
    deal_action,
)

from .dealer import Dealer

from .auction import Auction, AuctionOutcome

from .trick import Trick, TrickResolver

from .config import GameConfig

from .errors import (
    DizhuError,
    IllegalActionError,
    PhaseError,
    InvariantError,
)

from .state import (
    Phase,
    DouDizhuGame,
    GameState,
    CHANCE_PLAYER_ID,
    TERMINAL_PLAYER_ID,
)

__all__ = [
    # cards
    "Rank",
    "NUM_PLAYERS",
    "NUM_CARDS",
    "NUM_RANKS",
    "RANK_TO_STR",
    "STR_TO_RANK",
    "rank_of",
    "card_to_str",
    "cards_to_counts",
    "ranks_to_counts",
    "counts_to_ranks",
    "ranks_to_str",
    "str_to_ranks",
    "counts_to_onehot",
    # actions
    "ActionType",
    "Action",
    "ActionGenerator",
    "MIN_STRAIGHT_LEN",
    "MIN_STRAIGHT_PAIR_LEN",
    "MIN_AIRPLANE_LEN",
    # rules
    "RuleEngine",
    # encoding
    "ActionEncoder",
    "DEALING_ACTION_BASE",
    "BIDDING_ACTION_BASE",
    "PASS_ACTION",
    "bid_action",
    "deal_action",
    # phases
    "Dealer",
    "Auction",
    "AuctionOutcome",
    "Trick",
    "TrickResolver",
    # config / errors
    "GameConfig",
    "DizhuError",
    "IllegalActionError",
    "PhaseError",
    "InvariantError",
    # state
    "Phase",
    "DouDizhuGame",
    "GameState",
    "CHANCE_PLAYER_ID",
    "TERMINAL_PLAYER_ID",
]
