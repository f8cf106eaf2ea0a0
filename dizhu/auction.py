"""
叫牌

从先叫牌的玩家开始依次叫分或不叫:
- 叫分必须严格高于当前最高叫分，最高为 max_bid
- 叫到 max_bid 立即成为地主
- 有人叫分后，连续 players - 1 人不叫，则最后叫分者成为地主
- 连续 players 人不叫且无人叫分，流局
"""
from enum import Enum
from typing import List, Optional, Tuple

from .cards import NUM_PLAYERS
from .encoding import BIDDING_ACTION_BASE, PASS_ACTION, DEFAULT_MAX_BID, bid_action
from .errors import check_invariant


class AuctionOutcome(Enum):
    """叫牌动作的结果"""
    CONTINUE = "continue"   # 继续叫牌
    LANDLORD = "landlord"   # 地主已确定
    NO_BID = "no_bid"       # 无人叫分，流局


class Auction:
    """
    叫牌状态

    Attributes:
        winning_bid: 当前最高叫分 (0 表示无人叫分)
        landlord: 当前最高叫分者 (叫牌结束后为地主)
        num_passes: 连续不叫次数
        bid_history: 叫牌历史 ((座位, 叫分), ...)，不叫记为 0
    """

    def __init__(self, max_bid: int = DEFAULT_MAX_BID, num_players: int = NUM_PLAYERS):
        self.max_bid = max_bid
        self.num_players = num_players
        self.winning_bid = 0
        self.landlord: Optional[int] = None
        self.num_passes = 0
        self.bid_history: List[Tuple[int, int]] = []

    def legal_actions(self) -> List[int]:
        """不叫，以及所有高于当前最高叫分的叫分"""
        return [PASS_ACTION] + [
            bid_action(bid) for bid in range(self.winning_bid + 1, self.max_bid + 1)
        ]

    def apply(self, player: int, action: int) -> AuctionOutcome:
        """
        执行叫牌动作

        Args:
            player: 叫牌座位
            action: PASS_ACTION 或叫分动作编号

        Returns:
            叫牌结果
        """
        if action == PASS_ACTION:
            self.num_passes += 1
            self.bid_history.append((player, 0))

            if self.num_passes == self.num_players:
                check_invariant(self.winning_bid == 0, "All players passed after a bid")
                return AuctionOutcome.NO_BID
            if self.num_passes == self.num_players - 1 and self.winning_bid > 0:
                return AuctionOutcome.LANDLORD
            return AuctionOutcome.CONTINUE

        bid = action - BIDDING_ACTION_BASE
        check_invariant(bid > self.winning_bid, f"Bid {bid} not above {self.winning_bid}")

        self.winning_bid = bid
        self.landlord = player
        self.num_passes = 0
        self.bid_history.append((player, bid))

        if bid == self.max_bid:
            return AuctionOutcome.LANDLORD
        return AuctionOutcome.CONTINUE
