"""叫牌测试"""
import pytest
import numpy as np

from dizhu.auction import Auction, AuctionOutcome
from dizhu.encoding import PASS_ACTION, bid_action


def run(auction: Auction, actions, first=0):
    """从 first 开始依次执行叫牌动作，返回每步结果"""
    outcomes = []
    for i, action in enumerate(actions):
        outcomes.append(auction.apply((first + i) % 3, action))
    return outcomes


class TestAuction:
    """Auction 测试"""

    def test_initial_legal_actions(self):
        assert Auction().legal_actions() == [PASS_ACTION, 106, 107, 108]

    def test_legal_bids_above_winning(self):
        auction = Auction()
        auction.apply(0, bid_action(2))
        assert auction.legal_actions() == [PASS_ACTION, bid_action(3)]

    def test_all_pass_no_bid(self):
        outcomes = run(Auction(), [PASS_ACTION] * 3)
        assert outcomes == [AuctionOutcome.CONTINUE, AuctionOutcome.CONTINUE, AuctionOutcome.NO_BID]

    def test_max_bid_ends_immediately(self):
        auction = Auction()
        assert auction.apply(1, bid_action(3)) == AuctionOutcome.LANDLORD
        assert auction.landlord == 1
        assert auction.winning_bid == 3

    def test_two_passes_after_bid(self):
        auction = Auction()
        outcomes = run(auction, [bid_action(1), PASS_ACTION, PASS_ACTION], first=2)
        assert outcomes[-1] == AuctionOutcome.LANDLORD
        assert auction.landlord == 2
        assert auction.winning_bid == 1

    def test_late_bid_after_passes(self):
        auction = Auction()
        outcomes = run(auction, [PASS_ACTION, PASS_ACTION, bid_action(1), PASS_ACTION, PASS_ACTION])
        assert outcomes[2] == AuctionOutcome.CONTINUE
        assert outcomes[-1] == AuctionOutcome.LANDLORD
        assert auction.landlord == 2

    def test_outbid(self):
        auction = Auction()
        run(auction, [PASS_ACTION, bid_action(1), bid_action(2), PASS_ACTION, PASS_ACTION])
        assert auction.landlord == 2
        assert auction.winning_bid == 2

    def test_history(self):
        auction = Auction()
        run(auction, [PASS_ACTION, bid_action(2)])
        assert auction.bid_history == [(0, 0), (1, 2)]

    def test_max_bid_config(self):
        auction = Auction(max_bid=1)
        assert auction.legal_actions() == [PASS_ACTION, bid_action(1)]
        assert auction.apply(0, bid_action(1)) == AuctionOutcome.LANDLORD

    def test_random_auctions_terminate(self):
        """叫分单调递增，且有限步内结束"""
        rng = np.random.default_rng(0)
        for _ in range(200):
            auction = Auction()
            outcome = AuctionOutcome.CONTINUE
            steps = 0
            last_bid = 0
            while outcome == AuctionOutcome.CONTINUE:
                legal = auction.legal_actions()
                outcome = auction.apply(steps % 3, legal[rng.integers(len(legal))])
                assert auction.winning_bid >= last_bid
                last_bid = auction.winning_bid
                steps += 1
                assert steps <= 12

            if outcome == AuctionOutcome.NO_BID:
                assert auction.winning_bid == 0
            else:
                assert auction.winning_bid > 0
                assert auction.landlord is not None
