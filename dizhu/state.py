"""
游戏状态

阶段: 发牌 (DEAL) -> 叫牌 (AUCTION) -> 出牌 (PLAY) -> 结束 (GAME_OVER)

GameState 是可变对象，每局一个实例，由 apply_action 推进。
搜索算法用 clone() 得到互不共享可变数据的副本。
"""
from enum import Enum
from typing import List, Optional, Tuple
import copy
import logging

import numpy as np

from .cards import (
    NUM_CARDS,
    NUM_PLAYERS,
    NUM_RANKS,
    ONEHOT_SIZE,
    RANK_GROUP_SIZES,
    counts_to_str,
    rank_of,
    ranks_to_str,
)
from .actions import Action
from .auction import Auction, AuctionOutcome
from .config import GameConfig
from .dealer import Dealer
from .encoding import ActionEncoder, DEALING_ACTION_BASE, PASS_ACTION
from .errors import IllegalActionError, PhaseError, check_invariant
from .rules import RuleEngine
from .trick import Trick, TrickResolver

logger = logging.getLogger(__name__)


CHANCE_PLAYER_ID = -1
TERMINAL_PLAYER_ID = -4


class Phase(Enum):
    """游戏阶段"""
    DEAL = "deal"            # 发牌阶段 (机会节点)
    AUCTION = "auction"      # 叫牌阶段
    PLAY = "play"            # 出牌阶段
    GAME_OVER = "game_over"  # 游戏结束


class DouDizhuGame:
    """
    游戏上下文

    持有配置与动作编码表，由调用方创建并传给需要构造对局的地方。
    同一个上下文创建的所有 GameState 共享它 (只读)。
    """

    def __init__(self, config: Optional[GameConfig] = None):
        self.config = config or GameConfig()
        self.config.validate()
        self.encoder = ActionEncoder(self.config.max_bid)

    def new_initial_state(self) -> 'GameState':
        return GameState(self)

    def num_players(self) -> int:
        return NUM_PLAYERS

    def num_distinct_actions(self) -> int:
        return self.encoder.num_actions

    def max_chance_outcomes(self) -> int:
        return max(DEALING_ACTION_BASE, NUM_CARDS)

    def max_utility(self) -> float:
        """叫满分、13 个炸弹加王炸、春天时地主的得分"""
        max_doublings = (NUM_RANKS - 2) + 1 + 1
        return float(2 * self.config.max_bid * 2 ** max_doublings)

    def min_utility(self) -> float:
        return -self.max_utility()

    def utility_sum(self) -> float:
        return 0.0

    def observation_tensor_shape(self) -> Tuple[int]:
        """手牌、已出牌 (各 69)，相对地主位置、先叫牌座位 (各 3)，明牌点数 (15)"""
        return (2 * ONEHOT_SIZE + 2 * NUM_PLAYERS + NUM_RANKS,)

    def max_game_length(self) -> int:
        """发牌 + 叫牌 + 出牌的动作数上限"""
        deal_steps = DEALING_ACTION_BASE + 1
        auction_steps = (NUM_PLAYERS - 1) * (self.config.max_bid + 1) + self.config.max_bid
        play_steps = NUM_CARDS * NUM_PLAYERS
        return deal_steps + auction_steps + play_steps


class GameState:
    """
    可变游戏状态

    Attributes:
        phase: 游戏阶段
        hands: 各座位手牌计数 (3, 15)
        played_deck: 已打出的牌计数 (15,)
        bottom: 底牌 (牌 id)，发牌结束后确定
        landlord: 地主座位 (叫牌结束前为 None)
        final_winner: 最先出完牌的座位
        is_spring: 终局时是否春天
        bombs_played: 已打出的炸弹数 (含王炸)
        plays_per_player: 各座位非 PASS 出牌次数
        num_played: 出牌阶段的动作数 (含 PASS)
    """

    def __init__(self, game: DouDizhuGame):
        self.game = game
        self.phase = Phase.DEAL
        self.hands = np.zeros((NUM_PLAYERS, NUM_RANKS), dtype=np.int64)
        self.played_deck = np.zeros(NUM_RANKS, dtype=np.int64)
        self.bottom: List[int] = []
        self.landlord: Optional[int] = None
        self.final_winner: Optional[int] = None
        self.is_spring = False
        self.bombs_played = 0
        self.plays_per_player = [0] * NUM_PLAYERS
        self.num_played = 0

        self.dealer = Dealer(NUM_PLAYERS)
        self.auction = Auction(game.config.max_bid, NUM_PLAYERS)
        self.tricks = TrickResolver(NUM_PLAYERS)

        self._player = CHANCE_PLAYER_ID
        self._returns = [0.0] * NUM_PLAYERS
        self._history: List[Tuple[int, int]] = []

        # 合法动作缓存，每次状态变化时清空
        self._legal_actions_cache: Optional[List[int]] = None

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    @property
    def winning_bid(self) -> int:
        return self.auction.winning_bid

    @property
    def first_player(self) -> int:
        """先叫牌的座位 (拿到明牌者)"""
        return self.dealer.first_player

    @property
    def face_up_rank(self) -> int:
        return self.dealer.face_up_rank

    @property
    def current_trick(self) -> Optional[Trick]:
        if self.phase != Phase.PLAY:
            return None
        return self.tricks.current_trick

    def current_player(self) -> int:
        """当前行动者: 发牌阶段为机会玩家，结束后为终局标记"""
        if self.phase == Phase.DEAL:
            return CHANCE_PLAYER_ID
        if self.phase == Phase.GAME_OVER:
            return TERMINAL_PLAYER_ID
        return self._player

    def is_chance_node(self) -> bool:
        return self.phase == Phase.DEAL

    def is_terminal(self) -> bool:
        return self.phase == Phase.GAME_OVER

    def returns(self) -> List[float]:
        """各座位得分，结束前全为 0"""
        return list(self._returns)

    def history(self) -> List[Tuple[int, int]]:
        """动作历史 ((行动者, 动作编号), ...)"""
        return list(self._history)

    def hand(self, player: int) -> np.ndarray:
        return self.hands[player].copy()

    def num_unassigned_cards(self) -> int:
        """既不在手牌中也未打出的牌数 (未发的牌或未归属的底牌)"""
        if self.landlord is not None:
            return 0
        return int(self.dealer.deck.sum())

    def legal_actions(self) -> List[int]:
        """
        当前行动者的合法动作编号 (升序)

        Returns:
            发牌阶段: 机会结果; 叫牌阶段: PASS 与叫分; 出牌阶段: 出牌 (跟牌时含 PASS)
        """
        if self._legal_actions_cache is None:
            self._legal_actions_cache = self._compute_legal_actions()
        return list(self._legal_actions_cache)

    def _compute_legal_actions(self) -> List[int]:
        if self.phase == Phase.DEAL:
            return self.dealer.legal_actions()
        if self.phase == Phase.AUCTION:
            return self.auction.legal_actions()
        if self.phase == Phase.PLAY:
            plays = self.tricks.legal_plays(self.hands[self._player])
            return self.game.encoder.get_legal_action_indices(plays)
        return []

    def chance_outcomes(self) -> List[Tuple[int, float]]:
        """
        机会节点的结果及概率

        Raises:
            PhaseError: 当前不是机会节点
        """
        if not self.is_chance_node():
            raise PhaseError(f"chance_outcomes() called in phase {self.phase.value}")
        return self.dealer.chance_outcomes()

    # ------------------------------------------------------------------
    # 状态转移
    # ------------------------------------------------------------------

    def apply_action(self, action: int) -> None:
        """
        执行动作

        Args:
            action: 动作编号，必须来自 legal_actions()

        Raises:
            PhaseError: 游戏已结束
            IllegalActionError: 动作不合法
        """
        if self.phase == Phase.GAME_OVER:
            raise PhaseError("Cannot act in terminal states")

        player = self.current_player()
        if action not in self.legal_actions():
            raise IllegalActionError(
                f"Action {action} is not legal for player {player} in phase {self.phase.value}"
            )

        self._history.append((player, action))
        self._legal_actions_cache = None

        if self.phase == Phase.DEAL:
            self._apply_deal_action(action)
        elif self.phase == Phase.AUCTION:
            self._apply_bidding_action(action)
        else:
            self._apply_play_action(action)

        self._check_card_conservation()

    def _apply_deal_action(self, action: int) -> None:
        self.dealer.apply(action, self.hands)
        if not self.dealer.finished:
            return

        self.bottom = self.dealer.bottom()
        self.phase = Phase.AUCTION
        self._player = self.dealer.first_player
        check_invariant(0 <= self._player < NUM_PLAYERS, "First bidder not decided after dealing")
        logger.debug(
            f"Dealing finished, first bidder {self._player}, "
            f"bottom {ranks_to_str(rank_of(c) for c in self.bottom)}"
        )

    def _apply_bidding_action(self, action: int) -> None:
        outcome = self.auction.apply(self._player, action)

        if outcome == AuctionOutcome.NO_BID:
            self.phase = Phase.GAME_OVER
            logger.info("No player bid, game over with zero returns")
        elif outcome == AuctionOutcome.LANDLORD:
            self._resolve_auction()
        else:
            self._player = (self._player + 1) % NUM_PLAYERS

    def _resolve_auction(self) -> None:
        """地主拿底牌并领出第一轮"""
        self.landlord = self.auction.landlord
        for card in self.bottom:
            self.hands[self.landlord][rank_of(card)] += 1

        self.phase = Phase.PLAY
        self._player = self.landlord
        self.tricks.start(self.landlord)
        logger.debug(f"Player {self.landlord} becomes landlord with bid {self.winning_bid}")

    def _apply_play_action(self, action: int) -> None:
        player = self._player
        self.num_played += 1

        play = Action.pass_action() if action == PASS_ACTION else self.game.encoder.decode(action)
        check_invariant(
            RuleEngine.is_valid_play(play, self.tricks.current_trick.winning_action, self.hands[player]),
            f"Player {player} cannot play {ranks_to_str(play.cards) or 'Pass'} here",
        )

        if play.is_pass:
            leader = self.tricks.pass_turn(player)
            if leader is not None:
                self._player = leader
                return
        else:
            self.tricks.play(player, play)
            if play.is_bomb:
                self.bombs_played += 1
            self.plays_per_player[player] += 1

            # 出完牌立即结束，不再等本轮结束
            if self._remove_from_hand(player, play):
                self.final_winner = player
                self._score_up()
                self.phase = Phase.GAME_OVER
                return

        self._player = (player + 1) % NUM_PLAYERS

    def _remove_from_hand(self, player: int, play: Action) -> bool:
        """
        从手牌中移除打出的牌

        Returns:
            手牌是否已出完
        """
        used = play.counts()
        check_invariant(
            bool((self.hands[player] >= used).all()),
            f"Player {player} does not hold {ranks_to_str(play.cards)}",
        )
        self.hands[player] -= used
        self.played_deck += used
        return not self.hands[player].any()

    def _score_up(self) -> None:
        spring = RuleEngine.is_spring(self.landlord, self.plays_per_player)
        self.is_spring = spring
        self._returns = RuleEngine.calculate_score(
            self.landlord,
            self.final_winner,
            self.winning_bid,
            self.bombs_played,
            spring,
        )
        logger.info(
            f"Game over: winner {self.final_winner}, landlord {self.landlord}, "
            f"bid {self.winning_bid}, bombs {self.bombs_played}, spring {spring}, "
            f"returns {self._returns}"
        )

    def _check_card_conservation(self) -> None:
        check_invariant(bool((self.hands >= 0).all()), "Negative card count in hand")
        check_invariant(
            bool((self.hands <= RANK_GROUP_SIZES).all()),
            "Hand holds more cards of a rank than the deck has",
        )
        total = int(self.hands.sum()) + int(self.played_deck.sum()) + self.num_unassigned_cards()
        check_invariant(total == NUM_CARDS, f"Card count {total} != {NUM_CARDS}")

    # ------------------------------------------------------------------
    # 复制与展示
    # ------------------------------------------------------------------

    def clone(self) -> 'GameState':
        """深拷贝，仅共享只读的游戏上下文"""
        return copy.deepcopy(self, {id(self.game): self.game})

    def action_to_string(self, player: int, action: int) -> str:
        if player == CHANCE_PLAYER_ID and action >= DEALING_ACTION_BASE + NUM_CARDS:
            raise ValueError(f"Non valid ID {action} for chance player")
        return self.game.encoder.action_to_string(action)

    def original_deal(self) -> np.ndarray:
        """
        由动作历史还原发牌结果 (地主含底牌)

        Returns:
            各座位发到的牌计数 (num_players, 15)
        """
        deal = np.zeros_like(self.hands)
        num_dealt = 0
        for player, action in self._history:
            if player == CHANCE_PLAYER_ID and action >= DEALING_ACTION_BASE:
                card = action - DEALING_ACTION_BASE
                deal[num_dealt % NUM_PLAYERS][rank_of(card)] += 1
                num_dealt += 1

        if self.landlord is not None:
            for card in self.bottom:
                deal[self.landlord][rank_of(card)] += 1
        return deal

    def __str__(self) -> str:
        # 终局时展示完整的发牌，便于复盘
        hands = self.original_deal() if self.is_terminal() else self.hands
        lines = []
        for seat in range(NUM_PLAYERS):
            role = ""
            if self.landlord is not None:
                role = " (landlord)" if seat == self.landlord else " (farmer)"
            lines.append(f"Player {seat}{role}: {counts_to_str(hands[seat])}")

        if self.phase != Phase.DEAL:
            lines.append(f"Bottom: {ranks_to_str(rank_of(c) for c in self.bottom)}")
            lines.append("Bidding phase begin")
            for seat, bid in self.auction.bid_history:
                lines.append(f"Player {seat} played {'Pass' if bid == 0 else f'Bid {bid}'}")

        if self.num_played > 0:
            lines.append("Playing phase begin")
            for seat, action in self._history[-self.num_played:]:
                lines.append(f"Player {seat} played {self.action_to_string(seat, action)}")

        if self.is_terminal():
            lines.append("The results are:")
            for seat, value in enumerate(self._returns):
                lines.append(f"Player {seat} got {value}")

        return "\n".join(lines)
