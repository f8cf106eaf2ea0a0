"""
出牌轮次

每一轮由领出者出牌开始，其余玩家依次压牌或 PASS。
一手出牌后连续 players - 1 次 PASS，本轮结束，最大出牌者领出下一轮。
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .cards import NUM_PLAYERS
from .actions import Action, ActionGenerator
from .rules import RuleEngine
from .errors import check_invariant


@dataclass
class Trick:
    """
    一轮出牌

    Attributes:
        leader: 领出者
        winning_action: 当前最大的出牌 (None 表示还没有人出牌)
        winning_player: 当前最大出牌者
        plays: 本轮出牌记录 ((座位, 动作), ...)
    """
    leader: int
    winning_action: Optional[Action] = None
    winning_player: int = field(init=False)
    plays: List[tuple] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.winning_player = self.leader

    def play(self, player: int, action: Action) -> None:
        self.plays.append((player, action))
        if not action.is_pass:
            self.winning_action = action
            self.winning_player = player


class TrickResolver:
    """
    管理出牌阶段的轮次

    Attributes:
        tricks: 所有轮次 (最后一个为当前轮)
        num_passes: 最近一次出牌后的连续 PASS 数
    """

    def __init__(self, num_players: int = NUM_PLAYERS):
        self.num_players = num_players
        self.tricks: List[Trick] = []
        self.num_passes = 0

    def start(self, leader: int) -> None:
        """开始新的一轮"""
        self.tricks.append(Trick(leader))
        self.num_passes = 0

    @property
    def current_trick(self) -> Trick:
        check_invariant(bool(self.tricks), "No trick in progress")
        return self.tricks[-1]

    @property
    def new_trick_begin(self) -> bool:
        """本轮还没有人出牌 (领出者不能 PASS)"""
        return self.current_trick.winning_action is None

    def legal_plays(self, hand: Sequence[int]) -> List[Action]:
        """
        生成当前玩家的合法出牌

        Args:
            hand: 当前玩家手牌计数向量

        Returns:
            合法动作列表 (跟牌时含 PASS)
        """
        generator = ActionGenerator(hand)
        winning = self.current_trick.winning_action
        if winning is None:
            return generator.generate_all()
        return generator.generate_responses(winning)

    def is_legal_challenger(self, action: Action) -> bool:
        winning = self.current_trick.winning_action
        return winning is None or RuleEngine.can_beat(action, winning)

    def play(self, player: int, action: Action) -> None:
        """记录一手非 PASS 出牌"""
        check_invariant(not action.is_pass, "play() called with a pass")
        check_invariant(self.is_legal_challenger(action), f"Play {action.cards} does not beat the trick")
        self.current_trick.play(player, action)
        self.num_passes = 0

    def pass_turn(self, player: int) -> Optional[int]:
        """
        记录一次 PASS

        Args:
            player: PASS 的座位

        Returns:
            本轮结束时返回下一轮领出者，否则返回 None
        """
        check_invariant(not self.new_trick_begin, "Trick leader cannot pass")
        self.current_trick.play(player, Action.pass_action())
        self.num_passes += 1

        if self.num_passes == self.num_players - 1:
            winner = self.current_trick.winning_player
            self.start(winner)
            return winner
        return None
