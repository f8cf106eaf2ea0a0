"""
观察空间编码

将游戏状态转换为定长特征向量与可读字符串
"""
from dataclasses import dataclass
from typing import Dict
import numpy as np

from dizhu.cards import NUM_PLAYERS, NUM_RANKS, ONEHOT_SIZE, counts_to_onehot, counts_to_str
from dizhu.state import GameState, Phase


# 观测向量布局:
# - 自己手牌: 69 (每个点数张数的 one-hot)
# - 已出牌: 69
# - 相对地主的位置: 3
# - 先叫牌座位: 3
# - 明牌点数: 15
HAND_BASE = 0
PLAYED_BASE = HAND_BASE + ONEHOT_SIZE
FROM_LANDLORD_BASE = PLAYED_BASE + ONEHOT_SIZE
FIRST_PLAYER_BASE = FROM_LANDLORD_BASE + NUM_PLAYERS
FACE_UP_RANK_BASE = FIRST_PLAYER_BASE + NUM_PLAYERS
OBSERVATION_SIZE = FACE_UP_RANK_BASE + NUM_RANKS


@dataclass
class Observation:
    """
    结构化观测

    Attributes:
        tensor: 特征向量 (159,)
        action_mask: 合法动作掩码 (num_actions,)
        text: 可读形式
        phase: 游戏阶段
    """
    tensor: np.ndarray
    action_mask: np.ndarray
    text: str
    phase: str

    def to_dict(self) -> Dict[str, np.ndarray]:
        """转换为 gymnasium 字典观测"""
        return {
            "observation": self.tensor,
            "action_mask": self.action_mask,
        }


class ObservationBuilder:
    """
    观测构建器

    只通过 GameState 的公开接口读取状态，按阶段决定写入哪些特征
    """

    def build(self, state: GameState, player: int) -> Observation:
        """
        从游戏状态构建指定座位的观测

        Args:
            state: 游戏状态
            player: 视角座位

        Returns:
            Observation 对象
        """
        return Observation(
            tensor=self.tensor(state, player),
            action_mask=self.action_mask(state, player),
            text=self.text(state, player),
            phase=state.phase.value,
        )

    def tensor(self, state: GameState, player: int) -> np.ndarray:
        """
        观测向量

        发牌阶段全 0；地主确定前不写相对位置
        """
        self._check_player(player)
        values = np.zeros(OBSERVATION_SIZE, dtype=np.float32)
        if state.phase == Phase.DEAL:
            return values

        values[HAND_BASE:PLAYED_BASE] = counts_to_onehot(state.hands[player])
        values[PLAYED_BASE:FROM_LANDLORD_BASE] = counts_to_onehot(state.played_deck)

        if state.landlord is not None:
            from_landlord = (player - state.landlord) % NUM_PLAYERS
            values[FROM_LANDLORD_BASE + from_landlord] = 1

        if state.first_player >= 0:
            values[FIRST_PLAYER_BASE + state.first_player] = 1
            values[FACE_UP_RANK_BASE + state.face_up_rank] = 1

        return values

    def text(self, state: GameState, player: int) -> str:
        self._check_player(player)
        lines = [
            f"My hand {counts_to_str(state.hands[player])}",
            f"Played cards {counts_to_str(state.played_deck)}",
            f"face up card rank: {state.face_up_rank}",
            f"start player: {state.first_player}",
        ]
        if state.landlord is not None:
            lines.append(f"My position from landlord: {(player - state.landlord) % NUM_PLAYERS}")
        return "\n".join(lines)

    def action_mask(self, state: GameState, player: int) -> np.ndarray:
        """
        合法动作掩码

        只有轮到该座位行动时才有合法动作
        """
        encoder = state.game.encoder
        if state.is_terminal() or state.current_player() != player:
            return np.zeros(encoder.num_actions, dtype=np.float32)
        return encoder.build_legal_mask(state.legal_actions())

    @staticmethod
    def _check_player(player: int) -> None:
        if not 0 <= player < NUM_PLAYERS:
            raise ValueError(f"Invalid player: {player}")
