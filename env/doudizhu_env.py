"""
斗地主 Gymnasium 环境

遵循标准 Gymnasium API，发牌等机会节点由环境自身的随机数生成器采样
"""
from typing import Dict, Any, Tuple, Optional, List
import logging
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from dizhu.config import GameConfig
from dizhu.state import DouDizhuGame, GameState

from .observation import ObservationBuilder, OBSERVATION_SIZE

logger = logging.getLogger(__name__)


class DoudizhuEnv(gym.Env):
    """
    斗地主 Gymnasium 环境

    三个座位轮流由同一个调用方控制，step() 接受当前行动者的动作编号。

    API:
    - reset() -> observation, info
    - step(action) -> observation, reward, terminated, truncated, info

    奖励为行动者在终局时的得分，其余步为 0。
    """

    metadata = {
        "render_modes": ["human", "ansi"],
        "name": "Doudizhu-v0",
    }

    def __init__(
        self,
        render_mode: Optional[str] = None,
        config: Optional[GameConfig] = None,
        illegal_action_penalty: float = -1.0,
    ):
        """
        Args:
            render_mode: 渲染模式 ("human", "ansi", None)
            config: 游戏配置 (默认最高叫 3 分)
            illegal_action_penalty: 非法动作的惩罚，状态保持不变
        """
        super().__init__()

        self.render_mode = render_mode
        self.config = config or GameConfig()
        self.illegal_action_penalty = illegal_action_penalty

        self.game = DouDizhuGame(self.config)
        self._obs_builder = ObservationBuilder()

        self._state: Optional[GameState] = None
        self._last_actor = 0
        self._seeded = False

        self._define_spaces()

    def _define_spaces(self):
        """定义观测和动作空间"""
        num_actions = self.game.num_distinct_actions()
        self.action_space = spaces.Discrete(num_actions)
        self.observation_space = spaces.Dict({
            "observation": spaces.Box(0, 1, shape=(OBSERVATION_SIZE,), dtype=np.float32),
            "action_mask": spaces.Box(0, 1, shape=(num_actions,), dtype=np.float32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        重置环境并完成发牌

        Args:
            seed: 随机种子 (首次重置时默认使用配置中的种子)
            options: 额外选项

        Returns:
            (observation, info) 元组
        """
        # 配置中的种子只在首次重置时生效，之后沿用同一个随机数生成器
        if seed is None and not self._seeded:
            seed = self.config.seed
        super().reset(seed=seed)
        self._seeded = True

        self._state = self.game.new_initial_state()
        self._sample_chance_nodes()
        self._last_actor = max(self._state.current_player(), 0)

        obs = self._build_observation()
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, info

    def step(
        self,
        action: int,
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        执行当前行动者的动作

        Args:
            action: 动作编号

        Returns:
            (observation, reward, terminated, truncated, info) 元组
        """
        if self._state is None:
            raise RuntimeError("Environment not reset. Call reset() first.")
        if self._state.is_terminal():
            raise RuntimeError("Episode is over. Call reset() first.")

        action = int(action)
        player = self._state.current_player()

        if action not in self._state.legal_actions():
            # 非法动作：给予惩罚并保持状态
            logger.debug(f"Player {player} chose illegal action {action}")
            obs = self._build_observation()
            info = self._build_info()
            info["error"] = "Invalid action"
            return obs, self.illegal_action_penalty, False, False, info

        self._state.apply_action(action)
        self._last_actor = player
        self._sample_chance_nodes()

        terminated = self._state.is_terminal()
        reward = self._state.returns()[player] if terminated else 0.0

        obs = self._build_observation()
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, False, info

    def _sample_chance_nodes(self):
        """按概率采样机会节点直到轮到玩家行动"""
        while self._state.is_chance_node():
            outcomes = self._state.chance_outcomes()
            actions = [a for a, _ in outcomes]
            probs = np.array([p for _, p in outcomes])
            action = self.np_random.choice(actions, p=probs / probs.sum())
            self._state.apply_action(int(action))

    def _perspective(self) -> int:
        """观测视角: 当前行动者，终局时为最后行动者"""
        player = self._state.current_player()
        return player if player >= 0 else self._last_actor

    def _build_observation(self) -> Dict[str, np.ndarray]:
        obs = self._obs_builder.build(self._state, self._perspective())
        return obs.to_dict()

    def _build_info(self) -> Dict[str, Any]:
        """构建 info 字典"""
        info = {
            "current_player": self._state.current_player(),
            "phase": self._state.phase.value,
            "legal_actions": self._state.legal_actions(),
            "bombs_count": self._state.bombs_played,
        }

        if self._state.landlord is not None:
            info["landlord"] = self._state.landlord
            info["winning_bid"] = self._state.winning_bid

        if self._state.is_terminal():
            info["returns"] = self._state.returns()
            info["winner"] = self._state.final_winner
            info["is_spring"] = self._state.is_spring

        return info

    def render(self) -> Optional[str]:
        """渲染环境"""
        if self.render_mode not in ("ansi", "human"):
            return None

        output = str(self._state)
        if self.render_mode == "human":
            print(output)
        return output

    def close(self):
        """关闭环境"""
        pass

    @property
    def state(self) -> Optional[GameState]:
        """获取当前状态 (用于调试)"""
        return self._state

    def get_legal_actions(self) -> List[int]:
        """获取当前合法动作"""
        if self._state is None:
            return []
        return self._state.legal_actions()

    def sample_action(self) -> int:
        """随机采样一个合法动作"""
        legal_actions = self.get_legal_actions()
        if not legal_actions:
            raise RuntimeError("No legal action available")
        return int(self.np_random.choice(legal_actions))


def make_env(**kwargs) -> DoudizhuEnv:
    """
    工厂函数：创建环境

    Args:
        **kwargs: 环境参数，max_bid / seed 会合并到 GameConfig

    Returns:
        DoudizhuEnv 实例
    """
    config_keys = {k: kwargs.pop(k) for k in ("max_bid", "seed") if k in kwargs}
    if config_keys:
        kwargs["config"] = GameConfig.from_dict(config_keys)
    return DoudizhuEnv(**kwargs)
