"""
游戏配置
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .encoding import DEFAULT_MAX_BID


@dataclass
class GameConfig:
    """
    游戏配置

    Attributes:
        max_bid: 最高叫分 (1-3)，叫到最高分立即成为地主
        seed: 环境采样机会节点用的随机种子
    """
    max_bid: int = DEFAULT_MAX_BID
    seed: Optional[int] = None

    def validate(self) -> None:
        if not 1 <= self.max_bid <= DEFAULT_MAX_BID:
            raise ValueError(f"max_bid must be in [1, {DEFAULT_MAX_BID}], got {self.max_bid}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'GameConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        config = cls(**filtered)
        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
