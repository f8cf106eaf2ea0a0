"""
Environment Layer - Gymnasium 兼容环境

Modules:
    doudizhu_env: 主环境类
    observation: 观测空间构建
"""
from .doudizhu_env import (
    DoudizhuEnv,
    make_env,
)

from .observation import (
    Observation,
    ObservationBuilder,
    OBSERVATION_SIZE,
)

__all__ = [
    # env
    "DoudizhuEnv",
    "make_env",
    # observation
    "Observation",
    "ObservationBuilder",
    "OBSERVATION_SIZE",
]
