"""
异常定义

- IllegalActionError: 调用方违反约定 (提交了不在合法动作中的动作)
- PhaseError: 在错误的阶段调用接口 (如非机会节点调用 chance_outcomes)
- InvariantError: 引擎内部不变量被破坏 (牌数下溢、总牌数不守恒)

引擎不捕获也不修复这些异常。
"""


class DizhuError(Exception):
    """引擎异常基类"""


class IllegalActionError(DizhuError, ValueError):
    """动作不在当前合法动作集合中"""


class PhaseError(DizhuError, RuntimeError):
    """当前阶段不支持该操作"""


class InvariantError(DizhuError, AssertionError):
    """内部不变量被破坏，说明引擎有 bug"""


def check_invariant(condition: bool, message: str) -> None:
    if not condition:
        raise InvariantError(message)
