"""配置与异常测试"""
import pytest

from dizhu.config import GameConfig
from dizhu.errors import (
    DizhuError,
    IllegalActionError,
    InvariantError,
    PhaseError,
    check_invariant,
)


class TestGameConfig:
    """GameConfig 测试"""

    def test_defaults(self):
        config = GameConfig()
        assert config.max_bid == 3
        assert config.seed is None

    def test_from_dict_drops_unknown_keys(self):
        config = GameConfig.from_dict({"max_bid": 2, "seed": 7, "unknown": 1})
        assert config.max_bid == 2
        assert config.seed == 7

    def test_to_dict(self):
        assert GameConfig(max_bid=1).to_dict() == {"max_bid": 1, "seed": None}

    @pytest.mark.parametrize("max_bid", [0, 4, -1])
    def test_invalid_max_bid(self, max_bid):
        with pytest.raises(ValueError):
            GameConfig.from_dict({"max_bid": max_bid})


class TestErrors:
    """异常层级测试"""

    def test_hierarchy(self):
        assert issubclass(IllegalActionError, DizhuError)
        assert issubclass(IllegalActionError, ValueError)
        assert issubclass(PhaseError, RuntimeError)
        assert issubclass(InvariantError, AssertionError)

    def test_check_invariant(self):
        check_invariant(True, "never raised")
        with pytest.raises(InvariantError, match="broken"):
            check_invariant(False, "broken")
