"""环境层测试"""
import pytest
import numpy as np

from dizhu.cards import NUM_RANKS
from dizhu.config import GameConfig
from dizhu.encoding import PASS_ACTION, bid_action
from dizhu.state import Phase
from env import DoudizhuEnv, ObservationBuilder, OBSERVATION_SIZE, make_env


class TestObservationBuilder:
    """ObservationBuilder 测试"""

    def test_shape(self, game):
        assert OBSERVATION_SIZE == 159
        assert game.observation_tensor_shape() == (159,)

    def test_deal_phase_is_empty(self, game):
        state = game.new_initial_state()
        tensor = ObservationBuilder().tensor(state, 0)
        assert tensor.shape == (159,)
        assert tensor.sum() == 0

    def test_auction_phase(self, deal, fixed_hands):
        state = deal(fixed_hands)
        tensor = ObservationBuilder().tensor(state, 0)

        # 手牌与已出牌每个点数各一个 1
        assert tensor[:69].sum() == NUM_RANKS
        assert tensor[69:138].sum() == NUM_RANKS
        # 地主未定
        assert tensor[138:141].sum() == 0
        # 先叫牌座位与明牌点数
        assert tensor[141:144].tolist() == [1, 0, 0]
        assert tensor[144 + state.face_up_rank] == 1

    def test_position_from_landlord(self, deal, fixed_hands):
        state = deal(fixed_hands)
        state.apply_action(PASS_ACTION)
        state.apply_action(bid_action(3))

        builder = ObservationBuilder()
        assert builder.tensor(state, 1)[138:141].tolist() == [1, 0, 0]
        assert builder.tensor(state, 2)[138:141].tolist() == [0, 1, 0]
        assert builder.tensor(state, 0)[138:141].tolist() == [0, 0, 1]

    def test_text(self, deal, fixed_hands):
        state = deal(fixed_hands)
        text = ObservationBuilder().text(state, 0)
        assert text.startswith("My hand 33334444555566667")
        assert "start player: 0" in text

    def test_action_mask_only_for_actor(self, deal, fixed_hands):
        state = deal(fixed_hands)
        builder = ObservationBuilder()
        assert builder.action_mask(state, 0).sum() == 4
        assert builder.action_mask(state, 1).sum() == 0

    def test_invalid_player(self, game):
        with pytest.raises(ValueError):
            ObservationBuilder().tensor(game.new_initial_state(), 3)


class TestDoudizhuEnv:
    """DoudizhuEnv 测试"""

    @pytest.fixture
    def env(self):
        return DoudizhuEnv()

    def test_spaces(self, env):
        assert env.action_space.n == 11618
        assert env.observation_space["observation"].shape == (159,)

    def test_reset(self, env):
        obs, info = env.reset(seed=42)

        assert obs["observation"].shape == (159,)
        assert obs["action_mask"].shape == (env.action_space.n,)
        assert info["phase"] == Phase.AUCTION.value
        assert 0 <= info["current_player"] < 3
        assert obs["action_mask"].sum() == len(info["legal_actions"])

    def test_step_before_reset(self, env):
        with pytest.raises(RuntimeError):
            env.step(PASS_ACTION)

    def test_illegal_action_penalty(self, env):
        env.reset(seed=0)
        history = env.state.history()

        obs, reward, terminated, truncated, info = env.step(0)

        assert reward == -1.0
        assert not terminated
        assert info["error"] == "Invalid action"
        assert env.state.history() == history

    def test_full_game(self, env):
        obs, info = env.reset(seed=3)
        done = False
        steps = 0
        while not done:
            obs, reward, terminated, truncated, info = env.step(env.sample_action())
            done = terminated or truncated
            steps += 1
            assert steps < 500

        assert sum(info["returns"]) == pytest.approx(0.0)
        assert reward == info["returns"][env.state.history()[-1][0]]
        with pytest.raises(RuntimeError):
            env.step(PASS_ACTION)

    def test_seed_reproducible(self):
        histories = []
        for _ in range(2):
            env = DoudizhuEnv()
            env.reset(seed=11)
            for _ in range(20):
                if env.state.is_terminal():
                    break
                env.step(env.sample_action())
            histories.append(env.state.history())
        assert histories[0] == histories[1]

    def test_config_seed_only_on_first_reset(self):
        env = DoudizhuEnv(config=GameConfig(seed=42))
        env.reset()
        first = env.state.hands.copy()
        env.reset()
        second = env.state.hands.copy()
        assert not np.array_equal(first, second)

        # 同一配置种子的环境产生相同的对局序列
        other = DoudizhuEnv(config=GameConfig(seed=42))
        other.reset()
        assert np.array_equal(other.state.hands, first)
        other.reset()
        assert np.array_equal(other.state.hands, second)

    def test_render(self):
        env = DoudizhuEnv(render_mode="ansi")
        env.reset(seed=5)
        text = env.render()
        assert "Player 0" in text
        assert "Bidding phase begin" in text

    def test_make_env(self):
        env = make_env(max_bid=2, seed=9)
        assert env.config == GameConfig(max_bid=2, seed=9)
        assert env.action_space.n == 11617


class TestRandomSelfPlay:
    """多局随机自对弈"""

    def test_many_games(self):
        env = DoudizhuEnv(config=GameConfig(seed=100))
        rng = np.random.default_rng(7)
        finished = 0
        for episode in range(20):
            obs, info = env.reset(seed=100 + episode)
            done = False
            while not done:
                legal = np.flatnonzero(obs["action_mask"])
                action = int(legal[rng.integers(len(legal))])
                obs, reward, terminated, truncated, info = env.step(action)
                done = terminated or truncated
            assert sum(info["returns"]) == pytest.approx(0.0)
            finished += 1
        assert finished == 20
