"""牌编码/解码测试"""
import pytest
import numpy as np

from dizhu.cards import (
    Rank,
    NUM_CARDS,
    NUM_RANKS,
    NUM_CARDS_PER_PLAYER,
    MAX_HAND_SIZE,
    RANK_GROUP_SIZES,
    ONEHOT_SIZE,
    rank_of,
    card_rank_group,
    card_to_str,
    cards_to_counts,
    ranks_to_counts,
    counts_to_ranks,
    ranks_to_str,
    str_to_ranks,
    counts_to_onehot,
)


class TestRankEnum:
    """Rank 枚举测试"""

    def test_rank_values(self):
        assert Rank.THREE == 0
        assert Rank.ACE == 11
        assert Rank.TWO == 12
        assert Rank.BLACK_JOKER == 13
        assert Rank.RED_JOKER == 14

    def test_rank_ordering(self):
        assert Rank.THREE < Rank.FOUR < Rank.ACE < Rank.TWO
        assert Rank.TWO < Rank.BLACK_JOKER < Rank.RED_JOKER


class TestDeckConstants:
    """牌组常量测试"""

    def test_sizes(self):
        assert NUM_CARDS == 54
        assert NUM_RANKS == 15
        assert NUM_CARDS_PER_PLAYER == 17
        assert MAX_HAND_SIZE == 20

    def test_group_sizes(self):
        assert RANK_GROUP_SIZES.sum() == NUM_CARDS
        assert card_rank_group(Rank.TWO) == 4
        assert card_rank_group(Rank.RED_JOKER) == 1

    def test_invalid_rank_group(self):
        with pytest.raises(ValueError):
            card_rank_group(15)


class TestRankOf:
    """牌 -> 点数测试"""

    def test_suit_cards(self):
        assert rank_of(0) == Rank.THREE
        assert rank_of(12) == Rank.TWO
        assert rank_of(13) == Rank.THREE
        assert rank_of(51) == Rank.TWO

    def test_jokers(self):
        assert rank_of(52) == Rank.BLACK_JOKER
        assert rank_of(53) == Rank.RED_JOKER

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            rank_of(54)
        with pytest.raises(ValueError):
            rank_of(-1)


class TestCardStrings:
    """字符串转换测试"""

    def test_card_to_str(self):
        assert card_to_str(0) == "S3"
        assert card_to_str(7) == "S10"
        assert card_to_str(13) == "H3"
        assert card_to_str(51) == "D2"
        assert card_to_str(52) == "X"
        assert card_to_str(53) == "D"

    def test_ranks_to_str(self):
        assert ranks_to_str([4, 0, 1, 2, 3]) == "34567"
        assert ranks_to_str([Rank.RED_JOKER, Rank.BLACK_JOKER]) == "XD"
        assert ranks_to_str([]) == ""

    def test_str_to_ranks(self):
        assert str_to_ranks("34567") == [0, 1, 2, 3, 4]
        assert str_to_ranks("101010JJ") == [7, 7, 7, 8, 8]
        assert str_to_ranks("2XD") == [12, 13, 14]

    def test_string_roundtrip(self):
        for s in ["3", "10JQKA", "333444", "2XD"]:
            assert ranks_to_str(str_to_ranks(s)) == s


class TestCounts:
    """计数向量测试"""

    def test_cards_to_counts(self):
        counts = cards_to_counts([0, 13, 26, 52])
        assert counts[Rank.THREE] == 3
        assert counts[Rank.BLACK_JOKER] == 1
        assert counts.sum() == 4

    def test_ranks_to_counts(self):
        counts = ranks_to_counts([5, 5, 14])
        assert counts.shape == (NUM_RANKS,)
        assert counts[5] == 2
        assert counts[14] == 1

    def test_counts_to_ranks(self):
        counts = np.zeros(NUM_RANKS, dtype=np.int64)
        counts[3] = 2
        counts[0] = 1
        assert counts_to_ranks(counts) == [0, 3, 3]

    def test_full_deck_counts(self):
        counts = cards_to_counts(range(NUM_CARDS))
        assert np.array_equal(counts, RANK_GROUP_SIZES)


class TestOnehot:
    """one-hot 编码测试"""

    def test_shape(self):
        assert ONEHOT_SIZE == 69
        onehot = counts_to_onehot(np.zeros(NUM_RANKS, dtype=np.int64))
        assert onehot.shape == (69,)
        assert onehot.dtype == np.float32

    def test_one_per_rank(self):
        onehot = counts_to_onehot(RANK_GROUP_SIZES)
        assert onehot.sum() == NUM_RANKS

    def test_position(self):
        counts = np.zeros(NUM_RANKS, dtype=np.int64)
        counts[Rank.FOUR] = 3
        onehot = counts_to_onehot(counts)
        # 3 占 0-4，4 占 5-9
        assert onehot[5 + 3] == 1
        assert onehot[0] == 1
