import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from services.universe.canonical import (  # noqa: E402
    choose_canonical_pairs,
    pairs_by_token,
    passes_entry_filter,
    passes_keep_filter,
)

NOW_MS = 1_700_000_000_000.0


# ---------------------------------------------------------------------------
# Canonical pair selection
# ---------------------------------------------------------------------------


class TestChooseCanonicalPairs:
    def test_keeps_deepest_pool_per_token(self, make_pair):
        shallow = make_pair("tokA", pair_address="poolA1", liquidity=30_000)
        deep = make_pair("tokA", pair_address="poolA2", liquidity=90_000)
        other = make_pair("tokB", pair_address="poolB1", liquidity=10_000)

        result = choose_canonical_pairs([shallow, other, deep])

        assert [p.pair_address for p in result] == ["poolA2", "poolB1"]

    def test_tie_keeps_first_seen(self, make_pair):
        first = make_pair("tokA", pair_address="first", liquidity=50_000)
        second = make_pair("tokA", pair_address="second", liquidity=50_000)

        assert choose_canonical_pairs([first, second])[0].pair_address == "first"
        assert choose_canonical_pairs([second, first])[0].pair_address == "second"

    def test_drops_pairs_without_token_address(self, make_pair):
        missing = make_pair("", pair_address="orphan")
        kept = make_pair("tokA")

        result = choose_canonical_pairs([missing, kept])

        assert [p.base_token_address for p in result] == ["tokA"]

    def test_pairs_by_token_indexes_canonical_pair(self, make_pair):
        index = pairs_by_token(
            [make_pair("tokA", pair_address="a1", liquidity=1), make_pair("tokA", pair_address="a2", liquidity=2)]
        )
        assert set(index) == {"tokA"}
        assert index["tokA"].pair_address == "a2"


# ---------------------------------------------------------------------------
# Entry / keep filters
# ---------------------------------------------------------------------------


class TestFilters:
    def test_entry_filter_admits_pair_on_five_minute_volume(self, make_pair, test_settings):
        pair = make_pair(
            "tokA",
            liquidity=30_000,
            volume_h24=150_000,
            volume_h1=0,
            volume_m5=6_000,
            age_minutes=10,
        )
        assert passes_entry_filter(pair, NOW_MS, test_settings)

    def test_entry_filter_rejects_thin_liquidity(self, make_pair, test_settings):
        pair = make_pair(
            "tokA",
            liquidity=20_000,
            volume_h24=150_000,
            volume_h1=0,
            volume_m5=6_000,
            age_minutes=10,
        )
        assert not passes_entry_filter(pair, NOW_MS, test_settings)

    def test_entry_filter_requires_short_window_volume(self, make_pair, test_settings):
        pair = make_pair("tokA", volume_h1=10_000, volume_m5=1_000)
        assert not passes_entry_filter(pair, NOW_MS, test_settings)

    def test_entry_filter_rejects_brand_new_pool(self, make_pair, test_settings):
        assert not passes_entry_filter(make_pair("tokA", age_minutes=2), NOW_MS, test_settings)

    def test_unknown_creation_time_counts_as_brand_new(self, make_raw_pair, test_settings):
        from models import DexPair

        raw = make_raw_pair("tokA")
        raw.pop("pairCreatedAt")
        assert not passes_entry_filter(DexPair.from_api_response(raw), NOW_MS, test_settings)

    def test_keep_filter_rejects_low_volume_even_with_liquidity(self, make_pair, test_settings):
        pair = make_pair("tokA", liquidity=16_000, volume_h24=9_000)
        assert not passes_keep_filter(pair, test_settings)

    def test_keep_filter_is_looser_than_entry(self, make_pair, test_settings):
        pair = make_pair("tokA", liquidity=16_000, volume_h24=45_000, volume_h1=0, volume_m5=0)
        assert passes_keep_filter(pair, test_settings)
        assert not passes_entry_filter(pair, NOW_MS, test_settings)

    def test_thresholds_follow_settings(self, make_pair, make_settings):
        strict = make_settings(DEX_MIN_LIQUIDITY_USD=100_000)
        assert not passes_entry_filter(make_pair("tokA", liquidity=60_000), NOW_MS, strict)
