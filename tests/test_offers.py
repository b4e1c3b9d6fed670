"""
Tests for the offer generator and the randomness helpers it draws from.
"""
import pytest

from soundempire.schemas.career import EngagementCategory
from soundempire.services import offers
from soundempire.services.rng import RandomSource


# ---------------------------------------------------------------------------
# RandomSource
# ---------------------------------------------------------------------------

class TestRandomSource:
    def test_randint_inclusive_bounds(self, scripted):
        assert scripted([0.0]).randint(6, 8) == 6
        assert scripted([0.999999]).randint(6, 8) == 8

    def test_weighted_choice_walks_cumulative_weights(self, scripted):
        pairs = [("a", 40), ("b", 35), ("c", 25)]
        assert scripted([0.1]).weighted_choice(pairs) == "a"
        assert scripted([0.5]).weighted_choice(pairs) == "b"
        assert scripted([0.9]).weighted_choice(pairs) == "c"

    def test_sample_distinct(self):
        rng = RandomSource(seed=3)
        picked = rng.sample(list(range(10)), 4)
        assert len(picked) == 4
        assert len(set(picked)) == 4

    def test_same_seed_same_sequence(self):
        a, b = RandomSource(seed=99), RandomSource(seed=99)
        assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]


# ---------------------------------------------------------------------------
# Formulas
# ---------------------------------------------------------------------------

class TestFormulas:
    def test_payout_base(self):
        assert offers.payout_base(50, 1.0) == 800
        assert offers.payout_base(1, 0.9) == 191

    def test_demand_multiplier_range(self):
        assert offers.demand_multiplier(0) == pytest.approx(0.5)
        assert offers.demand_multiplier(100) == pytest.approx(1.4)

    def test_reputation_multiplier_caps_at_twelve_and_a_half_percent(self):
        assert offers.reputation_multiplier(100) == pytest.approx(1.125)

    def test_large_venues_near_zero_below_gates(self):
        weights = dict(offers.venue_weights(10))
        assert weights["festival"] == 0.5
        assert weights["arena"] == 0.25
        assert weights["club"] > 30

    def test_large_venues_open_above_gates(self):
        weights = dict(offers.venue_weights(80))
        assert weights["festival"] == pytest.approx(30)
        assert weights["arena"] == pytest.approx(29)
        assert weights["club"] == 17

    def test_target_week_wraps_past_52(self, scripted):
        # randint(1, 10) at 0.99 -> 10; 50 + 10 = 60 -> week 8
        assert offers.target_week(50, scripted([0.99])) == 8


class TestInterviewGate:
    def test_tv_allowed_above_gate(self, scripted):
        assert offers._interview_subtype(70, scripted([0.9])) == "tv"

    def test_tv_redrawn_below_gate(self, scripted):
        # tv draw, lucky break fails, re-draw lands on radio
        assert offers._interview_subtype(20, scripted([0.9, 0.5, 0.1])) == "radio"

    def test_lucky_break_keeps_tv(self, scripted):
        assert offers._interview_subtype(20, scripted([0.9, 0.01])) == "tv"


# ---------------------------------------------------------------------------
# generate_offers
# ---------------------------------------------------------------------------

class TestGenerateOffers:
    @pytest.mark.parametrize("popularity", [1, 40, 65, 100])
    def test_counts_hold_over_repeated_sampling(self, popularity):
        for seed in range(60):
            pool = offers.generate_offers(10, popularity, 50, RandomSource(seed))
            assert 6 <= len(pool.gigs) <= 8
            assert 5 <= len(pool.interviews) <= 7

    def test_fixed_fields_per_subtype(self):
        for seed in range(40):
            pool = offers.generate_offers(3, 70, 60, RandomSource(seed))
            for o in pool.gigs:
                assert o.category == EngagementCategory.gig
                spec = offers.GIG_SPECS[o.subtype]
                assert (o.energy_cost, o.popularity_delta, o.reputation_delta) == (
                    spec.energy, spec.popularity_delta, spec.reputation_delta,
                )
            for o in pool.interviews:
                assert o.category == EngagementCategory.interview
                assert o.energy_cost == offers.INTERVIEW_SPECS[o.subtype].energy
                assert not o.sold_out

    @pytest.mark.parametrize("subtype, deltas", [
        ("radio", (1, 0)),
        ("podcast", (1, 0)),
        ("tv", (5, 1)),
    ])
    def test_interview_stat_deltas(self, subtype, deltas):
        spec = offers.INTERVIEW_SPECS[subtype]
        assert (spec.popularity_delta, spec.reputation_delta) == deltas
        for seed in range(40):
            pool = offers.generate_offers(3, 70, 60, RandomSource(seed))
            for o in pool.interviews:
                if o.subtype == subtype:
                    assert (o.popularity_delta, o.reputation_delta) == deltas

    def test_target_weeks_in_forward_window(self):
        for seed in range(40):
            pool = offers.generate_offers(48, 30, 50, RandomSource(seed))
            for o in pool.gigs + pool.interviews:
                ahead = (o.target_week - 48) % 52
                assert 1 <= ahead <= 10
                assert 1 <= o.target_week <= 52

    def test_tv_is_rare_below_gate(self):
        tv = total = 0
        for seed in range(200):
            pool = offers.generate_offers(5, 10, 50, RandomSource(seed))
            tv += sum(1 for o in pool.interviews if o.subtype == "tv")
            total += len(pool.interviews)
        # 25% draw weight x 5% lucky break
        assert tv / total < 0.05

    def test_gig_payout_within_bounds(self):
        for seed in range(40):
            pool = offers.generate_offers(5, 50, 100, RandomSource(seed))
            for o in pool.gigs:
                guarantee = offers.VENUE_BASE[o.subtype] * offers.demand_multiplier(50)
                low = guarantee * 1.125
                high = guarantee * 1.40 * 1.125
                assert low - 1 <= o.money_reward <= high + 1
