"""Tests for trip normalization and option scoring."""

from trip_factories import at, direct_trip, leg, option, raw_leg, raw_trip

from ns_planner.application.services import ScoringPolicy, TripNormalizer, dedupe_by_signature
from ns_planner.domain.models import OptionKind


class TestTripNormalizer:
    """Tests for converting raw NS trips into options."""

    def test_multi_leg_trip_is_normalized(self) -> None:
        """Given a two-leg trip, when normalizing, then times, tracks and transfer are set."""
        trip = raw_trip(
            raw_leg("Rotterdam Centraal", "Gouda", 0, 18, delay=2),
            raw_leg("Gouda", "Utrecht Centraal", 24, 44),
        )

        result = TripNormalizer.normalize(trip)

        assert result is not None
        assert result.kind is OptionKind.DIRECT
        assert result.duration_minutes == 44
        assert result.min_transfer_minutes == 6
        assert result.legs[0].origin_track == "1"
        assert result.legs[0].delay_minutes == 2
        assert result.legs[1].delay_minutes == 0
        assert result.departure_time == at(0)

    def test_actual_times_are_used_when_planned_missing(self) -> None:
        """Given only actualDateTime and actualTrack, when normalizing, then they are used."""
        trip = {
            "legs": [
                {
                    "origin": {
                        "name": "A",
                        "actualDateTime": "2025-03-01T10:00:00+0100",
                        "actualTrack": "5b",
                    },
                    "destination": {"name": "B", "actualDateTime": "2025-03-01T10:30:00+0100"},
                }
            ]
        }

        result = TripNormalizer.normalize(trip)

        assert result is not None
        assert result.duration_minutes == 30
        assert result.legs[0].origin_track == "5b"
        assert result.legs[0].dest_track is None
        assert result.legs[0].product_label == "Trein"

    def test_product_label_priority(self) -> None:
        """Given product variants, when labelling, then the fixed priority order applies."""
        assert TripNormalizer.product_label({"product": "Sprinter"}) == "Sprinter"
        assert (
            TripNormalizer.product_label(
                {"product": {"shortCategoryName": "IC", "categoryName": "Intercity"}}
            )
            == "IC"
        )
        assert TripNormalizer.product_label({"product": {"categoryName": "Sprinter"}}) == "Sprinter"
        assert TripNormalizer.product_label({"product": {}}) == "Trein"

    def test_malformed_trips_are_dropped(self) -> None:
        """Given trips without legs, with bad times or negative duration, when normalizing
        all, then only the valid trip remains."""
        bad_time = raw_leg("A", "B", 0, 10)
        bad_time["origin"]["plannedDateTime"] = "not-a-time"
        trips = [
            {"legs": []},
            "garbage",
            raw_trip(bad_time),
            direct_trip("A", "B", 30, 10),
            direct_trip("A", "B", 0, 25),
        ]

        result = TripNormalizer.normalize_all(trips)

        assert [o.duration_minutes for o in result] == [25]

    def test_unparseable_intermediate_time_drops_the_trip(self) -> None:
        """Given a three-leg trip whose middle leg has no usable arrival time, when
        normalizing, then the whole trip is dropped even though both endpoints parse."""
        middle = raw_leg("Gouda", "Woerden", 20, 30)
        middle["destination"]["plannedDateTime"] = "not-a-time"
        trip = raw_trip(
            raw_leg("Rotterdam Centraal", "Gouda", 0, 18),
            middle,
            raw_leg("Woerden", "Utrecht Centraal", 35, 50),
        )

        assert TripNormalizer.normalize(trip) is None

    def test_duration_invariant_holds_for_every_option(self) -> None:
        """Given several trips, when normalizing, then duration equals the endpoint gap."""
        trips = [direct_trip("A", "B", start, start + 17 + start % 5) for start in range(0, 60, 7)]

        for result in TripNormalizer.normalize_all(trips):
            gap = (result.arrival_time - result.departure_time).total_seconds() / 60
            assert result.duration_minutes == round(gap)
            assert result.duration_minutes >= 0


class TestScoringPolicy:
    """Tests for ranking options."""

    def test_short_transfer_is_not_penalized(self) -> None:
        """Given a 5-minute transfer, when scoring, then the score equals the duration."""
        candidate = option(leg("A", "B", 0, 20), leg("B", "C", 25, 50))

        assert ScoringPolicy().score(candidate) == 50

    def test_long_transfer_is_penalized(self) -> None:
        """Given a 15-minute shortest transfer, when scoring, then 2 x 5 minutes is added."""
        candidate = option(leg("A", "B", 0, 20), leg("B", "C", 35, 50))

        assert ScoringPolicy().score(candidate) == 50 + 10

    def test_penalty_is_configurable(self) -> None:
        """Given threshold 5 and weight 1, when scoring a 15-minute transfer, then 10 is added."""
        candidate = option(leg("A", "B", 0, 20), leg("B", "C", 35, 50))

        policy = ScoringPolicy(penalty_threshold_minutes=5, penalty_weight=1)

        assert policy.score(candidate) == 60

    def test_rank_is_stable(self) -> None:
        """Given equal scores, when ranking, then input order is kept."""
        first = option(leg("A", "B", 0, 30))
        second = option(leg("A", "B", 10, 40))
        faster = option(leg("A", "B", 5, 20))

        assert ScoringPolicy().rank([first, second, faster]) == [faster, first, second]

    def test_dedupe_keeps_first_occurrence(self) -> None:
        """Given a direct option and an identical combination, when deduplicating, then the
        direct option wins."""
        direct = option(leg("A", "B", 0, 20), leg("B", "C", 25, 50))
        combo = option(leg("A", "B", 0, 20), leg("B", "C", 25, 50), kind=OptionKind.COMBINATION)

        result = dedupe_by_signature([direct, combo])

        assert result == [direct]
