from datetime import date

from amc_receipts.services.aggregation import (
    UNKNOWN,
    GroupSummary,
    MonthKey,
    active_traders_in_month,
    average_receipts_per_trader,
    by_commodity,
    by_committee,
    by_district,
    by_month,
    group_receipts,
    month_key,
    search_traders,
    summarize,
    top_n,
    top_traders,
    trader_profiles,
)


def test_single_group_totals_and_average():
    rows = [{"value": 100}, {"value": 200}, {"value": 300}]
    groups = group_receipts(rows, lambda r: "all")
    assert len(groups) == 1
    assert groups[0].count == 3
    assert groups[0].total_value == 600
    assert groups[0].average_value == 200


def test_zero_receipts_average_is_zero():
    totals = summarize([])
    assert totals.count == 0
    assert totals.average_value == 0
    assert GroupSummary("empty").average_value == 0


def test_malformed_value_counts_but_adds_nothing():
    rows = [{"value": 100}, {"value": "abc"}, {"value": None}, {"value": "1,250"}]
    groups = group_receipts(rows, lambda r: "k")
    assert groups[0].count == 4
    assert groups[0].total_value == 1350


def test_oversized_integer_value_does_not_break_grouping():
    rows = [{"value": 10 ** 400}, {"value": 5}]
    groups = group_receipts(rows, lambda r: "k")
    assert groups[0].count == 2
    assert groups[0].total_value == 5


def test_groups_follow_discovery_order():
    rows = [{"commodity": "Rice"}, {"commodity": "Cotton"}, {"commodity": "Rice"}, {}]
    assert [g.key for g in by_commodity(rows)] == ["Rice", "Cotton", UNKNOWN]


def test_top_n_keeps_first_seen_order_for_ties():
    rows = [
        {"commodity": "A", "value": 50},
        {"commodity": "B", "value": 100},
        {"commodity": "C", "value": 100},
        {"commodity": "D", "value": 10},
    ]
    top = top_n(by_commodity(rows), 2)
    assert [g.key for g in top] == ["B", "C"]


def test_summarize_totals(receipts):
    totals = summarize(receipts)
    assert totals.count == 4
    assert totals.total_value == 930000
    assert totals.total_quantity == 1650
    assert totals.total_fees == 9300
    assert totals.as_dict()["average_value"] == 232500


def test_by_committee_and_district_use_committee_lookup(receipts, committees):
    names = {g.key: g.total_value for g in by_committee(receipts, committees)}
    assert names == {
        "Tuni Agricultural Market Committee": 430000,
        "Kakinada Agricultural Market Committee": 200000,
        "Guntur Agricultural Market Committee": 300000,
    }
    districts = [(g.key, g.count) for g in by_district(receipts, committees)]
    assert districts == [("East Godavari", 3), ("Guntur", 1)]


def test_by_district_falls_back_to_unknown():
    assert by_district([{"committee_id": "nope"}])[0].key == UNKNOWN


def test_monthly_trend_is_chronological_with_unknown_last():
    rows = [
        {"date": "2024-06-10", "value": 1},
        {"date": "not a date", "value": 2},
        {"date": "2023-12-31", "value": 3},
        {"date": "2024-01-05", "value": 4},
        {"date": "2024-06-01", "value": 5},
    ]
    groups = by_month(rows)
    assert [g.key for g in groups] == [MonthKey(2023, 12), MonthKey(2024, 1), MonthKey(2024, 6), UNKNOWN]
    assert groups[2].total_value == 6
    assert groups[0].as_dict()["key"] == "Dec 2023"


def test_month_key_parses_common_formats():
    assert month_key("2024-06-10") == MonthKey(2024, 6)
    assert month_key("10/06/2024") == MonthKey(2024, 6)
    assert month_key(date(2024, 2, 29)).iso == "2024-02"
    assert month_key("") is None


def test_trader_profiles(receipts):
    extra = dict(receipts[0], id="r5", date="2024-07-01", commodity="Wheat", value="bad")
    profiles = trader_profiles(receipts + [extra])

    rajesh = profiles["Rajesh Kumar"]
    assert rajesh.receipt_count == 2
    assert rajesh.total_value == 250000
    assert rajesh.commodities == ["Rice", "Wheat"]
    assert rajesh.last_transaction == date(2024, 7, 1)
    assert rajesh.average_value == 125000

    detail = rajesh.as_dict(include_receipts=True)
    assert [m["key"] for m in detail["monthly"]] == ["Jun 2024", "Jul 2024"]


def test_trader_search_top_and_activity(receipts):
    profiles = trader_profiles(receipts)
    assert [p.name for p in search_traders(profiles, "REDDY")] == ["Suresh Reddy"]
    assert [p.name for p in top_traders(profiles, 2)] == ["Mohan Rao", "Rajesh Kumar"]
    assert active_traders_in_month(profiles, today=date(2024, 6, 20)) == 2
    assert average_receipts_per_trader(profiles) == 1
    assert average_receipts_per_trader({}) == 0


def test_missing_trader_name_grouped_as_unknown_trader():
    profiles = trader_profiles([{"value": 10}, {"trader_name": "  ", "value": 5}])
    assert list(profiles) == ["Unknown Trader"]
    assert profiles["Unknown Trader"].receipt_count == 2
