from __future__ import annotations

import math

import pytest

from freight_rates.models.rate_rule import (
    ExactWeight,
    LowerBound,
    Unspecified,
    UpperBound,
    WeightInterval,
)
from freight_rates.services.normalizer import (
    EmptyInputError,
    detect_shape,
    infer_columns,
    normalize,
    normalize_with_report,
)


def _summary(rule):
    return (rule.origin, rule.destination, rule.weight, rule.price)


# --- shape detection -------------------------------------------------------

@pytest.mark.parametrize("header", ["1kg", "2.5KG", "10Kg", "0.5kg"])
def test_detect_shape_wide_headers(header):
    shape, cols = detect_shape([{"Origin": "A", header: 1}])
    assert shape == "wide"
    assert cols == [header]


@pytest.mark.parametrize("header", ["1 kg", "kg1", "1kgs", ".5kg", "1.kg", "weight"])
def test_detect_shape_long_when_no_weight_column(header):
    shape, cols = detect_shape([{"Origin": "A", header: 1}])
    assert shape == "long"
    assert cols == []


@pytest.mark.parametrize("header", ["1kg\n", "\n1kg", "2.5kg\r\n"])
def test_header_with_line_break_is_not_a_weight_column(header):
    rows = [{"Origin": "A", "Destination": "B", header: 5, "Weight": 1, "Price": 2}]
    assert detect_shape(rows) == ("long", [])
    rule_set = normalize(rows)
    assert [_summary(r) for r in rule_set.rules] == [("A", "B", ExactWeight(1), 2)]


def test_decimal_weight_column_value():
    rule_set = normalize([{"Origin": "A", "Destination": "B", "2.5KG": 7}])
    assert rule_set.rules[0].weight == ExactWeight(2.5)


def test_detect_shape_only_looks_at_first_row():
    rows = [{"Origin": "A", "Weight": 1}, {"Origin": "A", "1kg": 2}]
    assert detect_shape(rows)[0] == "long"


def test_infer_columns_preserves_first_row_order():
    rows = [{"目的地": "B", "始发地": "A", "1kg": 1}, {"extra": 1}]
    assert infer_columns(rows) == ["目的地", "始发地", "1kg"]


# --- wide shape ------------------------------------------------------------

def test_wide_scenario_single_row():
    rows = [{"始发地": "新疆圆通仓", "目的地": "新疆维吾尔自治区", "1kg": 1.63, "2kg": 1.74}]
    rule_set = normalize(rows)
    assert rule_set.shape == "wide"
    assert [_summary(r) for r in rule_set.rules] == [
        ("新疆圆通仓", "新疆维吾尔自治区", ExactWeight(1.0), 1.63),
        ("新疆圆通仓", "新疆维吾尔自治区", ExactWeight(2.0), 1.74),
    ]
    assert rule_set.columns == ("始发地", "目的地", "1kg", "2kg")


def test_wide_drops_unparsable_cells(wide_rows):
    result = normalize_with_report(wide_rows, source="rates.xlsx")
    # 2 rows x 2 weight columns, one cell is "n/a"
    assert result.rule_count == 3
    assert result.skipped_cells == 1
    issue = result.issues[0]
    assert (issue.row, issue.column, issue.issue_type, issue.action) == (2, "2kg", "NOT_A_NUMBER", "DROPPED_RULE")
    assert all(math.isfinite(r.price) for r in result.rule_set.rules)


@pytest.mark.parametrize("cell", [None, "", "   ", float("nan"), float("inf"), "abc", True])
def test_wide_cell_not_finite_number_is_skipped(cell):
    rule_set = normalize([{"Origin": "A", "Destination": "B", "1kg": cell, "2kg": 5}])
    assert [r.exact_weight for r in rule_set.rules] == [2.0]


def test_wide_missing_cell_on_later_row_is_skipped():
    rows = [
        {"Origin": "A", "Destination": "B", "1kg": 1, "2kg": 2},
        {"Origin": "A", "Destination": "C", "1kg": 3},
    ]
    rule_set = normalize(rows)
    assert len(rule_set.rules) == 3


def test_wide_numeric_string_cells_are_parsed():
    rule_set = normalize([{"Origin": "A", "Destination": "B", "1kg": " 12.5 "}])
    assert rule_set.rules[0].price == 12.5


def test_wide_rule_count_bounded_by_rows_times_columns(wide_rows):
    rule_set = normalize(wide_rows)
    assert len(rule_set.rules) <= len(wide_rows) * 2


def test_wide_missing_route_fields_become_empty_strings():
    rule_set = normalize([{"1kg": 9}])
    rule = rule_set.rules[0]
    assert rule.origin == ""
    assert rule.destination == ""


def test_wide_keeps_raw_row():
    row = {"Origin": "A", "Destination": "B", "1kg": 1}
    rule_set = normalize([row])
    assert rule_set.rules[0].raw_data == row


# --- long shape ------------------------------------------------------------

def test_long_interval_rows(long_rows):
    rule_set = normalize(long_rows)
    assert rule_set.shape == "long"
    assert [_summary(r) for r in rule_set.rules] == [
        ("北京", "上海", WeightInterval(0, 10), 100),
        ("北京", "上海", WeightInterval(10, 20), 180),
        ("深圳", "成都", WeightInterval(0, 100), 500),
    ]


def test_long_one_rule_per_row_even_when_unparsable():
    rows = [
        {"Origin": "A", "Destination": "B", "Weight": 1, "Price": "abc"},
        {"Origin": "A", "Destination": "B", "Weight": 2},
        {"Origin": "A", "Destination": "B", "Weight": "heavy", "Price": 3},
    ]
    result = normalize_with_report(rows)
    assert result.rule_count == 3
    assert [r.price for r in result.rule_set.rules] == [0.0, 0.0, 3.0]
    actions = sorted(i.action for i in result.issues)
    assert actions == ["DEFAULTED_TO_ZERO", "KEPT_UNMATCHABLE"]
    # 数値でない重量の行は残るが一致しない
    assert result.rule_set.rules[2].weight == Unspecified()
    assert result.skipped_cells == 0


@pytest.mark.parametrize(
    "fields",
    [
        {"MinWeight": "heavy", "MaxWeight": 10},
        {"MinWeight": 1, "MaxWeight": "?"},
        {"MaxWeight": "  "},
        {"Weight": "n/a"},
    ],
)
def test_long_non_numeric_weight_makes_rule_unspecified(fields):
    row = {"Origin": "A", "Destination": "B", "Price": 1, **fields}
    result = normalize_with_report([row])
    assert result.rule_set.rules[0].weight == Unspecified()
    assert [i.action for i in result.issues] == ["KEPT_UNMATCHABLE"]


def test_long_unused_non_numeric_weight_does_not_change_variant():
    row = {"Origin": "A", "Destination": "B", "MinWeight": 1, "MaxWeight": 5, "Weight": "x", "Price": 1}
    assert normalize([row]).rules[0].weight == WeightInterval(1, 5)


def test_long_zero_bound_is_not_absent():
    rule_set = normalize([{"Origin": "A", "Destination": "B", "MinWeight": 0, "Price": 1}])
    assert rule_set.rules[0].weight == LowerBound(0)


@pytest.mark.parametrize(
    "fields, expected",
    [
        ({"min_weight": 5}, LowerBound(5)),
        ({"max_weight": 5}, UpperBound(5)),
        ({"minWeight": 1, "maxWeight": 5}, WeightInterval(1, 5)),
        ({"weight": 3}, ExactWeight(3)),
        ({"最小重量": 1, "最大重量": 5, "重量": 3}, WeightInterval(1, 5)),
        ({"MaxWeight": 5, "Weight": 3}, UpperBound(5)),
        ({}, Unspecified()),
    ],
)
def test_long_weight_variant_selection(fields, expected):
    row = {"Origin": "A", "Destination": "B", "Price": 1, **fields}
    assert normalize([row]).rules[0].weight == expected


@pytest.mark.parametrize("price_key", ["价格", "金额", "Price", "Amount", "price"])
def test_long_price_aliases(price_key):
    row = {"Origin": "A", "Destination": "B", "Weight": 1, price_key: 42}
    assert normalize([row]).rules[0].price == 42


def test_long_price_alias_order():
    row = {"Origin": "A", "Destination": "B", "Weight": 1, "price": 1, "价格": 2}
    assert normalize([row]).rules[0].price == 2


def test_long_blank_alias_falls_through_to_next():
    row = {"始发地": "", "Origin": "A", "Destination": "B", "Weight": 1, "Price": 1}
    assert normalize([row]).rules[0].origin == "A"


def test_whitespace_only_alias_value_is_present():
    row = {"始发地": "  ", "Origin": "A", "Destination": "B", "Weight": 1, "Price": 1}
    assert normalize([row]).rules[0].origin == ""


def test_alias_tolerance_english_and_chinese_headers_equal():
    zh = [{"始发地": " 北京 ", "目的地": "上海", "重量": 5, "价格": 10}]
    en = [{"Origin": "北京", "Destination": " 上海", "Weight": 5, "Price": 10}]
    assert [_summary(r) for r in normalize(zh).rules] == [_summary(r) for r in normalize(en).rules]


def test_numeric_route_values_are_stringified():
    rows = [{"Origin": 1001.0, "Destination": 2002, "Weight": 1, "Price": 1}]
    rule = normalize(rows).rules[0]
    assert (rule.origin, rule.destination) == ("1001", "2002")


# --- general ---------------------------------------------------------------

def test_empty_input_raises():
    with pytest.raises(EmptyInputError):
        normalize([])


def test_normalize_accepts_generators(long_rows):
    rule_set = normalize(r for r in long_rows)
    assert len(rule_set.rules) == 3


def test_normalize_is_idempotent(wide_rows, long_rows):
    assert normalize(wide_rows) == normalize(wide_rows)
    assert normalize(long_rows) == normalize(long_rows)


def test_normalize_does_not_mutate_input(wide_rows):
    before = [dict(r) for r in wide_rows]
    normalize(wide_rows)
    assert wide_rows == before


def test_report_counts(long_rows):
    result = normalize_with_report(long_rows, source="t.xlsx")
    assert result.source == "t.xlsx"
    assert result.total_rows == 3
    assert result.weight_columns == ()
    assert result.elapsed_seconds >= 0
