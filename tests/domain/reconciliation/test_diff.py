from __future__ import annotations

from arcdiff.domain.reconciliation.diff import (
    MISSING_SIGNATURE,
    build_diff_report,
    recipe_signature,
)
from arcdiff.domain.types import FieldDiffers, RecipePart
from tests.helpers.items import make_canonical, make_item

WIRES = RecipePart(amount=2.0, item_id="wires")
METAL = RecipePart(amount=1.0, item_id="Metal-Parts")


def test_identical_records_produce_empty_report() -> None:
    item = make_canonical(
        make_item("ardb", "Battery", rarity="Uncommon", value=250, weight=0.5),
        make_item("metaforge", "battery ", rarity="uncommon", value=250.0, weight=0.5),
    )

    report = build_diff_report(item, ["ardb", "metaforge"])

    assert report.missing_in == ()
    assert report.field_differs == FieldDiffers()
    assert report.recipe_differs is False
    assert report.severity == 0
    assert report.explanation == ()


def test_missing_provider_adds_weight_and_explanation() -> None:
    item = make_canonical(make_item("ardb", "Battery"))

    report = build_diff_report(item, ["ardb", "metaforge", "raidtheory"])

    assert report.missing_in == ("metaforge", "raidtheory")
    assert report.severity == 36
    assert report.explanation == ("Missing in: metaforge, raidtheory",)


def test_value_difference_lists_every_active_provider() -> None:
    item = make_canonical(
        make_item("ardb", "Battery", value=250),
        make_item("metaforge", "Battery", value=262.5),
    )

    report = build_diff_report(item, ["ardb", "metaforge", "raidtheory"])

    assert report.field_differs.value is True
    assert report.severity == 18 + 12
    assert report.explanation == (
        "Missing in: raidtheory",
        "Value differs: ardb=250, metaforge=262.5, raidtheory=-",
    )


def test_value_present_in_only_some_providers_differs() -> None:
    item = make_canonical(
        make_item("ardb", "Battery", weight=1.0),
        make_item("metaforge", "Battery"),
    )

    report = build_diff_report(item, ["ardb", "metaforge"])

    assert report.field_differs == FieldDiffers(weight=True)
    assert report.explanation == ("Weight differs: ardb=1, metaforge=-",)


def test_tiny_float_noise_does_not_differ() -> None:
    item = make_canonical(
        make_item("ardb", "Battery", weight=0.1 + 0.2),
        make_item("metaforge", "Battery", weight=0.3),
    )

    assert build_diff_report(item, ["ardb", "metaforge"]).field_differs.weight is False


def test_values_on_a_half_step_round_up() -> None:
    item = make_canonical(
        make_item("ardb", "Battery", value=-0.00005, weight=0.00005),
        make_item("metaforge", "Battery", value=0.0, weight=0.0001),
    )

    report = build_diff_report(item, ["ardb", "metaforge"])

    assert report.field_differs == FieldDiffers()
    assert report.severity == 0


def test_recipe_comparison_ignores_part_order_and_id_case() -> None:
    item = make_canonical(
        make_item("ardb", "Battery", inputs=(WIRES, METAL)),
        make_item(
            "metaforge",
            "Battery",
            inputs=(RecipePart(amount=1, item_id="metal-parts"), RecipePart(2, "WIRES")),
        ),
    )

    assert build_diff_report(item, ["ardb", "metaforge"]).recipe_differs is False


def test_recipe_present_in_one_provider_only_differs() -> None:
    item = make_canonical(
        make_item("ardb", "Battery", inputs=(WIRES,)),
        make_item("metaforge", "Battery"),
    )

    report = build_diff_report(item, ["ardb", "metaforge"])

    assert report.recipe_differs is True
    assert report.severity == 20
    assert report.explanation == ("Recipe differs (inputs/outputs are not equivalent).",)


def test_recipe_signature() -> None:
    item = make_item("ardb", "Battery", inputs=(WIRES, METAL))

    assert recipe_signature(item) == "in[metal-parts:1|wires:2]out[]"
    assert recipe_signature(make_item("ardb", "Battery")) == ""
    assert recipe_signature(None) == MISSING_SIGNATURE


def test_severity_is_clamped() -> None:
    item = make_canonical(
        make_item(
            "a", "Battery", type="Material", rarity="Common", value=1, weight=1, inputs=(WIRES,)
        ),
        make_item("b", "Batteries", type="Tool", rarity="Rare", value=2, weight=2),
    )
    active = ["a", "b", "c", "d", "e", "f", "g", "h"]

    report = build_diff_report(item, active)

    assert report.field_differs == FieldDiffers(
        name=True, type=True, rarity=True, value=True, weight=True
    )
    assert report.recipe_differs is True
    assert report.severity == 100


def test_report_is_deterministic() -> None:
    item = make_canonical(
        make_item("ardb", "Battery", value=1, inputs=(WIRES,)),
        make_item("metaforge", "Batteries", value=2),
    )

    first = build_diff_report(item, ["ardb", "metaforge", "raidtheory"])
    second = build_diff_report(item, ["ardb", "metaforge", "raidtheory"])

    assert first == second
