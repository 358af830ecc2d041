import copy
from decimal import Decimal

from ecologic.models.selection import SelectedProduct
from ecologic.services.consolidation import (
    apply_tier_edit,
    consolidate_products,
    quote_total,
    remove_consolidated,
)


def item(id, quantity, price, **extra):
    return {"id": id, "quantity": quantity, "price": price, **extra}


class TestConsolidateProducts:
    def test_single_entry_fills_tier_one(self):
        rows = consolidate_products([item("A", 100, "2.50")])

        assert len(rows) == 1
        assert rows[0].tier(1) == (100, Decimal("2.50"))
        assert rows[0].tier(2) == (0, Decimal("0"))
        assert rows[0].original_indexes == [0]

    def test_repeated_ids_fill_empty_tiers_in_order(self):
        rows = consolidate_products([
            item("A", 100, "2.50"),
            item("A", 250, "2.20"),
            item("A", 500, "1.90"),
        ])

        assert len(rows) == 1
        row = rows[0]
        assert row.tier(1) == (100, Decimal("2.50"))
        assert row.tier(2) == (250, Decimal("2.20"))
        assert row.tier(3) == (500, Decimal("1.90"))
        assert row.original_indexes == [0, 1, 2]

    def test_fourth_entry_is_dropped_but_index_recorded(self, caplog):
        selections = [item("A", q, "1.00") for q in (10, 20, 30, 40)]

        with caplog.at_level("WARNING"):
            rows = consolidate_products(selections)

        row = rows[0]
        assert (row.quantity1, row.quantity2, row.quantity3) == (10, 20, 30)
        assert row.original_indexes == [0, 1, 2, 3]
        assert "descartado" in caplog.text

    def test_one_row_per_id_in_first_seen_order(self):
        rows = consolidate_products([
            item("B", 1, 1),
            item("A", 1, 1),
            item("B", 2, 1),
            item("C", 1, 1),
        ])

        assert [row.id for row in rows] == ["B", "A", "C"]
        assert rows[0].original_indexes == [0, 2]

    def test_filled_tier_is_never_overwritten(self):
        rows = consolidate_products([
            item("A", 100, 3, quantity2=200, price2=2),
            item("A", 300, 1),
        ])

        row = rows[0]
        assert row.tier(2) == (200, Decimal("2"))
        assert row.tier(3) == (300, Decimal("1"))

    def test_incoming_explicit_tier_values_are_used(self):
        rows = consolidate_products([
            item("A", 100, 3),
            item("A", 50, 9, quantity2=200, price2="2.75"),
        ])

        assert rows[0].tier(2) == (200, Decimal("2.75"))

    def test_incoming_portuguese_price_keys(self):
        rows = consolidate_products([
            item("A", 100, 3),
            item("A", 0, 0, quantity2=200, preco2="2.40"),
        ])

        assert rows[0].tier(2) == (200, Decimal("2.40"))

    def test_zero_quantity_entry_does_not_fill_a_tier(self):
        rows = consolidate_products([item("A", 100, 3), item("A", 0, 5)])

        assert rows[0].quantity2 == 0
        assert rows[0].quantity3 == 0
        assert rows[0].original_indexes == [0, 1]

    def test_invalid_numbers_become_zero(self):
        rows = consolidate_products([item("A", "abc", None), item("B", "nan", "inf")])

        assert rows[0].tier(1) == (0, Decimal("0"))
        assert rows[1].tier(1) == (0, Decimal("0"))

    def test_input_is_not_mutated(self):
        selections = [item("A", 100, "2.50"), item("A", 200, "2.00")]
        snapshot = copy.deepcopy(selections)

        consolidate_products(selections)

        assert selections == snapshot

    def test_selected_product_instances_are_not_mutated(self):
        first = SelectedProduct(id="A", quantity1=10, price1=Decimal("1"))
        second = SelectedProduct(id="A", quantity1=20, price1=Decimal("2"))

        rows = consolidate_products([first, second])

        assert rows[0].quantity2 == 20
        assert first.quantity2 == 0
        assert first.original_indexes == []

    def test_empty_selection(self):
        assert consolidate_products([]) == []


class TestEditsAndTotals:
    def test_tier_one_edit_goes_to_first_entry_only(self):
        selections = [item("A", 100, 2), item("B", 5, 1), item("A", 200, 1)]
        row = consolidate_products(selections)[0]

        updated = apply_tier_edit(selections, row, "price1", "3.10")

        assert updated[0].price1 == Decimal("3.10")
        assert updated[2].price1 == Decimal("1")
        assert updated[1].price1 == Decimal("1")
        assert selections[0]["price"] == 2

    def test_tier_one_edit_survives_reconsolidation(self):
        selections = [item("A", 5, 2), item("A", 7, 1)]
        row = consolidate_products(selections)[0]

        updated = apply_tier_edit(selections, row, "quantity1", 10)
        again = consolidate_products(updated)[0]

        assert (again.quantity1, again.quantity2) == (10, 7)
        assert (again.price1, again.price2) == (Decimal("2"), Decimal("1"))

    def test_later_tier_edit_goes_to_the_entry_that_filled_it(self):
        selections = [item("A", 100, 2), item("B", 5, 1), item("A", 200, "1.50"), item("A", 300, 1)]
        row = consolidate_products(selections)[0]
        assert row.tier_sources == {1: 0, 2: 2, 3: 3}

        updated = apply_tier_edit(selections, row, "price2", "1.40")
        updated = apply_tier_edit(updated, row, "quantity3", 350)
        again = consolidate_products(updated)[0]

        assert again.tier(1) == (100, Decimal("2"))
        assert again.tier(2) == (200, Decimal("1.40"))
        assert again.tier(3) == (350, Decimal("1"))

    def test_explicit_tiers_of_the_first_entry_are_edited_in_place(self):
        selections = [item("A", 100, 2, quantity2=200, price2="1.80")]
        row = consolidate_products(selections)[0]

        updated = apply_tier_edit(selections, row, "quantity2", 250)

        assert updated[0].tier(2) == (250, Decimal("1.80"))
        assert updated[0].quantity1 == 100

    def test_edit_of_empty_tier_goes_to_first_entry(self):
        selections = [item("A", 100, 2), item("A", 200, 1)]
        row = consolidate_products(selections)[0]

        updated = apply_tier_edit(selections, row, "quantity3", 400)
        again = consolidate_products(updated)[0]

        assert updated[0].quantity3 == 400
        assert [again.quantity1, again.quantity2, again.quantity3] == [100, 200, 400]

    def test_non_tier_field_goes_to_every_entry(self):
        selections = [item("A", 100, 2), item("A", 200, 1)]
        row = consolidate_products(selections)[0]

        updated = apply_tier_edit(selections, row, "observacoes", "Embalar separado")

        assert [product.observacoes for product in updated] == ["Embalar separado"] * 2

    def test_edit_normalizes_quantity(self):
        selections = [item("A", 100, 2)]
        row = consolidate_products(selections)[0]

        updated = apply_tier_edit(selections, row, "quantity2", "-5")

        assert updated[0].quantity2 == 0

    def test_remove_drops_all_sources_of_the_row(self):
        selections = [item("A", 100, 2), item("B", 5, 1), item("A", 200, 1)]
        row = consolidate_products(selections)[0]

        remaining = remove_consolidated(selections, row)

        assert [product.id for product in remaining] == ["B"]

    def test_total_sums_all_tiers(self):
        rows = consolidate_products([
            item("A", 100, "2.50"),
            item("A", 200, "2.00"),
            item("B", 10, "10.00"),
        ])

        assert rows[0].total_value == Decimal("650.00")
        assert quote_total(rows) == Decimal("750.00")
