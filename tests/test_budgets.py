"""
Tests for monthly budget replay and the carryover state machine.
"""

from decimal import Decimal

from ynab4_actual.importer.budgets import fill_in_budgets, replay_budgets
from ynab4_actual.importer.categories import import_categories
from ynab4_actual.importer.registry import IdentifierRegistry
from ynab4_actual.schemas import LegacyDocument, MonthlyBudget, MonthlyCategoryBudget


def one_category_document(months: list[tuple[str, str | None]]) -> LegacyDocument:
    """A single category budgeted 10.00 every month with the given markers."""
    monthly = []
    for month, handling in months:
        entry = {"categoryId": "C", "budgeted": 10.0}
        if handling:
            entry["overspendingHandling"] = handling
        monthly.append({"month": month, "monthlySubCategoryBudgets": [entry]})

    return LegacyDocument.from_dict(
        {
            "masterCategories": [
                {
                    "entityId": "M",
                    "name": "M",
                    "type": "OUTFLOW",
                    "subCategories": [{"entityId": "C", "name": "C", "masterCategoryId": "M"}],
                }
            ],
            "monthlyBudgets": monthly,
        }
    )


def replay(document, ledger) -> IdentifierRegistry:
    registry = IdentifierRegistry()
    import_categories(document, ledger, registry)
    replay_budgets(document, ledger, registry)
    return registry


class TestCarryover:
    """Carryover flag propagation across months."""

    def test_confined_then_none_then_affects_buffer(self, ledger) -> None:
        document = one_category_document(
            [
                ("2015-01-01", "Confined"),
                ("2015-02-01", None),
                ("2015-03-01", "AffectsBuffer"),
            ]
        )
        registry = replay(document, ledger)
        category = registry.get("C")

        assert ledger.carryover_calls == [
            ("2015-01", category, True),
            ("2015-02", category, True),
        ]

    def test_flag_stays_off_after_affects_buffer(self, ledger) -> None:
        document = one_category_document(
            [
                ("2015-01-01", "Confined"),
                ("2015-02-01", "AffectsBuffer"),
                ("2015-03-01", None),
                ("2015-04-01", None),
            ]
        )
        registry = replay(document, ledger)

        assert [c[0] for c in ledger.carryover_calls] == ["2015-01"]
        assert registry.get("C")

    def test_never_confined_never_pushed(self, ledger) -> None:
        document = one_category_document([("2015-01-01", None), ("2015-02-01", "AffectsBuffer")])
        replay(document, ledger)
        assert ledger.carryover_calls == []

    def test_months_replayed_in_calendar_order(self, ledger) -> None:
        # Source order is scrambled; the flag must still propagate forward
        document = one_category_document(
            [
                ("2015-03-01", None),
                ("2015-01-01", "Confined"),
                ("2015-02-01", None),
            ]
        )
        replay(document, ledger)

        assert [c[0] for c in ledger.carryover_calls] == ["2015-01", "2015-02", "2015-03"]

    def test_backfilled_month_keeps_carrying(self, ledger) -> None:
        document = one_category_document([("2015-01-01", "Confined")])
        document.monthly_budgets.append(MonthlyBudget(month="2015-02-01"))

        registry = replay(document, ledger)
        category = registry.get("C")

        assert ledger.budget_amounts[("2015-02", category)] == 0
        assert ("2015-02", category, True) in ledger.carryover_calls

    def test_deleted_entry_is_replaced_by_zero_budget(self, ledger) -> None:
        document = one_category_document([("2015-01-01", "Confined"), ("2015-03-01", None)])
        document.monthly_budgets.append(
            MonthlyBudget(
                month="2015-02-01",
                category_budgets=[
                    MonthlyCategoryBudget(category_id="C", budgeted=Decimal("5"), is_tombstone=True)
                ],
            )
        )

        registry = replay(document, ledger)
        category = registry.get("C")

        assert ledger.budget_amounts[("2015-02", category)] == 0
        assert [c[0] for c in ledger.carryover_calls] == ["2015-01", "2015-02", "2015-03"]


class TestReplayBudgets:
    """Tests for replay_budgets against the sample snapshot."""

    def test_amounts_set_for_every_active_category(self, document, ledger) -> None:
        registry = replay(document, ledger)

        rent = registry.get("C-rent")
        phone = registry.get("C-phone")
        groceries = registry.get("C-groceries")

        assert ledger.budget_amounts == {
            ("2015-01", rent): 95000,
            ("2015-01", phone): 0,
            ("2015-01", groceries): 0,
            ("2015-02", rent): 95000,
            ("2015-02", groceries): 30000,
            ("2015-02", phone): 0,
        }

    def test_sample_carryover(self, document, ledger) -> None:
        registry = replay(document, ledger)
        rent = registry.get("C-rent")

        assert sorted(ledger.carryover_calls) == [
            ("2015-01", rent, True),
            ("2015-02", rent, True),
        ]

    def test_runs_inside_one_batch(self, document, ledger) -> None:
        replay(document, ledger)
        assert ledger.batches_opened == 1

    def test_returns_month_count(self, document, ledger) -> None:
        registry = IdentifierRegistry()
        import_categories(document, ledger, registry)
        assert replay_budgets(document, ledger, registry) == 2

    def test_no_months_is_noop(self, ledger) -> None:
        document = LegacyDocument()
        assert replay_budgets(document, ledger, IdentifierRegistry()) == 0
        assert ledger.batches_opened == 0

    def test_deleted_entries_skipped(self, ledger) -> None:
        document = one_category_document([("2015-01-01", "Confined")])
        document.monthly_budgets[0].category_budgets[0].is_tombstone = True

        registry = replay(document, ledger)

        assert ledger.budget_amounts == {("2015-01", registry.get("C")): 0}
        assert ledger.carryover_calls == []


class TestFillInBudgets:
    """Tests for fill_in_budgets."""

    def test_adds_zero_entries_for_missing_live_categories(self, document) -> None:
        existing = [MonthlyCategoryBudget(category_id="C-rent", budgeted=5)]

        filled = fill_in_budgets(document, existing)

        ids = [b.category_id for b in filled]
        assert ids[0] == "C-rent"
        assert set(ids) == {"C-rent", "C-phone", "C-groceries", "C-hidden"}
        assert all(b.budgeted == 0 for b in filled[1:])

    def test_does_not_modify_input(self, document) -> None:
        existing = [MonthlyCategoryBudget(category_id="C-rent")]
        fill_in_budgets(document, existing)
        assert len(existing) == 1
