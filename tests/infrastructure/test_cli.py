"""End-to-end tests for the click CLI against a temporary data directory."""

import pytest
from click.testing import CliRunner

from orderdesk.infrastructure.cli.main import cli


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()

    def invoke(*args: str):
        return runner.invoke(cli, ["--data-dir", str(tmp_path), *args])

    return invoke


@pytest.fixture
def seeded(run):
    """One user, two products (Widget x10 at $50, Gadget x2 at $30)."""
    assert run("user", "add", "--name", "Ada").exit_code == 0
    assert run("product", "add", "--name", "Widget", "--price", "50.00", "--stock", "10").exit_code == 0
    assert run("product", "add", "--name", "Gadget", "--price", "30.00", "--stock", "2").exit_code == 0
    return run


def _create(run, items: str = "1:2:50.00"):
    return run("order", "create", "--user", "1", "--items", items, "--address", "1 Main St")


class TestCatalogCommands:

    def test_user_add(self, run):
        result = run("user", "add", "--name", "Ada")
        assert result.exit_code == 0
        assert "User #1 'Ada' registered" in result.output

    def test_product_list_shows_stock(self, seeded):
        result = seeded("product", "list")
        assert "Widget" in result.output
        assert "Gadget" in result.output

    def test_duplicate_product_rejected(self, seeded):
        result = seeded("product", "add", "--name", "Widget", "--price", "1.00")
        assert result.exit_code != 0
        assert "already exists" in result.output


class TestOrderCommands:

    def test_create_and_show(self, seeded):
        result = _create(seeded)
        assert result.exit_code == 0, result.output
        assert "Order #1 created" in result.output
        assert "status=PENDING" in result.output
        assert "$110.00" in result.output

        shown = seeded("order", "show", "--id", "1")
        assert shown.exit_code == 0
        assert "Widget" in shown.output

    def test_show_prints_shipping_line(self, seeded):
        _create(seeded, "2:1:30.00")
        shown = seeded("order", "show", "--id", "1")
        assert "Shipping" in shown.output
        assert "$15.00" in shown.output

    def test_show_by_number(self, seeded):
        _create(seeded)
        listed = seeded("order", "list")
        number = listed.output.splitlines()[2].split()[1]

        shown = seeded("order", "show", "--number", number)
        assert shown.exit_code == 0
        assert number in shown.output

    def test_create_reserves_stock(self, seeded):
        _create(seeded, "1:3:50.00")
        assert " 7" in seeded("product", "list").output

    def test_insufficient_stock_is_reported(self, seeded):
        result = _create(seeded, "2:3:30.00")
        assert result.exit_code != 0
        assert "Insufficient stock for product #2" in result.output
        assert "No orders found." in seeded("order", "list").output

    def test_bad_item_format_rejected(self, seeded):
        result = _create(seeded, "1-2-50")
        assert result.exit_code != 0
        assert "Invalid item format" in result.output

    def test_lifecycle(self, seeded):
        _create(seeded)
        assert seeded("order", "process", "--id", "1").exit_code == 0
        assert seeded("order", "ship", "--id", "1").exit_code == 0
        assert seeded("order", "deliver", "--id", "1").exit_code == 0

        shown = seeded("order", "show", "--id", "1")
        assert "status=DELIVERED" in shown.output
        assert "Order delivered" in shown.output

    def test_invalid_transition_is_reported(self, seeded):
        _create(seeded)
        seeded("order", "ship", "--id", "1")
        result = seeded("order", "cancel", "--id", "1")
        assert result.exit_code != 0
        assert "cannot be cancelled" in result.output

    def test_status_command(self, seeded):
        _create(seeded)
        result = seeded("order", "status", "--id", "1", "--to", "processing")
        assert result.exit_code == 0
        assert "is now PROCESSING" in result.output

    def test_missing_order_is_reported(self, seeded):
        result = seeded("order", "cancel", "--id", "42")
        assert result.exit_code != 0
        assert "Order #42 not found" in result.output

    def test_item_editing_and_delete(self, seeded):
        _create(seeded)
        assert seeded("order", "add-item", "--id", "1", "--item", "2:1:30.00").exit_code == 0
        assert seeded("order", "update-item", "--id", "1", "--item-id", "1", "--item", "1:1:50.00").exit_code == 0
        assert seeded("order", "remove-item", "--id", "1", "--item-id", "2").exit_code == 0
        assert seeded("order", "recalculate", "--id", "1").exit_code == 0

        result = seeded("order", "delete", "--id", "1")
        assert result.exit_code == 0
        assert "No orders found." in seeded("order", "list").output

    def test_update_command(self, seeded):
        _create(seeded)
        assert seeded("order", "update", "--id", "1", "--notes", "Ring twice").exit_code == 0
        assert "Ring twice" in seeded("order", "show", "--id", "1").output

    def test_bulk_cancel(self, seeded):
        _create(seeded)
        _create(seeded, "1:1:50.00")
        seeded("order", "ship", "--id", "2")

        result = seeded("order", "bulk-cancel", "--ids", "1,2,9")
        assert result.exit_code == 0
        assert "SUCCEEDED" in result.output
        assert "REJECTED" in result.output
        assert "NOT_FOUND" in result.output
        assert "1 of 3 orders updated." in result.output

    def test_bulk_status(self, seeded):
        _create(seeded)
        _create(seeded, "1:1:50.00")
        result = seeded("order", "bulk-status", "--ids", "1,2", "--to", "PROCESSING")
        assert "2 of 2 orders updated." in result.output
        assert "status=PROCESSING" in seeded("order", "show", "--id", "2").output
