import pytest

from supply_tracker import settings
from supply_tracker.schemas import InventoryItem


@pytest.fixture
def make_item():
    """Factory for supply items with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides) -> InventoryItem:
        counter["n"] += 1
        fields = {
            "id": f"item{counter['n']}",
            "item_name": f"Item {counter['n']}",
            "category": "Paper",
            "unit": "box",
            "current_quantity": 10,
            "reorder_point": 10,
            "reorder_quantity": 20,
        }
        fields.update(overrides)
        return InventoryItem(**fields)

    return _make


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Points the input/output directories at a temp dir and disables the webhook."""
    input_dir = tmp_path / "input"
    output_dir = tmp_path / "output"
    input_dir.mkdir()
    monkeypatch.setattr(settings, "INPUT_DIR", input_dir)
    monkeypatch.setattr(settings, "OUTPUT_DIR", output_dir)
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", True)
    return tmp_path
