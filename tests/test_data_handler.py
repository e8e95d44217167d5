import io
import json
from datetime import date
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest
import requests
from pydantic import ValidationError

from supply_tracker import data_handler, settings, utils
from supply_tracker.schemas import ItemUpdate

ITEMS_CSV = """$id,item_name,category,unit,current_quantity,reorder_point,reorder_quantity,unit_cost,charge_price,supplier,supplier_sku,is_for_sale
001,Pens,Writing,box,3,10,5,2.5,,Acme,00042,false
002,Gum,Snacks,pack,0,4,12,,0.5,,,true
"""


def test_find_latest_report_picks_newest_date(tmp_path):
    for name in [
        "supply_items_2024-01-05.csv",
        "supply_items_2024-02-01.csv",
        "supply_items_latest.csv",
        "count_sheet_2024-03-01.csv",
    ]:
        (tmp_path / name).write_text("x\n")

    path, found_date = utils.find_latest_report(tmp_path, "supply_items_")

    assert path.name == "supply_items_2024-02-01.csv"
    assert found_date == date(2024, 2, 1)
    assert utils.find_latest_report(tmp_path, "supply_transactions_") is None


def test_load_csv_falls_back_to_latin1(tmp_path):
    path = tmp_path / "latin.csv"
    path.write_bytes("item_name\nCaf\xe9 filters\n".encode("latin-1"))
    df = utils.load_csv(path)
    assert df["item_name"].tolist() == ["Café filters"]


def test_load_csv_missing_file(tmp_path):
    assert utils.load_csv(tmp_path / "nope.csv") is None


def test_load_snapshot_and_validate_items(workspace):
    (settings.INPUT_DIR / "supply_items_2024-06-01.csv").write_text(ITEMS_CSV)

    df, snapshot_date = data_handler.load_snapshot(settings.ITEMS_FILENAME_PREFIX)
    items = data_handler.validate_items(df)

    assert snapshot_date == date(2024, 6, 1)
    pens, gum = items
    assert (pens.id, pens.supplier_sku, pens.unit_cost, pens.charge_price) == ("001", "00042", 2.5, None)
    assert pens.is_for_sale is False
    assert (gum.supplier, gum.unit_cost, gum.charge_price, gum.is_for_sale) == (None, None, 0.5, True)


def test_load_snapshot_missing(workspace):
    assert data_handler.load_snapshot(settings.ITEMS_FILENAME_PREFIX) is None


def test_validate_items_rejects_negative_quantity():
    df = pd.DataFrame([{"$id": "x", "item_name": "Bad", "current_quantity": -1}])
    with pytest.raises(ValidationError):
        data_handler.validate_items(df)


@pytest.mark.parametrize("column", ["current_quantity", "reorder_point", "reorder_quantity"])
def test_validate_items_rejects_blank_stock_levels(column):
    df = pd.read_csv(io.StringIO(ITEMS_CSV), dtype=data_handler.TEXT_COLUMNS)
    df[column] = df[column].astype(object)
    df.loc[0, column] = None
    with pytest.raises(ValidationError):
        data_handler.validate_items(df)


def test_save_outputs_writes_csv_and_json(workspace):
    updates = [ItemUpdate(item_id="a", current_quantity=3)]
    data_handler.save_outputs(updates, "updates")

    suffix = utils.get_date_suffix_for_filename()
    csv_df = pd.read_csv(settings.OUTPUT_DIR / f"updates_{suffix}.csv")
    assert csv_df.loc[0, "item_id"] == "a"
    assert csv_df.loc[0, "current_quantity"] == 3
    saved = json.loads((settings.OUTPUT_DIR / f"updates_{suffix}.json").read_text())
    assert saved[0]["item_id"] == "a"


def test_save_outputs_skips_json_when_disabled(workspace, monkeypatch):
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", False)
    data_handler.save_outputs([ItemUpdate(item_id="a")], "updates")
    assert not list(settings.OUTPUT_DIR.glob("*.json"))


def test_post_to_webhook_skipped_without_url(workspace):
    with patch("supply_tracker.data_handler.requests.post") as post:
        data_handler.post_to_webhook([ItemUpdate(item_id="a")], {"run": date(2024, 1, 1)}, "test")
    post.assert_not_called()


def test_post_to_webhook_sends_payload(workspace, monkeypatch):
    monkeypatch.setattr(settings, "WEBHOOK_URL", "https://hooks.example.test/supplies")
    with patch("supply_tracker.data_handler.requests.post") as post:
        post.return_value = MagicMock(status_code=200)
        data_handler.post_to_webhook(
            [ItemUpdate(item_id="a", current_quantity=1)], {"run": date(2024, 1, 1)}, "test"
        )

    args, kwargs = post.call_args
    assert args == ("https://hooks.example.test/supplies",)
    assert kwargs["timeout"] == settings.WEBHOOK_TIMEOUT
    assert kwargs["json"]["reportType"] == "test"
    assert kwargs["json"]["reportData"][0]["current_quantity"] == 1
    assert kwargs["json"]["metadata"] == {"run": "2024-01-01"}


def test_post_to_webhook_logs_request_errors(workspace, monkeypatch, caplog):
    monkeypatch.setattr(settings, "WEBHOOK_URL", "https://hooks.example.test/supplies")
    with patch(
        "supply_tracker.data_handler.requests.post",
        side_effect=requests.exceptions.ConnectionError("down"),
    ):
        data_handler.post_to_webhook([], None, "test")
    assert "Error posting to webhook" in caplog.text
