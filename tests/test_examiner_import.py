import asyncio
import csv
import io
from datetime import datetime

import pandas as pd
import pytest

from app.services.examiner_columns import field_for_header
from app.services.examiner_export import export_csv
from app.services.examiner_import import (
    ExaminerUploadParseError,
    ExaminerUploadValidationError,
    dataframe_rows,
    import_records,
    map_row,
    parse_upload_file,
)
from app.services.record_store.base import APPROVED, PENDING
from app.services.record_store.memory_backend import MemoryRecordStore

NOW = datetime(2025, 3, 14, 9, 30, 0)


def make_csv(rows: list[dict]) -> bytes:
    return pd.DataFrame(rows).to_csv(index=False).encode("utf-8")


def make_xlsx(rows: list[dict]) -> bytes:
    buffer = io.BytesIO()
    pd.DataFrame(rows).to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


def test_header_aliases():
    assert field_for_header("SL") == "serial"
    assert field_for_header("  rm ") == "reviewer_note"
    assert field_for_header("Last DateDate") == "last_updated"
    assert field_for_header("Docoment") == "document_link"
    assert field_for_header("In which Shift do you want to check the scripts?\n(Maximum 2)") == "check_scripts_shift"
    assert field_for_header("Unknown") is None


def test_map_row():
    row = {"SL": "12", "Nick Name": " Rafi ", "ID Checked?": "Yes", "Unknown": "x"}
    record = map_row(row, APPROVED, now=NOW)
    assert record == {
        "serial": 12,
        "nick_name": "Rafi",
        "id_checked": True,
        "review_status": "Approved",
        "mobile_number": "",
        "imported_at": "2025-03-14T09:30:00",
    }


def test_map_row_defaults_for_pending():
    record = map_row({"SL": "n/a", "ID Checked?": "no", "Status": ""}, PENDING, now=NOW)
    assert record["serial"] == 0
    assert record["id_checked"] is False
    assert record["review_status"] == "Pending"


def test_parse_csv_and_xlsx():
    rows = [{"SL": "1", "Nick Name": "A"}, {"SL": "2", "Nick Name": "B"}]
    for content, name in ((make_csv(rows), "sheet.csv"), (make_xlsx(rows), "sheet.xlsx")):
        df = parse_upload_file(content, name)
        assert dataframe_rows(df) == [{"SL": "1", "Nick Name": "A"}, {"SL": "2", "Nick Name": "B"}]


def test_parse_rejects_unsupported_type():
    with pytest.raises(ExaminerUploadParseError):
        parse_upload_file(b"hello", "sheet.txt")


def test_import_in_batches(store):
    rows = [{"SL": str(i), "Nick Name": f"N{i}"} for i in range(1, 6)]
    result = asyncio.run(import_records(store, rows, APPROVED, chunk_size=2, now=NOW))
    assert result.imported_count == 5
    assert result.errors == []
    assert store.commit_calls == 3
    assert sorted(r["serial"] for r in asyncio.run(store.query(APPROVED))) == [1, 2, 3, 4, 5]


def test_import_stops_at_failed_batch():
    store = MemoryRecordStore(fail_on_commits={2})
    rows = [{"Nick Name": f"N{i}"} for i in range(5)]
    result = asyncio.run(import_records(store, rows, PENDING, chunk_size=2))
    assert result.imported_count == 2
    assert result.errors[0].startswith("Batch 2 of 3 failed after 2 imported")
    assert len(asyncio.run(store.query(PENDING))) == 2


def test_import_rejects_unknown_target_and_columns(store):
    with pytest.raises(ExaminerUploadValidationError):
        asyncio.run(import_records(store, [{"Nick Name": "A"}], "elsewhere"))
    with pytest.raises(ExaminerUploadValidationError):
        asyncio.run(import_records(store, [{"Foo": "A"}], APPROVED))


def test_export_quotes_every_value():
    records = [{"serial": 1, "nick_name": 'Ra"fi', "id_checked": False}, {"serial": 2, "nick_name": "B, C"}]
    content = export_csv(records, ["SL", "Nick Name", "ID Checked?"])
    lines = content.splitlines()
    assert lines[0] == '"SL","Nick Name","ID Checked?"'
    assert lines[1] == '"1","Ra""fi",""'
    assert list(csv.reader(io.StringIO(content)))[2] == ["2", "B, C", ""]


def test_export_rejects_unknown_columns():
    with pytest.raises(ValueError):
        export_csv([], ["Nope"])
