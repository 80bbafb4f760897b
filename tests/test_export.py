from datetime import date, datetime, timezone

from job_tracker import export
from job_tracker.models import ActivityEntry, ApplicationRecord
from job_tracker.store import RecordStore

def _rec(**kw):
    base = dict(id="1", company="Acme", position="Engineer", location="Berlin",
                application_date=date(2024, 3, 5))
    base.update(kw)
    return ApplicationRecord(**base)

def test_json_round_trip():
    records = [
        _rec(notes="Referral", interview_questions=["Why Acme?"],
             activities=[ActivityEntry("9", "note", "hi", datetime(2024, 3, 6, 9, 30, tzinfo=timezone.utc))]),
        _rec(id="2", company="Globex", salary="", follow_up_date=date(2024, 4, 1)),
    ]
    assert export.load_json(export.to_json(records)) == records

def test_json_matches_persisted_bytes(tmp_path):
    records = [_rec()]
    path = tmp_path / "apps.json"
    RecordStore(str(path)).save(records)
    assert path.read_text(encoding="utf-8") == export.to_json(records)

def test_csv_header_and_rows():
    text = export.to_csv([_rec(salary=None, interview_date=date(2024, 3, 20))])
    header, row = text.split("\n")
    assert header == ("Company,Position,Status,Location,Salary,Job Type,Application Date,"
                      "Interview Date,Priority,Contact Person,Contact Email,Job URL")
    cells = row.split(",")
    assert len(cells) == 12
    assert cells[4] == '""'
    assert cells[7] == '"2024-03-20"'
    assert "None" not in row

def test_csv_escapes_embedded_quotes():
    text = export.to_csv([_rec(company='Acme "Labs"')])
    assert text.split("\n")[1].startswith('"Acme ""Labs"""')

def test_csv_empty_collection_is_header_only():
    assert export.to_csv([]) == ",".join(export.CSV_HEADERS)

def test_write_export_names_file_by_date(tmp_path):
    path = export.write_export([_rec()], "csv", str(tmp_path), today=date(2024, 3, 5))
    assert path.endswith("job-applications-2024-03-05.csv")
    assert "Acme" in open(path, encoding="utf-8").read()
