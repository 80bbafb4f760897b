import os, csv, io
from datetime import date
from typing import List, Optional, Sequence

from .models import ApplicationRecord
from .store import dump_records, parse_records

CSV_HEADERS = [
    "Company", "Position", "Status", "Location", "Salary", "Job Type",
    "Application Date", "Interview Date", "Priority", "Contact Person", "Contact Email", "Job URL",
]

FORMATS = ("json", "csv")

def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)

def csv_row(record: ApplicationRecord) -> List[str]:
    return [_text(v) for v in (
        record.company,
        record.position,
        record.status,
        record.location,
        record.salary,
        record.job_type,
        record.application_date,
        record.interview_date,
        record.priority,
        record.contact_person,
        record.contact_email,
        record.job_url,
    )]

def to_json(records: Sequence[ApplicationRecord]) -> str:
    return dump_records(records)

def load_json(text: str) -> List[ApplicationRecord]:
    return parse_records(text)

def to_csv(records: Sequence[ApplicationRecord]) -> str:
    buf = io.StringIO()
    # header stays bare; every data cell is quoted
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for record in records:
        writer.writerow(csv_row(record))
    lines = [",".join(CSV_HEADERS)]
    if records:
        lines.append(buf.getvalue()[:-1])
    return "\n".join(lines)

def export_filename(ext: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"job-applications-{today.isoformat()}.{ext}"

def write_export(records: Sequence[ApplicationRecord], fmt: str, directory: str,
                 today: Optional[date] = None) -> str:
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")
    content = to_json(records) if fmt == "json" else to_csv(records)
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, export_filename(fmt, today))
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    return path
