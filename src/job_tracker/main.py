import argparse
import sys
from datetime import date
from typing import Any, Dict, List, Optional

import dateparser

from .settings import load_settings
from .store import RecordStore
from .tracker import Tracker, COMMON_INTERVIEW_QUESTIONS
from .models import STATUSES, JOB_TYPES, PRIORITIES, ACTIVITY_TYPES, ApplicationRecord
from .views import SORT_KEYS, analytics, current_date, dashboard, filter_records, reminders, timeline
from .export import FORMATS, write_export
from .attachments import SLOTS, save_attachment
from .email_templates import TEMPLATE_NAMES, get_template, mailto_uri, template_text

# --option name -> record attribute
TEXT_OPTIONS = ("company", "position", "location", "salary", "notes",
                "contact_person", "contact_email", "job_url")
DATE_OPTIONS = ("application_date", "interview_date", "follow_up_date", "offer_deadline")
CHOICE_OPTIONS = {"status": STATUSES, "job_type": JOB_TYPES, "priority": PRIORITIES}

def parse_date_arg(value: str) -> date:
    parsed = dateparser.parse(value, settings={"DATE_ORDER": "YMD"})
    if parsed is None:
        raise argparse.ArgumentTypeError(f"could not understand date {value!r}")
    return parsed.date()

def _add_record_options(p: argparse.ArgumentParser, required: bool) -> None:
    for name in TEXT_OPTIONS:
        flag = "--" + name.replace("_", "-")
        p.add_argument(flag, dest=name, required=required and name in ("company", "position"))
    for name in DATE_OPTIONS:
        p.add_argument("--" + name.replace("_", "-"), dest=name, type=parse_date_arg)
    for name, choices in CHOICE_OPTIONS.items():
        p.add_argument("--" + name.replace("_", "-"), dest=name, choices=choices)

def _record_fields(args: argparse.Namespace) -> Dict[str, Any]:
    names = TEXT_OPTIONS + DATE_OPTIONS + tuple(CHOICE_OPTIONS)
    return {n: getattr(args, n) for n in names if getattr(args, n, None) is not None}

def _summary(r: ApplicationRecord) -> str:
    return f"{r.id} | {r.company} | {r.position} | {r.status} | {r.priority} | applied {r.application_date}"

def _require(tracker: Tracker, record_id: str) -> Optional[ApplicationRecord]:
    record = tracker.select(record_id)
    if record is None:
        print(f"[WARN] No application with id {record_id}")
    return record

def cmd_add(tracker: Tracker, args, settings) -> int:
    record = tracker.create(_record_fields(args))
    print(f"[ADDED] {_summary(record)}")
    return 0

def cmd_list(tracker: Tracker, args, settings) -> int:
    shown = filter_records(tracker.records, search=args.search, status=args.status, sort=args.sort)
    for r in shown:
        print(_summary(r))
    print(f"Showing {len(shown)} of {len(tracker.records)} applications")
    return 0

def cmd_show(tracker: Tracker, args, settings) -> int:
    r = _require(tracker, args.id)
    if r is None:
        return 1
    print(_summary(r))
    for label, value in (
        ("Location", r.location), ("Job type", r.job_type), ("Salary", r.salary),
        ("Interview", r.interview_date), ("Follow up", r.follow_up_date),
        ("Offer deadline", r.offer_deadline), ("Contact", r.contact_person),
        ("Email", r.contact_email), ("URL", r.job_url), ("Notes", r.notes),
        ("CV", r.cv.name if r.cv else None),
        ("Cover letter", r.cover_letter.name if r.cover_letter else None),
    ):
        if value not in (None, ""):
            print(f"  {label}: {value}")
    for i, q in enumerate(r.interview_questions):
        print(f"  Q{i}: {q}")
    for a in reversed(r.activities):
        print(f"  [{a.type}] {a.date.isoformat()} {a.description}")
    return 0

def cmd_update(tracker: Tracker, args, settings) -> int:
    if _require(tracker, args.id) is None:
        return 1
    tracker.patch(args.id, _record_fields(args))
    print(f"[UPDATED] {_summary(tracker.get(args.id))}")
    return 0

def cmd_status(tracker: Tracker, args, settings) -> int:
    if _require(tracker, args.id) is None:
        return 1
    tracker.patch(args.id, {"status": args.status})
    print(f"[UPDATED] {_summary(tracker.get(args.id))}")
    return 0

def cmd_delete(tracker: Tracker, args, settings) -> int:
    if tracker.get(args.id) is None:
        print(f"[WARN] No application with id {args.id}")
        return 0
    tracker.delete(args.id)
    print(f"[DELETED] {args.id}")
    return 0

def cmd_note(tracker: Tracker, args, settings) -> int:
    if _require(tracker, args.id) is None:
        return 1
    entry = tracker.add_note(args.id, args.text, kind=args.type)
    print(f"[NOTE] {entry.type}: {entry.description}")
    return 0

def cmd_question(tracker: Tracker, args, settings) -> int:
    if args.action == "suggest":
        for q in COMMON_INTERVIEW_QUESTIONS:
            print(f"+ {q}")
        return 0
    record = _require(tracker, args.id)
    if record is None:
        return 1
    if args.action == "add":
        tracker.add_interview_question(args.id, args.text)
        print("[QUESTION] Question added")
    else:
        if args.index is None or not 0 <= args.index < len(record.interview_questions):
            print(f"[WARN] No question at index {args.index} for {args.id}")
            return 1
        tracker.remove_interview_question(args.id, args.index)
        print("[QUESTION] Question removed")
    return 0

def cmd_attach(tracker: Tracker, args, settings) -> int:
    if _require(tracker, args.id) is None:
        return 1
    tracker.attach(args.id, args.slot, args.path)
    print(f"[ATTACHED] {args.slot}: {args.path}")
    return 0

def cmd_detach(tracker: Tracker, args, settings) -> int:
    if _require(tracker, args.id) is None:
        return 1
    tracker.detach(args.id, args.slot)
    print(f"[DETACHED] {args.slot}")
    return 0

def cmd_download(tracker: Tracker, args, settings) -> int:
    r = _require(tracker, args.id)
    if r is None:
        return 1
    attachment = getattr(r, args.slot)
    if attachment is None:
        print(f"[WARN] No {args.slot} attached to {args.id}")
        return 1
    print(f"[DOWNLOAD] {save_attachment(attachment, args.dest)}")
    return 0

def cmd_dashboard(tracker: Tracker, args, settings) -> int:
    stats = dashboard(tracker.records, today=current_date(settings.timezone))
    print(f"Total Applications: {stats.total}")
    print(f"Active Applications: {stats.active}")
    print(f"Interviews: {stats.interviews} ({stats.upcoming_interviews} upcoming)")
    print(f"Offers Received: {stats.offers}")
    print(f"Rejected: {stats.rejected}")
    print(f"Response Rate: {stats.response_rate_label}%")
    print(f"Success Rate: {stats.success_rate_label}%")
    return 0

def cmd_analytics(tracker: Tracker, args, settings) -> int:
    report = analytics(tracker.records, today=current_date(settings.timezone))
    if report.total == 0:
        print("No data to analyze yet")
        return 0
    print(f"Interview Rate: {report.interview_rate_label}%")
    print(f"Offer Rate: {report.offer_rate_label}%")
    print(f"In Progress: {report.in_progress}")
    print(f"Avg. Days Since Applied: {report.average_days_since_applied} days")
    for title, rows in (("Status", report.status_data), ("Applications Over Time", report.monthly_data),
                        ("Job Type", report.job_type_data)):
        print(f"{title}:")
        for label, count in rows:
            print(f"  {label}: {count}")
    return 0

def cmd_timeline(tracker: Tracker, args, settings) -> int:
    for group in timeline(tracker.records):
        n = len(group.entries)
        print(f"{group.label} ({n} application{'s' if n > 1 else ''})")
        for entry in group.entries:
            print(f"  {_summary(entry.record)}")
            for a in entry.recent_activities:
                print(f"    - {a.description}")
    return 0

def cmd_reminders(tracker: Tracker, args, settings) -> int:
    window = args.days if args.days is not None else settings.reminder_window_days
    for rem in reminders(tracker.records, today=current_date(settings.timezone), window_days=window):
        flag = " (overdue)" if rem.overdue else ""
        print(f"{rem.due} {rem.kind}{flag}: {rem.record.company} | {rem.record.position}")
    return 0

def cmd_export(tracker: Tracker, args, settings) -> int:
    directory = args.dest or settings.export_dir
    path = write_export(tracker.records, args.format, directory, today=current_date(settings.timezone))
    print(f"[EXPORT] {len(tracker.records)} applications -> {path}")
    return 0

def cmd_email(tracker: Tracker, args, settings) -> int:
    r = _require(tracker, args.id)
    if r is None:
        return 1
    template = get_template(r, args.template)
    if args.mailto:
        if not r.contact_email:
            print(f"[WARN] No contact email for {args.id}")
            return 1
        print(mailto_uri(r, template))
    else:
        print(template_text(template))
    return 0

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Job Application Tracker")
    parser.add_argument("--data", help="Path to the applications JSON file")
    parser.add_argument("--config", help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add", help="Add a new application")
    _add_record_options(p, required=True)
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("list", help="List applications")
    p.add_argument("--search", default="")
    p.add_argument("--status", choices=("all",) + STATUSES, default="all")
    p.add_argument("--sort", choices=SORT_KEYS, default="date-desc")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("show", help="Show one application")
    p.add_argument("id")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("update", help="Edit fields of an application")
    p.add_argument("id")
    _add_record_options(p, required=False)
    p.set_defaults(func=cmd_update)

    p = sub.add_parser("status", help="Change the status of an application")
    p.add_argument("id")
    p.add_argument("status", choices=STATUSES)
    p.set_defaults(func=cmd_status)

    p = sub.add_parser("delete", help="Delete an application")
    p.add_argument("id")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("note", help="Log an activity")
    p.add_argument("id")
    p.add_argument("text")
    p.add_argument("--type", choices=[t for t in ACTIVITY_TYPES if t != "status_change"], default="note")
    p.set_defaults(func=cmd_note)

    p = sub.add_parser("question", help="Interview preparation questions")
    p.add_argument("action", choices=("add", "remove", "suggest"))
    p.add_argument("id", nargs="?")
    p.add_argument("--text", default="")
    p.add_argument("--index", type=int, help="Question number shown by `show` (required for remove)")
    p.set_defaults(func=cmd_question)

    for name, func, help_text in (("attach", cmd_attach, "Attach a CV or cover letter"),
                                  ("detach", cmd_detach, "Remove an attachment"),
                                  ("download", cmd_download, "Save an attachment to disk")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("id")
        p.add_argument("slot", choices=SLOTS)
        if name == "attach":
            p.add_argument("path")
        if name == "download":
            p.add_argument("--dest", default=".")
        p.set_defaults(func=func)

    sub.add_parser("dashboard", help="Summary counters").set_defaults(func=cmd_dashboard)
    sub.add_parser("analytics", help="Charts data as text").set_defaults(func=cmd_analytics)
    sub.add_parser("timeline", help="Applications grouped by month").set_defaults(func=cmd_timeline)

    p = sub.add_parser("reminders", help="Upcoming follow-ups and offer deadlines")
    p.add_argument("--days", type=int)
    p.set_defaults(func=cmd_reminders)

    p = sub.add_parser("export", help="Export applications")
    p.add_argument("format", choices=FORMATS)
    p.add_argument("--dest")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("email", help="Render an email template")
    p.add_argument("id")
    p.add_argument("template", choices=TEMPLATE_NAMES)
    p.add_argument("--mailto", action="store_true", help="Print a mailto: link instead of the text")
    p.set_defaults(func=cmd_email)
    return parser

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings(args.config)
    store = RecordStore(args.data or settings.data_file)
    tracker = Tracker(store, timezone=settings.timezone, max_attachment_bytes=settings.max_attachment_bytes)
    try:
        return args.func(tracker, args, settings)
    except ValueError as e:
        # AttachmentError is a ValueError
        print(f"[ERROR] {e}")
        return 1

if __name__ == "__main__":
    sys.exit(main())
