from datetime import date

import pytest

from job_tracker.store import RecordStore
from job_tracker.tracker import Tracker
from job_tracker import views

def _tracker(tmp_path):
    return Tracker(RecordStore(str(tmp_path / "apps.json")))

def _acme(**extra):
    fields = {"company": "Acme", "position": "Engineer", "status": "applied",
              "location": "Berlin", "application_date": date(2024, 3, 5)}
    fields.update(extra)
    return fields

def test_create_prepends_and_persists(tmp_path):
    t = _tracker(tmp_path)
    first = t.create(_acme())
    second = t.create(_acme(company="Globex"))
    assert [r.id for r in t.records] == [second.id, first.id]
    assert first.id != second.id
    reloaded = RecordStore(str(tmp_path / "apps.json")).load()
    assert reloaded[0] == second
    assert reloaded == t.records

def test_create_fills_defaults(tmp_path):
    t = _tracker(tmp_path)
    r = t.create({"company": "Acme", "position": "Engineer"})
    assert r.status == "applied"
    assert r.job_type == "full-time"
    assert r.priority == "medium"
    assert r.location == ""
    assert isinstance(r.application_date, date)
    assert r.salary is None

def test_create_rejects_blank_required_and_bad_enum(tmp_path):
    t = _tracker(tmp_path)
    with pytest.raises(ValueError):
        t.create({"company": "  ", "position": "Engineer"})
    with pytest.raises(ValueError):
        t.create(_acme(status="ghosted"))
    with pytest.raises(ValueError):
        t.create(_acme(activities=[]))
    assert t.records == []

def test_status_change_appends_activity(tmp_path):
    t = _tracker(tmp_path)
    r = t.create(_acme())
    t.patch(r.id, {"status": "interview"})
    updated = t.get(r.id)
    assert updated.status == "interview"
    assert len(updated.activities) == 1
    entry = updated.activities[0]
    assert entry.type == "status_change"
    assert entry.description == "Status changed from applied to interview"

def test_patch_without_status_change_logs_nothing(tmp_path):
    t = _tracker(tmp_path)
    r = t.create(_acme())
    t.patch(r.id, {"status": "applied"})
    t.patch(r.id, {"notes": "Called recruiter", "salary": ""})
    updated = t.get(r.id)
    assert updated.activities == []
    assert updated.notes == "Called recruiter"
    assert updated.salary == ""

def test_patch_unknown_id_is_noop(tmp_path):
    t = _tracker(tmp_path)
    r = t.create(_acme())
    t.patch("missing", {"status": "offer"})
    assert t.records == [r]

def test_patch_rejects_protected_fields(tmp_path):
    t = _tracker(tmp_path)
    r = t.create(_acme())
    with pytest.raises(ValueError):
        t.patch(r.id, {"id": "other"})
    with pytest.raises(ValueError):
        t.patch(r.id, {"activities": []})
    with pytest.raises(ValueError):
        t.patch(r.id, {"colour": "blue"})

def test_delete_is_idempotent_and_clears_selection(tmp_path):
    t = _tracker(tmp_path)
    keep = t.create(_acme(company="Keep"))
    gone = t.create(_acme(company="Gone"))
    t.select(gone.id)
    assert t.selected == gone
    t.delete(gone.id)
    assert t.records == [keep]
    assert t.selected is None
    t.delete(gone.id)
    assert t.records == [keep]

def test_delete_other_record_keeps_selection(tmp_path):
    t = _tracker(tmp_path)
    a = t.create(_acme(company="A"))
    b = t.create(_acme(company="B"))
    t.select(a.id)
    t.delete(b.id)
    assert t.selected.id == a.id
    t.clear_selection()
    assert t.selected is None

def test_selection_follows_patches(tmp_path):
    t = _tracker(tmp_path)
    r = t.create(_acme())
    t.select(r.id)
    t.patch(r.id, {"priority": "high"})
    assert t.selected.priority == "high"

def test_acme_scenario(tmp_path):
    t = _tracker(tmp_path)
    r = t.create(_acme())
    stats = views.dashboard(t.records, today=date(2024, 3, 10))
    assert (stats.total, stats.active, stats.offers) == (1, 1, 0)
    assert stats.response_rate_label == "0.0"
    t.patch(r.id, {"status": "interview"})
    stats = views.dashboard(t.records, today=date(2024, 3, 10))
    assert stats.interviews == 1
    assert stats.response_rate_label == "100.0"
    assert len(t.get(r.id).activities) == 1

def test_notes_and_questions(tmp_path):
    t = _tracker(tmp_path)
    r = t.create(_acme())
    entry = t.add_note(r.id, "Sent thank-you email", kind="email")
    assert entry.type == "email"
    with pytest.raises(ValueError):
        t.add_note(r.id, "   ")
    with pytest.raises(ValueError):
        t.add_note(r.id, "manual", kind="status_change")
    t.add_interview_question(r.id, "Why Acme?")
    t.add_interview_question(r.id, "Tell me about yourself")
    t.remove_interview_question(r.id, 0)
    assert t.get(r.id).interview_questions == ["Tell me about yourself"]
    with pytest.raises(ValueError):
        t.add_interview_question(r.id, "")
    assert len(t.get(r.id).activities) == 1

def test_reload_keeps_activity_log(tmp_path):
    t = _tracker(tmp_path)
    r = t.create(_acme())
    t.patch(r.id, {"status": "offer"})
    again = _tracker(tmp_path)
    assert again.get(r.id) == t.get(r.id)

def test_create_accepts_iso_date_text(tmp_path):
    t = _tracker(tmp_path)
    r = t.create({"company": "Acme", "position": "Engineer", "application_date": "2024-03-05",
                  "interview_date": ""})
    assert r.application_date == date(2024, 3, 5)
    assert r.interview_date is None
    assert RecordStore(str(tmp_path / "apps.json")).load() == [r]

def test_bad_date_rejected_and_tracker_keeps_saving(tmp_path):
    t = _tracker(tmp_path)
    with pytest.raises(ValueError):
        t.create({"company": "Acme", "position": "Engineer", "application_date": "soon"})
    assert t.records == []
    kept = t.create({"company": "Globex", "position": "Analyst"})
    with pytest.raises(ValueError):
        t.patch(kept.id, {"interview_date": "next week-ish"})
    assert RecordStore(str(tmp_path / "apps.json")).load() == [kept]

def test_failed_save_leaves_collection_unchanged(tmp_path, monkeypatch):
    t = _tracker(tmp_path)
    r = t.create(_acme())

    def broken_save(records):
        raise OSError("disk full")

    monkeypatch.setattr(t.store, "save", broken_save)
    with pytest.raises(OSError):
        t.create(_acme(company="Globex"))
    with pytest.raises(OSError):
        t.patch(r.id, {"status": "offer"})
    with pytest.raises(OSError):
        t.delete(r.id)
    assert t.records == [r]
    assert t.get(r.id).status == "applied"

def test_patch_rejects_blank_required_text(tmp_path):
    t = _tracker(tmp_path)
    r = t.create(_acme())
    with pytest.raises(ValueError):
        t.patch(r.id, {"company": ""})
    with pytest.raises(ValueError):
        t.patch(r.id, {"position": "   "})
    assert t.get(r.id).company == "Acme"
    t.patch(r.id, {"company": "Acme GmbH"})
    assert t.get(r.id).company == "Acme GmbH"
