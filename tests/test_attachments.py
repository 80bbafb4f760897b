import pytest

from job_tracker import attachments
from job_tracker.store import RecordStore
from job_tracker.tracker import Tracker

def test_read_pdf_as_data_uri(tmp_path):
    path = tmp_path / "cv.pdf"
    path.write_bytes(b"%PDF-1.4 hello")
    att = attachments.read_attachment(str(path))
    assert att.name == "cv.pdf"
    assert att.type == "application/pdf"
    assert att.data.startswith("data:application/pdf;base64,")
    out = attachments.save_attachment(att, str(tmp_path / "out"))
    assert open(out, "rb").read() == b"%PDF-1.4 hello"

def test_docx_media_type(tmp_path):
    path = tmp_path / "letter.DOCX"
    path.write_bytes(b"PK")
    assert attachments.read_attachment(str(path)).type.endswith("wordprocessingml.document")

def test_rejects_wrong_type_and_oversize(tmp_path):
    txt = tmp_path / "cv.txt"
    txt.write_text("plain")
    with pytest.raises(attachments.AttachmentError):
        attachments.read_attachment(str(txt))
    big = tmp_path / "big.pdf"
    big.write_bytes(b"x" * 11)
    with pytest.raises(attachments.AttachmentError):
        attachments.read_attachment(str(big), max_bytes=10)

def test_missing_file_is_attachment_error(tmp_path):
    with pytest.raises(attachments.AttachmentError):
        attachments.read_attachment(str(tmp_path / "gone.pdf"))

def test_failed_upload_leaves_record_untouched(tmp_path):
    t = Tracker(RecordStore(str(tmp_path / "apps.json")))
    r = t.create({"company": "Acme", "position": "Engineer"})
    good = tmp_path / "cv.pdf"
    good.write_bytes(b"%PDF")
    t.attach(r.id, "cv", str(good))
    before = t.get(r.id)
    bad = tmp_path / "cv.png"
    bad.write_bytes(b"png")
    with pytest.raises(attachments.AttachmentError):
        t.attach(r.id, "cv", str(bad))
    assert t.get(r.id) == before
    t.detach(r.id, "cv")
    assert t.get(r.id).cv is None
