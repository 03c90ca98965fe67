from pathlib import Path

import docx
import pytest

import cli
from exam_api.services.blob_storage import LocalBlobStorage
from exam_api.services.test_storage import TestStorage


@pytest.fixture
def storage(session_factory, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestStorage:
    blobs = LocalBlobStorage(root=tmp_path / "blobs")
    monkeypatch.setattr(cli, "SessionLocal", session_factory)
    monkeypatch.setattr(cli, "LocalBlobStorage", lambda: blobs)
    monkeypatch.setattr(cli, "init_db", lambda: None)
    return TestStorage(session_factory, blobs)


def test_list_prints_saved_tests(storage: TestStorage, sample_test, capsys) -> None:
    test_id = storage.save(sample_test)
    assert cli.main(["list"]) == 0
    out = capsys.readouterr().out
    assert test_id in out
    assert "Mid-term test" in out


def test_export_writes_docx(storage: TestStorage, sample_test, tmp_path: Path) -> None:
    test_id = storage.save(sample_test)
    output = tmp_path / "out.docx"
    assert cli.main(["export", test_id, "--output", str(output)]) == 0
    paragraphs = [p.text for p in docx.Document(str(output)).paragraphs]
    assert paragraphs[0] == "Mid-term test"


def test_delete_and_missing(storage: TestStorage, sample_test, capsys) -> None:
    test_id = storage.save(sample_test)
    assert cli.main(["delete", test_id]) == 0
    assert storage.get_by_id(test_id) is None
    assert cli.main(["delete", test_id]) == 1
    assert cli.main(["export", test_id]) == 1
    assert "Test not found" in capsys.readouterr().err
