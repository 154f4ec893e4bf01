"""
Document Service Unit Tests
===========================
"""

import io
import json

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from casebook.models.document import Document
from casebook.models.user import User
from casebook.services.document_service import DocumentService
from casebook.services.storage_service import StorageService


pytestmark = pytest.mark.unit


def _metadata(case) -> str:
    return json.dumps({"title": "Tender notice", "case_id": str(case.id)})


class TestUpload:
    def test_upload_stores_file_and_row(self, db_session: Session, private_case, journalist_user: User, tmp_path):
        # Arrange
        storage = StorageService(root=tmp_path)

        # Act
        document = DocumentService(db_session, storage=storage).upload(
            journalist_user, io.BytesIO(b"scan"), "notice.pdf", "application/pdf", _metadata(private_case)
        )

        # Assert
        assert storage.resolve(document.file_path).read_bytes() == b"scan"
        assert document.file_size == 4

    def test_failed_insert_removes_stored_file(
        self, db_session: Session, private_case, journalist_user: User, tmp_path, monkeypatch
    ):
        # Arrange
        storage = StorageService(root=tmp_path)

        def broken_commit():
            raise SQLAlchemyError("database is locked")

        monkeypatch.setattr(db_session, "commit", broken_commit)

        # Act & Assert
        with pytest.raises(SQLAlchemyError):
            DocumentService(db_session, storage=storage).upload(
                journalist_user, io.BytesIO(b"scan"), "notice.pdf", "application/pdf", _metadata(private_case)
            )
        assert list(storage.documents_dir.iterdir()) == []
        monkeypatch.undo()
        assert db_session.query(Document).count() == 0
