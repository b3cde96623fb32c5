"""
Tests for structured preview requests.
"""

import base64
import json

import pytest

from reposcope.errors import InvalidPreviewRequestError
from reposcope.external.results import ContentResult, FileResult
from reposcope.preview import PreviewRequest, build_preview_request


class TestPreviewRequest:
    """Test suite for PreviewRequest encoding."""

    def test_encode_is_base64_json(self):
        request = PreviewRequest(type="file", path="/r/a/foo.txt")

        decoded = json.loads(base64.b64decode(request.encode()))

        assert decoded == {
            "type": "file",
            "path": "/r/a/foo.txt",
            "repo_path": "",
            "line_number": 0,
            "commit_hash": "",
        }

    def test_decode_restores_request(self):
        request = PreviewRequest(
            type="content", path="/r/a/x.py", repo_path="/r/a", line_number=7
        )

        assert PreviewRequest.decode(request.encode()) == request

    def test_decode_accepts_partial_documents(self):
        encoded = base64.b64encode(b'{"type": "commit", "commit_hash": "abc123"}')

        request = PreviewRequest.decode(encoded.decode())

        assert request.commit_hash == "abc123"
        assert request.path == ""

    def test_decode_rejects_bad_base64(self):
        with pytest.raises(InvalidPreviewRequestError):
            PreviewRequest.decode("not base64!!")

    def test_decode_rejects_unknown_type(self):
        encoded = base64.b64encode(b'{"type": "image"}').decode()

        with pytest.raises(InvalidPreviewRequestError):
            PreviewRequest.decode(encoded)


class TestBuildPreviewRequest:
    """Test suite for build_preview_request."""

    def test_file_result(self):
        request = build_preview_request(
            FileResult("a", "sub/foo.txt", "/r/a/sub/foo.txt")
        )

        assert request == PreviewRequest(
            type="file", path="/r/a/sub/foo.txt", repo_path="/r/a"
        )

    def test_content_result(self):
        request = build_preview_request(
            ContentResult("a", "x.py", "/r/a/x.py", 42, 3, "pass")
        )

        assert request.type == "content"
        assert request.line_number == 42
        assert request.repo_path == "/r/a"

    def test_result_outside_repository_has_no_repo_path(self):
        request = build_preview_request(FileResult("a", "/elsewhere/x", "/elsewhere/x"))

        assert request.repo_path == ""
