import logging
from unittest import mock

import pytest
import requests
import responses

from workservice.integration.file_client import FileClient, FileServiceError, UploadResponse

BASE_URL = "http://localhost:8082"
UPLOAD_ENDPOINT = "/api/v1/files/upload"
UPLOAD_URL = BASE_URL + UPLOAD_ENDPOINT


@pytest.fixture
def http():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _client(retry_count=2, retry_delay=0):
    return FileClient(
        BASE_URL, UPLOAD_ENDPOINT, 5, retry_count, retry_delay, logging.getLogger("test")
    )


def _envelope(file_id="f1", file_hash="abc", size=11):
    return {"success": True, "data": {"file_id": file_id, "hash": file_hash, "file_size": size}}


def test_upload_sends_multipart_and_decodes_envelope(http):
    http.add(responses.POST, UPLOAD_URL, json=_envelope())
    result = _client().upload_file(b"hello world", "essay.txt")
    assert result == UploadResponse(file_id="f1", hash="abc", size=11)
    request = http.calls[0].request
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="file"; filename="essay.txt"' in request.body
    assert b"hello world" in request.body


def test_upload_without_data_gives_empty_response(http):
    http.add(responses.POST, UPLOAD_URL, json={"success": True})
    assert _client().upload_file(b"x", "a.txt") == UploadResponse()


def test_upload_retries_then_succeeds(http):
    http.add(responses.POST, UPLOAD_URL, status=502)
    http.add(responses.POST, UPLOAD_URL, json=_envelope(file_id="f2"))
    result = _client().upload_file(b"x", "a.txt")
    assert result.file_id == "f2"
    assert len(http.calls) == 2


def test_upload_gives_up_with_last_status(http):
    retry_count = 1
    http.add(responses.POST, UPLOAD_URL, status=500)
    with pytest.raises(FileServiceError, match="file service returned status 500"):
        _client(retry_count=retry_count).upload_file(b"x", "a.txt")
    assert len(http.calls) == retry_count + 1


def test_upload_connection_error_is_wrapped(http):
    http.add(responses.POST, UPLOAD_URL, body=requests.ConnectionError("refused"))
    with pytest.raises(FileServiceError, match="failed to upload file after .*refused"):
        _client(retry_count=0).upload_file(b"x", "a.txt")


def test_upload_invalid_json(http):
    http.add(responses.POST, UPLOAD_URL, body="<html>", content_type="text/html")
    with pytest.raises(FileServiceError, match="failed to decode response"):
        _client().upload_file(b"x", "a.txt")


def test_upload_back_off_grows_with_attempt(http):
    http.add(responses.POST, UPLOAD_URL, status=503)
    with mock.patch("workservice.integration.file_client.time.sleep") as sleep:
        with pytest.raises(FileServiceError):
            _client(retry_count=2, retry_delay=0.25).upload_file(b"x", "a.txt")
    assert [c.args[0] for c in sleep.call_args_list] == [0.25, 0.5]


def test_get_file_returns_bytes(http):
    http.add(responses.GET, f"{BASE_URL}/api/v1/files/f1", body=b"content")
    assert _client().get_file("f1") == b"content"


def test_get_file_error_status(http):
    http.add(responses.GET, f"{BASE_URL}/api/v1/files/f1", status=404)
    with pytest.raises(FileServiceError, match="file service returned status 404"):
        _client().get_file("f1")
    assert len(http.calls) == 1


@pytest.mark.parametrize("status", [200, 204])
def test_delete_file_accepts_success_codes(http, status):
    http.add(responses.DELETE, f"{BASE_URL}/api/v1/files/f1", status=status)
    assert _client().delete_file("f1") is None
    assert http.calls[0].request.method == "DELETE"


def test_delete_file_error_status(http):
    http.add(responses.DELETE, f"{BASE_URL}/api/v1/files/f1", status=500)
    with pytest.raises(FileServiceError, match="file service returned status 500"):
        _client().delete_file("f1")


def test_delete_file_connection_error(http):
    http.add(
        responses.DELETE,
        f"{BASE_URL}/api/v1/files/f1",
        body=requests.ConnectionError("refused"),
    )
    with pytest.raises(FileServiceError, match="failed to delete file: refused"):
        _client().delete_file("f1")