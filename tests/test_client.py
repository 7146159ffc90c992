"""Test class CalculatorClient."""
import tarfile
import zipfile

import py7zr
from pydantic import ValidationError
import pytest
import requests

from web_calculator.client.client import CalculatorClient
from web_calculator.common.dispatcher import ArithmeticDispatcher
from web_calculator.common.operations import ErrorKind


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int, body: dict):
        self.status_code = status_code
        self.body = body

    def json(self) -> dict:
        return self.body

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def fake_server_post(url, json, timeout):
    """Answer like the real /calculate endpoint, using the dispatcher directly."""
    result = ArithmeticDispatcher.dispatch(json["num1"], json["num2"], json["operation"])
    if result.ok:
        return FakeResponse(200, {"result": result.result})
    return FakeResponse(400, {"error": result.message})


def test_client_valid_config() -> None:
    """Check that a valid base URL and timeout correctly initialize the client."""
    client = CalculatorClient(base_url="http://localhost:8080", timeout=2)
    assert client.calculate_url == "http://localhost:8080/calculate"
    assert client.timeout == 2.0


def test_client_invalid_url() -> None:
    """Ensure invalid URLs raise a ValidationError."""
    with pytest.raises(ValidationError):
        CalculatorClient(base_url="not a url")


def test_client_invalid_timeout() -> None:
    """Ensure non-positive timeouts raise a ValidationError."""
    with pytest.raises(ValidationError):
        CalculatorClient(timeout=0)


def test_calculate_success(monkeypatch) -> None:
    """A 200 response becomes a successful result."""
    sent = {}

    def fake_post(url, json, timeout):
        sent.update(url=url, json=json, timeout=timeout)
        return FakeResponse(200, {"result": 15.0})

    monkeypatch.setattr(requests, "post", fake_post)

    result = CalculatorClient().calculate(10, 5, "add")

    assert result.ok
    assert result.result == 15.0
    assert sent == {
        "url": "http://127.0.0.1:5000/calculate",
        "json": {"num1": 10, "num2": 5, "operation": "add"},
        "timeout": 5.0,
    }


@pytest.mark.parametrize("message,kind", [
    ("Missing 'num1', 'num2', or 'operation' in request data", ErrorKind.MISSING_DATA),
    ("Invalid number format for 'num1' or 'num2'", ErrorKind.INVALID_NUMERIC_INPUT),
    ("Unsupported operation: modulo", ErrorKind.INVALID_OPERATION),
    ("Division by zero is not allowed", ErrorKind.DIVISION_BY_ZERO),
])
def test_calculate_maps_errors(monkeypatch, message, kind) -> None:
    """A 400 response is mapped back to its error kind."""
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(400, {"error": message}))

    result = CalculatorClient().calculate(1, 2, "x")

    assert result.error is kind
    assert result.message == message


def test_calculate_unexpected_status(monkeypatch) -> None:
    """Statuses other than 200 and 400 raise an HTTPError."""
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(500, {}))

    with pytest.raises(requests.HTTPError):
        CalculatorClient().calculate(1, 2, "add")


def test_calculate_line_malformed_skips_request(monkeypatch) -> None:
    """Lines without exactly three tokens never reach the server."""
    def fail_post(*args, **kwargs):
        raise AssertionError("request should not be sent")

    monkeypatch.setattr(requests, "post", fail_post)

    result = CalculatorClient().calculate_line("10 add")

    assert result.error is ErrorKind.MISSING_DATA


def test_send_file_txt(tmp_path, monkeypatch) -> None:
    """Verify sending a plain text file writes expected results to output."""
    input_file = tmp_path / "calculations.txt"
    output_file = tmp_path / "results.txt"
    input_file.write_text("10 add 5\n\n10 divide 0\nabc add 5\n10 modulo 5\n")

    monkeypatch.setattr(requests, "post", fake_server_post)

    CalculatorClient().send_file(input_file, output_file)

    assert output_file.read_text().splitlines() == [
        "10 add 5 = 15.0",
        "10 divide 0 -> ERROR: Division by zero is not allowed",
        "abc add 5 -> ERROR: Invalid number format for 'num1' or 'num2'",
        "10 modulo 5 -> ERROR: Unsupported operation: modulo",
    ]


def test_send_file_archive(tmp_path, monkeypatch) -> None:
    """Archives are extracted before their lines are sent."""
    txt = tmp_path / "calculations.txt"
    txt.write_text("6 multiply 7\n")
    zip_path = tmp_path / "calculations.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.write(txt, arcname="calculations.txt")
    output_file = tmp_path / "results.txt"

    monkeypatch.setattr(requests, "post", fake_server_post)

    CalculatorClient().send_file(zip_path, output_file)

    assert output_file.read_text() == "6 multiply 7 = 42.0\n"


def test_extract_zip(tmp_path) -> None:
    """Check that a .zip archive can be extracted and read correctly."""
    txt = tmp_path / "ops.txt"
    txt.write_text("3 add 3\n")

    zip_path = tmp_path / "ops.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.write(txt, arcname="ops.txt")

    content = CalculatorClient()._extract_archive(zip_path)

    assert content == "3 add 3\n"


def test_extract_tar_xz(tmp_path) -> None:
    """Check that a .tar.xz archive can be extracted and read correctly."""
    txt = tmp_path / "ops.txt"
    txt.write_text("4 multiply 4\n")

    tar_path = tmp_path / "ops.tar.xz"
    with tarfile.open(tar_path, "w:xz") as tf:
        tf.add(txt, arcname="ops.txt")

    content = CalculatorClient()._extract_archive(tar_path)

    assert content == "4 multiply 4\n"


def test_extract_7z(tmp_path) -> None:
    """Check that a .7z archive can be extracted and read correctly."""
    txt = tmp_path / "ops.txt"
    txt.write_text("5 subtract 2\n")

    archive_path = tmp_path / "ops.7z"
    with py7zr.SevenZipFile(archive_path, "w") as archive:
        archive.write(txt, arcname="ops.txt")

    content = CalculatorClient()._extract_archive(archive_path)

    assert content == "5 subtract 2\n"


def test_extract_archive_no_txt(tmp_path) -> None:
    """Verify that extraction fails if no .txt file exists in the archive."""
    zip_path = tmp_path / "empty.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.writestr("data.bin", b"\x00\x01")

    with pytest.raises(ValueError):
        CalculatorClient()._extract_archive(zip_path)


def test_extract_unsupported_format(tmp_path) -> None:
    """Ensure unsupported archive formats raise a ValueError."""
    file_path = tmp_path / "ops.rar"
    file_path.write_text("1 add 1")

    with pytest.raises(ValueError):
        CalculatorClient()._extract_archive(file_path)


def test_calculate_overflowed_result(monkeypatch) -> None:
    """Infinite results sent as strings are parsed back to floats."""
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(200, {"result": "-Infinity"}))

    result = CalculatorClient().calculate(-1e308, 10, "multiply")

    assert result.ok
    assert result.result == float("-inf")
