"""HTTP client for the calculator server."""
from pathlib import Path
import tarfile
import tempfile
from typing import Any, List, Optional
import zipfile

import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath, HttpUrl
import requests

from web_calculator.common.logger import logger
from web_calculator.common.operations import CalculationResult, ErrorKind


class CalculatorClient(BaseModel):
    """
    HTTP client responsible for sending calculations to the server and receiving results.

    The HTTP client:
    - posts single calculations to ``/calculate`` and returns a tagged result
    - reads ``<num1> <operation> <num2>`` lines from a plain text file or an archive
    - writes one result line per calculation into an output file
    """

    # Make the Pydantic instance immutable (read-only), to prevent errors
    # that could be caused by changes to the network configuration during execution.
    model_config = ConfigDict(frozen=True)

    base_url: HttpUrl = Field(default="http://127.0.0.1:5000", description="Server base URL")
    timeout: float = Field(default=5.0, gt=0, description="Request timeout in seconds")

    @property
    def calculate_url(self) -> str:
        return f"{str(self.base_url).rstrip('/')}/calculate"

    @staticmethod
    def _error_kind(message: str) -> ErrorKind:
        """
        Recover the error classification from a server error message.

        :param str message: Message from a 400 response body

        :return: Matching error kind
        :rtype: ErrorKind
        :raises ValueError: If the message matches no known error kind
        """
        for kind in ErrorKind:
            if message.startswith(kind.message):
                return kind
        raise ValueError(f"Unrecognized error message from server: {message!r}")

    def calculate(self, num1: Any, num2: Any, operation: Any) -> CalculationResult:
        """
        Post a single calculation to the server.

        :param Any num1: First operand
        :param Any num2: Second operand
        :param Any operation: Operation name

        :return: Success with the computed value, or the classified server error
        :rtype: CalculationResult
        :raises requests.HTTPError: If the server answers with a status other than 200 or 400
        :raises requests.RequestException: If the server cannot be reached
        """
        response = requests.post(
            self.calculate_url,
            json={"num1": num1, "num2": num2, "operation": operation},
            timeout=self.timeout,
        )

        if response.status_code == 400:
            message: str = response.json()["error"]
            return CalculationResult(error=self._error_kind(message), message=message)

        response.raise_for_status()
        return CalculationResult.success(float(response.json()["result"]))

    def calculate_line(self, line: str) -> CalculationResult:
        """
        Evaluate one ``<num1> <operation> <num2>`` line through the server.

        Lines that do not split into exactly three tokens are reported as
        missing data without contacting the server.

        :param str line: Calculation line, e.g. ``"10 add 5"``

        :return: Result of the calculation
        :rtype: CalculationResult
        """
        tokens: List[str] = line.split()
        if len(tokens) != 3:
            return CalculationResult.failure(ErrorKind.MISSING_DATA)
        num1, operation, num2 = tokens
        return self.calculate(num1, num2, operation)

    def send_file(
        self,
        input_file: FilePath,
        output_file: Path,
    ) -> None:
        """
        Send every calculation of an input file to the server and write the results to an output file.

        :param FilePath input_file: Path to the input file or archive
        :param Path output_file: Path where results will be written

        :return: None
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        # Load calculations from file or archive
        if input_file.suffix == ".txt":
            content = input_file.read_text()
        else:
            content = self._extract_archive(input_file)

        lines: List[str] = [line.strip() for line in content.splitlines() if line.strip()]
        logger.info(f"📄 Sending {len(lines)} calculations from {input_file}")

        with output_file.open("w", encoding="utf-8") as f_out:
            for line in lines:
                result: CalculationResult = self.calculate_line(line)
                if result.ok:
                    f_out.write(f"{line} = {result.result}\n")
                else:
                    f_out.write(f"{line} -> ERROR: {result.message}\n")
                # Flush so that progress survives an interrupted run
                f_out.flush()

        logger.info(f"📄✅ Results written to {output_file}")

    def _extract_archive(self, archive_path: FilePath) -> str:
        """
        Extract the first .txt file found in a supported archive and return its content as a string.

        Supported formats:
        - .zip
        - .tar.xz
        - .7z

        :param FilePath archive_path: Path to the archive file

        :return: Content of the extracted .txt file
        :rtype: str
        :raises ValueError: If no .txt file is found or format is unsupported
        """
        with tempfile.TemporaryDirectory() as tmpdir:
            tmpdir_path = Path(tmpdir)
            txt_name: Optional[str] = None

            if archive_path.suffix == ".zip":
                with zipfile.ZipFile(archive_path, "r") as zf:
                    txt_name = next((f for f in zf.namelist() if f.endswith(".txt")), None)
                    if txt_name is not None:
                        zf.extract(txt_name, path=tmpdir_path)

            elif archive_path.suffixes[-2:] == [".tar", ".xz"]:
                with tarfile.open(archive_path, "r:xz") as tf:
                    member = next((m for m in tf.getmembers() if m.name.endswith(".txt")), None)
                    if member is not None:
                        tf.extract(member, path=tmpdir_path, filter="data")
                        txt_name = member.name

            elif archive_path.suffix == ".7z":
                with py7zr.SevenZipFile(archive_path, mode="r") as archive:
                    txt_name = next((f for f in archive.getnames() if f.endswith(".txt")), None)
                    if txt_name is not None:
                        archive.extract(path=tmpdir_path, targets=[txt_name])

            else:
                raise ValueError(f"📄❌ Unsupported archive format: {archive_path.suffix}")

            if txt_name is None:
                raise ValueError(f"📄❌ No .txt file found in archive {archive_path.name}")
            return (tmpdir_path / txt_name).read_text()
