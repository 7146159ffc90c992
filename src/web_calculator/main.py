"""
Main entrypoint used by CI and Docker.

Subcommands:
- ``serve``: run the HTTP calculator server
- ``batch FILE``: start the server, run the client over a calculations file, stop the server

The batch run validates:
- HTTP communication between client and server
- Server process lifecycle
- End-to-end correctness
"""

import argparse
from multiprocessing import Process
from pathlib import Path
import time
from typing import List, Optional

from pydantic import BaseModel, Field, FilePath, IPvAnyAddress, ValidationError
import requests

from web_calculator.client.client import CalculatorClient
from web_calculator.common.logger import logger
from web_calculator.server.server import SERVICE_NAME, CalculatorServer


class ServeArgs(BaseModel):
    """
    Pydantic model used to validate ``serve`` arguments.

    Attributes
    ----------
    host : IPvAnyAddress
        Address to bind.
    port : int
        Port to listen on.
    debug : bool
        Run Flask in debug mode.
    """

    host: IPvAnyAddress = "127.0.0.1"
    port: int = Field(default=5000, ge=1, le=65535)
    debug: bool = False


class BatchArgs(BaseModel):
    """
    Pydantic model used to validate ``batch`` arguments.

    Attributes
    ----------
    file_path : FilePath
        Path to the file containing calculations.
    port : int
        Port the temporary server listens on.
    """

    file_path: FilePath
    port: int = Field(default=5000, ge=1, le=65535)


def build_parser() -> argparse.ArgumentParser:
    """
    Build the command-line parser.

    :return: Parser with ``serve`` and ``batch`` subcommands
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="web-calculator",
        description="Four-function calculator served over HTTP",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default="127.0.0.1", help="Address to bind")
    serve.add_argument("--port", type=int, default=5000, help="Port to listen on")
    serve.add_argument("--debug", action="store_true", help="Run Flask in debug mode")

    batch = subparsers.add_parser("batch", help="Evaluate a calculations file end to end")
    batch.add_argument("file_path", help="Path to the file containing calculations")
    batch.add_argument("--port", type=int, default=5000, help="Port for the temporary server")

    return parser


def run_server(host: str, port: int) -> None:
    """
    Start the calculator server.

    The server runs in its own process and serves HTTP requests
    until it is terminated.
    """
    server = CalculatorServer(host=host, port=port)
    server.start()


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/calculations.7z
    output: resources/calculations_7z_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    stem = input_path.name[: len(input_path.name) - len("".join(input_path.suffixes))]
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def _is_calculator_health(response: requests.Response) -> bool:
    """Whether a health response comes from a calculator server."""
    if response.status_code != 200:
        return False
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("service") == SERVICE_NAME


def wait_for_server(
    client: CalculatorClient,
    server_process: Optional[Process] = None,
    attempts: int = 50,
    delay: float = 0.1,
) -> None:
    """
    Poll the server health endpoint until the calculator answers.

    Another service answering on the same port does not count as ready.

    :param CalculatorClient client: Client pointing at the server
    :param Process server_process: Server process, checked to be alive between polls
    :param int attempts: Number of polls before giving up
    :param float delay: Seconds between polls

    :raises RuntimeError: If the server process exits or never becomes ready
    """
    health_url = f"{str(client.base_url).rstrip('/')}/health"
    for _ in range(attempts):
        if server_process is not None and not server_process.is_alive():
            raise RuntimeError(f"🖥️❌ Server process exited before serving {health_url}")
        try:
            if _is_calculator_health(requests.get(health_url, timeout=client.timeout)):
                return
        except requests.ConnectionError:
            pass
        time.sleep(delay)
    raise RuntimeError(f"🖥️❌ Server did not start at {health_url}")


def serve(args: ServeArgs) -> None:
    CalculatorServer(host=args.host, port=args.port, debug=args.debug).start()


def batch(args: BatchArgs) -> Path:
    """
    Run the client over a calculations file against a temporary server.

    :param BatchArgs args: Validated batch arguments

    :return: Path of the results file
    :rtype: Path
    """
    input_path: Path = Path(args.file_path)
    output_path: Path = build_output_path(input_path)

    server_process = Process(target=run_server, args=("127.0.0.1", args.port))
    server_process.start()

    try:
        client = CalculatorClient(base_url=f"http://127.0.0.1:{args.port}")
        wait_for_server(client, server_process)
        client.send_file(input_path, output_path)
    finally:
        # Ensure the server is always stopped
        server_process.terminate()
        server_process.join()

    return output_path


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main function executed by CI or Docker.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "serve":
            cli_args = ServeArgs(host=args.host, port=args.port, debug=args.debug)
        else:
            cli_args = BatchArgs(file_path=args.file_path, port=args.port)
    except ValidationError as exc:
        parser.error(str(exc))

    if isinstance(cli_args, ServeArgs):
        serve(cli_args)
    else:
        output_path = batch(cli_args)
        logger.info(f"✉️ Results available in {output_path}")


if __name__ == "__main__":
    main()
