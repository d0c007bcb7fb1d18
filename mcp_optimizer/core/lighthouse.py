"""Lighthouse runner - the audit engine behind the orchestrator."""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
import subprocess
from typing import Any

from mcp_optimizer.errors.exceptions import AuditError, LighthouseNotFoundError
from mcp_optimizer.schemas.audit import EngineOptions, EngineResult, LighthouseResult
from mcp_optimizer.services.browser import BrowserLauncher

logger = logging.getLogger(__name__)

# Lighthouse JSON for a real page easily exceeds a few MB
MAX_OUTPUT_BYTES = 64 * 1024 * 1024


def _check_lighthouse_available(command: str = "lighthouse") -> None:
    """
    Check if Lighthouse CLI is available in PATH.

    Raises:
        LighthouseNotFoundError: If lighthouse is not installed or not in PATH.
    """
    if shutil.which(command) is None:
        raise LighthouseNotFoundError(
            f"Lighthouse CLI '{command}' not found in PATH. Install it with: npm install -g lighthouse"
        )


def build_lighthouse_command(
    url: str,
    cdp_port: int,
    options: EngineOptions,
    command: str = "lighthouse",
) -> list[str]:
    """Build the Lighthouse CLI command for a browser already listening on ``cdp_port``."""
    args = [
        command,
        url,
        f"--port={cdp_port}",
        "--output=json",
        "--quiet",
    ]
    if options.emulate_mobile:
        args.append("--form-factor=mobile")
    else:
        args.append("--preset=desktop")
    if options.categories:
        args.append(f"--only-categories={','.join(options.categories)}")
    return args


def _run_lighthouse_sync(command: list[str], timeout: float) -> str:
    """
    Run the Lighthouse CLI and return its stdout.

    Raises:
        subprocess.TimeoutExpired: If the audit times out.
        RuntimeError: If lighthouse returns a non-zero exit code.
    """
    result = subprocess.run(
        command,
        capture_output=True,
        text=True,
        timeout=timeout,
    )
    if result.returncode != 0:
        raise RuntimeError(result.stderr.strip() or f"exit code {result.returncode}")
    if len(result.stdout) > MAX_OUTPUT_BYTES:
        raise RuntimeError(f"Lighthouse output exceeds {MAX_OUTPUT_BYTES} bytes")
    return result.stdout


def parse_lighthouse_output(stdout: str) -> EngineResult:
    """
    Parse Lighthouse CLI JSON output.

    The CLI prints the LHR itself; some wrappers nest it under ``lhr``. The
    whole parsed payload is kept as the raw report.
    """
    payload: dict[str, Any] = json.loads(stdout)
    if not isinstance(payload, dict):
        raise ValueError("Lighthouse output is not a JSON object")
    lhr = payload.get("lhr", payload)
    return EngineResult(lhr=LighthouseResult.model_validate(lhr), report=payload)


def degraded_result(message: str) -> EngineResult:
    """Error-shaped engine result with no category data."""
    return EngineResult(lhr=LighthouseResult(), report={"error": message}, error=message)


class LighthouseEngine:
    """
    Audit engine backed by the Lighthouse CLI.

    Callable as ``await engine(url, options)``. Never raises for audit
    failures: they come back as a degraded ``EngineResult`` carrying ``error``.
    The browser is always closed before returning.
    """

    def __init__(
        self,
        launcher: BrowserLauncher,
        command: str = "lighthouse",
        timeout: float = 600.0,
    ) -> None:
        self.launcher = launcher
        self.command = command
        self.timeout = timeout

    async def __call__(self, url: str, options: EngineOptions) -> EngineResult:
        try:
            _check_lighthouse_available(self.command)
            async with self.launcher.launch() as browser:
                command = build_lighthouse_command(url, browser.cdp_port, options, self.command)
                logger.info(f"Running Lighthouse for {url} (mobile={options.emulate_mobile})")
                stdout = await asyncio.to_thread(_run_lighthouse_sync, command, self.timeout)
            return parse_lighthouse_output(stdout)

        except AuditError as e:
            message = str(e)
        except subprocess.TimeoutExpired as e:
            message = f"Lighthouse audit timed out after {e.timeout}s"
        except RuntimeError as e:
            message = f"Lighthouse process failed: {e}"
        except json.JSONDecodeError as e:
            message = f"Failed to parse Lighthouse output: {e}"
        except ValueError as e:
            message = f"Unexpected Lighthouse output: {e}"
        except OSError as e:
            message = f"OS error running Lighthouse: {e}"

        logger.error(f"Lighthouse audit of {url} failed: {message}")
        return degraded_result(message)
