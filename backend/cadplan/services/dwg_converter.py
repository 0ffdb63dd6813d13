# backend/cadplan/services/dwg_converter.py
"""
DXF to DWG conversion chain.

Strategies are tried in order, each only when it is configured:
1. CloudConvert API (remote job: import -> convert -> export)
2. LibreDWG ``dwgwrite`` (local, file based)
3. ODA File Converter (local, directory based)

When every strategy fails or none is available the chain hands back the
DXF text as a fallback with a warning. ``convert`` never raises.
"""

import os
import time
import shutil
import logging
import tempfile
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import requests

from .. import config
from ..errors import ConversionError, ConversionTimeoutError

logger = logging.getLogger(__name__)

FORMAT_DWG = "dwg"
FORMAT_FALLBACK_TEXT = "fallback-text"

FALLBACK_WARNING = "DWG conversion unavailable, returning DXF format (compatible with AutoCAD)"

INPUT_FILENAME = "floor-plan.dxf"
OUTPUT_FILENAME = "floor-plan.dwg"


@dataclass
class ConversionResult:
    content: bytes
    format: str
    strategy: Optional[str] = None
    fallback_text: Optional[str] = None
    warning: Optional[str] = None
    failures: List[str] = field(default_factory=list)

    @property
    def is_fallback(self) -> bool:
        return self.format == FORMAT_FALLBACK_TEXT


class ConversionStrategy(ABC):
    """One way of turning DXF text into DWG bytes."""

    name = "strategy"

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the strategy's configuration or tooling is present."""

    @abstractmethod
    def attempt_conversion(self, dxf_text: str) -> bytes:
        """Convert or raise ConversionError."""


# =============================================================================
# CLOUDCONVERT
# =============================================================================

class CloudConvertStrategy(ConversionStrategy):
    """Remote conversion through the CloudConvert v2 jobs API."""

    name = "cloudconvert"

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        poll_interval: float = config.CLOUDCONVERT_POLL_INTERVAL_SECONDS,
        max_polls: int = config.CLOUDCONVERT_MAX_POLLS,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        request_timeout: float = 30
    ):
        self.api_key = api_key if api_key is not None else config.CLOUDCONVERT_API_KEY
        self.api_url = (api_url or config.CLOUDCONVERT_API_URL).rstrip("/")
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.session = session or requests.Session()
        self.request_timeout = request_timeout
        self._sleep = sleep

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def create_job(self, dxf_text: str) -> str:
        payload = {
            "tasks": {
                "import-dxf": {
                    "operation": "import/raw",
                    "file": dxf_text,
                    "filename": INPUT_FILENAME,
                },
                "convert-dwg": {
                    "operation": "convert",
                    "input": "import-dxf",
                    "output_format": "dwg",
                },
                "export-result": {
                    "operation": "export/url",
                    "input": "convert-dwg",
                },
            }
        }
        response = self.session.post(
            f"{self.api_url}/jobs", json=payload,
            headers=self._headers(), timeout=self.request_timeout
        )
        response.raise_for_status()
        job_id = response.json()["data"]["id"]
        logger.info(f"CloudConvert job created: {job_id}")
        return job_id

    def wait_for_job(self, job_id: str) -> dict:
        """Poll until the job finishes, errors, or the poll budget runs out."""
        for _ in range(self.max_polls):
            self._sleep(self.poll_interval)

            response = self.session.get(
                f"{self.api_url}/jobs/{job_id}",
                headers=self._headers(), timeout=self.request_timeout
            )
            response.raise_for_status()
            job = response.json()["data"]
            status = job.get("status")
            logger.debug(f"Job {job_id} status: {status}")

            if status == "finished":
                return job
            if status == "error":
                error_task = next((t for t in job.get("tasks", []) if t.get("status") == "error"), None)
                message = (error_task or {}).get("message") or "Unknown error"
                raise ConversionError(f"Conversion failed: {message}")

        raise ConversionTimeoutError("Job timeout: conversion took too long")

    def attempt_conversion(self, dxf_text: str) -> bytes:
        try:
            job_id = self.create_job(dxf_text)
            job = self.wait_for_job(job_id)

            export_task = next(
                (t for t in job.get("tasks", []) if t.get("name") == "export-result"), None
            )
            if not export_task or export_task.get("status") != "finished":
                raise ConversionError("Export task failed")

            files = (export_task.get("result") or {}).get("files") or []
            if not files or not files[0].get("url"):
                raise ConversionError("Export task returned no file URL")

            download = self.session.get(files[0]["url"], allow_redirects=True, timeout=self.request_timeout)
            download.raise_for_status()

        except (requests.RequestException, KeyError, ValueError) as e:
            raise ConversionError(f"CloudConvert request failed: {e}") from e

        logger.info(f"DWG file generated successfully ({len(download.content)} bytes)")
        return download.content


# =============================================================================
# LOCAL TOOLS
# =============================================================================

class LibreDWGStrategy(ConversionStrategy):
    """Local conversion with LibreDWG's dwgwrite (apt-get install libredwg-tools)."""

    name = "libredwg"

    def __init__(self, command: Optional[str] = None, timeout: int = config.LOCAL_CONVERTER_TIMEOUT_SECONDS):
        self.command = command or config.LIBREDWG_COMMAND
        self.timeout = timeout

    def is_available(self) -> bool:
        return shutil.which(self.command) is not None

    def attempt_conversion(self, dxf_text: str) -> bytes:
        fd, input_path = tempfile.mkstemp(prefix="floor-plan-", suffix=".dxf")
        output_path = input_path[:-4] + ".dwg"

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(dxf_text)

            result = subprocess.run(
                [self.command, "-o", output_path, input_path],
                capture_output=True,
                timeout=self.timeout,
            )
            if result.returncode != 0 or not os.path.isfile(output_path):
                raise ConversionError(
                    f"dwgwrite failed (exit code {result.returncode}): "
                    f"{result.stderr.decode(errors='replace')[:500]}"
                )

            with open(output_path, "rb") as f:
                content = f.read()

        except subprocess.TimeoutExpired as e:
            raise ConversionError(f"dwgwrite timed out ({self.timeout}s limit)") from e
        except OSError as e:
            raise ConversionError(f"dwgwrite could not run: {e}") from e
        finally:
            for path in (input_path, output_path):
                if os.path.exists(path):
                    os.remove(path)

        logger.info(f"LibreDWG conversion successful ({len(content)} bytes)")
        return content


class ODAConverterStrategy(ConversionStrategy):
    """Local conversion with the ODA File Converter (directory in, directory out)."""

    name = "oda"

    def __init__(self, executable: Optional[str] = None, timeout: int = config.LOCAL_CONVERTER_TIMEOUT_SECONDS):
        self.executable = executable or config.ODA_CONVERTER_PATH
        self.timeout = timeout

    def is_available(self) -> bool:
        return os.path.isfile(self.executable) and os.access(self.executable, os.X_OK)

    def attempt_conversion(self, dxf_text: str) -> bytes:
        input_dir = tempfile.mkdtemp(prefix="dxf-input-")
        output_dir = tempfile.mkdtemp(prefix="dwg-output-")

        try:
            with open(os.path.join(input_dir, INPUT_FILENAME), "w", encoding="utf-8") as f:
                f.write(dxf_text)

            # ODAFileConverter <in dir> <out dir> <version> <type> <recurse> <audit>
            result = subprocess.run(
                [self.executable, input_dir, output_dir, "ACAD2018", "DWG", "0", "1"],
                capture_output=True,
                timeout=self.timeout,
            )

            dwg_path = os.path.join(output_dir, OUTPUT_FILENAME)
            if not os.path.isfile(dwg_path):
                raise ConversionError(
                    f"ODA conversion produced no .dwg output. "
                    f"Exit code: {result.returncode}, stderr: {result.stderr.decode(errors='replace')[:500]}"
                )

            with open(dwg_path, "rb") as f:
                content = f.read()

        except subprocess.TimeoutExpired as e:
            raise ConversionError(f"ODA File Converter timed out ({self.timeout}s limit)") from e
        except OSError as e:
            raise ConversionError(f"ODA File Converter could not run: {e}") from e
        finally:
            shutil.rmtree(input_dir, ignore_errors=True)
            shutil.rmtree(output_dir, ignore_errors=True)

        logger.info(f"ODA conversion successful ({len(content)} bytes)")
        return content


# =============================================================================
# CHAIN
# =============================================================================

class DWGConversionChain:
    """Run conversion strategies in order until one produces DWG bytes."""

    def __init__(self, strategies: Sequence[ConversionStrategy]):
        self.strategies = list(strategies)

    @property
    def available(self) -> bool:
        return any(s.is_available() for s in self.strategies)

    def available_strategies(self) -> List[str]:
        return [s.name for s in self.strategies if s.is_available()]

    def convert(self, dxf_text: str, method: Optional[str] = None) -> ConversionResult:
        """
        Convert DXF text to DWG.

        Args:
            dxf_text: DXF document
            method: restrict the chain to one named strategy ("cloudconvert",
                "libredwg", "oda"); None tries all of them in order

        Returns:
            ConversionResult; on total failure ``format`` is "fallback-text"
            and ``content`` holds the UTF-8 encoded DXF.
        """
        failures: List[str] = []

        for strategy in self.strategies:
            if method and strategy.name != method:
                continue
            if not strategy.is_available():
                logger.debug(f"{strategy.name} not configured, skipping")
                continue

            logger.info(f"Trying conversion method: {strategy.name}")
            try:
                content = strategy.attempt_conversion(dxf_text)
                return ConversionResult(
                    content=content,
                    format=FORMAT_DWG,
                    strategy=strategy.name,
                    failures=failures,
                )
            except ConversionTimeoutError as e:
                logger.warning(f"Method {strategy.name} timed out: {e}")
                failures.append(f"{strategy.name}: timeout: {e}")
            except Exception as e:
                logger.warning(f"Method {strategy.name} failed: {e}")
                failures.append(f"{strategy.name}: {e}")

        logger.warning("All DWG conversion methods failed, returning DXF format")
        return ConversionResult(
            content=dxf_text.encode("utf-8"),
            format=FORMAT_FALLBACK_TEXT,
            fallback_text=dxf_text,
            warning=FALLBACK_WARNING,
            failures=failures,
        )


def build_default_chain() -> DWGConversionChain:
    """CloudConvert, then LibreDWG, then ODA, configured from the environment."""
    return DWGConversionChain([
        CloudConvertStrategy(),
        LibreDWGStrategy(),
        ODAConverterStrategy(),
    ])
