import asyncio
import json
import re
from typing import Any, Dict, List, Mapping, Optional

from app.platform.config import settings
from app.platform.exceptions import EngineError
from app.platform.logger import get_logger

logger = get_logger("lighthouse_engine")

DEFAULT_CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Flags the service sets itself, or that make Lighthouse read or write local files
RESERVED_FLAGS = frozenset(
    {
        "output",
        "output-path",
        "port",
        "gather-mode",
        "audit-mode",
        "config-path",
        "plugins",
        "chrome-flags",
        "save-assets",
        "view",
        "cli-flags-path",
        "budget-path",
        "precomputed-lantern-data-path",
    }
)

_OPTION_KEY = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")


def build_engine_options(options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Default category set, overridden key by key by caller options. Reserved keys are dropped."""
    merged: Dict[str, Any] = {"onlyCategories": list(DEFAULT_CATEGORIES)}
    for key, value in (options or {}).items():
        if not isinstance(key, str) or not _OPTION_KEY.fullmatch(key):
            logger.warning(f"Ignoring malformed Lighthouse option: {key!r}")
            continue
        if _flag_name(key) in RESERVED_FLAGS:
            logger.warning(f"Ignoring reserved Lighthouse option: {key}")
            continue
        merged[key] = value
    return merged


def _flag_name(key: str) -> str:
    key = key.replace("_", "-")
    if "-" in key:
        return key.lower()
    return _CAMEL_BOUNDARY.sub("-", key).lower()


def options_to_flags(options: Mapping[str, Any]) -> List[str]:
    """Translate an options mapping into Lighthouse CLI flags."""
    flags = []
    for key, value in options.items():
        if value is None:
            continue
        name = _flag_name(key)
        if isinstance(value, bool):
            flags.append(f"--{name}" if value else f"--no-{name}")
        elif isinstance(value, (list, tuple)):
            flags.append(f"--{name}={','.join(str(v) for v in value)}")
        elif isinstance(value, dict):
            flags.append(f"--{name}={json.dumps(value)}")
        else:
            flags.append(f"--{name}={value}")
    return flags


class LighthouseEngine:
    """Runs the ``lighthouse`` CLI against an already running Chrome."""

    def __init__(self, binary: Optional[str] = None, timeout: Optional[float] = None):
        self.binary = binary or settings.LIGHTHOUSE_BIN
        self.timeout = timeout if timeout is not None else settings.LIGHTHOUSE_TIMEOUT

    def build_command(self, url: str, options: Mapping[str, Any], port: int) -> List[str]:
        return [
            self.binary,
            url,
            f"--port={port}",
            "--output=json",
            "--output-path=stdout",
            "--quiet",
            *options_to_flags(build_engine_options(options)),
        ]

    async def run_audit(self, url: str, options: Mapping[str, Any], port: int) -> Dict[str, Any]:
        command = self.build_command(url, options, port)
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise EngineError(f"Lighthouse executable not found: {self.binary}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.CancelledError:
            self._kill(process)
            raise
        except asyncio.TimeoutError as e:
            self._kill(process)
            await process.wait()
            raise EngineError(f"Lighthouse timed out after {self.timeout:g}s for {url}") from e

        if process.returncode != 0:
            detail = stderr.decode(errors="replace").strip().splitlines()
            raise EngineError(
                f"Lighthouse exited with code {process.returncode}: {detail[-1] if detail else 'no output'}"
            )

        return self.parse_report(stdout)

    @staticmethod
    def _kill(process) -> None:
        try:
            process.kill()
        except ProcessLookupError:
            pass

    @staticmethod
    def parse_report(stdout: bytes) -> Dict[str, Any]:
        """Accept either a bare LHR or a ``{"lhr": ...}`` runner result."""
        if not stdout.strip():
            raise EngineError("Lighthouse returned no report")
        try:
            payload = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise EngineError(f"Lighthouse returned malformed JSON: {e}") from e

        if isinstance(payload, dict) and isinstance(payload.get("lhr"), dict):
            payload = payload["lhr"]
        if not isinstance(payload, dict):
            raise EngineError("Lighthouse returned no report")
        return payload
