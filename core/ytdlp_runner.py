#!/usr/bin/env python3
"""
yt-dlp Runner

Runs the yt-dlp command line tool as a subprocess. yt-dlp is installed
differently across hosts (standalone binary vs. pip module), so several
invocation strategies are tried in order until one succeeds.
"""

import os
import re
import json
import logging
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from core.config import Config

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Raised when an external command fails or cannot be started"""

    def __init__(self, message: str, command: str = '', returncode: Optional[int] = None, stderr: str = ''):
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


def clean_output(text: str) -> str:
    """Collapse all whitespace runs (including newlines) into single spaces"""
    return re.sub(r'\s+', ' ', text or '').strip()


def run_command(command: str, args: List[str], timeout: Optional[int] = None) -> str:
    """
    Run a command and return its stdout

    Args:
        command: Executable name or path
        args: Arguments to pass
        timeout: Seconds before the process is killed

    Returns:
        Captured stdout

    Raises:
        CommandError: On non-zero exit, missing executable, or timeout
    """
    try:
        result = subprocess.run(
            [command, *args],
            capture_output=True,
            text=True,
            timeout=timeout
        )
    except FileNotFoundError:
        logger.warning(f"⚠️ Command not found: {command}")
        raise CommandError(f"Command not found: {command}", command=command)
    except OSError as e:
        logger.warning(f"⚠️ Could not start {command}: {e}")
        raise CommandError(f"Could not start {command}: {e}", command=command)
    except subprocess.TimeoutExpired:
        logger.error(f"❌ Command \"{command}\" timed out after {timeout}s")
        raise CommandError(f"Command timed out after {timeout}s", command=command)

    if result.returncode != 0:
        stderr = clean_output(result.stderr)
        logger.error(
            f"❌ Command \"{command}\" failed (code {result.returncode}): "
            f"{stderr[:Config.STDERR_LOG_CHARS]}"
        )
        raise CommandError(
            f"Command failed: {stderr[:Config.STDERR_ERROR_CHARS]}...",
            command=command,
            returncode=result.returncode,
            stderr=stderr
        )

    return result.stdout


def parse_print_json(stdout: str) -> Dict:
    """
    Parse the metadata yt-dlp prints with --print-json

    yt-dlp prints one JSON object per downloaded item, possibly after other
    output, so the last line that parses as an object wins.

    Returns:
        Parsed info dict, or {} if nothing could be parsed
    """
    for line in reversed((stdout or '').strip().splitlines()):
        line = line.strip()
        if not line.startswith('{'):
            continue
        try:
            info = json.loads(line)
        except ValueError:
            continue
        if isinstance(info, dict):
            return info

    logger.warning("⚠️ Could not parse yt-dlp JSON metadata, using defaults")
    return {}


def find_downloaded_file(temp_dir: str, unique_id: str) -> Optional[Path]:
    """
    Locate a download by filename prefix

    yt-dlp may pick a different extension than the one requested in the
    output template (e.g., .webm or .mkv after a merge).
    """
    try:
        for name in sorted(os.listdir(temp_dir)):
            if name.startswith(unique_id) and not name.endswith('.part'):
                return Path(temp_dir) / name
    except OSError as e:
        logger.warning(f"⚠️ Could not list temp dir {temp_dir}: {e}")
    return None


def cleanup_partial_files(temp_dir: str, unique_id: str) -> int:
    """
    Delete every file in temp_dir starting with unique_id

    Returns:
        Number of files removed
    """
    removed = 0
    try:
        names = os.listdir(temp_dir)
    except OSError as e:
        logger.warning(f"⚠️ Cleanup warning: {e}")
        return 0

    for name in names:
        if not name.startswith(unique_id):
            continue
        try:
            os.unlink(os.path.join(temp_dir, name))
            removed += 1
            logger.info(f"🧹 Cleaned up temp file: {name}")
        except OSError as e:
            logger.warning(f"⚠️ Cleanup warning for {name}: {e}")
    return removed


class YtDlpRunner:
    """Download a URL with yt-dlp, falling back across invocation strategies"""

    def __init__(
        self,
        strategies: Optional[List[Tuple[str, str, List[str]]]] = None,
        timeout: Optional[int] = None,
        cookies_file: Optional[str] = None,
        format_selector: Optional[str] = None
    ):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.strategies = strategies if strategies is not None else Config.get_ytdlp_command_strategies()
        self.timeout = timeout or Config.get_ytdlp_timeout()
        self.cookies_file = cookies_file if cookies_file is not None else Config.get_ytdlp_cookies_file()
        self.format_selector = format_selector or Config.YTDLP_FORMAT

    def build_args(self, url: str, output_path: str) -> List[str]:
        """Build the yt-dlp argument list (without the executable)"""
        args = [
            '-f', self.format_selector,
            '-o', output_path,
            '--no-warnings',
            '--print-json',
        ]
        if self.cookies_file:
            args += ['--cookies', self.cookies_file]
        args.append(url)
        return args

    def download(
        self,
        url: str,
        output_path: str,
        on_strategy: Optional[Callable[[str], None]] = None
    ) -> Tuple[str, str]:
        """
        Download url to output_path

        Args:
            url: Page or media URL understood by yt-dlp
            output_path: Output template (yt-dlp may change the extension)
            on_strategy: Called with each strategy name before it is tried

        Returns:
            Tuple of (stdout, strategy_name)

        Raises:
            CommandError: If every strategy failed (the last failure is raised)
        """
        if not self.strategies:
            raise CommandError("No yt-dlp invocation strategies configured")

        args = self.build_args(url, output_path)
        last_error: Optional[CommandError] = None

        for name, executable, leading_args in self.strategies:
            self.logger.info(f"🔧 [YT-DLP] Trying strategy '{name}': {executable} {' '.join(leading_args)}".rstrip())
            if on_strategy:
                on_strategy(name)
            try:
                stdout = run_command(executable, [*leading_args, *args], timeout=self.timeout)
                self.logger.info(f"✅ [YT-DLP] Download finished using '{name}'")
                return stdout, name
            except CommandError as e:
                last_error = e
                self.logger.warning(f"⚠️ [YT-DLP] Strategy '{name}' failed: {str(e)[:100]}")

        raise last_error
