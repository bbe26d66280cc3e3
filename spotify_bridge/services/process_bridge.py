"""Script interpreter bridge: run AppleScript text through osascript.

Each call spawns one interpreter process and races it against two timeouts:
the inner process wait and the outer call bound. Whichever fires, the process
is killed and reaped before the call returns.
"""

import asyncio
import shutil

from spotify_bridge.config import Settings
from spotify_bridge.exceptions import (
    CommandExecutionError,
    CommandNonZeroExitError,
    CommandTimeoutError,
    InterpreterError,
)
from spotify_bridge.logging_config import get_logger, log_with_context
from spotify_bridge.models import CommandRequest

logger = get_logger(__name__)

# osascript prints this when the script raised inside the target application
EXECUTION_ERROR_MARKER = "execution error"


class ProcessCommandBridge:
    """Runs scripts against the target application and returns their trimmed output.

    Holds configuration only, so a single instance is safe for concurrent callers.
    """

    def __init__(self, settings: Settings):
        self.interpreter = settings.osascript_path
        self.process_timeout = settings.process_timeout
        self.call_timeout = settings.call_timeout

    def interpreter_available(self) -> bool:
        """Check whether the interpreter executable can be found."""
        return shutil.which(self.interpreter) is not None

    async def run_request(self, request: CommandRequest) -> str:
        """Run a CommandRequest. See run()."""
        return await self.run(request.script, request.timeout)

    async def run(self, script: str, timeout: float | None = None) -> str:
        """Run one script and return its trimmed stdout.

        Args:
            script: Script text passed to the interpreter with -e
            timeout: Inner process timeout in seconds (defaults to settings.process_timeout).
                The outer call timeout keeps the configured margin above it.

        Returns:
            Trimmed stdout of the interpreter.

        Raises:
            CommandTimeoutError: Process or call exceeded its timeout.
            CommandExecutionError: Output carries an execution error.
            CommandNonZeroExitError: Non-zero exit without output.
            InterpreterError: Interpreter could not be started.
        """
        process_timeout = self.process_timeout if timeout is None else timeout
        call_timeout = process_timeout + (self.call_timeout - self.process_timeout)

        try:
            return await asyncio.wait_for(self._execute(script, process_timeout), timeout=call_timeout)
        except TimeoutError:
            log_with_context(
                logger,
                "warning",
                "Script call timed out",
                call_timeout=call_timeout,
                event_type="script_call_timeout",
            )
            raise CommandTimeoutError(
                f"Script call timed out after {call_timeout}s",
                details={"timeout": call_timeout, "stage": "call"},
            ) from None

    async def _execute(self, script: str, process_timeout: float) -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                self.interpreter,
                "-e",
                script,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            # ValueError: argv the OS refuses, such as a script with a NUL byte
            log_with_context(
                logger,
                "error",
                "Cannot start script interpreter",
                interpreter=self.interpreter,
                error=str(e),
                event_type="interpreter_error",
            )
            raise InterpreterError(
                f"Cannot start script interpreter {self.interpreter!r}: {e}",
                details={"interpreter": self.interpreter},
            ) from e

        try:
            try:
                stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(), timeout=process_timeout)
            except TimeoutError:
                log_with_context(
                    logger,
                    "warning",
                    "Script execution timed out",
                    pid=process.pid,
                    process_timeout=process_timeout,
                    event_type="script_process_timeout",
                )
                raise CommandTimeoutError(
                    f"Script execution timed out after {process_timeout}s",
                    details={"timeout": process_timeout, "stage": "process"},
                ) from None
        finally:
            await self._reap(process)

        stdout = stdout_bytes.decode("utf-8", errors="replace").strip()
        stderr = stderr_bytes.decode("utf-8", errors="replace").strip()

        if stderr:
            # Spotify emits benign warnings here; only report them
            log_with_context(
                logger,
                "warning",
                "Script interpreter wrote to stderr",
                stderr=stderr,
                exit_code=process.returncode,
                event_type="script_stderr",
            )

        if stdout.startswith(EXECUTION_ERROR_MARKER):
            log_with_context(
                logger,
                "warning",
                "Script execution error",
                output=stdout,
                event_type="script_execution_error",
            )
            raise CommandExecutionError(stdout, details={"exit_code": process.returncode})

        if process.returncode != 0 and not stdout:
            log_with_context(
                logger,
                "warning",
                "Script interpreter exited with error",
                exit_code=process.returncode,
                stderr=stderr,
                event_type="script_non_zero_exit",
            )
            raise CommandNonZeroExitError(process.returncode, stderr)

        return stdout

    @staticmethod
    async def _reap(process: asyncio.subprocess.Process) -> None:
        """Kill the process if it is still alive and wait for it to exit."""
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()
