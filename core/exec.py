"""Shell command execution for lock tools."""

import asyncio
import logging
import os
import shlex
import shutil
from pathlib import Path, PurePosixPath

from packaging.version import InvalidVersion, Version

from .config import Settings, get_settings
from .errors import ExecError, TemporaryError
from .models import ExecOptions, ToolConstraint

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


def _resolve_cwd(options: ExecOptions, settings: Settings) -> Path:
    local_dir = Path(settings.local_dir)
    if options.cwd_file:
        return local_dir / PurePosixPath(options.cwd_file).parent
    return local_dir


def _install_tool_steps(constraints: list[ToolConstraint]) -> list[str]:
    """Build ``install-tool`` steps for constraints pinned to an exact version."""
    steps = []
    for constraint in constraints:
        if not constraint.constraint:
            logger.debug("No constraint for %s, using image default", constraint.tool_name)
            continue
        try:
            version = Version(constraint.constraint)
        except InvalidVersion:
            logger.debug(
                "Constraint %s for %s is not an exact version, using image default",
                constraint.constraint,
                constraint.tool_name,
            )
            continue
        steps.append(f"install-tool {constraint.tool_name} {version}")
    return steps


def wrap_docker_command(
    cmd: str, options: ExecOptions, settings: Settings, cwd: Path
) -> str:
    """Wrap ``cmd`` into a ``docker run`` invocation of the sidecar image."""
    image = (options.docker.image if options.docker else None) or settings.docker_image
    local_dir = str(Path(settings.local_dir).resolve())
    inner = " && ".join([*_install_tool_steps(options.tool_constraints), cmd])
    parts = [
        "docker run --rm --label=lockfix_child",
        f'-v "{local_dir}":"{local_dir}"',
        *(f"-e {name}" for name in sorted(options.env)),
        f'-w "{cwd.resolve()}"',
        image,
        f"bash -l -c {shlex.quote(inner)}",
    ]
    return " ".join(parts)


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        process.kill()
        await process.wait()


async def _run(cmd: str, cwd: Path, env: dict[str, str], timeout: float) -> None:
    logger.debug("Executing command: %s (cwd=%s)", cmd, cwd)
    try:
        process = await asyncio.create_subprocess_shell(
            cmd,
            cwd=cwd,
            env={**os.environ, **env},
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise TemporaryError(f"Could not start command {cmd!r}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.CancelledError:
        await _kill(process)
        raise
    except asyncio.TimeoutError:
        await _kill(process)
        raise ExecError(f"Command timed out after {timeout}s: {cmd}", cmd=cmd)

    out = stdout.decode("utf-8", errors="replace")
    err = stderr.decode("utf-8", errors="replace")
    if process.returncode == COMMAND_NOT_FOUND:
        raise TemporaryError(f"Command not found: {cmd}")
    if process.returncode != 0:
        message = err.strip() or f"Command failed with exit code {process.returncode}: {cmd}"
        raise ExecError(
            message, cmd=cmd, exit_code=process.returncode, stdout=out, stderr=err
        )
    logger.debug("Command succeeded: %s", cmd)


async def exec_commands(
    cmds: list[str], options: ExecOptions, settings: Settings | None = None
) -> None:
    """Run commands in order, stopping at the first failure.

    Args:
        cmds: Shell command strings
        options: Working directory, docker mode and tool constraints
        settings: Runtime settings, defaults to the global settings

    Raises:
        TemporaryError: The toolchain could not be started
        ExecError: A command exited unsuccessfully or timed out
    """
    settings = settings or get_settings()
    cwd = _resolve_cwd(options, settings)
    use_docker = settings.binary_source == "docker" and options.docker is not None

    if use_docker and shutil.which("docker") is None:
        raise TemporaryError("docker binary not available")

    for cmd in cmds:
        if use_docker:
            cmd = wrap_docker_command(cmd, options, settings, cwd)
        await _run(cmd, cwd, options.env, settings.exec_timeout)
