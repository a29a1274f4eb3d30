"""TypeScript declaration exporter for the Tauri `invoke` function."""

import os
import stat
import tempfile
from pathlib import Path
from typing import Iterable, List, Union

from registry.errors import ConfigError, DeclarationWriteError, EmptyCommandSetError
from registry.model import CommandName


DECLARATION_FILENAME = "invoke.d.ts"
IMPORT_LINE = "import * as tauri from '@tauri-apps/api/tauri';"
MODULE_NAME = "@tauri-apps/api"
INVOKE_SIGNATURE = "function invoke<T>(cmd: Commands, args?: InvokeArgs): Promise<T>;"

EMPTY_NEVER = "never"
EMPTY_ERROR = "error"
EMPTY_POLICIES = (EMPTY_NEVER, EMPTY_ERROR)

INDENT = "    "
FIRST_MEMBER_PREFIX = INDENT * 2 + "  "
MEMBER_PREFIX = INDENT * 2 + "| "


def render_union(commands: Iterable[CommandName], empty_policy: str = EMPTY_NEVER) -> List[str]:
    """
    Render the lines of the `Commands` union, in the given order.

    The first member is aligned with the `|` of the following ones and the
    last member carries the terminating semicolon.

    Raises:
        EmptyCommandSetError: If there are no commands and the policy is "error".
    """
    if empty_policy not in EMPTY_POLICIES:
        raise ConfigError(f"Unknown empty policy: {empty_policy!r} (expected one of {', '.join(EMPTY_POLICIES)})")

    members = [f"'{name}'" for name in commands]
    if not members:
        if empty_policy == EMPTY_ERROR:
            raise EmptyCommandSetError("No Tauri commands were found; refusing to write an empty declaration")
        # `never` makes every invoke() call a type error
        members = ["never"]

    lines = [FIRST_MEMBER_PREFIX + members[0]]
    lines.extend(MEMBER_PREFIX + member for member in members[1:])
    lines[-1] += ";"
    return lines


def render_declaration(commands: Iterable[CommandName], empty_policy: str = EMPTY_NEVER) -> str:
    """
    Render the full `invoke.d.ts` text.

    Args:
        commands: Command names in CommandSet order (not sorted).
        empty_policy: "never" renders an unsatisfiable union when no command
                      exists; "error" raises EmptyCommandSetError instead.

    Returns:
        The declaration text, ending with a newline.
    """
    lines = [
        IMPORT_LINE,
        f"declare module '{MODULE_NAME}' {{",
        f"{INDENT}type Commands = ",
        *render_union(commands, empty_policy),
        "",
        f"{INDENT}{INVOKE_SIGNATURE}",
        "}",
    ]
    return "\n".join(lines) + "\n"


def write_declaration(
    commands: Iterable[CommandName],
    output_dir: Union[str, Path],
    empty_policy: str = EMPTY_NEVER,
) -> Path:
    """
    Render and atomically write `invoke.d.ts` into a directory.

    The text is rendered before anything touches the disk; it is then
    written to a temporary file next to the target and renamed over it, so
    readers see either the old file or the complete new one.

    Returns:
        Path of the written file.

    Raises:
        DeclarationWriteError: If the directory or file cannot be written.
    """
    content = render_declaration(commands, empty_policy)
    output_dir = Path(output_dir)
    target = output_dir / DECLARATION_FILENAME

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DeclarationWriteError(e.errno, f"Cannot create output directory: {e.strerror}", str(output_dir)) from e

    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="\n",
            dir=output_dir,
            prefix=f".{DECLARATION_FILENAME}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(content)
        os.chmod(tmp_name, _file_mode(target))
        os.replace(tmp_name, target)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise DeclarationWriteError(e.errno, f"Cannot write declaration: {e.strerror}", str(target)) from e

    return target


def _file_mode(target: Path) -> int:
    """Mode for the new file: the existing file's, else 0o666 minus the umask."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask
