from __future__ import annotations
from typing import TYPE_CHECKING

import asyncio
import re
from collections import deque
from droidsign.core.exc import ExternalProcessError, FilesystemError, ToolNotFoundError
from droidsign.core.ui import ui

if TYPE_CHECKING:
  from typing import Optional, Sequence, Iterable, List, AsyncIterator

MASK = '***'
CHUNK_SIZE = 65536
MAX_LINE = 4096

def _mask_word(word: str, secrets: Sequence[str]) -> str:
  # whole words only, optionally behind apksigner's pass: prefix
  for s in secrets:
    if word == s:
      return MASK
    if word == f'pass:{s}':
      return f'pass:{MASK}'
  return word

def _mask_line(line: str, secrets: Sequence[str]) -> str:
  return re.sub(r'\S+', lambda m: _mask_word(m.group(0), secrets), line)

def masked(cmdline: Sequence[str], secrets: Iterable[str] = ()) -> str:
  from shlex import quote
  ss = [s for s in secrets if s]
  return ' '.join(quote(_mask_word(a, ss)) for a in cmdline)

def require_in_path(cmd: str, path: Optional[str] = None) -> str:
  from shutil import which
  found = which(cmd, path=path)
  if found is None:
    raise ToolNotFoundError(f'not found in PATH: {cmd}')
  return found

def copyfile(src: str, dst: str) -> None:
  from shutil import copyfile as _copyfile
  try:
    _copyfile(src, dst)
  except OSError as e:
    raise FilesystemError(f'cannot copy {src} to {dst}: {e}') from e

async def _lines_of(stream: asyncio.StreamReader) -> AsyncIterator[str]:
  """Splits stream into lines by reading fixed-size chunks; overlong lines are cut at MAX_LINE characters."""
  buf = b''
  while True:
    chunk = await stream.read(CHUNK_SIZE)
    if not chunk:
      break
    buf += chunk
    *complete, buf = buf.split(b'\n')
    for l in complete:
      yield l[:MAX_LINE].decode('UTF-8', errors='replace').rstrip('\r')
    if len(buf) > MAX_LINE:
      # keep only what is shown; the remainder of the line is dropped
      buf = buf[:MAX_LINE]
  if buf:
    yield buf[:MAX_LINE].decode('UTF-8', errors='replace').rstrip('\r')

async def invoke(cmdline: Sequence[str], timeout: Optional[float] = None, secrets: Iterable[str] = (), tail: int = 10) -> List[str]:
  """Runs cmdline to completion, echoing its merged output at debug level.

  Returns the last `tail` lines of output. Raises ExternalProcessError on non-zero exit, on spawn failure, or when
  the process outlives `timeout` seconds. The process never outlives this call.
  """
  from subprocess import PIPE, STDOUT

  ss = [s for s in secrets if s]
  shown = masked(cmdline, ss)
  ui.debug(f'invoking: {shown}')

  try:
    p = await asyncio.create_subprocess_exec(*cmdline, stdin=asyncio.subprocess.DEVNULL, stdout=PIPE, stderr=STDOUT)
  except OSError as e:
    raise ExternalProcessError(f'cannot execute {cmdline[0]}: {e}', cmdline=cmdline) from e

  lines: deque[str] = deque(maxlen=tail)

  async def _pump() -> int:
    assert p.stdout is not None
    async for l in _lines_of(p.stdout):
      line = _mask_line(l, ss)
      lines.append(line)
      ui.debug(line)
    return await p.wait()

  try:
    code = await asyncio.wait_for(_pump(), timeout=timeout)
  except asyncio.TimeoutError:
    ui.warn(f'process does not seem to terminate in {timeout} sec., killing it: {shown}')
    raise ExternalProcessError(f'timed out after {timeout} sec.: {shown}', cmdline=cmdline)
  finally:
    if p.returncode is None:
      p.kill()
      await p.wait()

  if code:
    detail = '; '.join(l for l in lines if l.strip())
    raise ExternalProcessError(
      'exited with status {code}: {cmd}{detail}'.format(code=code, cmd=shown, detail=f' ({detail})' if detail else ''),
      cmdline=cmdline,
      returncode=code,
    )
  return list(lines)
