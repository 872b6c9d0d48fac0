from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
  from typing import Optional, Sequence

class FatalError(Exception):
  pass

class SigningError(Exception):
  pass

class ConfigurationError(SigningError):
  pass

class ToolNotFoundError(ConfigurationError):
  pass

class FilesystemError(SigningError):
  pass

class ExternalProcessError(SigningError):
  cmdline: Sequence[str]
  returncode: Optional[int]

  def __init__(self, msg: str, cmdline: Sequence[str] = (), returncode: Optional[int] = None) -> None:
    super().__init__(msg)
    self.cmdline = cmdline
    self.returncode = returncode
