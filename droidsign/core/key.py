from __future__ import annotations
from typing import TYPE_CHECKING

import os
from contextlib import contextmanager

from droidsign.core.exc import ConfigurationError, FilesystemError
from droidsign.core.ui import ui

if TYPE_CHECKING:
  from typing import Iterator

class SigningKey:
  """Keystore material handed over as base64, materialized for the duration of a run."""
  _encoded: str

  def __init__(self, encoded: str) -> None:
    self._encoded = encoded

  def decoded(self) -> bytes:
    from base64 import b64decode
    from binascii import Error
    try:
      blob = b64decode(''.join(self._encoded.split()), validate=True)
    except (Error, ValueError) as e:
      raise ConfigurationError(f'signing key is not valid base64: {e}') from e
    if not blob:
      raise ConfigurationError('signing key is empty')
    return blob

  @contextmanager
  def scoped(self, name: str = 'signingKey.jks') -> Iterator[str]:
    from tempfile import TemporaryDirectory
    blob = self.decoded()
    with TemporaryDirectory(prefix='droidsign-') as td:
      path = os.path.join(td, name)
      try:
        with open(path, 'wb') as f:
          os.chmod(path, 0o600)
          f.write(blob)
      except OSError as e:
        raise FilesystemError(f'cannot write signing key: {e}') from e
      ui.debug(f'wrote signing key ({len(blob)} bytes) to {path}')
      yield path
