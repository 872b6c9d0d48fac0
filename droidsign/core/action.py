from __future__ import annotations
from typing import TYPE_CHECKING

from droidsign.core.exc import FilesystemError
from droidsign.core.ui import ui

if TYPE_CHECKING:
  from typing import Dict, List, Optional, Tuple

class ActionOutputs:
  """Publishes results the way workflow steps consume them: step outputs and exported environment variables.

  Without a runner (i.e. GITHUB_OUTPUT/GITHUB_ENV unset), signed paths are printed to stdout one per line instead.
  """
  _output_path: Optional[str]
  _env_path: Optional[str]

  def __init__(self, output_path: Optional[str] = None, env_path: Optional[str] = None) -> None:
    self._output_path = output_path
    self._env_path = env_path

  @staticmethod
  def build(signed: List[str]) -> Tuple[Dict[str, str], Dict[str, str]]:
    outputs: Dict[str, str] = dict()
    envs: Dict[str, str] = dict()
    if len(signed) == 1:
      outputs['signedReleaseFile'] = signed[0]
      envs['SIGNED_RELEASE_FILE'] = signed[0]
    elif len(signed) > 1:
      for i, path in enumerate(signed):
        outputs[f'signedReleaseFile{i}'] = path
        envs[f'SIGNED_RELEASE_FILE_{i}'] = path
      outputs['signedReleaseFiles'] = ':'.join(signed)
      envs['SIGNED_RELEASE_FILES'] = ':'.join(signed)
      outputs['nosignedReleaseFiles'] = str(len(signed))
      envs['NOSIGNED_RELEASE_FILES'] = str(len(signed))
    return outputs, envs

  def publish(self, signed: List[str]) -> None:
    outputs, envs = self.build(signed)
    if self._output_path is None and self._env_path is None:
      for path in signed:
        ui.stdout(path)
      return
    if self._output_path is not None:
      self._append(self._output_path, outputs)
    if self._env_path is not None:
      self._append(self._env_path, envs)

  def _append(self, path: str, values: Dict[str, str]) -> None:
    from uuid import uuid4
    try:
      with open(path, 'a', encoding='utf-8') as f:
        for k, v in values.items():
          ui.debug(f'setting {k}={v}')
          delim = f'ghadelimiter_{uuid4()}'
          f.write(f'{k}<<{delim}\n{v}\n{delim}\n')
    except OSError as e:
      raise FilesystemError(f'cannot write to {path}: {e}') from e
