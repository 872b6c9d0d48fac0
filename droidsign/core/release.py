from __future__ import annotations
from typing import TYPE_CHECKING

import asyncio
import os

from pubsub import pub

from droidsign.core.exc import ConfigurationError
from droidsign.core.model.artifact import ArtifactFile, RunSummary, is_derived
from droidsign.core.ui import ui

if TYPE_CHECKING:
  from typing import List, Iterator
  from droidsign.core.android.sign import Signer
  from droidsign.core.config import ToolConfig
  from droidsign.core.model.artifact import SigningCredentials, PipelineResult

def discover_artifacts(directory: str, recursive: bool = False) -> List[ArtifactFile]:
  """Lists .apk and .aab files under directory in a stable order, leaving out our own -aligned/-signed outputs."""
  if not os.path.isdir(directory):
    raise ConfigurationError(f'release directory not found: {directory}')

  def _walk() -> Iterator[str]:
    if recursive:
      for d, dns, fns in os.walk(directory):
        dns.sort()
        for fn in sorted(fns):
          yield os.path.join(d, fn)
    else:
      for fn in sorted(os.listdir(directory)):
        yield os.path.join(directory, fn)

  o: List[ArtifactFile] = []
  for path in _walk():
    if not os.path.isfile(path):
      continue
    artifact = ArtifactFile.of(path)
    if artifact is None:
      continue
    if is_derived(path):
      ui.debug(f'skipping derived file: {path}')
      continue
    o.append(artifact)
  return o

class ReleaseSigner:
  _directory: str
  _credentials: SigningCredentials
  _config: ToolConfig
  _recursive: bool
  _jobs: int

  def __init__(self, directory: str, credentials: SigningCredentials, config: ToolConfig, recursive: bool = False, jobs: int = 1) -> None:
    self._directory = directory
    self._credentials = credentials
    self._config = config
    self._recursive = recursive
    self._jobs = max(1, jobs)

  def discover(self) -> List[ArtifactFile]:
    return discover_artifacts(self._directory, recursive=self._recursive)

  def preflight(self, artifacts: List[ArtifactFile]) -> None:
    """Resolves the tools the given artifacts need, before anything gets spawned."""
    from droidsign.core.android.tools import ToolLocator
    locator = ToolLocator(self._config)
    kinds = {a.kind for a in artifacts}
    if 'apk' in kinds:
      locator.build_tools_path()
    if 'aab' in kinds:
      locator.jarsigner()

  def signer_for(self, artifact: ArtifactFile) -> Signer:
    from droidsign.core.android.sign import APKSigner, AABSigner
    from droidsign.core.android.tools import ToolLocator
    locator = ToolLocator(self._config)
    if artifact.kind == 'apk':
      return APKSigner(locator, self._credentials, timeout=self._config.timeout)
    elif artifact.kind == 'aab':
      return AABSigner(locator, self._credentials, timeout=self._config.timeout)
    assert False, f'unknown artifact kind: {artifact.kind}'

  async def sign(self) -> RunSummary:
    import time

    artifacts = self.discover()
    if not artifacts:
      return RunSummary()

    self.preflight(artifacts)

    at = time.time()
    pub.sendMessage('progress.core.sign.begin', total=len(artifacts))

    sem = asyncio.Semaphore(self._jobs)

    async def _one(artifact: ArtifactFile) -> PipelineResult:
      async with sem:
        result = await self.signer_for(artifact).sign(artifact.path)
      pub.sendMessage('progress.core.sign.artifact', result=result)
      return result

    results = await asyncio.gather(*[_one(a) for a in artifacts])

    pub.sendMessage('progress.core.sign.done', t=(time.time() - at))
    return RunSummary(results=list(results))
