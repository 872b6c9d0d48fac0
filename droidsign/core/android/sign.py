from __future__ import annotations
from typing import TYPE_CHECKING
from abc import ABC, abstractmethod

from pubsub import pub

from droidsign.core.exc import ExternalProcessError, FilesystemError
from droidsign.core.model.artifact import PipelineResult, aligned_path_of, signed_path_of
from droidsign.core.ui import ui

if TYPE_CHECKING:
  from typing import List, Optional
  from droidsign.core.android.tools import ToolLocator
  from droidsign.core.model.artifact import SigningCredentials

def zipalign_check_args(zipalign: str, path: str) -> List[str]:
  return [zipalign, '-c', '-v', '4', path]

def apksigner_sign_args(apksigner: str, credentials: SigningCredentials, signed: str, aligned: str) -> List[str]:
  return [
    apksigner,
    'sign',
    '--ks', credentials.key_path,
    '--ks-key-alias', credentials.alias,
    '--ks-pass', f'pass:{credentials.key_store_password}',
    '--out', signed,
    *(['--key-pass', f'pass:{credentials.key_password}'] if credentials.key_password else []),
    aligned,
  ]

def apksigner_verify_args(apksigner: str, signed: str) -> List[str]:
  return [apksigner, 'verify', signed]

def jarsigner_args(jarsigner: str, credentials: SigningCredentials, path: str) -> List[str]:
  return [
    jarsigner,
    '-keystore', credentials.key_path,
    '-storepass', credentials.key_store_password,
    *(['-keypass', credentials.key_password] if credentials.key_password else []),
    path,
    credentials.alias,
  ]

class Signer(ABC):
  _locator: ToolLocator
  _credentials: SigningCredentials
  _timeout: Optional[float]
  _stage: Optional[str]

  def __init__(self, locator: ToolLocator, credentials: SigningCredentials, timeout: Optional[float] = None) -> None:
    self._locator = locator
    self._credentials = credentials
    self._timeout = timeout
    self._stage = None

  async def sign(self, path: str) -> PipelineResult:
    """Runs the pipeline for path; process and filesystem failures are captured in the result.

    Configuration errors (i.e. tools cannot be located) are not captured and abort the caller.
    """
    self._stage = None
    try:
      return PipelineResult.success(path, await self._do(path))
    except (ExternalProcessError, FilesystemError) as e:
      msg = f'{self._stage} failed: {e}' if self._stage else str(e)
      ui.debug(f'{path}: {msg}')
      return PipelineResult.failure(path, msg)

  def _enter(self, path: str, stage: str) -> None:
    self._stage = stage
    pub.sendMessage('progress.core.sign.stage', path=path, stage=stage)

  async def _invoke(self, cmdline: List[str]) -> None:
    from droidsign.core.tools import invoke
    await invoke(cmdline, timeout=self._timeout, secrets=self._credentials.secrets())

  @abstractmethod
  async def _do(self, path: str) -> str:
    ...

class APKSigner(Signer):
  async def _do(self, path: str) -> str:
    ui.debug('Zipaligning APK file')
    aligned = await self._align(path, self._locator.zipalign())

    ui.debug('Signing APK file')
    apksigner = self._locator.apksigner()
    signed = await self._sign(apksigner, aligned, path)

    ui.debug('Verifying Signed APK')
    await self._verify(apksigner, signed, path)

    return signed

  async def _align(self, path: str, zipalign: str) -> str:
    from droidsign.core.tools import copyfile
    self._enter(path, 'alignment')
    aligned = aligned_path_of(path)
    # check mode only: the aligned file is a plain copy of the input
    await self._invoke(zipalign_check_args(zipalign, path))
    copyfile(path, aligned)
    return aligned

  async def _sign(self, apksigner: str, aligned: str, path: str) -> str:
    self._enter(path, 'signing')
    signed = signed_path_of(path)
    await self._invoke(apksigner_sign_args(apksigner, self._credentials, signed, aligned))
    return signed

  async def _verify(self, apksigner: str, signed: str, path: str) -> None:
    self._enter(path, 'verification')
    await self._invoke(apksigner_verify_args(apksigner, signed))

class AABSigner(Signer):
  async def _do(self, path: str) -> str:
    ui.debug('Signing AAB file')
    jarsigner = self._locator.jarsigner()
    self._enter(path, 'signing')
    await self._invoke(jarsigner_args(jarsigner, self._credentials, path))
    return path
