from __future__ import annotations
from typing import TYPE_CHECKING, Optional, List

import os.path

import attr

if TYPE_CHECKING:
  from typing_extensions import Literal
  ArtifactKind = Literal['apk', 'aab']

ALIGNED_SUFFIX = '-aligned.apk'
SIGNED_SUFFIX = '-signed.apk'

def _derive(path: str, suffix: str) -> str:
  d, fn = os.path.split(path)
  if not fn.endswith('.apk'):
    raise ValueError(f'not an apk: {path}')
  return os.path.join(d, fn[:-len('.apk')] + suffix)

def aligned_path_of(path: str) -> str:
  return _derive(path, ALIGNED_SUFFIX)

def signed_path_of(path: str) -> str:
  return _derive(path, SIGNED_SUFFIX)

def is_derived(path: str) -> bool:
  return path.endswith(ALIGNED_SUFFIX) or path.endswith(SIGNED_SUFFIX)

@attr.s(auto_attribs=True, frozen=True)
class SigningCredentials:
  key_path: str
  alias: str
  key_store_password: str = attr.ib(repr=False)
  key_password: Optional[str] = attr.ib(default=None, repr=False)

  def secrets(self) -> List[str]:
    return [x for x in (self.key_store_password, self.key_password) if x]

@attr.s(auto_attribs=True, frozen=True)
class ArtifactFile:
  path: str
  kind: ArtifactKind

  @classmethod
  def of(cls, path: str) -> Optional[ArtifactFile]:
    """Infers the artifact kind from the extension; returns None for anything else."""
    if path.endswith('.apk'):
      return cls(path=path, kind='apk')
    elif path.endswith('.aab'):
      return cls(path=path, kind='aab')
    else:
      return None

@attr.s(auto_attribs=True, frozen=True)
class PipelineResult:
  input_path: str
  output_path: Optional[str] = None
  succeeded: bool = False
  error_message: Optional[str] = None

  @classmethod
  def success(cls, input_path: str, output_path: str) -> PipelineResult:
    return cls(input_path=input_path, output_path=output_path, succeeded=True)

  @classmethod
  def failure(cls, input_path: str, error_message: str) -> PipelineResult:
    return cls(input_path=input_path, succeeded=False, error_message=error_message)

@attr.s(auto_attribs=True, frozen=True)
class RunSummary:
  results: List[PipelineResult] = attr.ib(factory=list)

  @property
  def succeeded(self) -> bool:
    return bool(self.results) and all(r.succeeded for r in self.results)

  @property
  def failures(self) -> List[PipelineResult]:
    return [r for r in self.results if not r.succeeded]

  @property
  def signed_files(self) -> List[str]:
    return [r.output_path for r in self.results if r.succeeded and r.output_path is not None]
