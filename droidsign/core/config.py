from __future__ import annotations
from typing import TYPE_CHECKING, Optional

import attr

from droidsign.core.env import DEFAULT_BUILD_TOOLS_VERSION

if TYPE_CHECKING:
  from typing import Mapping

DEFAULT_TIMEOUT = 600.

@attr.s(auto_attribs=True, frozen=True)
class ToolConfig:
  android_home: Optional[str]
  build_tools_version: str = DEFAULT_BUILD_TOOLS_VERSION
  search_path: Optional[str] = None
  timeout: Optional[float] = DEFAULT_TIMEOUT

  @classmethod
  def from_env(cls, build_tools_version: Optional[str] = None, timeout: Optional[float] = DEFAULT_TIMEOUT, environ: Optional[Mapping[str, str]] = None) -> ToolConfig:
    from droidsign.core.env import get_android_home
    return cls(
      android_home=get_android_home(environ),
      build_tools_version=resolve_build_tools_version(build_tools_version, environ),
      search_path=None if environ is None else environ.get('PATH'),
      timeout=timeout,
    )

@attr.s(auto_attribs=True, frozen=True)
class ActionInputs:
  release_directory: str
  signing_key_base64: str = attr.ib(repr=False)
  alias: str
  key_store_password: str = attr.ib(repr=False)
  key_password: Optional[str] = attr.ib(default=None, repr=False)
  build_tools_version: Optional[str] = None
  recursive: bool = False
  jobs: int = 1
  timeout: Optional[float] = DEFAULT_TIMEOUT

def resolve_build_tools_version(given: Optional[str], environ: Optional[Mapping[str, str]] = None) -> str:
  from droidsign.core.env import get_build_tools_version
  return given or get_build_tools_version(environ) or DEFAULT_BUILD_TOOLS_VERSION
