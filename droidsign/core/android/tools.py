from __future__ import annotations
from typing import TYPE_CHECKING

import os

from droidsign.core.exc import ConfigurationError
from droidsign.core.ui import ui

if TYPE_CHECKING:
  from typing import TypedDict
  from droidsign.core.config import ToolConfig

  class Toolchain(TypedDict):
    zipalign: str
    apksigner: str
    jarsigner: str

class ToolLocator:
  """Resolves the external executables needed for signing.

  zipalign and apksigner come from <android_home>/build-tools/<version>; only that directory is checked here, and a
  missing executable inside it surfaces when it is invoked. jarsigner is searched in PATH.
  """
  _config: ToolConfig

  def __init__(self, config: ToolConfig) -> None:
    self._config = config

  def build_tools_path(self) -> str:
    android_home = self._config.android_home
    if not android_home:
      raise ConfigurationError('ANDROID_HOME environment variable is not set.')

    path = os.path.join(android_home, 'build-tools', self._config.build_tools_version)
    if not os.path.isdir(path):
      raise ConfigurationError(f"Couldn't find the Android build tools @ {path}")
    return path

  def zipalign(self) -> str:
    path = os.path.join(self.build_tools_path(), 'zipalign')
    ui.debug(f"Found 'zipalign' @ {path}")
    return path

  def apksigner(self) -> str:
    path = os.path.join(self.build_tools_path(), 'apksigner')
    ui.debug(f"Found 'apksigner' @ {path}")
    return path

  def jarsigner(self) -> str:
    from droidsign.core.tools import require_in_path
    path = require_in_path('jarsigner', self._config.search_path)
    ui.debug(f"Found 'jarsigner' @ {path}")
    return path

  def toolchain(self) -> Toolchain:
    return dict(
      zipalign=self.zipalign(),
      apksigner=self.apksigner(),
      jarsigner=self.jarsigner(),
    )
