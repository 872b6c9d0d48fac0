from __future__ import annotations
from typing import TYPE_CHECKING

import os

if TYPE_CHECKING:
  from typing import Optional, Mapping

DEFAULT_BUILD_TOOLS_VERSION = '35.0.0'

def _environ(environ: Optional[Mapping[str, str]]) -> Mapping[str, str]:
  return os.environ if environ is None else environ

def get_android_home(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
  return _environ(environ).get('ANDROID_HOME') or None

def get_build_tools_version(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
  return _environ(environ).get('ANDROID_BUILD_TOOLS_VERSION') or None

def get_action_input(name: str, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
  """Reads an action input the way the runner exposes it, e.g. releaseDirectory -> INPUT_RELEASEDIRECTORY."""
  key = 'INPUT_{}'.format(name.replace(' ', '_').upper())
  o = _environ(environ).get(key, '').strip()
  return o if o else None

def is_github_actions(environ: Optional[Mapping[str, str]] = None) -> bool:
  return _environ(environ).get('GITHUB_ACTIONS') == 'true'

def get_github_output_path(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
  return _environ(environ).get('GITHUB_OUTPUT') or None

def get_github_env_path(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
  return _environ(environ).get('GITHUB_ENV') or None
