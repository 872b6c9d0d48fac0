from __future__ import annotations
from typing import TYPE_CHECKING
import asyncio
import sys

from droidsign.core.ui import ui

if TYPE_CHECKING:
  from argparse import Namespace
  from typing import Optional, Coroutine, Any, List, Mapping
  from droidsign.core.config import ActionInputs
  from droidsign.core.model.artifact import RunSummary

class Shell:
  _environ: Optional[Mapping[str, str]]

  def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
    self._environ = environ

  @classmethod
  def _version(cls) -> str:
    from droidsign import __version__
    return f'droidsign {__version__}, signs Android release files (APK/AAB) with the SDK tools\n'

  def _launch(self, coro: Coroutine[Any, Any, RunSummary]) -> RunSummary:
    return asyncio.run(coro)

  def invoke(self, argv: Optional[List[str]] = None) -> int:
    from argparse import ArgumentParser
    from droidsign.core.env import is_github_actions

    parser = ArgumentParser(description='Sign Android release files (APK/AAB) found in a directory')
    parser.add_argument('-d', '--release-directory', metavar='DIR', help='Directory to scan for .apk/.aab files')
    parser.add_argument('-k', '--signing-key-base64', metavar='BASE64', help='Base64-encoded keystore')
    parser.add_argument('-a', '--alias', metavar='ALIAS', help='Key alias')
    parser.add_argument('-p', '--key-store-password', metavar='PASSWORD', help='Keystore password')
    parser.add_argument('--key-password', metavar='PASSWORD', help='Key password (optional)')
    parser.add_argument('--build-tools-version', metavar='VERSION', help='Android build-tools version (default: $ANDROID_BUILD_TOOLS_VERSION or 35.0.0)')
    parser.add_argument('-r', '--recursive', action='store_true', default=None, help='Scan subdirectories as well')
    parser.add_argument('-j', '--jobs', type=int, metavar='N', help='Sign up to N files in parallel')
    parser.add_argument('--timeout', type=float, metavar='SEC', help='Give up on an external tool after SEC seconds (default: 600)')
    parser.add_argument('--debug', action='store_true', help='Debug mode')
    parser.add_argument('--version', action='store_true', help='Version information')
    args = parser.parse_args(argv)

    if args.version:
      ui.stderr(self._version())
      return 0

    if is_github_actions(self._environ):
      ui.enable_annotations()
    ui.set_level(ui.DEBUG if args.debug else ui.INFO)

    inputs = self._inputs(args)
    for secret in (inputs.key_store_password, inputs.key_password, inputs.signing_key_base64):
      ui.add_mask(secret)

    summary = self._launch(self._sign(inputs))
    return self._report(summary)

  def _input(self, given: Any, name: str) -> Optional[str]:
    from droidsign.core.env import get_action_input
    if given is not None:
      return str(given)
    return get_action_input(name, self._environ)

  def _require(self, given: Any, name: str, flag: str) -> str:
    o = self._input(given, name)
    if not o:
      ui.fatal(f'missing required input: {name} (use {flag})')
    return o

  def _inputs(self, args: Namespace) -> ActionInputs:
    from droidsign.core.config import ActionInputs, DEFAULT_TIMEOUT

    recursive = self._input(args.recursive, 'recursive')
    jobs = self._input(args.jobs, 'jobs')
    timeout = self._input(args.timeout, 'timeout')

    try:
      return ActionInputs(
        release_directory=self._require(args.release_directory, 'releaseDirectory', '-d'),
        signing_key_base64=self._require(args.signing_key_base64, 'signingKeyBase64', '-k'),
        alias=self._require(args.alias, 'alias', '-a'),
        key_store_password=self._require(args.key_store_password, 'keyStorePassword', '-p'),
        key_password=self._input(args.key_password, 'keyPassword'),
        build_tools_version=self._input(args.build_tools_version, 'buildToolsVersion'),
        recursive=(recursive or '').lower() in ['true', '1', 'yes'],
        jobs=int(jobs) if jobs else 1,
        timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
      )
    except ValueError as e:
      ui.fatal(f'invalid input: {e}')

  async def _sign(self, inputs: ActionInputs) -> RunSummary:
    from droidsign.core.config import ToolConfig
    from droidsign.core.exc import ConfigurationError, FilesystemError
    from droidsign.core.key import SigningKey
    from droidsign.core.model.artifact import SigningCredentials
    from droidsign.core.release import ReleaseSigner
    from droidsign.core.ui import SigningProgressReporter

    config = ToolConfig.from_env(
      build_tools_version=inputs.build_tools_version,
      timeout=inputs.timeout,
      environ=self._environ,
    )
    ui.debug(f'using build-tools {config.build_tools_version}')

    try:
      with SigningKey(inputs.signing_key_base64).scoped() as key_path:
        credentials = SigningCredentials(
          key_path=key_path,
          alias=inputs.alias,
          key_store_password=inputs.key_store_password,
          key_password=inputs.key_password,
        )
        app = ReleaseSigner(inputs.release_directory, credentials, config, recursive=inputs.recursive, jobs=inputs.jobs)
        with SigningProgressReporter().scoped():
          return await app.sign()
    except (ConfigurationError, FilesystemError) as e:
      ui.fatal(str(e), exc=e)

  def _report(self, summary: RunSummary) -> int:
    from droidsign.core.action import ActionOutputs
    from droidsign.core.env import get_github_output_path, get_github_env_path
    from droidsign.core.exc import FilesystemError

    if not summary.results:
      ui.failure('No release files (.apk or .aab) could be found.')
      return 1

    signed = summary.signed_files
    try:
      ActionOutputs(get_github_output_path(self._environ), get_github_env_path(self._environ)).publish(signed)
    except FilesystemError as e:
      ui.fatal(str(e), exc=e)

    if summary.failures:
      for r in summary.failures:
        ui.error(f'Failed to sign {r.input_path}: {r.error_message}')
      ui.failure('{nr} of {total} release file(s) failed to sign'.format(nr=len(summary.failures), total=len(summary.results)))
      return 1

    ui.success('signed {nr} release file(s)'.format(nr=len(signed)))
    return 0

def entry() -> None:
  from droidsign.core.exc import FatalError
  try:
    sys.exit(Shell().invoke())
  except FatalError:
    sys.exit(2)
