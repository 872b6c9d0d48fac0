from __future__ import annotations
from typing import TYPE_CHECKING

import sys
from contextlib import contextmanager
from functools import cache
from pubsub import pub
from droidsign.core.exc import FatalError

if TYPE_CHECKING:
  from typing import NoReturn, Optional, TextIO, Any, Iterator
  from typing_extensions import Final
  from progressbar import ProgressBar
  from droidsign.core.model.artifact import PipelineResult

class UI:
  DEBUG: Final = 0
  INFO: Final = 1
  WARN: Final = 2
  ERROR: Final = 3

  level = INFO
  is_annotating = False

  def is_tty(self) -> bool:
    from os import isatty
    try:
      return isatty(sys.stderr.fileno())
    except (AttributeError, OSError, ValueError):
      # e.g. replaced by capturing streams
      return False

  def set_level(self, level: int) -> None:
    self.level = level

  def enable_annotations(self) -> None:
    self.is_annotating = True

  def disable_annotations(self) -> None:
    self.is_annotating = False

  def add_mask(self, value: Optional[str]) -> None:
    # GitHub Actions redacts registered values from the rest of the log; one value per line
    if value and self.is_annotating:
      for l in value.splitlines():
        if l.strip():
          self.stdout(f'::add-mask::{l.strip()}')

  # XXX: check color capability on our own because we are coloring stderr -- termcolor cares stdout only.
  @cache
  def colored(self, x: str, **kw: Any) -> str:
    from termcolor import colored
    return colored(x, force_color=self._can_do_colour_stderr(), **kw)

  def bullet(self, what: str) -> str:
    if self.is_annotating:
      return ''
    if what == 'error':
      return self.colored('[-] ', color='red', attrs=('bold',))
    elif what == 'warn':
      return self.colored('[*] ', color='yellow', attrs=('bold',))
    elif what == 'info':
      return self.colored('[*] ', color='blue', attrs=('bold',))
    elif what == 'debug':
      return self.colored('[.] ', color='grey', attrs=('bold',))
    elif what == 'success':
      return self.colored('[+] ', color='green', attrs=('bold',))
    elif what == 'failure':
      return self.colored('[-] ', color='red', attrs=('bold',))
    assert False, f'invalid type of bullet: {what}'

  def fatal(self, msg: str, exc: Optional[Exception] = None) -> NoReturn:
    self.stderr(self._format_msg(f'fatal: {msg}', 'failure'), exc=self._traceback_of(exc))
    raise FatalError(msg)

  def error(self, msg: str, exc: Optional[Exception] = None) -> None:
    if self.level <= self.ERROR:
      self.stderr(self._format_msg(msg, 'error'), exc=self._traceback_of(exc))

  def warn(self, msg: str) -> None:
    if self.level <= self.WARN:
      self.stderr(self._format_msg(msg, 'warn'))

  def info(self, msg: str, ow: bool = False) -> None:
    if self.level <= self.INFO:
      self.stderr(self._format_msg(msg, 'info'), ow=ow)

  def debug(self, msg: str) -> None:
    if self.level <= self.DEBUG or self.is_annotating:
      self.stderr(self._format_msg(msg, 'debug'))

  def success(self, msg: str) -> None:
    self.stderr(self._format_msg(msg, 'success'))

  def failure(self, msg: str) -> None:
    self.stderr(self._format_msg(msg, 'failure'))

  def stdout(self, msg: str) -> None:
    self._write(sys.stdout, msg)

  def stderr(self, msg: str, ow: bool = False, exc: Optional[BaseException] = None) -> None:
    self._write(sys.stderr, msg, ow=ow, exc=exc)

  def _traceback_of(self, exc: Optional[Exception]) -> Optional[Exception]:
    # tracebacks only when debugging
    return exc if self.level <= self.DEBUG else None

  def _write(self, f: TextIO, msg: str, ow: bool = False, exc: Optional[BaseException] = None) -> None:
    if ow:
      f.write('\r')
    f.write(msg)
    f.write('\n')
    f.flush()
    if exc is not None:
      self._format_exception(f, exc)

  def _format_exception(self, f: TextIO, exc: BaseException) -> None:
    from traceback import format_exception
    f.write(''.join(format_exception(type(exc), exc, exc.__traceback__)))
    f.write('\n')

  def _format_msg(self, msg: str, flagtyp: str) -> str:
    if self.is_annotating:
      command = self._workflow_command_of(flagtyp)
      if command:
        return '::{cmd}::{msg}'.format(cmd=command, msg=self._escape_workflow_data(msg))
    return '{flag}{msg}'.format(flag=self.bullet(flagtyp), msg=msg)

  @staticmethod
  def _workflow_command_of(flagtyp: str) -> Optional[str]:
    return {
      'debug':'debug',
      'warn':'warning',
      'error':'error',
      'failure':'error',
    }.get(flagtyp)

  @staticmethod
  def _escape_workflow_data(msg: str) -> str:
    return msg.replace('%', '%25').replace('\r', '%0D').replace('\n', '%0A')

  # termcolor 2.4 compatible color capability checker
  @cache
  def _can_do_colour_stderr(self) -> bool:
    from io import UnsupportedOperation
    from os import environ, isatty

    if "ANSI_COLORS_DISABLED" in environ:
      return False
    if "NO_COLOR" in environ:
      return False
    if "FORCE_COLOR" in environ:
      return True

    if environ.get("TERM") == "dumb":
      return False
    if not hasattr(sys.stderr, "fileno"):
      return False

    try:
      return isatty(sys.stderr.fileno())
    except UnsupportedOperation:
      return sys.stderr.isatty()

class SigningProgressReporter:
  _bar: Optional[ProgressBar] = None
  _nr: int = 0

  @contextmanager
  def scoped(self) -> Iterator[None]:
    submap = {
      'progress.core.sign.begin':self._core_sign_begin,
      'progress.core.sign.stage':self._core_sign_stage,
      'progress.core.sign.artifact':self._core_sign_artifact,
      'progress.core.sign.done':self._core_sign_done,
    }
    try:
      for k, v in submap.items():
        pub.subscribe(v, k)
      yield None
    finally:
      for k, v in submap.items():
        pub.unsubscribe(v, k)
      if self._bar is not None:
        self._bar.finish()   # type:ignore[no-untyped-call]
        self._bar = None

  def _core_sign_begin(self, total: int) -> None:
    self._nr = 0
    ui.info(f'sign: found {total} release file(s)')
    if ui.is_tty() and not ui.is_annotating and total > 1:
      from progressbar import ProgressBar, Percentage, GranularBar, SimpleProgress
      self._bar = ProgressBar(
        max_value=total,
        widgets=[
          ui.bullet('info'),
          'sign: signing... ',
          Percentage(), ' ',  # type:ignore[no-untyped-call]
          GranularBar(), ' ',  # type:ignore[no-untyped-call]
          SimpleProgress(format='%(value_s)s/%(max_value_s)s'),   # type:ignore[no-untyped-call]
        ]
      )
      self._bar.start()   # type:ignore[no-untyped-call]
    else:
      self._bar = None

  def _core_sign_stage(self, path: str, stage: str) -> None:
    ui.debug(f'sign: {path}: {stage}')

  def _core_sign_artifact(self, result: PipelineResult) -> None:
    self._nr += 1
    if self._bar is not None:
      self._bar.update(self._nr)   # type:ignore[no-untyped-call]
    elif result.succeeded:
      ui.success(f'sign: {result.input_path} -> {result.output_path}')
    else:
      ui.failure(f'sign: {result.input_path}: {result.error_message}')

  def _core_sign_done(self, t: float) -> None:
    if self._bar is not None:
      self._bar.finish(end='\r')   # type:ignore[no-untyped-call]
      self._bar = None
      ui.info(f'sign: signing... done ({t:.02f} sec.)' + (' '*16), ow=True)
    else:
      ui.info(f'sign: done ({t:.02f} sec.)')

ui = UI()
