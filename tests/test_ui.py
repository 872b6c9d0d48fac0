import io
import unittest
from contextlib import redirect_stderr, redirect_stdout

from pubsub import pub

from droidsign.core.exc import FatalError
from droidsign.core.model.artifact import PipelineResult
from droidsign.core.ui import ui, SigningProgressReporter

class UITest(unittest.TestCase):
  def tearDown(self):
    ui.disable_annotations()
    ui.set_level(ui.INFO)

  def _capture(self, fn, *args):
    f = io.StringIO()
    with redirect_stderr(f):
      fn(*args)
    return f.getvalue()

  def test_levels(self):
    ui.set_level(ui.INFO)
    self.assertEqual('', self._capture(ui.debug, 'hidden'))
    self.assertIn('shown', self._capture(ui.info, 'shown'))
    ui.set_level(ui.DEBUG)
    self.assertIn('hidden', self._capture(ui.debug, 'hidden'))

  def test_workflow_commands(self):
    ui.enable_annotations()
    self.assertEqual('::debug::x\n', self._capture(ui.debug, 'x'))
    self.assertEqual('::warning::careful\n', self._capture(ui.warn, 'careful'))
    self.assertEqual('::error::a%0Ab\n', self._capture(ui.error, 'a\nb'))
    self.assertEqual('plain\n', self._capture(ui.info, 'plain'))

  def test_fatal(self):
    f = io.StringIO()
    with redirect_stderr(f):
      with self.assertRaises(FatalError):
        ui.fatal('broken')
    self.assertIn('fatal: broken', f.getvalue())

  def test_traceback_when_debugging(self):
    try:
      raise ValueError('boom')
    except ValueError as e:
      exc = e
    self.assertNotIn('Traceback', self._capture(ui.error, 'failed', exc))
    ui.set_level(ui.DEBUG)
    out = self._capture(ui.error, 'failed', exc)
    self.assertIn('Traceback', out)
    self.assertIn('ValueError: boom', out)

class SigningProgressReporterTest(unittest.TestCase):
  def test_reports_results(self):
    f = io.StringIO()
    with redirect_stderr(f):
      with SigningProgressReporter().scoped():
        pub.sendMessage('progress.core.sign.begin', total=2)
        pub.sendMessage('progress.core.sign.artifact', result=PipelineResult.success('app.apk', 'app-signed.apk'))
        pub.sendMessage('progress.core.sign.artifact', result=PipelineResult.failure('app.aab', 'signing failed: boom'))
        pub.sendMessage('progress.core.sign.done', t=1.)
    out = f.getvalue()
    self.assertIn('found 2 release file(s)', out)
    self.assertIn('app.apk -> app-signed.apk', out)
    self.assertIn('app.aab: signing failed: boom', out)
    self.assertIn('done (1.00 sec.)', out)

class MaskTest(unittest.TestCase):
  def tearDown(self):
    ui.disable_annotations()

  def _masks(self, value):
    f = io.StringIO()
    with redirect_stdout(f):
      ui.add_mask(value)
    return f.getvalue().splitlines()

  def test_wrapped_value(self):
    ui.enable_annotations()
    self.assertEqual(['::add-mask::AAAA', '::add-mask::BBBB', '::add-mask::CC=='], self._masks('AAAA\nBBBB\r\n\nCC==\n'))

  def test_off_runner(self):
    self.assertEqual([], self._masks('AAAA'))
