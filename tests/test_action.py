import os
import shutil
import tempfile
import unittest

from droidsign.core.action import ActionOutputs

class ActionOutputsTest(unittest.TestCase):
  def test_single(self):
    outputs, envs = ActionOutputs.build(['/r/app-signed.apk'])
    self.assertEqual(dict(signedReleaseFile='/r/app-signed.apk'), outputs)
    self.assertEqual(dict(SIGNED_RELEASE_FILE='/r/app-signed.apk'), envs)

  def test_multiple(self):
    outputs, envs = ActionOutputs.build(['/r/a.aab', '/r/b-signed.apk'])
    self.assertEqual('/r/a.aab', outputs['signedReleaseFile0'])
    self.assertEqual('/r/b-signed.apk', outputs['signedReleaseFile1'])
    self.assertEqual('/r/a.aab:/r/b-signed.apk', outputs['signedReleaseFiles'])
    self.assertEqual('2', outputs['nosignedReleaseFiles'])
    self.assertEqual('/r/b-signed.apk', envs['SIGNED_RELEASE_FILE_1'])
    self.assertEqual('/r/a.aab:/r/b-signed.apk', envs['SIGNED_RELEASE_FILES'])
    self.assertEqual('2', envs['NOSIGNED_RELEASE_FILES'])
    self.assertNotIn('signedReleaseFile', outputs)

  def test_none(self):
    self.assertEqual((dict(), dict()), ActionOutputs.build([]))

  def test_publish(self):
    d = tempfile.mkdtemp()
    try:
      path = os.path.join(d, 'output')
      ActionOutputs(output_path=path).publish(['/r/app-signed.apk'])
      with open(path) as f:
        lines = f.read().splitlines()
      self.assertEqual(3, len(lines))
      name, delim = lines[0].split('<<')
      self.assertEqual('signedReleaseFile', name)
      self.assertEqual(['/r/app-signed.apk', delim], lines[1:])
    finally:
      shutil.rmtree(d)
