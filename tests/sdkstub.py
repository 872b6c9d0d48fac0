import os
import shutil
import stat
import tempfile

ZIPALIGN = r'''#!/bin/sh
echo "zipalign $*" >> @ROOT@/invocations.log
if [ -e @ROOT@/fail-zipalign ]; then
  echo "Verification FAILED"
  exit 1
fi
echo "Verification succesful"
'''

APKSIGNER = r'''#!/bin/sh
echo "apksigner $*" >> @ROOT@/invocations.log
case "$1" in
  sign)
    if [ -e @ROOT@/fail-apksigner-sign ]; then
      echo "Failed to load signer \"signer #1\""
      exit 1
    fi
    out=""
    in=""
    while [ $# -gt 0 ]; do
      case "$1" in
        --out) out="$2"; shift 2 ;;
        *) in="$1"; shift ;;
      esac
    done
    cp "$in" "$out"
    ;;
  verify)
    if [ -e @ROOT@/fail-apksigner-verify ]; then
      echo "DOES NOT VERIFY"
      exit 1
    fi
    ;;
esac
'''

JARSIGNER = r'''#!/bin/sh
echo "jarsigner $*" >> @ROOT@/invocations.log
if [ -e @ROOT@/hang-jarsigner ]; then
  exec sleep 30
fi
if [ -e @ROOT@/chatty-jarsigner ]; then
  head -c 100000 /dev/zero | tr "\\000" x
  echo
fi
if [ -e @ROOT@/fail-jarsigner ]; then
  echo "jarsigner: unable to sign jar"
  exit 1
fi
echo "jar signed."
'''

class FakeSDK:
  """Android SDK lookalike whose tools log their arguments to invocations.log and fail on demand."""
  def __init__(self, version='35.0.0'):
    self.root = tempfile.mkdtemp(prefix='droidsign-sdk-')
    self.version = version
    self.build_tools = os.path.join(self.root, 'build-tools', version)
    self.bin = os.path.join(self.root, 'bin')
    os.makedirs(self.build_tools)
    os.makedirs(self.bin)
    self._install(os.path.join(self.build_tools, 'zipalign'), ZIPALIGN)
    self._install(os.path.join(self.build_tools, 'apksigner'), APKSIGNER)
    self._install(os.path.join(self.bin, 'jarsigner'), JARSIGNER)

  def _install(self, path, script):
    with open(path, 'w') as f:
      f.write(script.replace('@ROOT@', self.root))
    os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

  def fail(self, what):
    open(os.path.join(self.root, what), 'w').close()

  def invocations(self):
    try:
      with open(os.path.join(self.root, 'invocations.log')) as f:
        return [l.rstrip('\n') for l in f]
    except FileNotFoundError:
      return []

  def config(self, **kw):
    from droidsign.core.config import ToolConfig
    kw.setdefault('android_home', self.root)
    kw.setdefault('build_tools_version', self.version)
    kw.setdefault('search_path', self.bin)
    kw.setdefault('timeout', 10.)
    return ToolConfig(**kw)

  def cleanup(self):
    shutil.rmtree(self.root, ignore_errors=True)

def make_release_dir(*names):
  d = tempfile.mkdtemp(prefix='droidsign-release-')
  for n in names:
    path = os.path.join(d, n)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'wb') as f:
      f.write(b'PK\x03\x04' + n.encode('utf-8'))
  return d

def credentials(key_path='/tmp/key.jks', key_password='keypw'):
  from droidsign.core.model.artifact import SigningCredentials
  return SigningCredentials(key_path=key_path, alias='test_key', key_store_password='storepw', key_password=key_password)
